"""Importing this package registers every mapped class on ``Base.metadata``."""

from database.models.users import User, UserType
from database.models.subjects import SubjectKind
from database.models.candidates import Candidate
from database.models.industries import Industry
from database.models.opportunities import Opportunity, OpportunityType
from database.models.applications import Application, ApplicationStatus
from database.models.interviews import Interview, InterviewMode
from database.models.communications import Message
from database.models.audit import AuditAction, PrivacyAuditLog

__all__ = [
    "User",
    "UserType",
    "SubjectKind",
    "Candidate",
    "Industry",
    "Opportunity",
    "OpportunityType",
    "Application",
    "ApplicationStatus",
    "Interview",
    "InterviewMode",
    "Message",
    "AuditAction",
    "PrivacyAuditLog",
]
