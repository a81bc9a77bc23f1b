"""
Redaction projector.

Turns a persisted entity plus a DisclosureDecision into a new plain dict
that is safe to return to the viewer. Projections only read from the source
entity. Nested subjects (the candidate inside an application, the company
behind an opportunity) go through ``project`` with their own decision, so
visibility of a field is decided in exactly one place.
"""

from typing import Any, Dict, Optional

from core.privacy.policy import DisclosureDecision
from database.security import DisclosureField, SubjectKind, get_projectable_columns


def format_location(city: Optional[str], state: Optional[str]) -> Optional[str]:
    parts = [part for part in (city, state) if part]
    return ", ".join(parts) if parts else None


def display_name(entity, decision: DisclosureDecision) -> str:
    """Real name of the subject when disclosed, its anonymous label otherwise."""
    if decision.subject_kind == SubjectKind.CANDIDATE:
        return decision.value_for(DisclosureField.NAME, entity.full_name)
    return decision.value_for(DisclosureField.COMPANY_NAME, entity.company_name)


def display_location(entity, decision: DisclosureDecision) -> Optional[str]:
    return decision.value_for(
        DisclosureField.LOCATION, format_location(entity.city, entity.state)
    )


def is_anonymous(decision: DisclosureDecision) -> bool:
    name_field = (
        DisclosureField.NAME
        if decision.subject_kind == SubjectKind.CANDIDATE
        else DisclosureField.COMPANY_NAME
    )
    return not decision.is_disclosed(name_field)


def project(entity, decision: DisclosureDecision) -> Dict[str, Any]:
    """
    Project every tagged column of a subject.

    Public columns are copied, governed columns are copied only when their
    field is disclosed and are None otherwise. Untagged columns are dropped.
    The derived ``display_name`` and ``location`` carry the redacted labels.
    """
    view: Dict[str, Any] = {}
    for column, field in get_projectable_columns(type(entity)).items():
        value = getattr(entity, column)
        if field is None or decision.is_disclosed(field):
            view[column] = value
        else:
            view[column] = None

    view["display_name"] = display_name(entity, decision)
    view["location"] = display_location(entity, decision)
    view["is_anonymous"] = is_anonymous(decision)
    return view


# ==================== Candidate shapes ===================== #
def candidate_detail(candidate, decision: DisclosureDecision) -> Dict[str, Any]:
    view = project(candidate, decision)
    view["name"] = view["display_name"]
    view["email"] = decision.value_for(DisclosureField.CONTACT, candidate.user.email)
    return view


def candidate_summary(candidate, decision: DisclosureDecision) -> Dict[str, Any]:
    """Compact candidate view used in lists."""
    return {
        "id": candidate.id,
        "display_name": display_name(candidate, decision),
        "is_anonymous": is_anonymous(decision),
        "location": display_location(candidate, decision),
        "bio": candidate.bio,
        "college": candidate.college,
        "degree": candidate.degree,
        "graduation_year": candidate.graduation_year,
    }


# ==================== Company shapes ===================== #
def company_view(industry, decision: DisclosureDecision) -> Dict[str, Any]:
    view = project(industry, decision)
    view["company_name"] = view["display_name"]
    view["email"] = decision.value_for(DisclosureField.CONTACT, industry.user.email)
    return view


def company_summary(industry, decision: DisclosureDecision) -> Dict[str, Any]:
    return {
        "id": industry.id,
        "company_name": display_name(industry, decision),
        "is_anonymous": is_anonymous(decision),
        "industry": industry.industry,
        "is_verified": industry.is_verified,
        "location": display_location(industry, decision),
    }


# ==================== Relationship carriers ===================== #
def _opportunity_ref(opportunity) -> Dict[str, Any]:
    return {
        "id": opportunity.id,
        "title": opportunity.title,
        "type": opportunity.type.value,
    }


def application_detail(
    application,
    candidate_decision: DisclosureDecision,
    company_decision: Optional[DisclosureDecision] = None,
) -> Dict[str, Any]:
    view = {
        "id": application.id,
        "status": application.status.value,
        "cover_letter": application.cover_letter,
        "rejection_reason": application.rejection_reason,
        "applied_at": application.applied_at,
        "reviewed_at": application.reviewed_at,
        "opportunity": _opportunity_ref(application.opportunity),
        "candidate": candidate_detail(application.candidate, candidate_decision),
    }
    if company_decision is not None:
        view["company"] = company_summary(application.industry, company_decision)
    return view


def application_summary(
    application, candidate_decision: DisclosureDecision
) -> Dict[str, Any]:
    return {
        "id": application.id,
        "status": application.status.value,
        "applied_at": application.applied_at,
        "opportunity": _opportunity_ref(application.opportunity),
        "candidate": candidate_summary(application.candidate, candidate_decision),
    }


def candidate_application_entry(
    application, company_decision: DisclosureDecision
) -> Dict[str, Any]:
    """An application as its candidate sees it: the company is the projected side."""
    return {
        "id": application.id,
        "status": application.status.value,
        "applied_at": application.applied_at,
        "reviewed_at": application.reviewed_at,
        "rejection_reason": application.rejection_reason,
        "opportunity": _opportunity_ref(application.opportunity),
        "company": company_summary(application.industry, company_decision),
    }


def interview_entry(
    interview,
    candidate_decision: DisclosureDecision,
    company_decision: DisclosureDecision,
) -> Dict[str, Any]:
    application = interview.application
    return {
        "id": interview.id,
        "application_id": application.id,
        "scheduled_at": interview.scheduled_at,
        "duration_minutes": interview.duration_minutes,
        "mode": interview.mode.value,
        "meeting_link": interview.meeting_link,
        "location": interview.location,
        "notes": interview.notes,
        "status": application.status.value,
        "opportunity": _opportunity_ref(application.opportunity),
        "candidate": candidate_summary(application.candidate, candidate_decision),
        "company": company_summary(application.industry, company_decision),
    }


def conversation_partner(
    user, subject=None, decision: Optional[DisclosureDecision] = None
) -> Dict[str, Any]:
    """
    The other side of a message thread.

    Partners without a subject profile (admins, institutes) are shown by role.
    """
    if subject is None or decision is None:
        return {
            "user_id": user.id,
            "role": user.user_type.value,
            "display_name": user.user_type.value.title(),
            "is_anonymous": False,
        }
    return {
        "user_id": user.id,
        "role": user.user_type.value,
        "subject_id": subject.id,
        "display_name": display_name(subject, decision),
        "is_anonymous": is_anonymous(decision),
    }
