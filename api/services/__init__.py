"""
API Services Layer.

Database operations behind the API endpoints. Services take the request's
session and viewer context explicitly and return plain dicts.
"""

from api.services.applications import (
    get_application,
    update_application_status,
    schedule_interview,
    list_industry_applications,
    list_candidate_applications,
)

from api.services.candidates import get_candidate

from api.services.industries import (
    get_industry,
    get_industry_stats,
    get_posting_limits,
)

from api.services.interviews import list_interviews

from api.services.messages import (
    initiate_conversation,
    send_message,
    list_conversations,
    get_thread,
)

from api.services.opportunities import list_opportunities

from api.services.users import (
    get_privacy_settings,
    update_privacy_settings,
)

__all__ = [
    # Applications
    "get_application",
    "update_application_status",
    "schedule_interview",
    "list_industry_applications",
    "list_candidate_applications",
    # Candidates
    "get_candidate",
    # Industries
    "get_industry",
    "get_industry_stats",
    "get_posting_limits",
    # Interviews
    "list_interviews",
    # Messages
    "initiate_conversation",
    "send_message",
    "list_conversations",
    "get_thread",
    # Opportunities
    "list_opportunities",
    # Users
    "get_privacy_settings",
    "update_privacy_settings",
]
