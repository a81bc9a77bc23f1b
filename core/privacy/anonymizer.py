"""
Identity anonymizer.

Subjects get a random anonymous identifier once, at creation. The label shown
in place of a redacted name is derived only from that identifier, never from
the primary key or any mutable profile field.
"""

import secrets

from core.config import settings
from core.exceptions import MissingAnonymousIdentifier
from database.security import SubjectKind

CANDIDATE_LABEL_PREFIX = "Candidate #"
COMPANY_LABEL_PREFIX = "Company #"


def generate_anonymous_id() -> str:
    """Allocate a fresh identifier. Called exactly once per subject."""
    return secrets.token_hex(settings.anonymous_id_bytes)


def anonymous_label(subject) -> str:
    """
    Display label for a subject whose name is redacted.

    Args:
        subject: A Candidate or Industry

    Returns:
        ``Candidate #<last 8 chars>`` or ``Company #<last 3 chars>``

    Raises:
        MissingAnonymousIdentifier: The subject has no anonymous identifier.
    """
    anonymous_id = getattr(subject, "anonymous_id", None)
    kind = subject.subject_kind
    if not anonymous_id:
        raise MissingAnonymousIdentifier(kind.value, getattr(subject, "id", None))

    if kind == SubjectKind.CANDIDATE:
        return CANDIDATE_LABEL_PREFIX + anonymous_id[-settings.candidate_label_suffix_length:]
    return COMPANY_LABEL_PREFIX + anonymous_id[-settings.company_label_suffix_length:]
