"""
Owner-only visibility preferences.

Preferences are read and written only for the caller's own subject profile;
no other role can reach them.
"""

from typing import Any, Dict
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccessDenied, PreconditionViolation
from core.privacy.policy import ViewerContext
from database.models.candidates import Candidate
from database.models.industries import Industry

logger = logging.getLogger(__name__)


async def _own_subject(db: AsyncSession, viewer: ViewerContext):
    if viewer.candidate_id is not None:
        return await db.get(Candidate, viewer.candidate_id)
    if viewer.industry_id is not None:
        return await db.get(Industry, viewer.industry_id)
    raise AccessDenied("This account has no visibility settings")


def _serialize(subject) -> Dict[str, Any]:
    settings = {
        attr: getattr(subject, attr)
        for attr in subject.__visibility_preferences__.values()
    }
    return {
        "subject_type": subject.subject_kind.value,
        "anonymous_id": subject.anonymous_id,
        "settings": settings,
    }


async def get_privacy_settings(db: AsyncSession, viewer: ViewerContext) -> Dict[str, Any]:
    """Visibility preferences of the caller's own profile."""
    return _serialize(await _own_subject(db, viewer))


async def update_privacy_settings(
    db: AsyncSession,
    viewer: ViewerContext,
    updates: Dict[str, bool],
) -> Dict[str, Any]:
    """
    Update the caller's own visibility preferences.

    Args:
        db: Database session
        viewer: The subject itself
        updates: Preference name to new value; unset names are left alone

    Raises:
        PreconditionViolation: A preference does not exist for this role
    """
    subject = await _own_subject(db, viewer)
    allowed = set(subject.__visibility_preferences__.values())

    unknown = sorted(set(updates) - allowed)
    if unknown:
        raise PreconditionViolation(
            f"Not a {subject.subject_kind.value.lower()} setting: {', '.join(unknown)}"
        )

    for attr, value in updates.items():
        setattr(subject, attr, bool(value))
    await db.commit()

    logger.info(
        f"User {viewer.user_id} updated visibility settings: {sorted(updates)}"
    )
    return _serialize(subject)
