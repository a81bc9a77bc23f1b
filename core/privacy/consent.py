"""
Relationship and consent tracker.

Owns the application state machine, the messaging gate and the lookup of
relationships (applications, message threads) that can unlock disclosure.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import InvalidStatusTransition, RejectionReasonRequired
from core.privacy.policy import NO_RELATIONSHIP, Relationship, ViewerContext
from core.privacy.subscription import as_utc, utcnow
from database.models.applications import (
    Application,
    ApplicationStatus,
    MESSAGING_ELIGIBLE_STATUSES,
)
from database.models.communications import Message
from database.security import SubjectKind

logger = logging.getLogger(__name__)


def can_message(industry_id: int, application: Application) -> bool:
    """
    Whether an industry may open a message thread about an application.

    Requires a shortlisted or interview-scheduled application on an
    opportunity the industry owns.
    """
    if application is None or industry_id is None:
        return False
    return (
        application.industry_id == industry_id
        and application.status in MESSAGING_ELIGIBLE_STATUSES
    )


def has_viewed_contact(application: Application) -> bool:
    return bool(application.contact_viewed)


def transition(
    application: Application,
    new_status: ApplicationStatus,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Application:
    """
    Move an application to a new status in memory.

    The single validation point for every status change. The caller persists
    the change.

    Raises:
        InvalidStatusTransition: The transition table does not allow the move
        RejectionReasonRequired: Rejecting without a non-empty reason
    """
    current = ApplicationStatus(application.status)
    new_status = ApplicationStatus(new_status)

    if not current.can_transition_to(new_status):
        raise InvalidStatusTransition(current, new_status)

    if new_status == ApplicationStatus.REJECTED:
        if not reason or not reason.strip():
            raise RejectionReasonRequired()
        application.rejection_reason = reason.strip()

    application.status = new_status
    if new_status != ApplicationStatus.PENDING:
        application.reviewed_at = as_utc(now) if now is not None else utcnow()

    logger.info(
        f"Application {application.id} moved from {current.value} to {new_status.value}",
        extra={"application_id": application.id},
    )
    return application


async def resolve_relationship(
    db: AsyncSession, viewer: ViewerContext, subject
) -> Relationship:
    """
    Find applications and message threads linking a viewer and a subject.

    An industry is related to a candidate who applied to it, a candidate to
    an industry it applied to, and any two users who exchanged messages.
    """
    if viewer.is_subject(subject):
        return NO_RELATIONSHIP

    application_filter = None
    if subject.subject_kind == SubjectKind.CANDIDATE and viewer.industry_id:
        application_filter = and_(
            Application.candidate_id == subject.id,
            Application.industry_id == viewer.industry_id,
        )
    elif subject.subject_kind == SubjectKind.COMPANY and viewer.candidate_id:
        application_filter = and_(
            Application.candidate_id == viewer.candidate_id,
            Application.industry_id == subject.id,
        )

    application_ids: tuple[int, ...] = ()
    if application_filter is not None:
        result = await db.execute(
            select(Application.id)
            .where(application_filter)
            .order_by(Application.applied_at.desc(), Application.id.desc())
        )
        application_ids = tuple(result.scalars().all())

    thread = await db.execute(
        select(Message.id)
        .where(
            or_(
                and_(
                    Message.sender_id == viewer.user_id,
                    Message.receiver_id == subject.user_id,
                ),
                and_(
                    Message.sender_id == subject.user_id,
                    Message.receiver_id == viewer.user_id,
                ),
            )
        )
        .limit(1)
    )
    has_thread = thread.scalar_one_or_none() is not None

    return Relationship(application_ids=application_ids, has_message_thread=has_thread)


def application_relationship(viewer: ViewerContext, application: Application) -> Relationship:
    """Relationship carried by an application the viewer is a party to."""
    if viewer.industry_id == application.industry_id or (
        viewer.candidate_id == application.candidate_id
    ):
        return Relationship(application_ids=(application.id,))
    return NO_RELATIONSHIP
