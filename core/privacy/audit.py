"""
Privacy audit logger.

Audit rows are append-only. ``record`` adds a row to the caller's unit of
work so it commits atomically with the business write that caused it.
``record_contact_view`` owns its own transaction: the application's
``contact_viewed`` flag and the VIEW_CONTACT row are written together or
not at all, and at most once per application.
"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from core.privacy.policy import ViewerContext
from database.models.applications import Application
from database.models.audit import AuditAction, PrivacyAuditLog
from database.models.users import UserType
from database.security import SubjectKind

logger = logging.getLogger(__name__)

PREMIUM_CONTACT_BASIS = "Premium subscription - legitimate interest"
MESSAGE_INITIATE_BASIS = "Company initiated conversation with shortlisted candidate"

SUBJECT_USER_TYPES = {
    SubjectKind.CANDIDATE: UserType.CANDIDATE,
    SubjectKind.COMPANY: UserType.INDUSTRY,
}


def status_change_basis(status) -> str:
    return f"Status changed to {getattr(status, 'value', status)}"


def record(
    db: AsyncSession,
    viewer: ViewerContext,
    subject,
    action: AuditAction,
    resource_type: str,
    resource_id: int,
    legal_basis: str,
    is_premium_access: bool = False,
) -> PrivacyAuditLog:
    """
    Append an audit row to the current unit of work.

    The caller commits; a failed commit drops the row together with the
    business change it describes.

    Args:
        db: Database session
        viewer: The acting viewer
        subject: Candidate or Industry the action concerns
        action: Audit action kind
        resource_type: Kind of the referenced resource, e.g. "application"
        resource_id: Id of the referenced resource
        legal_basis: Human-readable justification
        is_premium_access: Whether the action relied on premium entitlement

    Returns:
        The pending audit row
    """
    if not legal_basis or not legal_basis.strip():
        raise ValueError("An audit entry requires a legal basis")

    entry = PrivacyAuditLog(
        actor_id=viewer.user_id,
        target_user_id=subject.user_id,
        target_user_type=SUBJECT_USER_TYPES[subject.subject_kind],
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        is_premium_access=is_premium_access,
        legal_basis=legal_basis.strip(),
        ip_address=viewer.ip_address,
        user_agent=viewer.user_agent,
    )
    db.add(entry)
    logger.info(
        f"Audit {action.value}: actor={viewer.user_id} "
        f"target={subject.user_id} {resource_type}={resource_id}",
        extra={"action": action.value, "user_id": viewer.user_id},
    )
    return entry


async def record_contact_view(
    db: AsyncSession,
    viewer: ViewerContext,
    application: Application,
    legal_basis: str = PREMIUM_CONTACT_BASIS,
) -> bool:
    """
    Record the first privileged view of an application's candidate contact.

    Sets ``contact_viewed`` with a conditional update and inserts the
    VIEW_CONTACT row in the same transaction. A concurrent writer that loses
    the race matches no row and returns without logging.

    Failures are logged and swallowed: by the time this runs the view has
    already been computed for the caller. The flag stays unset whenever the
    audit row is not persisted.

    Returns:
        True if this call created the audit entry
    """
    application_id = application.id
    try:
        result = await db.execute(
            update(Application)
            .where(
                Application.id == application_id,
                Application.contact_viewed.is_(False),
            )
            .values(contact_viewed=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return await _end_already_recorded(db, viewer, application_id)

        record(
            db,
            viewer,
            application.candidate,
            AuditAction.VIEW_CONTACT,
            "application",
            application_id,
            legal_basis,
            is_premium_access=True,
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.error(
            f"Failed to record contact view for application {application_id}",
            exc_info=True,
            extra={"application_id": application_id, "user_id": viewer.user_id},
        )
        return False

    set_committed_value(application, "contact_viewed", True)
    return True


async def _end_already_recorded(
    db: AsyncSession, viewer: ViewerContext, application_id: int
) -> bool:
    # A rollback would expire the caller's loaded objects.
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.warning(
            f"Failed to end contact view check for application {application_id}",
            exc_info=True,
            extra={"application_id": application_id, "user_id": viewer.user_id},
        )
        return False

    logger.debug(f"Contact view for application {application_id} already recorded")
    return False


async def record_privileged_view(
    db: AsyncSession,
    viewer: ViewerContext,
    subject,
    resource_type: str,
    resource_id: int,
    legal_basis: str = PREMIUM_CONTACT_BASIS,
    action: AuditAction = AuditAction.VIEW_CONTACT,
) -> Optional[PrivacyAuditLog]:
    """
    Record a premium disclosure that has no per-application flag.

    Every occurrence is logged. Failures are tolerated like contact views.
    """
    try:
        entry = record(
            db,
            viewer,
            subject,
            action,
            resource_type,
            resource_id,
            legal_basis,
            is_premium_access=True,
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.error(
            f"Failed to record {action.value} on {resource_type} {resource_id}",
            exc_info=True,
            extra={"user_id": viewer.user_id},
        )
        return None
    return entry
