"""
Messaging service functions.

Companies open threads only on applications that passed the messaging gate;
afterwards either side can reply inside the thread.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from sqlalchemy import select, update, or_, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccessDenied, MessagingNotPermitted, ResourceNotFound
from core.privacy import pipeline
from core.privacy.audit import MESSAGE_INITIATE_BASIS, record
from core.privacy.consent import can_message
from core.privacy.policy import ViewerContext
from core.privacy.subscription import is_premium_active
from database.models.applications import Application
from database.models.audit import AuditAction
from database.models.communications import Message
from database.models.users import User, UserType

logger = logging.getLogger(__name__)


def serialize_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "application_id": message.application_id,
        "subject": message.subject,
        "content": message.content,
        "is_read": message.is_read,
        "sent_at": message.sent_at,
    }


async def initiate_conversation(
    db: AsyncSession,
    viewer: ViewerContext,
    application_id: int,
    content: str,
    subject: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Company opens a thread with the candidate behind an application.

    ``can_message`` is a hard precondition. The message and its
    MESSAGE_INITIATE audit entry commit together.

    Raises:
        AccessDenied: The viewer is not a company
        ResourceNotFound: No such application
        MessagingNotPermitted: The application is not eligible
    """
    if viewer.role != UserType.INDUSTRY or viewer.industry_id is None:
        raise AccessDenied("Only companies can initiate conversations")

    result = await db.execute(select(Application).where(Application.id == application_id))
    application = result.scalar_one_or_none()
    if application is None:
        raise ResourceNotFound("Application not found")

    if application.industry_id != viewer.industry_id:
        raise AccessDenied("You can only message candidates who applied to your opportunities")

    if not can_message(viewer.industry_id, application):
        raise MessagingNotPermitted()

    candidate = application.candidate
    message = Message(
        sender_id=viewer.user_id,
        receiver_id=candidate.user_id,
        application_id=application.id,
        subject=subject or f"Regarding: {application.opportunity.title}",
        content=content,
    )
    db.add(message)
    record(
        db,
        viewer,
        candidate,
        AuditAction.MESSAGE_INITIATE,
        "application",
        application.id,
        MESSAGE_INITIATE_BASIS,
        is_premium_access=is_premium_active(viewer),
    )
    await db.commit()
    await db.refresh(message)

    logger.info(
        f"Conversation initiated on application {application.id} by industry {viewer.industry_id}"
    )
    return serialize_message(message)


async def _latest_thread_message(
    db: AsyncSession, user_a: int, user_b: int
) -> Optional[Message]:
    result = await db.execute(
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == user_a, Message.receiver_id == user_b),
                and_(Message.sender_id == user_b, Message.receiver_id == user_a),
            )
        )
        .order_by(Message.sent_at.desc(), Message.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def send_message(
    db: AsyncSession,
    viewer: ViewerContext,
    receiver_id: int,
    content: str,
    subject: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Reply inside an existing thread.

    Threads are only ever opened through ``initiate_conversation``; a reply
    inherits the application that anchors the thread.
    """
    if receiver_id == viewer.user_id:
        raise MessagingNotPermitted("You cannot message yourself")

    receiver = await db.get(User, receiver_id)
    if receiver is None or not receiver.is_active:
        raise ResourceNotFound("Recipient not found")

    latest = await _latest_thread_message(db, viewer.user_id, receiver_id)
    if latest is None:
        raise MessagingNotPermitted("No conversation exists with this user")

    message = Message(
        sender_id=viewer.user_id,
        receiver_id=receiver_id,
        application_id=latest.application_id,
        subject=subject or latest.subject,
        content=content,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return serialize_message(message)


async def list_conversations(
    db: AsyncSession,
    viewer: ViewerContext,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Conversation list of the viewer, newest first.

    Each entry carries the partner projected through the disclosure
    pipeline, the last message and the unread count.
    """
    result = await db.execute(
        select(Message)
        .where(
            or_(Message.sender_id == viewer.user_id, Message.receiver_id == viewer.user_id)
        )
        .order_by(Message.sent_at.desc(), Message.id.desc())
    )
    messages = result.scalars().all()

    unread = await db.execute(
        select(Message.sender_id, func.count(Message.id))
        .where(Message.receiver_id == viewer.user_id, Message.is_read.is_(False))
        .group_by(Message.sender_id)
    )
    unread_counts = dict(unread.all())

    conversations: Dict[int, Dict[str, Any]] = {}
    for message in messages:
        partner = message.receiver if message.sender_id == viewer.user_id else message.sender
        if partner.id in conversations:
            continue
        conversations[partner.id] = {
            "partner": await pipeline.describe_partner(
                db, viewer, partner, message.application, now
            ),
            "application_id": message.application_id,
            "last_message": serialize_message(message),
            "unread_count": unread_counts.get(partner.id, 0),
        }

    return list(conversations.values())


async def get_thread(
    db: AsyncSession,
    viewer: ViewerContext,
    partner_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Messages exchanged with one partner, oldest first.

    Opening the thread marks the partner's messages to the viewer as read.
    Messages are returned as they were before this read.

    Raises:
        ResourceNotFound: No such user or no conversation with them
    """
    partner = await db.get(User, partner_id)
    if partner is None or not partner.is_active:
        raise ResourceNotFound("User not found")

    result = await db.execute(
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == viewer.user_id, Message.receiver_id == partner_id),
                and_(Message.sender_id == partner_id, Message.receiver_id == viewer.user_id),
            )
        )
        .order_by(Message.sent_at.asc(), Message.id.asc())
    )
    messages = result.scalars().all()
    if not messages:
        raise ResourceNotFound("No conversation exists with this user")

    partner_view = await pipeline.describe_partner(
        db, viewer, partner, messages[-1].application, now
    )
    thread = [serialize_message(message) for message in messages]

    marked = await db.execute(
        update(Message)
        .where(
            Message.sender_id == partner_id,
            Message.receiver_id == viewer.user_id,
            Message.is_read.is_(False),
        )
        .values(is_read=True)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()

    if marked.rowcount:
        logger.debug(f"User {viewer.user_id} read {marked.rowcount} messages from {partner_id}")
    return {
        "partner": partner_view,
        "messages": thread,
        "marked_read": marked.rowcount,
    }
