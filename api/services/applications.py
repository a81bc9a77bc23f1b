"""
Application service functions for API endpoints.

Every subject projection goes through the disclosure pipeline; status
changes go through the consent tracker's state machine and are audited in
the same transaction.
"""

from typing import Any, Dict, Optional
from datetime import datetime
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccessDenied, ResourceNotFound
from core.privacy import pipeline
from core.privacy.audit import record, status_change_basis
from core.privacy.consent import transition
from core.privacy.policy import ViewerContext
from database.models.applications import Application, ApplicationStatus
from database.models.audit import AuditAction
from database.models.interviews import Interview

logger = logging.getLogger(__name__)


async def load_application(db: AsyncSession, application_id: int) -> Application:
    result = await db.execute(
        select(Application).where(Application.id == application_id)
    )
    application = result.scalar_one_or_none()
    if application is None:
        raise ResourceNotFound("Application not found")
    return application


def ensure_party(viewer: ViewerContext, application: Application) -> None:
    """Only the candidate, the owning company and admins may see an application."""
    if viewer.is_admin:
        return
    if viewer.candidate_id is not None and viewer.candidate_id == application.candidate_id:
        return
    if viewer.industry_id is not None and viewer.industry_id == application.industry_id:
        return
    raise AccessDenied("You don't have access to this application")


async def get_application(
    db: AsyncSession,
    viewer: ViewerContext,
    application_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Get the projected detail of an application.

    Args:
        db: Database session
        viewer: Requesting viewer
        application_id: The application ID
        now: Evaluation instant for premium resolution

    Returns:
        Application detail with the embedded candidate and company projected
    """
    application = await load_application(db, application_id)
    ensure_party(viewer, application)
    return await pipeline.view_application(db, viewer, application, now)


def _authorize_status_change(
    viewer: ViewerContext, application: Application, new_status: ApplicationStatus
) -> None:
    if viewer.is_admin:
        return
    if viewer.industry_id is not None and viewer.industry_id == application.industry_id:
        if new_status == ApplicationStatus.WITHDRAWN:
            raise AccessDenied("Only the candidate can withdraw an application")
        return
    if viewer.candidate_id is not None and viewer.candidate_id == application.candidate_id:
        if new_status != ApplicationStatus.WITHDRAWN:
            raise AccessDenied("Candidates can only withdraw their applications")
        return
    raise AccessDenied("You don't have access to this application")


async def update_application_status(
    db: AsyncSession,
    viewer: ViewerContext,
    application_id: int,
    new_status: ApplicationStatus,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Move an application through its state machine.

    The status change and its audit entry commit together; any failure
    propagates to the caller.

    Returns:
        The updated application summary
    """
    application = await load_application(db, application_id)
    _authorize_status_change(viewer, application, new_status)

    previous = application.status
    transition(application, new_status, reason, now)
    record(
        db,
        viewer,
        application.candidate,
        AuditAction.APPLICATION_STATUS_UPDATE,
        "application",
        application.id,
        status_change_basis(new_status),
    )
    await db.commit()

    logger.info(
        f"Application {application.id} status {previous.value} -> {new_status.value} "
        f"by user {viewer.user_id}"
    )

    summary = pipeline.summarize_application(viewer, application, now)
    summary["previous_status"] = previous.value
    summary["reviewed_at"] = application.reviewed_at
    summary["rejection_reason"] = application.rejection_reason
    return summary


async def schedule_interview(
    db: AsyncSession,
    viewer: ViewerContext,
    application_id: int,
    scheduled_at: datetime,
    duration_minutes: int = 60,
    mode=None,
    meeting_link: Optional[str] = None,
    location: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Schedule an interview and move the application to INTERVIEW_SCHEDULED.

    Only the owning company (or an admin) may schedule. Additional interviews
    on an already scheduled application keep its status.
    """
    application = await load_application(db, application_id)
    if not viewer.is_admin and viewer.industry_id != application.industry_id:
        raise AccessDenied("Only the company that owns this application can schedule interviews")

    if application.status != ApplicationStatus.INTERVIEW_SCHEDULED:
        transition(application, ApplicationStatus.INTERVIEW_SCHEDULED, now=now)
        record(
            db,
            viewer,
            application.candidate,
            AuditAction.APPLICATION_STATUS_UPDATE,
            "application",
            application.id,
            status_change_basis(ApplicationStatus.INTERVIEW_SCHEDULED),
        )

    interview = Interview(
        application_id=application.id,
        scheduled_at=scheduled_at,
        duration_minutes=duration_minutes,
        meeting_link=meeting_link,
        location=location,
        notes=notes,
    )
    if mode is not None:
        interview.mode = mode
    interview.application = application
    db.add(interview)
    await db.commit()

    logger.info(f"Interview {interview.id} scheduled for application {application.id}")
    return pipeline.summarize_interview(viewer, interview, now)


async def list_industry_applications(
    db: AsyncSession,
    viewer: ViewerContext,
    industry_id: int,
    status: Optional[ApplicationStatus] = None,
    limit: int = 50,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    List applications received by a company with per-status counts.

    Args:
        db: Database session
        viewer: The owning company or an admin
        industry_id: Company whose applications are listed
        status: Optional status filter
        limit: Maximum number of results
        offset: Pagination offset

    Returns:
        Dictionary with projected application summaries, counts and
        pagination info
    """
    if not viewer.is_admin and viewer.industry_id != industry_id:
        raise AccessDenied("You can only view your own applications")

    query = select(Application).where(Application.industry_id == industry_id)
    count_query = select(func.count(Application.id)).where(
        Application.industry_id == industry_id
    )
    if status is not None:
        query = query.where(Application.status == status)
        count_query = count_query.where(Application.status == status)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(
        query.order_by(Application.applied_at.desc(), Application.id.desc())
        .limit(limit)
        .offset(offset)
    )
    applications = result.scalars().all()

    return {
        "applications": [
            pipeline.summarize_application(viewer, application, now)
            for application in applications
        ],
        "stats": await count_by_status(db, industry_id),
        "total": total,
        "limit": limit,
        "offset": offset,
    }


async def list_candidate_applications(
    db: AsyncSession,
    viewer: ViewerContext,
    status: Optional[ApplicationStatus] = None,
    limit: int = 50,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    List the viewer's own applications, newest first.

    The company on each entry is projected for the candidate, so a company
    hiding its name shows up under its anonymous label.

    Raises:
        AccessDenied: The viewer has no candidate profile
    """
    if viewer.candidate_id is None:
        raise AccessDenied("Only candidates can list their applications")

    query = select(Application).where(Application.candidate_id == viewer.candidate_id)
    count_query = select(func.count(Application.id)).where(
        Application.candidate_id == viewer.candidate_id
    )
    if status is not None:
        query = query.where(Application.status == status)
        count_query = count_query.where(Application.status == status)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(
        query.order_by(Application.applied_at.desc(), Application.id.desc())
        .limit(limit)
        .offset(offset)
    )

    return {
        "applications": [
            pipeline.summarize_own_application(viewer, application, now)
            for application in result.scalars().all()
        ],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


async def count_by_status(db: AsyncSession, industry_id: int) -> Dict[str, int]:
    result = await db.execute(
        select(Application.status, func.count(Application.id))
        .where(Application.industry_id == industry_id)
        .group_by(Application.status)
    )
    counts = {status.value: 0 for status in ApplicationStatus}
    for status, count in result.all():
        counts[ApplicationStatus(status).value] = count
    counts["total"] = sum(counts.values())
    return counts
