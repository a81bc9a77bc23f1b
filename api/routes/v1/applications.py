"""
Application workflow endpoints.

Application details go through the disclosure pipeline; status changes go
through the application state machine.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer
from api.schemas.applications import ApplicationStatusUpdate, InterviewCreate
from api.schemas.common import ErrorResponse
from api.services import applications as application_service
from core.privacy.policy import ViewerContext
from database.engine import get_db

router = APIRouter()


@router.get(
    "/{application_id}",
    summary="Get Application Details",
    description="Application detail for its candidate, the owning company or an admin.",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_application(
    application_id: int = Path(..., description="Application ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    """Retrieve an application with its candidate and company projected for the viewer."""
    return await application_service.get_application(db, viewer, application_id)


@router.put(
    "/{application_id}/status",
    summary="Update Application Status",
    description=(
        "Move an application to a new status. Companies advance or reject, "
        "candidates may withdraw. Rejection requires a reason."
    ),
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_application_status(
    payload: ApplicationStatusUpdate,
    application_id: int = Path(..., description="Application ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.update_application_status(
        db,
        viewer,
        application_id,
        new_status=payload.status,
        reason=payload.reason,
    )


@router.post(
    "/{application_id}/interviews",
    status_code=201,
    summary="Schedule Interview",
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def schedule_interview(
    payload: InterviewCreate,
    application_id: int = Path(..., description="Application ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    """Schedule an interview; the application moves to INTERVIEW_SCHEDULED."""
    return await application_service.schedule_interview(
        db,
        viewer,
        application_id,
        scheduled_at=payload.scheduled_at,
        duration_minutes=payload.duration_minutes,
        mode=payload.mode,
        meeting_link=payload.meeting_link,
        location=payload.location,
        notes=payload.notes,
    )
