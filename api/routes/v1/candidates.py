"""Candidate endpoints: profiles and the candidate's own applications."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer
from api.schemas.common import ErrorResponse
from api.services import applications as application_service
from api.services import candidates as candidate_service
from core.privacy.policy import ViewerContext
from database.engine import get_db
from database.models.applications import ApplicationStatus

router = APIRouter()


@router.get(
    "/me/applications",
    summary="List My Applications",
    description="The candidate's applications with each company projected for the candidate.",
    responses={403: {"model": ErrorResponse}},
)
async def list_my_applications(
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.list_candidate_applications(
        db, viewer, status=status, limit=limit, offset=offset
    )


@router.get(
    "/{candidate_id}",
    summary="Get Candidate Profile",
    description="Candidate profile with name, contact and location disclosed per viewer.",
    responses={404: {"model": ErrorResponse}},
)
async def get_candidate(
    candidate_id: int = Path(..., description="Candidate ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.get_candidate(db, viewer, candidate_id)
