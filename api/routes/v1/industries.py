"""Company endpoints: profile, received applications, stats and posting limits."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer
from api.schemas.common import ErrorResponse
from api.services import applications as application_service
from api.services import industries as industry_service
from core.privacy.policy import ViewerContext
from database.engine import get_db
from database.models.applications import ApplicationStatus

router = APIRouter()


@router.get(
    "/{industry_id}",
    summary="Get Company Profile",
    responses={404: {"model": ErrorResponse}},
)
async def get_industry(
    industry_id: int = Path(..., description="Company ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await industry_service.get_industry(db, viewer, industry_id)


@router.get(
    "/{industry_id}/applications",
    summary="List Received Applications",
    description="Applications to the company's opportunities with per-status counts.",
    responses={403: {"model": ErrorResponse}},
)
async def list_applications(
    industry_id: int = Path(..., description="Company ID"),
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.list_industry_applications(
        db, viewer, industry_id, status=status, limit=limit, offset=offset
    )


@router.get(
    "/{industry_id}/stats",
    summary="Company Dashboard Statistics",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_stats(
    industry_id: int = Path(..., description="Company ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await industry_service.get_industry_stats(db, viewer, industry_id)


@router.get(
    "/{industry_id}/posting-limits",
    summary="Monthly Posting Limits",
    description="Premium companies post without limits; free companies have monthly quotas.",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_posting_limits(
    industry_id: int = Path(..., description="Company ID"),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await industry_service.get_posting_limits(db, viewer, industry_id)
