"""Interview listing endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer
from api.services import interviews as interview_service
from core.privacy.policy import ViewerContext
from database.engine import get_db

router = APIRouter()


@router.get(
    "",
    summary="List My Interviews",
    description="Interviews of the calling candidate or company, both sides projected.",
)
async def list_interviews(
    upcoming_only: bool = Query(False, description="Only future interviews"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    interviews = await interview_service.list_interviews(
        db, viewer, upcoming_only=upcoming_only, limit=limit, offset=offset
    )
    return {"interviews": interviews}
