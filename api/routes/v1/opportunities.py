"""Opportunity listing endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer, get_pagination_params
from api.services import opportunities as opportunity_service
from core.privacy.policy import ViewerContext
from database.engine import get_db
from database.models.opportunities import OpportunityType

router = APIRouter()


@router.get(
    "",
    summary="List Opportunities",
    description="Approved opportunities with the posting company shown per its visibility settings.",
)
async def list_opportunities(
    type: Optional[OpportunityType] = Query(None, description="Filter by opportunity type"),
    pagination: dict = Depends(get_pagination_params),
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await opportunity_service.list_opportunities(
        db,
        viewer,
        opportunity_type=type,
        limit=pagination["limit"],
        offset=pagination["offset"],
    )
