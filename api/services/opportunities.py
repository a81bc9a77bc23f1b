"""Opportunity listing with the posting company projected."""

from typing import Any, Dict, Optional
from datetime import datetime
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.privacy import pipeline
from core.privacy.policy import ViewerContext
from database.models.opportunities import Opportunity, OpportunityType

logger = logging.getLogger(__name__)


async def list_opportunities(
    db: AsyncSession,
    viewer: ViewerContext,
    opportunity_type: Optional[OpportunityType] = None,
    limit: int = 20,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    List approved, active opportunities.

    Returns:
        Dictionary with opportunities, each carrying a company summary, and
        pagination info
    """
    filters = [Opportunity.is_approved.is_(True), Opportunity.is_active.is_(True)]
    if opportunity_type is not None:
        filters.append(Opportunity.type == opportunity_type)

    total = (
        await db.execute(select(func.count(Opportunity.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Opportunity)
        .where(*filters)
        .order_by(Opportunity.created_at.desc(), Opportunity.id.desc())
        .limit(limit)
        .offset(offset)
    )

    companies: Dict[int, Dict[str, Any]] = {}
    items = []
    for opportunity in result.scalars().all():
        if opportunity.industry_id not in companies:
            companies[opportunity.industry_id] = await pipeline.summarize_company(
                db, viewer, opportunity.industry, now
            )
        items.append(
            {
                "id": opportunity.id,
                "title": opportunity.title,
                "type": opportunity.type.value,
                "description": opportunity.description,
                "location": opportunity.location,
                "is_remote": opportunity.is_remote,
                "duration_weeks": opportunity.duration_weeks,
                "stipend": opportunity.stipend,
                "created_at": opportunity.created_at,
                "company": companies[opportunity.industry_id],
            }
        )

    return {"opportunities": items, "total": total, "limit": limit, "offset": offset}
