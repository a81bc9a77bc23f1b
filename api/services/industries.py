"""Company profile, dashboard statistics and subscription-gated limits."""

from typing import Any, Dict, Optional
from datetime import datetime
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccessDenied, ResourceNotFound
from core.privacy import pipeline
from core.privacy.policy import ViewerContext
from core.privacy.subscription import get_posting_limits as resolve_posting_limits
from api.services.applications import count_by_status
from database.models.applications import Application
from database.models.industries import Industry
from database.models.opportunities import Opportunity

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


async def load_industry(db: AsyncSession, industry_id: int) -> Industry:
    industry = await db.get(Industry, industry_id)
    if industry is None:
        raise ResourceNotFound("Company not found")
    return industry


def ensure_owner(viewer: ViewerContext, industry_id: int) -> None:
    if not viewer.is_admin and viewer.industry_id != industry_id:
        raise AccessDenied("You can only access your own company")


async def get_industry(
    db: AsyncSession,
    viewer: ViewerContext,
    industry_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Company profile as the viewer is allowed to see it."""
    industry = await load_industry(db, industry_id)
    return await pipeline.view_company(db, viewer, industry, now)


async def get_industry_stats(
    db: AsyncSession,
    viewer: ViewerContext,
    industry_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Dashboard statistics for a company.

    Args:
        db: Database session
        viewer: The owning company or an admin
        industry_id: The company ID

    Returns:
        Opportunity and application counts plus recent applications with
        privacy-aware candidate names
    """
    await load_industry(db, industry_id)
    ensure_owner(viewer, industry_id)

    opportunities = await db.execute(
        select(func.count(Opportunity.id)).where(Opportunity.industry_id == industry_id)
    )
    active_opportunities = await db.execute(
        select(func.count(Opportunity.id)).where(
            Opportunity.industry_id == industry_id,
            Opportunity.is_active.is_(True),
        )
    )
    recent = await db.execute(
        select(Application)
        .where(Application.industry_id == industry_id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    )

    return {
        "total_opportunities": opportunities.scalar_one(),
        "active_opportunities": active_opportunities.scalar_one(),
        "applications": await count_by_status(db, industry_id),
        "recent_applications": [
            pipeline.summarize_application(viewer, application, now)
            for application in recent.scalars().all()
        ],
    }


async def get_posting_limits(
    db: AsyncSession,
    viewer: ViewerContext,
    industry_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Posting allowance of a company, gated by its owner's subscription."""
    industry = await load_industry(db, industry_id)
    ensure_owner(viewer, industry_id)
    return await resolve_posting_limits(db, industry, industry.user, now)
