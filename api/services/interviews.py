"""Interview listing for candidates and companies."""

from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccessDenied
from core.privacy import pipeline
from core.privacy.policy import ViewerContext
from core.privacy.subscription import utcnow
from database.models.applications import Application
from database.models.interviews import Interview

logger = logging.getLogger(__name__)


async def list_interviews(
    db: AsyncSession,
    viewer: ViewerContext,
    upcoming_only: bool = False,
    limit: int = 50,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Interviews the viewer takes part in, with both sides projected.

    Args:
        db: Database session
        viewer: Requesting viewer
        upcoming_only: Only interviews scheduled after ``now``
        limit: Maximum number of results
        offset: Pagination offset
        now: Evaluation instant

    Returns:
        List of interview entries
    """
    query = select(Interview).join(Application, Interview.application_id == Application.id)
    if viewer.industry_id is not None:
        query = query.where(Application.industry_id == viewer.industry_id)
    elif viewer.candidate_id is not None:
        query = query.where(Application.candidate_id == viewer.candidate_id)
    elif not viewer.is_admin:
        raise AccessDenied("Only candidates and companies have interviews")

    if upcoming_only:
        query = query.where(Interview.scheduled_at >= (now or utcnow()))

    result = await db.execute(
        query.order_by(Interview.scheduled_at.asc()).limit(limit).offset(offset)
    )
    return [
        pipeline.summarize_interview(viewer, interview, now)
        for interview in result.scalars().all()
    ]
