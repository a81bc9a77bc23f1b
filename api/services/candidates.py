"""Candidate profile service."""

from typing import Any, Dict, Optional
from datetime import datetime
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ResourceNotFound
from core.privacy import pipeline
from core.privacy.policy import ViewerContext
from database.models.candidates import Candidate

logger = logging.getLogger(__name__)


async def get_candidate(
    db: AsyncSession,
    viewer: ViewerContext,
    candidate_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Get a candidate profile as the viewer is allowed to see it.

    Args:
        db: Database session
        viewer: Requesting viewer
        candidate_id: The candidate ID

    Returns:
        Projected candidate profile
    """
    candidate = await db.get(Candidate, candidate_id)
    if candidate is None:
        raise ResourceNotFound("Candidate not found")
    return await pipeline.view_candidate(db, viewer, candidate, now)
