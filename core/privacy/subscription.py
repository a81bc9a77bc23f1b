"""
Subscription gate.

Premium entitlement is resolved at the moment of every decision from the
persisted flag and expiry, never from anything cached at session issuance.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from database.models.opportunities import Opportunity, OpportunityType

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes read from the store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_premium_active(account, now: Optional[datetime] = None) -> bool:
    """
    Whether an account currently holds premium entitlement.

    Args:
        account: Anything exposing ``is_premium`` and ``premium_expires_at``
            (a User row or a ViewerContext)
        now: Evaluation instant, defaults to the current time

    Returns:
        True only if the flag is set and the expiry lies in the future
    """
    if account is None or not account.is_premium:
        return False
    expires_at = account.premium_expires_at
    if expires_at is None:
        return False
    now = as_utc(now) if now is not None else utcnow()
    return as_utc(expires_at) > now


def month_start(now: datetime) -> datetime:
    now = as_utc(now)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def get_posting_limits(
    db: AsyncSession,
    industry,
    owner,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Monthly posting allowance of an industry.

    Premium industries are unlimited. Free industries may post a fixed number
    of internships and projects per calendar month and no freelance work.

    Args:
        db: Database session
        industry: The posting industry
        owner: The industry's user account (entitlement source)
        now: Evaluation instant

    Returns:
        Dict with premium state, per-type limits, current counts and
        whether another posting of each type is allowed
    """
    now = as_utc(now) if now is not None else utcnow()
    premium = is_premium_active(owner, now)

    result = await db.execute(
        select(Opportunity.type, func.count(Opportunity.id))
        .where(
            Opportunity.industry_id == industry.id,
            Opportunity.created_at >= month_start(now),
        )
        .group_by(Opportunity.type)
    )
    counts = {kind.value: 0 for kind in OpportunityType}
    for kind, count in result.all():
        counts[OpportunityType(kind).value] = count

    if premium:
        limits = {kind.value: None for kind in OpportunityType}
    else:
        limits = {
            OpportunityType.INTERNSHIP.value: settings.free_monthly_posting_limit,
            OpportunityType.PROJECT.value: settings.free_monthly_posting_limit,
            OpportunityType.FREELANCING.value: 0,
        }

    can_post = {
        kind: limit is None or counts[kind] < limit for kind, limit in limits.items()
    }

    logger.debug(
        f"Posting limits for industry {industry.id}: premium={premium}, counts={counts}"
    )

    return {
        "is_premium": premium,
        "limits": limits,
        "current_counts": counts,
        "can_post": can_post,
        "period_start": month_start(now).isoformat(),
    }
