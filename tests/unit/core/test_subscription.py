"""
Tests for the subscription gate.

Tests:
- Premium resolution from flag and expiry
- Naive datetimes read back from the store
- Monthly posting limits for free and premium companies
"""

import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from core.privacy.subscription import (
    as_utc,
    get_posting_limits,
    is_premium_active,
    month_start,
)
from database.models.opportunities import OpportunityType

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def account(is_premium=True, expires_at=None):
    return SimpleNamespace(is_premium=is_premium, premium_expires_at=expires_at)


class TestIsPremiumActive:
    """Test premium entitlement resolution."""

    def test_active_premium(self):
        assert is_premium_active(account(expires_at=NOW + timedelta(days=1)), NOW) is True

    def test_flag_without_expiry_is_not_premium(self):
        assert is_premium_active(account(expires_at=None), NOW) is False

    def test_expired_premium(self):
        assert is_premium_active(account(expires_at=NOW - timedelta(seconds=1)), NOW) is False

    def test_expiry_instant_is_exclusive(self):
        assert is_premium_active(account(expires_at=NOW), NOW) is False

    def test_flag_off_ignores_expiry(self):
        assert is_premium_active(
            account(is_premium=False, expires_at=NOW + timedelta(days=30)), NOW
        ) is False

    def test_none_account(self):
        assert is_premium_active(None, NOW) is False

    def test_naive_expiry_treated_as_utc(self):
        naive = datetime(2025, 3, 15, 12, 30)
        assert is_premium_active(account(expires_at=naive), NOW) is True

    def test_defaults_to_current_time(self):
        future = datetime.now(timezone.utc) + timedelta(minutes=5)
        past = datetime.now(timezone.utc) - timedelta(minutes=5)

        assert is_premium_active(account(expires_at=future)) is True
        assert is_premium_active(account(expires_at=past)) is False


class TestTimeHelpers:
    def test_as_utc_converts_offsets(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        value = datetime(2025, 3, 15, 17, 30, tzinfo=ist)

        assert as_utc(value) == NOW

    def test_month_start(self):
        assert month_start(NOW) == datetime(2025, 3, 1, tzinfo=timezone.utc)


class TestPostingLimits:
    """Test monthly posting allowance."""

    @pytest.mark.asyncio
    async def test_free_company_limits(self, factory, db):
        industry = await factory.industry()
        await factory.opportunity(industry, OpportunityType.INTERNSHIP)
        await factory.opportunity(industry, OpportunityType.INTERNSHIP)
        await factory.opportunity(industry, OpportunityType.PROJECT)

        limits = await get_posting_limits(db, industry, industry.user)

        assert limits["is_premium"] is False
        assert limits["limits"] == {"INTERNSHIP": 3, "PROJECT": 3, "FREELANCING": 0}
        assert limits["current_counts"] == {"INTERNSHIP": 2, "PROJECT": 1, "FREELANCING": 0}
        assert limits["can_post"] == {"INTERNSHIP": True, "PROJECT": True, "FREELANCING": False}

    @pytest.mark.asyncio
    async def test_free_company_at_limit(self, factory, db):
        industry = await factory.industry()
        for _ in range(3):
            await factory.opportunity(industry, OpportunityType.PROJECT)

        limits = await get_posting_limits(db, industry, industry.user)

        assert limits["can_post"]["PROJECT"] is False
        assert limits["can_post"]["INTERNSHIP"] is True

    @pytest.mark.asyncio
    async def test_premium_company_unlimited(self, factory, db):
        industry = await factory.industry(premium=True)
        for _ in range(5):
            await factory.opportunity(industry, OpportunityType.INTERNSHIP)

        limits = await get_posting_limits(db, industry, industry.user)

        assert limits["is_premium"] is True
        assert all(limit is None for limit in limits["limits"].values())
        assert all(limits["can_post"].values())
        assert limits["current_counts"]["INTERNSHIP"] == 5

    @pytest.mark.asyncio
    async def test_lapsed_premium_falls_back_to_free_limits(self, factory, db):
        industry = await factory.industry()
        industry.user.is_premium = True
        industry.user.premium_expires_at = datetime.now(timezone.utc) - timedelta(days=1)

        limits = await get_posting_limits(db, industry, industry.user)

        assert limits["is_premium"] is False
        assert limits["limits"]["FREELANCING"] == 0

    @pytest.mark.asyncio
    async def test_postings_from_previous_months_not_counted(self, factory, db):
        industry = await factory.industry()
        await factory.opportunity(industry, OpportunityType.INTERNSHIP)

        next_month = month_start(datetime.now(timezone.utc)) + timedelta(days=40)
        limits = await get_posting_limits(db, industry, industry.user, now=next_month)

        assert limits["current_counts"]["INTERNSHIP"] == 0
