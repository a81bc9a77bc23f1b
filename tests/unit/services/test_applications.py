"""
Tests for application service functions.

Tests:
- Application detail through the disclosure pipeline
- Status updates with authorization and audit
- Interview scheduling
- Company application lists and stats
- Candidate application lists with projected companies
"""

import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import func, select

from api.services import applications as application_service
from api.services import industries as industry_service
from core.exceptions import (
    AccessDenied,
    InvalidStatusTransition,
    RejectionReasonRequired,
    ResourceNotFound,
)
from core.privacy.policy import LOCATION_HIDDEN
from database.models.applications import Application, ApplicationStatus
from database.models.audit import AuditAction, PrivacyAuditLog
from database.models.interviews import Interview, InterviewMode
from tests.conftest import viewer_for


async def audit_actions(session):
    result = await session.execute(
        select(PrivacyAuditLog.action).order_by(PrivacyAuditLog.id)
    )
    return list(result.scalars().all())


@pytest.fixture
async def setup(factory):
    candidate = await factory.candidate()
    free_company = await factory.industry()
    opportunity = await factory.opportunity(free_company)
    application = await factory.application(candidate, opportunity)
    return candidate, free_company, application


class TestGetApplication:
    """Test application detail."""

    @pytest.mark.asyncio
    async def test_free_company_sees_redacted_candidate(self, db, setup):
        candidate, company, application = setup

        view = await application_service.get_application(
            db, viewer_for(company.user), application.id
        )

        assert view["candidate"]["is_anonymous"] is True
        assert view["candidate"]["name"].startswith("Candidate #")
        assert view["candidate"]["phone"] is None
        assert view["candidate"]["email"] is None
        assert view["candidate"]["location"] == LOCATION_HIDDEN
        assert await audit_actions(db) == []

    @pytest.mark.asyncio
    async def test_candidate_sees_own_application(self, db, setup):
        candidate, company, application = setup

        view = await application_service.get_application(
            db, viewer_for(candidate.user), application.id
        )

        assert view["candidate"]["name"] == "Asha Verma"
        assert view["company"]["is_anonymous"] is True

    @pytest.mark.asyncio
    async def test_outsider_denied(self, db, factory, setup):
        _, _, application = setup
        other = await factory.industry(company_name="Other Co")

        with pytest.raises(AccessDenied):
            await application_service.get_application(
                db, viewer_for(other.user), application.id
            )

    @pytest.mark.asyncio
    async def test_missing_application(self, db, setup):
        candidate, _, _ = setup

        with pytest.raises(ResourceNotFound):
            await application_service.get_application(db, viewer_for(candidate.user), 9999)

    @pytest.mark.asyncio
    async def test_admin_sees_everything_without_audit(self, db, factory, setup):
        _, _, application = setup
        admin = await factory.admin()

        view = await application_service.get_application(db, viewer_for(admin), application.id)

        assert view["candidate"]["phone"] == "+91-9876543210"
        assert view["company"]["company_name"] == "Acme Robotics"
        assert await audit_actions(db) == []


class TestUpdateApplicationStatus:
    """Test status updates."""

    @pytest.mark.asyncio
    async def test_shortlist_records_audit(self, db, setup):
        _, company, application = setup

        result = await application_service.update_application_status(
            db, viewer_for(company.user), application.id, ApplicationStatus.SHORTLISTED
        )

        assert result["status"] == "SHORTLISTED"
        assert result["previous_status"] == "PENDING"
        assert result["reviewed_at"] is not None
        assert await audit_actions(db) == [AuditAction.APPLICATION_STATUS_UPDATE]

        entry = (await db.execute(select(PrivacyAuditLog))).scalar_one()
        assert entry.legal_basis == "Status changed to SHORTLISTED"
        assert entry.is_premium_access is False

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, db, setup):
        _, company, application = setup

        with pytest.raises(RejectionReasonRequired):
            await application_service.update_application_status(
                db, viewer_for(company.user), application.id, ApplicationStatus.REJECTED
            )

        assert await audit_actions(db) == []

    @pytest.mark.asyncio
    async def test_reject_with_reason(self, db, setup):
        _, company, application = setup

        result = await application_service.update_application_status(
            db,
            viewer_for(company.user),
            application.id,
            ApplicationStatus.REJECTED,
            reason="Position filled",
        )

        assert result["rejection_reason"] == "Position filled"

    @pytest.mark.asyncio
    async def test_invalid_transition(self, db, factory, setup):
        candidate, company, _ = setup
        selected = await factory.application(
            candidate,
            await factory.opportunity(company, title="Data Intern"),
            ApplicationStatus.SELECTED,
        )

        with pytest.raises(InvalidStatusTransition):
            await application_service.update_application_status(
                db, viewer_for(company.user), selected.id, ApplicationStatus.PENDING
            )

    @pytest.mark.asyncio
    async def test_candidate_can_only_withdraw(self, db, setup):
        candidate, _, application = setup
        viewer = viewer_for(candidate.user)

        with pytest.raises(AccessDenied):
            await application_service.update_application_status(
                db, viewer, application.id, ApplicationStatus.SHORTLISTED
            )

        result = await application_service.update_application_status(
            db, viewer, application.id, ApplicationStatus.WITHDRAWN
        )
        assert result["status"] == "WITHDRAWN"

    @pytest.mark.asyncio
    async def test_company_cannot_withdraw(self, db, setup):
        _, company, application = setup

        with pytest.raises(AccessDenied):
            await application_service.update_application_status(
                db, viewer_for(company.user), application.id, ApplicationStatus.WITHDRAWN
            )


class TestScheduleInterview:
    """Test interview scheduling."""

    @pytest.mark.asyncio
    async def test_schedule_moves_status(self, db, factory, setup):
        _, company, application = setup
        application_id = application.id
        when = datetime.now(timezone.utc) + timedelta(days=3)

        entry = await application_service.schedule_interview(
            db,
            viewer_for(company.user),
            application_id,
            scheduled_at=when,
            mode=InterviewMode.ONLINE,
            meeting_link="https://meet.example.com/abc",
        )

        assert entry["status"] == "INTERVIEW_SCHEDULED"
        assert entry["mode"] == "ONLINE"
        assert entry["candidate"]["is_anonymous"] is True

        count = await db.execute(select(func.count(Interview.id)))
        assert count.scalar_one() == 1
        status = await db.execute(
            select(Application.status).where(Application.id == application_id)
        )
        assert status.scalar_one() == ApplicationStatus.INTERVIEW_SCHEDULED
        assert await audit_actions(db) == [AuditAction.APPLICATION_STATUS_UPDATE]

    @pytest.mark.asyncio
    async def test_candidate_cannot_schedule(self, db, setup):
        candidate, _, application = setup

        with pytest.raises(AccessDenied):
            await application_service.schedule_interview(
                db,
                viewer_for(candidate.user),
                application.id,
                scheduled_at=datetime.now(timezone.utc),
            )

    @pytest.mark.asyncio
    async def test_terminal_application_cannot_be_scheduled(self, db, factory, setup):
        candidate, company, _ = setup
        rejected = await factory.application(
            candidate,
            await factory.opportunity(company, title="QA Intern"),
            ApplicationStatus.REJECTED,
            rejection_reason="Not a fit",
        )

        with pytest.raises(InvalidStatusTransition):
            await application_service.schedule_interview(
                db,
                viewer_for(company.user),
                rejected.id,
                scheduled_at=datetime.now(timezone.utc),
            )


class TestCompanyLists:
    """Test company-side application lists and statistics."""

    @pytest.mark.asyncio
    async def test_list_with_counts(self, db, factory, setup):
        candidate, company, application = setup
        other_candidate = await factory.candidate(first_name="Ravi", last_name="Kumar")
        await factory.application(
            other_candidate,
            await factory.opportunity(company, title="Data Intern"),
            ApplicationStatus.SHORTLISTED,
        )

        result = await application_service.list_industry_applications(
            db, viewer_for(company.user), company.id
        )

        assert result["total"] == 2
        assert result["stats"]["PENDING"] == 1
        assert result["stats"]["SHORTLISTED"] == 1
        assert result["stats"]["total"] == 2
        names = {entry["candidate"]["display_name"] for entry in result["applications"]}
        assert all(name.startswith("Candidate #") for name in names)

    @pytest.mark.asyncio
    async def test_status_filter(self, db, setup):
        _, company, _ = setup

        result = await application_service.list_industry_applications(
            db, viewer_for(company.user), company.id, status=ApplicationStatus.SELECTED
        )

        assert result["applications"] == []
        assert result["total"] == 0

    @pytest.mark.asyncio
    async def test_other_company_denied(self, db, factory, setup):
        _, company, _ = setup
        other = await factory.industry(company_name="Other Co")

        with pytest.raises(AccessDenied):
            await application_service.list_industry_applications(
                db, viewer_for(other.user), company.id
            )

    @pytest.mark.asyncio
    async def test_stats(self, db, setup):
        _, company, _ = setup

        stats = await industry_service.get_industry_stats(
            db, viewer_for(company.user), company.id
        )

        assert stats["total_opportunities"] == 1
        assert stats["active_opportunities"] == 1
        assert stats["applications"]["total"] == 1
        assert len(stats["recent_applications"]) == 1


class TestCandidateLists:
    """Test the candidate's own application list."""

    @pytest.mark.asyncio
    async def test_free_candidate_sees_company_label(self, db, setup):
        candidate, company, application = setup

        result = await application_service.list_candidate_applications(
            db, viewer_for(candidate.user)
        )

        assert result["total"] == 1
        entry = result["applications"][0]
        assert entry["id"] == application.id
        assert entry["status"] == "PENDING"
        assert entry["opportunity"]["title"] == "Backend Intern"
        assert entry["company"]["id"] == company.id
        assert entry["company"]["company_name"].startswith("Company #")
        assert entry["company"]["is_anonymous"] is True
        assert entry["company"]["location"] == LOCATION_HIDDEN
        assert "candidate" not in entry

    @pytest.mark.asyncio
    async def test_company_name_shown_by_preference(self, db, setup):
        candidate, company, _ = setup
        company.show_company_name = True
        await db.commit()

        result = await application_service.list_candidate_applications(
            db, viewer_for(candidate.user)
        )

        assert result["applications"][0]["company"]["company_name"] == "Acme Robotics"
        assert result["applications"][0]["company"]["is_anonymous"] is False

    @pytest.mark.asyncio
    async def test_premium_candidate_sees_company_name(self, db, factory, setup):
        _, company, _ = setup
        premium_user = await factory.user(premium=True)
        premium_candidate = await factory.candidate(user=premium_user)
        await factory.application(
            premium_candidate, await factory.opportunity(company, title="Data Intern")
        )

        result = await application_service.list_candidate_applications(
            db, viewer_for(premium_user)
        )

        assert result["total"] == 1
        assert result["applications"][0]["company"]["company_name"] == "Acme Robotics"
        assert result["applications"][0]["company"]["location"] == "Bengaluru, Karnataka"

    @pytest.mark.asyncio
    async def test_only_own_applications(self, db, factory, setup):
        candidate, company, _ = setup
        other_candidate = await factory.candidate(first_name="Ravi")
        await factory.application(
            other_candidate,
            await factory.opportunity(company, title="Data Intern"),
            ApplicationStatus.SHORTLISTED,
        )

        result = await application_service.list_candidate_applications(
            db, viewer_for(candidate.user)
        )
        filtered = await application_service.list_candidate_applications(
            db, viewer_for(candidate.user), status=ApplicationStatus.SHORTLISTED
        )

        assert result["total"] == 1
        assert filtered["applications"] == []
        assert filtered["total"] == 0

    @pytest.mark.asyncio
    async def test_company_viewer_denied(self, db, setup):
        _, company, _ = setup

        with pytest.raises(AccessDenied):
            await application_service.list_candidate_applications(
                db, viewer_for(company.user)
            )
