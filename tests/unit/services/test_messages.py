"""
Tests for messaging service functions.

Tests:
- The messaging gate on conversation initiation
- MESSAGE_INITIATE audit entries
- Replies inside existing threads
- Conversation lists with projected partners
- Thread reads that mark incoming messages as read
"""

import pytest
from sqlalchemy import func, select

from api.services import messages as message_service
from core.exceptions import AccessDenied, MessagingNotPermitted, ResourceNotFound
from database.models.applications import ApplicationStatus
from database.models.audit import AuditAction, PrivacyAuditLog
from database.models.communications import Message
from tests.conftest import viewer_for


async def message_count(session):
    return (await session.execute(select(func.count(Message.id)))).scalar_one()


async def audit_entries(session):
    result = await session.execute(select(PrivacyAuditLog).order_by(PrivacyAuditLog.id))
    return list(result.scalars().all())


async def make_application(factory, status, premium=False):
    candidate = await factory.candidate()
    company = await factory.industry(premium=premium)
    opportunity = await factory.opportunity(company)
    application = await factory.application(candidate, opportunity, status)
    return candidate, company, application


class TestInitiateConversation:
    """Test the messaging gate."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [
        ApplicationStatus.PENDING,
        ApplicationStatus.REVIEWED,
        ApplicationStatus.SELECTED,
        ApplicationStatus.WITHDRAWN,
    ])
    async def test_ineligible_status_rejected(self, db, factory, status):
        _, company, application = await make_application(factory, status)

        with pytest.raises(MessagingNotPermitted, match="shortlisted"):
            await message_service.initiate_conversation(
                db, viewer_for(company.user), application.id, "Hello"
            )

        assert await message_count(db) == 0
        assert await audit_entries(db) == []

    @pytest.mark.asyncio
    async def test_shortlisted_application_opens_thread(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )

        message = await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "We'd like to talk"
        )

        assert message["sender_id"] == company.user_id
        assert message["receiver_id"] == candidate.user_id
        assert message["application_id"] == application.id
        assert message["subject"] == "Regarding: Backend Intern"
        assert message["sent_at"] is not None

        entries = await audit_entries(db)
        assert [entry.action for entry in entries] == [AuditAction.MESSAGE_INITIATE]
        assert entries[0].is_premium_access is False
        assert entries[0].target_user_id == candidate.user_id

    @pytest.mark.asyncio
    async def test_premium_initiation_flagged(self, db, factory):
        _, company, application = await make_application(
            factory, ApplicationStatus.INTERVIEW_SCHEDULED, premium=True
        )

        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hi", subject="Next steps"
        )

        entries = await audit_entries(db)
        assert entries[0].is_premium_access is True

    @pytest.mark.asyncio
    async def test_candidate_cannot_initiate(self, db, factory):
        candidate, _, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )

        with pytest.raises(AccessDenied):
            await message_service.initiate_conversation(
                db, viewer_for(candidate.user), application.id, "Hello"
            )

    @pytest.mark.asyncio
    async def test_other_company_cannot_initiate(self, db, factory):
        _, _, application = await make_application(factory, ApplicationStatus.SHORTLISTED)
        other = await factory.industry(company_name="Other Co")

        with pytest.raises(AccessDenied):
            await message_service.initiate_conversation(
                db, viewer_for(other.user), application.id, "Hello"
            )

    @pytest.mark.asyncio
    async def test_missing_application(self, db, factory):
        company = await factory.industry()

        with pytest.raises(ResourceNotFound):
            await message_service.initiate_conversation(
                db, viewer_for(company.user), 4242, "Hello"
            )


class TestSendMessage:
    """Test replies."""

    @pytest.mark.asyncio
    async def test_no_thread_no_message(self, db, factory):
        candidate, company, _ = await make_application(factory, ApplicationStatus.PENDING)

        with pytest.raises(MessagingNotPermitted):
            await message_service.send_message(
                db, viewer_for(candidate.user), company.user_id, "Any update?"
            )

    @pytest.mark.asyncio
    async def test_reply_inherits_application(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hello"
        )

        reply = await message_service.send_message(
            db, viewer_for(candidate.user), company.user_id, "Happy to talk"
        )

        assert reply["application_id"] == application.id
        assert reply["subject"] == "Regarding: Backend Intern"
        assert await message_count(db) == 2

    @pytest.mark.asyncio
    async def test_cannot_message_self(self, db, factory):
        candidate = await factory.candidate()

        with pytest.raises(MessagingNotPermitted):
            await message_service.send_message(
                db, viewer_for(candidate.user), candidate.user_id, "Note to self"
            )

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, db, factory):
        candidate = await factory.candidate()

        with pytest.raises(ResourceNotFound):
            await message_service.send_message(
                db, viewer_for(candidate.user), 987654, "Hello"
            )


class TestListConversations:
    """Test conversation lists."""

    @pytest.mark.asyncio
    async def test_partner_projected(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hello"
        )

        company_side = await message_service.list_conversations(db, viewer_for(company.user))
        candidate_side = await message_service.list_conversations(db, viewer_for(candidate.user))

        assert len(company_side) == 1
        assert company_side[0]["partner"]["role"] == "CANDIDATE"
        assert company_side[0]["partner"]["display_name"].startswith("Candidate #")
        assert company_side[0]["unread_count"] == 0

        assert candidate_side[0]["partner"]["display_name"].startswith("Company #")
        assert candidate_side[0]["unread_count"] == 1
        assert candidate_side[0]["application_id"] == application.id

    @pytest.mark.asyncio
    async def test_visible_name_by_preference(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )
        candidate.show_full_name = True
        await db.commit()
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hello"
        )

        conversations = await message_service.list_conversations(db, viewer_for(company.user))

        assert conversations[0]["partner"]["display_name"] == "Asha Verma"
        assert conversations[0]["partner"]["is_anonymous"] is False


class TestGetThread:
    """Test reading a single conversation."""

    @pytest.mark.asyncio
    async def test_thread_oldest_first_with_redacted_partner(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hello"
        )
        await message_service.send_message(
            db, viewer_for(candidate.user), company.user_id, "Happy to talk"
        )

        thread = await message_service.get_thread(
            db, viewer_for(candidate.user), company.user_id
        )

        assert [m["content"] for m in thread["messages"]] == ["Hello", "Happy to talk"]
        assert thread["partner"]["role"] == "INDUSTRY"
        assert thread["partner"]["display_name"].startswith("Company #")
        assert thread["partner"]["is_anonymous"] is True
        assert "Acme" not in thread["partner"]["display_name"]

    @pytest.mark.asyncio
    async def test_opening_thread_marks_incoming_read(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hello"
        )
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Are you available Monday?"
        )
        candidate_viewer = viewer_for(candidate.user)

        before = await message_service.list_conversations(db, candidate_viewer)
        thread = await message_service.get_thread(db, candidate_viewer, company.user_id)
        after = await message_service.list_conversations(db, candidate_viewer)

        assert before[0]["unread_count"] == 2
        assert thread["marked_read"] == 2
        assert all(m["is_read"] is False for m in thread["messages"])
        assert after[0]["unread_count"] == 0

        unread = await db.execute(
            select(func.count(Message.id)).where(Message.is_read.is_(False))
        )
        assert unread.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_sender_does_not_mark_own_messages(self, db, factory):
        candidate, company, application = await make_application(
            factory, ApplicationStatus.SHORTLISTED
        )
        await message_service.initiate_conversation(
            db, viewer_for(company.user), application.id, "Hello"
        )

        thread = await message_service.get_thread(
            db, viewer_for(company.user), candidate.user_id
        )
        candidate_side = await message_service.list_conversations(
            db, viewer_for(candidate.user)
        )

        assert thread["marked_read"] == 0
        assert thread["partner"]["display_name"].startswith("Candidate #")
        assert candidate_side[0]["unread_count"] == 1

    @pytest.mark.asyncio
    async def test_no_conversation(self, db, factory):
        candidate, company, _ = await make_application(factory, ApplicationStatus.PENDING)

        with pytest.raises(ResourceNotFound):
            await message_service.get_thread(
                db, viewer_for(candidate.user), company.user_id
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self, db, factory):
        candidate = await factory.candidate()

        with pytest.raises(ResourceNotFound):
            await message_service.get_thread(db, viewer_for(candidate.user), 987654)
