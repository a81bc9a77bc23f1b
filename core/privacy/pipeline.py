"""
Disclosure pipeline.

Every endpoint that returns subject data goes through these functions:
resolve the relationship, decide (the subscription gate runs inside the
decision), project, then audit privileged contact disclosures. The view is
always computed before the audit write so an audit failure cannot block it.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.privacy import projector
from core.privacy.audit import record_contact_view, record_privileged_view
from core.privacy.consent import application_relationship, resolve_relationship
from core.privacy.policy import (
    NO_RELATIONSHIP,
    DisclosureDecision,
    Relationship,
    ViewerContext,
    decide,
)
from database.models.applications import Application
from database.models.candidates import Candidate
from database.models.industries import Industry

logger = logging.getLogger(__name__)


async def evaluate(
    db: AsyncSession,
    viewer: ViewerContext,
    subject,
    relationship: Optional[Relationship] = None,
    now: Optional[datetime] = None,
) -> DisclosureDecision:
    """Decide visibility of a subject, looking up the relationship if not given."""
    if relationship is None:
        if viewer.is_admin or viewer.is_subject(subject):
            relationship = NO_RELATIONSHIP
        else:
            relationship = await resolve_relationship(db, viewer, subject)
    return decide(subject, viewer, relationship, now)


async def view_candidate(
    db: AsyncSession,
    viewer: ViewerContext,
    candidate: Candidate,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    relationship = None
    if not (viewer.is_admin or viewer.is_subject(candidate)):
        relationship = await resolve_relationship(db, viewer, candidate)
    decision = await evaluate(db, viewer, candidate, relationship, now)
    view = projector.candidate_detail(candidate, decision)

    if decision.contact_privileged:
        if viewer.industry_id and relationship and relationship.application_ids:
            application = await db.get(Application, relationship.application_ids[0])
            await record_contact_view(db, viewer, application)
        else:
            await record_privileged_view(db, viewer, candidate, "candidate", candidate.id)
    return view


async def view_company(
    db: AsyncSession,
    viewer: ViewerContext,
    industry: Industry,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    decision = await evaluate(db, viewer, industry, now=now)
    view = projector.company_view(industry, decision)

    if decision.contact_privileged:
        await record_privileged_view(db, viewer, industry, "industry", industry.id)
    return view


async def view_application(
    db: AsyncSession,
    viewer: ViewerContext,
    application: Application,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Application detail for one of its parties or an admin.

    The first premium view of the candidate's contact by the owning industry
    sets ``contact_viewed`` and writes exactly one VIEW_CONTACT entry.
    """
    relationship = application_relationship(viewer, application)
    candidate_decision = decide(application.candidate, viewer, relationship, now)
    company_decision = decide(application.industry, viewer, relationship, now)
    view = projector.application_detail(
        application, candidate_decision, company_decision
    )

    if (
        candidate_decision.contact_privileged
        and viewer.industry_id == application.industry_id
    ):
        await record_contact_view(db, viewer, application)
    return view


def summarize_application(
    viewer: ViewerContext,
    application: Application,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """List entry for an application. Summaries carry no contact data."""
    relationship = application_relationship(viewer, application)
    decision = decide(application.candidate, viewer, relationship, now)
    return projector.application_summary(application, decision)


def summarize_own_application(
    viewer: ViewerContext,
    application: Application,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """List entry for a candidate's own application, with the company projected."""
    relationship = application_relationship(viewer, application)
    decision = decide(application.industry, viewer, relationship, now)
    return projector.candidate_application_entry(application, decision)


def summarize_interview(
    viewer: ViewerContext,
    interview,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    application = interview.application
    relationship = application_relationship(viewer, application)
    return projector.interview_entry(
        interview,
        decide(application.candidate, viewer, relationship, now),
        decide(application.industry, viewer, relationship, now),
    )


async def summarize_company(
    db: AsyncSession,
    viewer: ViewerContext,
    industry: Industry,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    decision = await evaluate(db, viewer, industry, now=now)
    return projector.company_summary(industry, decision)


async def describe_partner(
    db: AsyncSession,
    viewer: ViewerContext,
    user,
    application: Optional[Application] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Projected identity of a conversation partner.

    A thread anchored to an application is itself the relationship, so no
    lookup is needed in that case.
    """
    subject = user.candidate or user.industry
    if subject is None:
        return projector.conversation_partner(user)

    relationship = None
    if application is not None:
        relationship = Relationship(
            application_ids=(application.id,), has_message_thread=True
        )
    decision = await evaluate(db, viewer, subject, relationship, now)
    return projector.conversation_partner(user, subject, decision)
