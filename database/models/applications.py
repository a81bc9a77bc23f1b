"""
Application Models

Applications carry the relationship between a candidate and the industry
owning an opportunity. Status moves through an explicit state machine and
the ``contact_viewed`` flag records the first privileged contact view.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Boolean,
    ForeignKey,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    UniqueConstraint,
)
from database.engine import Base, BigIntId
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.candidates import Candidate
    from database.models.industries import Industry
    from database.models.opportunities import Opportunity
    from database.models.interviews import Interview


# =================== Application Status Enum ==================== #
class ApplicationStatus(str, PyEnum):
    """Canonical statuses for an application."""

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"

    def is_terminal(self) -> bool:
        return self in APPLICATION_STATUS_TERMINALS

    def can_transition_to(self, new: "ApplicationStatus") -> bool:
        allowed = APPLICATION_STATUS_TRANSITIONS.get(self, set())
        return new in allowed

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def try_parse(cls, value: str) -> "ApplicationStatus | None":
        if value is None:
            return None
        try:
            normalized = str(value).strip().upper().replace(" ", "_").replace("-", "_")
            return cls(normalized)
        except ValueError:
            return None


# Helpers
APPLICATION_STATUS_TERMINALS = {
    ApplicationStatus.SELECTED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
}

# Statuses in which the owning industry may open a message thread
MESSAGING_ELIGIBLE_STATUSES = {
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW_SCHEDULED,
}

APPLICATION_STATUS_TRANSITIONS = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.REVIEWED,
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.SELECTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.REVIEWED: {
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.SELECTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.SHORTLISTED: {
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.SELECTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.INTERVIEW_SCHEDULED: {
        ApplicationStatus.SELECTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.SELECTED: set(),
    ApplicationStatus.REJECTED: set(),
    ApplicationStatus.WITHDRAWN: set(),
}


# ==================== Models ===================== #
class Application(Base):
    """
    A candidate's application to an opportunity.

    ``industry_id`` is denormalized from the opportunity so ownership checks
    do not need a join.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint(
            "candidate_id", "opportunity_id", name="uq_application_candidate_opportunity"
        ),
    )

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    candidate_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    opportunity_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("opportunities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    industry_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("industries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=30),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    cover_letter: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Set once, by the first audited privileged contact view
    contact_viewed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Timestamps
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    candidate: Mapped["Candidate"] = relationship(
        "Candidate", back_populates="applications", lazy="selectin"
    )
    opportunity: Mapped["Opportunity"] = relationship(
        "Opportunity", back_populates="applications", lazy="selectin"
    )
    industry: Mapped["Industry"] = relationship("Industry", lazy="selectin")
    interviews: Mapped[list["Interview"]] = relationship(
        "Interview", back_populates="application", cascade="all, delete-orphan"
    )
