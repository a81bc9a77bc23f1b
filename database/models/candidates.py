"""
Candidate Models

Candidates are students and freelancers applying to opportunities.
Their identity is disclosed to other roles only through the disclosure
pipeline; every projectable column declares the field that governs it.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Float,
    Integer,
    func,
    Text,
)
from database.engine import Base, BigIntId
from database.models.subjects import SubjectKind, SubjectMixin
from database.security import DisclosureField, disclosure_column
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User
    from database.models.applications import Application


class Candidate(SubjectMixin, Base):
    """
    Candidate profile.

    ``show_full_name`` and ``show_contact`` are owned by the candidate and
    mutated only through the candidate's own privacy settings.
    """

    __tablename__ = "candidates"
    __subject_kind__ = SubjectKind.CANDIDATE
    __visibility_preferences__ = {
        DisclosureField.NAME: "show_full_name",
        DisclosureField.CONTACT: "show_contact",
    }

    id: Mapped[int] = mapped_column(
        BigIntId,
        primary_key=True,
        nullable=False,
        autoincrement=True,
        info=disclosure_column(public=True),
    )
    user_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # Identity (owner-controlled)
    first_name: Mapped[str] = mapped_column(
        String(100), nullable=False, info=disclosure_column(DisclosureField.NAME)
    )
    last_name: Mapped[str] = mapped_column(
        String(100), nullable=False, info=disclosure_column(DisclosureField.NAME)
    )

    # Contact (owner-controlled)
    phone: Mapped[str | None] = mapped_column(
        String(20), info=disclosure_column(DisclosureField.CONTACT)
    )
    resume_url: Mapped[str | None] = mapped_column(
        String(1000), info=disclosure_column(DisclosureField.CONTACT)
    )
    portfolio_url: Mapped[str | None] = mapped_column(
        String(1000), info=disclosure_column(DisclosureField.CONTACT)
    )
    linkedin_url: Mapped[str | None] = mapped_column(
        String(1000), info=disclosure_column(DisclosureField.CONTACT)
    )
    github_url: Mapped[str | None] = mapped_column(
        String(1000), info=disclosure_column(DisclosureField.CONTACT)
    )

    # Location (policy-controlled)
    city: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(DisclosureField.LOCATION)
    )
    state: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(DisclosureField.LOCATION)
    )
    country: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(DisclosureField.LOCATION)
    )

    # Profile details visible to every viewer
    bio: Mapped[str | None] = mapped_column(Text, info=disclosure_column(public=True))
    college: Mapped[str | None] = mapped_column(
        String(255), info=disclosure_column(public=True)
    )
    degree: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(public=True)
    )
    field_of_study: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(public=True)
    )
    graduation_year: Mapped[int | None] = mapped_column(
        Integer, info=disclosure_column(public=True)
    )

    # Academic record (policy-controlled)
    cgpa: Mapped[float | None] = mapped_column(
        Float, info=disclosure_column(DisclosureField.ACADEMIC)
    )

    # Visibility preferences
    show_full_name: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    show_contact: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="candidate", lazy="selectin"
    )
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="candidate"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
