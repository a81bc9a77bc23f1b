"""
Industry Models

Industries are companies posting internships, projects and freelance work.
A company's name is redacted behind a pseudonym unless the company chooses
to show it or the viewer's subscription allows it.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
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
    from database.models.opportunities import Opportunity


class Industry(SubjectMixin, Base):
    """Company profile."""

    __tablename__ = "industries"
    __subject_kind__ = SubjectKind.COMPANY
    __visibility_preferences__ = {
        DisclosureField.COMPANY_NAME: "show_company_name",
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

    # Identity
    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        info=disclosure_column(DisclosureField.COMPANY_NAME),
    )
    website: Mapped[str | None] = mapped_column(
        String(1000), info=disclosure_column(DisclosureField.COMPANY_NAME)
    )

    # Contact
    contact_person: Mapped[str | None] = mapped_column(
        String(200), info=disclosure_column(DisclosureField.CONTACT)
    )
    phone: Mapped[str | None] = mapped_column(
        String(20), info=disclosure_column(DisclosureField.CONTACT)
    )

    # Location
    city: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(DisclosureField.LOCATION)
    )
    state: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(DisclosureField.LOCATION)
    )
    country: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(DisclosureField.LOCATION)
    )

    # Public profile
    industry: Mapped[str | None] = mapped_column(
        String(100), info=disclosure_column(public=True)
    )  # sector, e.g. "Fintech"
    description: Mapped[str | None] = mapped_column(
        Text, info=disclosure_column(public=True)
    )
    company_size: Mapped[str | None] = mapped_column(
        String(50), info=disclosure_column(public=True)
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, info=disclosure_column(public=True)
    )

    # Visibility preferences
    show_company_name: Mapped[bool] = mapped_column(
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
        "User", back_populates="industry", lazy="selectin"
    )
    opportunities: Mapped[list["Opportunity"]] = relationship(
        "Opportunity", back_populates="industry"
    )
