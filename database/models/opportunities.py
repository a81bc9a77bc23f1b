"""
Opportunity Models

Internships, projects and freelance work posted by industries.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Integer,
    func,
    Text,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntId
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.industries import Industry
    from database.models.applications import Application


class OpportunityType(str, PyEnum):
    """Kinds of work an industry can post."""

    INTERNSHIP = "INTERNSHIP"
    PROJECT = "PROJECT"
    FREELANCING = "FREELANCING"


class Opportunity(Base):
    __tablename__ = "opportunities"
    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    industry_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("industries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[OpportunityType] = mapped_column(
        SQLEnum(OpportunityType, native_enum=False, length=20),
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(String(255))
    duration_weeks: Mapped[int | None] = mapped_column(Integer)
    stipend: Mapped[int | None] = mapped_column(Integer)
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_approved: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    industry: Mapped["Industry"] = relationship(
        "Industry", back_populates="opportunities", lazy="selectin"
    )
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="opportunity"
    )
