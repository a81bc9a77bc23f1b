from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
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
    from database.models.applications import Application


class InterviewMode(str, PyEnum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    PHONE = "PHONE"


class Interview(Base):
    """Interview scheduled by an industry for one of its applications."""

    __tablename__ = "interviews"
    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    application_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, default=60, nullable=False)
    mode: Mapped[InterviewMode] = mapped_column(
        SQLEnum(InterviewMode, native_enum=False, length=20),
        nullable=False,
        default=InterviewMode.ONLINE,
    )
    meeting_link: Mapped[str | None] = mapped_column(String(1000))
    location: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    application: Mapped["Application"] = relationship(
        "Application", back_populates="interviews", lazy="selectin"
    )
