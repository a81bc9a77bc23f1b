from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    DateTime,
    func,
    Enum as SQLEnum,
)
from database.engine import Base, BigIntId
from datetime import datetime
from enum import Enum as PyEnum


# ==================== User Type ===================== #
class UserType(str, PyEnum):
    CANDIDATE = "CANDIDATE"  # student or freelancer looking for opportunities
    INDUSTRY = "INDUSTRY"  # company posting opportunities
    INSTITUTE = "INSTITUTE"  # educational institute
    ADMIN = "ADMIN"  # platform admin with full access


class User(Base):
    """
    Account identity shared by every role.

    Premium entitlement is owned by the billing collaborator; this service
    only reads ``is_premium`` and ``premium_expires_at``.
    """

    __tablename__: str = "users"
    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType, native_enum=False, length=20),
        nullable=False,
        default=UserType.CANDIDATE,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Subscription state (read-only here)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    premium_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

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
    candidate: Mapped["Candidate | None"] = relationship(
        "Candidate", back_populates="user", uselist=False, lazy="selectin"
    )
    industry: Mapped["Industry | None"] = relationship(
        "Industry", back_populates="user", uselist=False, lazy="selectin"
    )
