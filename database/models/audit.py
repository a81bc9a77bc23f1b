from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntId
from database.models.users import UserType
from database.security import append_only
from datetime import datetime
from enum import Enum as PyEnum


# ============ Audit Enums ============ #
class AuditAction(str, PyEnum):
    """Privileged actions recorded in the privacy audit trail."""

    VIEW_CONTACT = "VIEW_CONTACT"
    VIEW_PROFILE = "VIEW_PROFILE"
    ACCESS_PREMIUM_FEATURE = "ACCESS_PREMIUM_FEATURE"
    MESSAGE_INITIATE = "MESSAGE_INITIATE"
    APPLICATION_STATUS_UPDATE = "APPLICATION_STATUS_UPDATE"


# ==================== Models ===================== #
@append_only
class PrivacyAuditLog(Base):
    """
    Append-only record of a privileged disclosure or consent-unlocking action.

    Rows are never updated or deleted by the application; retention purges
    run outside this service.
    """

    __tablename__ = "privacy_audit_logs"
    __table_args__ = (
        Index("ix_privacy_audit_resource", "resource_type", "resource_id"),
    )

    id: Mapped[int] = mapped_column(
        BigIntId, primary_key=True, nullable=False, autoincrement=True
    )

    # Actor
    actor_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id"), nullable=False, index=True
    )

    # Target subject
    target_user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id"), nullable=False, index=True
    )
    target_user_type: Mapped[UserType] = mapped_column(
        SQLEnum(UserType, native_enum=False, length=20), nullable=False
    )

    # Action
    action: Mapped[AuditAction] = mapped_column(
        SQLEnum(AuditAction, native_enum=False, length=50),
        nullable=False,
        index=True,
    )
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    is_premium_access: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    legal_basis: Mapped[str] = mapped_column(Text, nullable=False)

    # Request context
    ip_address: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
