"""
Privacy metadata for persisted subject data.

This module provides:
- Disclosure field classification for redactable columns
- Column metadata consumed by the redaction projector
- Append-only enforcement for audit tables
"""

from enum import Enum as PyEnum
from typing import Any, Dict, Optional

from sqlalchemy import event


# =======================================
# Disclosure Classification
# =======================================


class SubjectKind(str, PyEnum):
    """Kinds of accounts whose data can be disclosed or redacted."""

    CANDIDATE = "CANDIDATE"
    COMPANY = "COMPANY"


class DisclosureField(str, PyEnum):
    """Redactable field groups. One decision governs every column in a group."""

    NAME = "name"  # personal name of a candidate
    CONTACT = "contact"  # email, phone, profile links
    LOCATION = "location"  # city, state, country
    COMPANY_NAME = "company_name"  # company name and website
    ACADEMIC = "academic"  # academic record such as CGPA


# Fields the subject alone controls: premium entitlement cannot lift a hidden
# preference without a relationship between viewer and subject.
OWNER_CONTROLLED_FIELDS = frozenset({DisclosureField.NAME, DisclosureField.CONTACT})

# Fields whose granularity is decided by platform policy only.
POLICY_CONTROLLED_FIELDS = frozenset(
    {
        DisclosureField.LOCATION,
        DisclosureField.COMPANY_NAME,
        DisclosureField.ACADEMIC,
    }
)


# =======================================
# Column Privacy Metadata
# =======================================


def disclosure_column(
    field: Optional[DisclosureField] = None,
    public: bool = False,
    pii: bool = True,
    **kwargs,
) -> Dict[str, Any]:
    """
    Mark a column with disclosure metadata.

    - field: The disclosure field that governs visibility of the column.
    - public: The column is shown to every viewer (no decision needed).
    - pii: Whether the column holds personally identifiable information.

    Columns carrying neither a field nor ``public=True`` are internal and
    never leave the service through a projection.

    Usage:
        phone: Mapped[str | None] = mapped_column(
            String(20),
            info=disclosure_column(DisclosureField.CONTACT),
        )
    """
    if field is not None and public:
        raise ValueError("A column is either public or governed by a field")

    return {
        "disclosure_field": field.value if field else None,
        "public": public,
        "pii": pii if not public else False,
        **kwargs,
    }


def get_projectable_columns(model_class) -> Dict[str, Optional[DisclosureField]]:
    """
    Returns the projectable columns of a model mapped to their governing field.

    Public columns map to None.
    """
    columns: Dict[str, Optional[DisclosureField]] = {}
    for column in model_class.__table__.columns:
        info = column.info or {}
        field = info.get("disclosure_field")
        if field:
            columns[column.key] = DisclosureField(field)
        elif info.get("public"):
            columns[column.key] = None
    return columns


# =======================================
# Append-only Tables
# =======================================


class AppendOnlyViolation(RuntimeError):
    """Raised when application code tries to change an append-only row."""


def append_only(model_class):
    """
    Decorator that forbids UPDATE and DELETE of persisted rows through the ORM.

    Lifecycle of such rows ends only via external retention purges.
    """

    @event.listens_for(model_class, "before_update")
    def _reject_update(mapper, connection, target):
        raise AppendOnlyViolation(
            f"{model_class.__name__} rows are append-only and cannot be modified"
        )

    @event.listens_for(model_class, "before_delete")
    def _reject_delete(mapper, connection, target):
        raise AppendOnlyViolation(
            f"{model_class.__name__} rows are append-only and cannot be deleted"
        )

    return model_class
