"""
Disclosure policy evaluator.

``decide`` is a pure function of the subject, the viewer and the relationship
between them. Each redactable field is decided on its own, first matching
rule wins:

1. the viewer is an admin
2. the viewer is the subject
3. the subject chose to show the field
4. the viewer holds active premium; owner-controlled fields (name, contact)
   additionally need an application or message relationship
5. otherwise the field is redacted

Decisions are recomputed on every request and never persisted.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional

from core.privacy.anonymizer import anonymous_label
from core.privacy.subscription import is_premium_active
from database.models.users import UserType
from database.security import (
    DisclosureField,
    OWNER_CONTROLLED_FIELDS,
    SubjectKind,
    get_projectable_columns,
)

LOCATION_HIDDEN = "Location Hidden"

NAME_LIKE_FIELDS = frozenset({DisclosureField.NAME, DisclosureField.COMPANY_NAME})


class DisclosureBasis(str, Enum):
    """Rule that governed a field decision."""

    ADMIN = "ADMIN"
    SELF = "SELF"
    OWNER_PREFERENCE = "OWNER_PREFERENCE"
    PREMIUM_ENTITLEMENT = "PREMIUM_ENTITLEMENT"
    REDACTED = "REDACTED"


@dataclass(frozen=True)
class ViewerContext:
    """
    Identity and entitlement of whoever requests a view.

    Built once per request at the API boundary and passed explicitly through
    the pipeline. Premium is stored raw and resolved at decision time.
    """

    user_id: int
    role: UserType
    is_premium: bool = False
    premium_expires_at: Optional[datetime] = None
    candidate_id: Optional[int] = None
    industry_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_user(
        cls,
        user,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> "ViewerContext":
        return cls(
            user_id=user.id,
            role=UserType(user.user_type),
            is_premium=bool(user.is_premium),
            premium_expires_at=user.premium_expires_at,
            candidate_id=user.candidate.id if user.candidate else None,
            industry_id=user.industry.id if user.industry else None,
            ip_address=ip_address,
            user_agent=user_agent[:500] if user_agent else None,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserType.ADMIN

    def is_subject(self, subject) -> bool:
        return subject.user_id == self.user_id


@dataclass(frozen=True)
class Relationship:
    """
    Platform-recorded connections between a viewer and a subject.

    Only applications and message threads count.
    """

    application_ids: tuple[int, ...] = ()
    has_message_thread: bool = False

    @property
    def exists(self) -> bool:
        return bool(self.application_ids) or self.has_message_thread


NO_RELATIONSHIP = Relationship()


@dataclass(frozen=True)
class FieldDecision:
    field: DisclosureField
    disclosed: bool
    basis: DisclosureBasis
    redacted_value: Optional[str] = None

    @property
    def privileged(self) -> bool:
        """Disclosed because of a paid entitlement rather than consent."""
        return self.disclosed and self.basis == DisclosureBasis.PREMIUM_ENTITLEMENT


@dataclass(frozen=True)
class DisclosureDecision:
    subject_kind: SubjectKind
    subject_id: int
    subject_user_id: int
    premium_active: bool
    fields: Mapping[DisclosureField, FieldDecision] = dataclass_field(
        default_factory=dict
    )

    def is_disclosed(self, field: DisclosureField) -> bool:
        decision = self.fields.get(field)
        return decision is not None and decision.disclosed

    def value_for(self, field: DisclosureField, real_value):
        """Real value when disclosed, the field's redacted value otherwise."""
        decision = self.fields.get(field)
        if decision is not None and decision.disclosed:
            return real_value
        return decision.redacted_value if decision is not None else None

    @property
    def privileged_fields(self) -> frozenset:
        return frozenset(f for f, d in self.fields.items() if d.privileged)

    @property
    def contact_privileged(self) -> bool:
        return DisclosureField.CONTACT in self.privileged_fields

    @property
    def fully_disclosed(self) -> bool:
        return all(d.disclosed for d in self.fields.values())


def subject_fields(subject) -> list[DisclosureField]:
    """Disclosure fields that govern at least one column of the subject."""
    governing = {
        f for f in get_projectable_columns(type(subject)).values() if f is not None
    }
    return [f for f in DisclosureField if f in governing]


def _decide_field(
    field: DisclosureField,
    subject,
    viewer: ViewerContext,
    relationship: Relationship,
    premium_active: bool,
) -> tuple[bool, DisclosureBasis]:
    if viewer.is_admin:
        return True, DisclosureBasis.ADMIN
    if viewer.is_subject(subject):
        return True, DisclosureBasis.SELF
    if subject.visibility_preference(field):
        return True, DisclosureBasis.OWNER_PREFERENCE
    if premium_active and (
        field not in OWNER_CONTROLLED_FIELDS or relationship.exists
    ):
        return True, DisclosureBasis.PREMIUM_ENTITLEMENT
    return False, DisclosureBasis.REDACTED


def decide(
    subject,
    viewer: ViewerContext,
    relationship: Optional[Relationship] = None,
    now: Optional[datetime] = None,
) -> DisclosureDecision:
    """
    Decide per-field visibility of a subject for a viewer.

    Never raises for missing entitlement or relationship; those yield a
    redacted field. Raises MissingAnonymousIdentifier when a name-like field
    must be redacted and the subject has no anonymous identifier.
    """
    relationship = relationship or NO_RELATIONSHIP
    premium_active = is_premium_active(viewer, now)

    label = None
    decisions = {}
    for field in subject_fields(subject):
        disclosed, basis = _decide_field(
            field, subject, viewer, relationship, premium_active
        )
        redacted_value = None
        if not disclosed:
            if field in NAME_LIKE_FIELDS:
                if label is None:
                    label = anonymous_label(subject)
                redacted_value = label
            elif field == DisclosureField.LOCATION:
                redacted_value = LOCATION_HIDDEN
        decisions[field] = FieldDecision(field, disclosed, basis, redacted_value)

    return DisclosureDecision(
        subject_kind=subject.subject_kind,
        subject_id=subject.id,
        subject_user_id=subject.user_id,
        premium_active=premium_active,
        fields=decisions,
    )
