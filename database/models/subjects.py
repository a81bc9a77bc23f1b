from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy import String

from core.privacy.anonymizer import generate_anonymous_id
from database.security import DisclosureField, SubjectKind


class SubjectMixin:
    """
    Shared identity of a disclosure subject.

    The anonymous identifier is generated once when the subject is created,
    independently of the primary key, and can never be reassigned.
    """

    __subject_kind__: SubjectKind
    __visibility_preferences__: dict[DisclosureField, str] = {}

    anonymous_id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("anonymous_id", generate_anonymous_id())
        super().__init__(**kwargs)

    @validates("anonymous_id")
    def _validate_anonymous_id(self, key: str, value: str) -> str:
        if not value:
            raise ValueError("anonymous_id must be a non-empty string")
        current = self.__dict__.get("anonymous_id")
        if current is not None and current != value:
            raise ValueError("anonymous_id is immutable once assigned")
        return value

    @property
    def subject_kind(self) -> SubjectKind:
        return self.__subject_kind__

    def visibility_preference(self, field: DisclosureField) -> bool:
        """Returns the subject's own preference for a disclosure field."""
        attr = self.__visibility_preferences__.get(field)
        if attr is None:
            return False
        return bool(getattr(self, attr))
