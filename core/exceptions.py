"""
Domain errors raised by the disclosure control core and the services above it.

Each error carries a stable ``code`` and the HTTP status it maps to; the
error handling middleware renders them into the standard error envelope.
Absence of a relationship is never an error: the policy evaluator returns a
redacted decision instead.
"""

from fastapi import status


class DomainError(Exception):
    """Base class for expected, caller-visible domain failures."""

    code: str = "DOMAIN_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "The operation could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ==================== Data integrity ===================== #
class DataIntegrityError(DomainError):
    """Persisted state violates an invariant. The request must fail closed."""

    code = "DATA_INTEGRITY_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"


class MissingAnonymousIdentifier(DataIntegrityError):
    code = "MISSING_ANONYMOUS_IDENTIFIER"

    def __init__(self, subject_kind: str, subject_id: int | None):
        self.subject_kind = subject_kind
        self.subject_id = subject_id
        # The client-facing message stays generic; details go to the logs.
        super().__init__()

    def __str__(self) -> str:
        return f"{self.subject_kind} {self.subject_id} has no anonymous identifier"


# ==================== Preconditions ===================== #
class PreconditionViolation(DomainError):
    code = "PRECONDITION_FAILED"
    status_code = status.HTTP_400_BAD_REQUEST


class MessagingNotPermitted(PreconditionViolation):
    code = "MESSAGING_NOT_PERMITTED"
    default_message = "Can only message shortlisted candidates"


class InvalidStatusTransition(PreconditionViolation):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot change application status from "
            f"{getattr(current, 'value', current)} to {getattr(target, 'value', target)}"
        )


class RejectionReasonRequired(PreconditionViolation):
    code = "REJECTION_REASON_REQUIRED"
    default_message = "Rejection reason is required"


# ==================== Access ===================== #
class ResourceNotFound(DomainError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class AccessDenied(DomainError):
    code = "ACCESS_DENIED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have permission to perform this action"
