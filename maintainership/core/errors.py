"""Error Hierarchy — closed failure taxonomy for the maintainer-invitation lifecycle.

Invariants:
    - FailureKind is closed: every failure an operation can report is one member
    - failure_status / failure_category are exhaustive (assert_never on the default arm)
    - Every error has a code (str), kind (FailureKind), category, severity, http_status
    - to_response() produces the REST envelope; StorageUnavailableError never carries
      the internal cause in its user-facing message

Design Decisions:
    - Single hierarchy with MaintainershipError base: FastAPI global handler catches all
    - One exception class per FailureKind; error_for_kind() builds the right one for
      conflicts reported by storage
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, assert_never

from maintainership.core import format_messages as msg
from maintainership.core.domain_types import PackageRef


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error classes for routing and handling."""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    INFRASTRUCTURE = "infrastructure"
    VALIDATION = "validation"


class FailureKind(str, Enum):
    """Every domain failure an operation may return."""
    PACKAGE_NOT_FOUND = "package_not_found"
    INVITEE_NOT_FOUND = "invitee_not_found"
    INVITATION_NOT_FOUND = "invitation_not_found"
    INVITEE_NOT_MAINTAINER = "invitee_not_maintainer"
    ALREADY_ACCEPTED = "already_accepted"
    ALREADY_DECLINED = "already_declined"
    UNAUTHORIZED = "unauthorized"
    STORAGE_UNAVAILABLE = "storage_unavailable"


def failure_status(kind: FailureKind) -> int:
    """Transport status for a failure kind."""
    match kind:
        case FailureKind.PACKAGE_NOT_FOUND:
            return 404
        case FailureKind.INVITEE_NOT_FOUND:
            return 404
        case FailureKind.INVITATION_NOT_FOUND:
            return 404
        case FailureKind.INVITEE_NOT_MAINTAINER:
            return 409
        case FailureKind.ALREADY_ACCEPTED | FailureKind.ALREADY_DECLINED:
            return 409
        case FailureKind.UNAUTHORIZED:
            return 403
        case FailureKind.STORAGE_UNAVAILABLE:
            return 500
        case _:
            assert_never(kind)


def failure_category(kind: FailureKind) -> ErrorCategory:
    match kind:
        case (
            FailureKind.PACKAGE_NOT_FOUND
            | FailureKind.INVITEE_NOT_FOUND
            | FailureKind.INVITATION_NOT_FOUND
        ):
            return ErrorCategory.NOT_FOUND
        case (
            FailureKind.INVITEE_NOT_MAINTAINER
            | FailureKind.ALREADY_ACCEPTED
            | FailureKind.ALREADY_DECLINED
        ):
            return ErrorCategory.CONFLICT
        case FailureKind.UNAUTHORIZED:
            return ErrorCategory.AUTHORIZATION
        case FailureKind.STORAGE_UNAVAILABLE:
            return ErrorCategory.INFRASTRUCTURE
        case _:
            assert_never(kind)


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    package: str | None = None
    subject: str | None = None
    actor: str | None = None
    debug_info: dict[str, Any] | None = None


class MaintainershipError(Exception):
    """Base exception for all maintainer-invitation failures."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        kind: FailureKind | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.kind = kind

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "kind": self.kind.value if self.kind else None,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


class DomainFailure(MaintainershipError):
    """A failure from the closed FailureKind set."""

    severity_for_kind = ErrorSeverity.WARNING

    def __init__(
        self, kind: FailureKind, message: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, kind.name, failure_category(kind),
            self.severity_for_kind, context, failure_status(kind), kind,
        )


# ─── Not-Found class ────────────────────────────────────────────

class PackageNotFoundError(DomainFailure):
    def __init__(self, package: PackageRef, context: ErrorContext | None = None):
        super().__init__(
            FailureKind.PACKAGE_NOT_FOUND, msg.package_not_found(package), context,
        )
        self.package = package


class InviteeNotFoundError(DomainFailure):
    def __init__(self, invitee: str, context: ErrorContext | None = None):
        super().__init__(
            FailureKind.INVITEE_NOT_FOUND, msg.invitee_not_found(invitee), context,
        )
        self.invitee = invitee


class InvitationNotFoundError(DomainFailure):
    def __init__(
        self, member: str, package: PackageRef, context: ErrorContext | None = None,
    ):
        super().__init__(
            FailureKind.INVITATION_NOT_FOUND,
            msg.invitation_not_found(member, package), context,
        )
        self.member = member
        self.package = package


# ─── Conflict class ─────────────────────────────────────────────

class InviteeNotMaintainerError(DomainFailure):
    def __init__(
        self, invitee: str, package: PackageRef, context: ErrorContext | None = None,
    ):
        super().__init__(
            FailureKind.INVITEE_NOT_MAINTAINER,
            msg.invitee_not_maintainer(invitee, package), context,
        )
        self.invitee = invitee
        self.package = package


class AlreadyAcceptedError(DomainFailure):
    def __init__(
        self, invitee: str, package: PackageRef, context: ErrorContext | None = None,
    ):
        super().__init__(
            FailureKind.ALREADY_ACCEPTED,
            msg.already_accepted(invitee, package), context,
        )
        self.invitee = invitee
        self.package = package


class AlreadyDeclinedError(DomainFailure):
    def __init__(
        self, invitee: str, package: PackageRef, context: ErrorContext | None = None,
    ):
        super().__init__(
            FailureKind.ALREADY_DECLINED,
            msg.already_declined(invitee, package), context,
        )
        self.invitee = invitee
        self.package = package


# ─── Authorization class ────────────────────────────────────────

class UnauthorizedError(DomainFailure):
    """Caller lacks the relationship an operation requires."""
    def __init__(self, message: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            FailureKind.UNAUTHORIZED, message or msg.UNAUTHORIZED, context,
        )


# ─── Infrastructure class ───────────────────────────────────────

class StorageUnavailableError(DomainFailure):
    """Storage failed or timed out. The cause is kept for logs only."""

    severity_for_kind = ErrorSeverity.CRITICAL

    def __init__(
        self, operation: str, cause: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            FailureKind.STORAGE_UNAVAILABLE, msg.operation_failed(operation), context,
        )
        self.operation = operation
        self.cause = cause


# ─── Validation (transport-level, outside FailureKind) ──────────

class InvalidCursorError(MaintainershipError):
    """Pagination cursor could not be decoded."""
    def __init__(self, cursor: str, context: ErrorContext | None = None):
        super().__init__(
            "Invalid pagination cursor.", "INVALID_CURSOR",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, context, 400,
        )
        self.cursor = cursor


def error_for_kind(
    kind: FailureKind, subject: str, package: PackageRef,
) -> DomainFailure:
    """Build the exception for a failure kind reported against (subject, package)."""
    match kind:
        case FailureKind.PACKAGE_NOT_FOUND:
            return PackageNotFoundError(package)
        case FailureKind.INVITEE_NOT_FOUND:
            return InviteeNotFoundError(subject)
        case FailureKind.INVITATION_NOT_FOUND:
            return InvitationNotFoundError(subject, package)
        case FailureKind.INVITEE_NOT_MAINTAINER:
            return InviteeNotMaintainerError(subject, package)
        case FailureKind.ALREADY_ACCEPTED:
            return AlreadyAcceptedError(subject, package)
        case FailureKind.ALREADY_DECLINED:
            return AlreadyDeclinedError(subject, package)
        case FailureKind.UNAUTHORIZED:
            return UnauthorizedError()
        case FailureKind.STORAGE_UNAVAILABLE:
            return StorageUnavailableError(f"update {subject} on {package}")
        case _:
            assert_never(kind)
