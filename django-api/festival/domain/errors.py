"""Domain error codes for the festival module."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    EVENT_REFERENCE_MISSING = "EVENT_REFERENCE_MISSING"
    DEPENDENCY_FAILED = "DEPENDENCY_FAILED"
    RELATIONSHIP_INCONSISTENT = "RELATIONSHIP_INCONSISTENT"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    SETTING_NOT_FOUND = "SETTING_NOT_FOUND"
    RECORD_MISSING = "RECORD_MISSING"
    DUPLICATE_RECORD = "DUPLICATE_RECORD"
    INVALID_ID = "INVALID_ID"
    GATE_REJECTED = "GATE_REJECTED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when submitted fields fail validation.

    ``errors`` maps each offending field to a message so callers can
    surface them next to the field.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message="Some fields are invalid",
        )
        self.errors = dict(errors)


class EventReferenceError(DomainError):
    """Raised when a selection references events that no longer exist."""

    def __init__(self, missing: Iterable[object]) -> None:
        super().__init__(
            code=ErrorCode.EVENT_REFERENCE_MISSING,
            message="Selected events no longer exist",
        )
        self.missing = tuple(missing)


class DependencyError(DomainError):
    """Raised when the store or the mail relay cannot serve a request.

    Always retryable from the caller's point of view.
    """

    def __init__(self, message: str = "A backing service is unavailable") -> None:
        super().__init__(code=ErrorCode.DEPENDENCY_FAILED, message=message)


class StoreUnavailableError(DependencyError):
    """Raised when the document store fails."""

    def __init__(self) -> None:
        super().__init__(message="Document store is unavailable")


class NotificationFailedError(DependencyError):
    """Raised when the receipt could not be delivered."""

    def __init__(self, status: int | None = None) -> None:
        super().__init__(message="Receipt could not be sent")
        self.status = status


class RelationshipInconsistencyError(DomainError):
    """Raised when a partial write could not be rolled back.

    The registration and event reference lists may disagree; retrying the
    same registration can create a duplicate.
    """

    def __init__(self, registration_id: object, unrepaired: Iterable[object]) -> None:
        super().__init__(
            code=ErrorCode.RELATIONSHIP_INCONSISTENT,
            message="Registration was only partially recorded",
        )
        self.registration_id = registration_id
        self.unrepaired = tuple(unrepaired)


class InvalidTransitionError(DomainError):
    """Raised when a registration flow action is not allowed in its state."""

    def __init__(self, state: str, action: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {action} while {state}",
        )
        self.state = state
        self.action = action


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class RegistrationNotFoundError(DomainError):
    """Raised when a registration is not found."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="Registration not found",
        )
        self.registration_id = registration_id


class SettingNotFoundError(DomainError):
    """Raised when a named setting has never been written."""

    def __init__(self, name: str) -> None:
        super().__init__(
            code=ErrorCode.SETTING_NOT_FOUND,
            message=f"Setting {name!r} is not configured",
        )
        self.name = name


class RecordMissingError(DomainError):
    """Raised by stores when patching a record that does not exist."""

    def __init__(self, record_id: object) -> None:
        super().__init__(
            code=ErrorCode.RECORD_MISSING,
            message="Record does not exist",
        )
        self.record_id = record_id


class DuplicateRecordError(DomainError):
    """Raised when a unique field value is already taken."""

    def __init__(self, field: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_RECORD,
            message=f"A record with this {field} already exists",
        )
        self.field = field


class InvalidIdError(DomainError):
    """Raised when a record ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid ID format",
        )


class GateRejectedError(DomainError):
    """Raised when a shared-secret gate check fails."""

    def __init__(self, gate: str) -> None:
        super().__init__(
            code=ErrorCode.GATE_REJECTED,
            message="Incorrect key",
        )
        self.gate = gate
