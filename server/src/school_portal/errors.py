"""Domain error codes for the school portal."""

from enum import Enum
from typing import Iterable


class ErrorCode(Enum):
    """Domain error codes."""

    STORE_FAILURE = "STORE_FAILURE"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    REGISTRATION_INCOMPLETE = "REGISTRATION_INCOMPLETE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    REGISTRATION_SESSION_NOT_FOUND = "REGISTRATION_SESSION_NOT_FOUND"
    REGISTRATION_SESSION_BUSY = "REGISTRATION_SESSION_BUSY"


class PortalError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ContentStoreError(PortalError):
    """Raised when the content store rejects a read or a write."""

    def __init__(self, operation: str, table: str, cause: Exception | None = None):
        super().__init__(
            code=ErrorCode.STORE_FAILURE,
            message=f"Content store {operation} on '{table}' failed",
        )
        self.operation = operation
        self.table = table
        self.cause = cause


class EventNotFoundError(PortalError):
    """Raised when an event is not found."""

    def __init__(self, event_id) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class RegistrationClosedError(PortalError):
    """Raised when an event has no remaining participant slots."""

    def __init__(self, event_id) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CLOSED,
            message="Cupo Completo: registration for this event is closed",
        )
        self.event_id = event_id


class RegistrationValidationError(PortalError):
    """Raised when required registration fields are blank."""

    def __init__(self, missing_fields: Iterable[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            code=ErrorCode.REGISTRATION_INCOMPLETE,
            message="Por favor complete todos los campos",
        )


class InvalidTransitionError(PortalError):
    """Raised when an action is not allowed from the current workflow state."""

    def __init__(self, action: str, state) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {action} while registration is {state.value}",
        )
        self.action = action
        self.state = state


class RegistrationSessionNotFoundError(PortalError):
    """Raised when a registration session id is unknown or already closed."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_SESSION_NOT_FOUND,
            message="Registration session not found",
        )
        self.session_id = session_id


class SessionBusyError(PortalError):
    """Raised when closing a registration that is submitting or already succeeded."""

    def __init__(self, state) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_SESSION_BUSY,
            message=f"Registration cannot be closed while {state.value}",
        )
        self.state = state


HTTP_STATUS_BY_CODE = {
    ErrorCode.STORE_FAILURE: 502,
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.REGISTRATION_CLOSED: 409,
    ErrorCode.REGISTRATION_INCOMPLETE: 400,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.REGISTRATION_SESSION_NOT_FOUND: 404,
    ErrorCode.REGISTRATION_SESSION_BUSY: 409,
}


def http_status_for(error: PortalError) -> int:
    return HTTP_STATUS_BY_CODE.get(error.code, 500)
