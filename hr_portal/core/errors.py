"""
Error kinds raised across the portal.

Every failure that crosses a component boundary is one of the kinds in
`ErrorKind`. Handling sites branch on `classify(exc)` rather than on message
text.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4


class ErrorKind(str, Enum):
    TRANSIENT_STORE = "TRANSIENT_STORE"
    STORE_REJECTED = "STORE_REJECTED"
    TIMEOUT = "TIMEOUT"
    PROVISIONING_FAILURE = "PROVISIONING_FAILURE"
    NOT_FOUND = "NOT_FOUND"
    AUTHENTICATION = "AUTHENTICATION"
    CONFLICT = "CONFLICT"
    INVALID_REQUEST = "INVALID_REQUEST"


@dataclass
class ErrorResponse:
    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class PortalError(Exception):
    """Base exception. `user_message` is safe to show; `message` is for logs."""

    kind: ErrorKind
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str, *, context: dict[str, Any] | None = None, error_id: str | None = None):
        self.message = message
        self.context = context or {}
        self.error_id = error_id or str(uuid4())
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.kind.value,
            message=self.user_message,
            error_id=self.error_id,
        )


class TransientStoreError(PortalError):
    """Network, connection or unexpected database failure."""

    kind = ErrorKind.TRANSIENT_STORE
    user_message = "We could not reach the server. Please check your connection and try again."

    def __init__(self, table: str, operation: str, reason: str, **kwargs):
        self.table = table
        self.operation = operation
        self.reason = reason
        context = {"table": table, "operation": operation, "reason": reason}
        super().__init__(f"{operation} on {table} failed: {reason}", context=context, **kwargs)


class StoreRejected(TransientStoreError):
    """The store refused the write (constraint or permission)."""

    kind = ErrorKind.STORE_REJECTED
    user_message = "The request could not be completed."


class OperationTimeout(PortalError):
    kind = ErrorKind.TIMEOUT
    user_message = "Loading is taking too long. Please check your connection and try again."

    def __init__(self, operation: str, seconds: float, **kwargs):
        self.operation = operation
        self.seconds = seconds
        super().__init__(
            f"{operation} timed out after {seconds:g} seconds",
            context={"operation": operation, "seconds": seconds},
            **kwargs,
        )


class ProvisioningFailure(PortalError):
    kind = ErrorKind.PROVISIONING_FAILURE
    user_message = "Your account could not be set up. Please contact support."

    def __init__(self, table: str, reason: str, **kwargs):
        self.table = table
        self.reason = reason
        super().__init__(
            f"Failed to create {table} record: {reason}",
            context={"table": table, "reason": reason},
            **kwargs,
        )


class NotFoundError(PortalError):
    kind = ErrorKind.NOT_FOUND
    user_message = "The requested record was not found."

    def __init__(self, entity: str, key: Any, **kwargs):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found", context={"entity": entity, "key": str(key)}, **kwargs)


class AuthenticationError(PortalError):
    kind = ErrorKind.AUTHENTICATION
    user_message = "Invalid email or password."

    def __init__(self, message: str, *, user_message: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if user_message:
            self.user_message = user_message


class ConflictError(PortalError):
    """The record exists but is not in a state that allows the change."""

    kind = ErrorKind.CONFLICT

    def __init__(self, entity: str, key: Any, current: str, *, user_message: str | None = None, **kwargs):
        self.entity = entity
        self.key = key
        self.current = current
        self.user_message = user_message or f"This {entity.replace('_', ' ')} cannot be changed while it is {current.lower()}."
        super().__init__(
            f"{entity} {key!r} is {current}",
            context={"entity": entity, "key": str(key), "current": current},
            **kwargs,
        )


class InvalidRequest(PortalError):
    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.user_message = message


def classify(exc: BaseException) -> ErrorKind:
    """Map any exception onto a kind. Unknown exceptions count as transient store errors."""
    if isinstance(exc, PortalError):
        return exc.kind
    if isinstance(exc, TimeoutError):
        return ErrorKind.TIMEOUT
    return ErrorKind.TRANSIENT_STORE


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.TRANSIENT_STORE: 503,
    ErrorKind.STORE_REJECTED: 409,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.PROVISIONING_FAILURE: 500,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_REQUEST: 400,
}


@dataclass
class Notice:
    """A message for the person using the portal (what the browser shows as a toast)."""
    level: str  # info, warning, error
    message: str
    error_id: str | None = None
