"""Domain exceptions.

Every error carries a ``kind`` tag and a ``retryable`` flag so that handling
boundaries can branch on the classification rather than on the class.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a dbgrant failure."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION_OPERATION = "permission_operation"
    OPERATION = "operation"
    INVALID_STATE = "invalid_state"
    INVALID_ARGUMENT = "invalid_argument"


class DbGrantError(Exception):
    """Base exception for dbgrant."""

    kind: ErrorKind = ErrorKind.OPERATION

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"retryable={self.retryable}, message={self.message!r})"
        )


class ValidationError(DbGrantError):
    """Malformed or missing input. Never retryable."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(DbGrantError):
    """Referenced principal or permission does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} '{identifier}' not found")
        self.entity = entity
        self.identifier = identifier


class PermissionOperationError(DbGrantError):
    """Grant, revoke or schedule statement failed against the managed store."""

    kind = ErrorKind.PERMISSION_OPERATION


class OperationError(DbGrantError):
    """Uncharacterized managed-store failure. Not retryable."""

    kind = ErrorKind.OPERATION

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message, retryable=False, cause=cause)


class InvalidStateError(DbGrantError):
    """Transition attempted from a state that does not allow it."""

    kind = ErrorKind.INVALID_STATE


class InvalidArgumentError(DbGrantError):
    """Transition argument violates its precondition."""

    kind = ErrorKind.INVALID_ARGUMENT
