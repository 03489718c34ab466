"""Error kinds and the non-throwing error value returned by invocations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Classification of function set errors."""

    VALIDATION = "validation"
    INVOCATION = "invocation"
    ROUTING = "routing"
    REGISTRATION = "registration"


class FunctionSetError(Exception):
    """Base class for function set errors."""

    kind = ErrorKind.INVOCATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(FunctionSetError):
    """An argument failed the schema declared for its position."""

    kind = ErrorKind.VALIDATION

    def __init__(self, index: int, diagnostics: list[str]) -> None:
        self.index = index
        self.diagnostics = list(diagnostics)
        super().__init__(
            f"Invalid function call on param {index}: " + "; ".join(self.diagnostics)
        )


class InvocationError(FunctionSetError):
    """The callable raised, or its awaited result failed."""

    kind = ErrorKind.INVOCATION

    @classmethod
    def from_exception(cls, exc: BaseException) -> "InvocationError":
        text = str(exc)
        name = type(exc).__name__
        error = cls(f"{name}: {text}" if text else name)
        error.__cause__ = exc
        return error


class RoutingError(FunctionSetError, LookupError):
    """No callable is registered under the requested path."""

    kind = ErrorKind.ROUTING

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Unknown function path: {path}")


class RegistrationError(FunctionSetError):
    """A callable could not be added to a registry."""

    kind = ErrorKind.REGISTRATION


class DuplicatePathError(RegistrationError):
    """A path is already taken by another descriptor."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Function path '{path}' already registered. Use unregister() first.")


@dataclass(frozen=True)
class ErrorValue:
    """Failure returned as data instead of raised."""

    kind: ErrorKind
    message: str
    index: Optional[int] = None
    details: tuple[str, ...] = ()

    @classmethod
    def from_error(cls, error: FunctionSetError) -> "ErrorValue":
        if isinstance(error, ValidationError):
            return cls(
                kind=error.kind,
                message=error.message,
                index=error.index,
                details=tuple(error.diagnostics),
            )
        return cls(kind=error.kind, message=error.message)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.index is not None:
            data["index"] = self.index
        if self.details:
            data["details"] = list(self.details)
        return data

    def __str__(self) -> str:
        return self.message


def is_error(value: Any) -> bool:
    """Return True when an invocation result is an ErrorValue."""
    return isinstance(value, ErrorValue)
