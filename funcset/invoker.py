"""Safe invocation: validate, call, and turn every failure into an ErrorValue."""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Optional

from .errors import ErrorValue, InvocationError, ValidationError
from .validation import SchemaValidator, Validator, validate_arguments

if TYPE_CHECKING:
    from .descriptor import CallableDescriptor

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class SafeInvoker:
    """
    Runs descriptors through validation and contains their failures.

    ``invoke`` never raises for validation or callable failures: the result
    is either the callable's return value (awaited when it is awaitable) or
    an ``ErrorValue``.
    """

    def __init__(self, validator: Optional[Validator] = None) -> None:
        self.validator = validator or SchemaValidator()

    async def invoke(self, descriptor: "CallableDescriptor", *args: Any, context: Any = None) -> Any:
        try:
            validate_arguments(args, descriptor.param_types, self.validator)
        except ValidationError as exc:
            logger.info(f"Rejected call to {descriptor.path or descriptor.name}: {exc}")
            return ErrorValue.from_error(exc)
        except Exception as exc:
            error = InvocationError.from_exception(exc)
            logger.warning(f"Validator failed for {descriptor.path or descriptor.name}: {error}")
            return ErrorValue.from_error(error)

        try:
            return await _maybe_await(descriptor.call(*args, context=context))
        except Exception as exc:
            error = InvocationError.from_exception(exc)
            logger.warning(f"Call to {descriptor.path or descriptor.name} failed: {error}")
            return ErrorValue.from_error(error)


_default_invoker: Optional[SafeInvoker] = None


def default_invoker() -> SafeInvoker:
    """Shared invoker using the default schema validator."""
    global _default_invoker
    if _default_invoker is None:
        _default_invoker = SafeInvoker()
    return _default_invoker
