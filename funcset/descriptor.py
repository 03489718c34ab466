"""Callable descriptors: a callable plus the metadata used to route and document it."""

import functools
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from . import docs

if TYPE_CHECKING:
    from .invoker import SafeInvoker
    from .registry import Registry


@dataclass(eq=False)
class CallableDescriptor:
    """
    Wraps exactly one callable with its metadata.

    Metadata is meant to be set before the descriptor is registered; the
    setters are plain assignments and do not validate what they store.
    Calling the descriptor calls the wrapped callable directly, without
    validation.
    """

    func: Callable[..., Any]
    path: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    param_types: Optional[list[Any]] = None
    return_type: Any = None
    http_mapper: Optional[list[str]] = None
    accepts_context: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not callable(self.func):
            raise TypeError(f"{self.func!r} is not callable")
        functools.update_wrapper(
            self, self.func, assigned=("__module__", "__name__", "__qualname__", "__doc__"), updated=()
        )
        self.accepts_context = _detect_context_support(self.func)

    @property
    def name(self) -> str:
        return getattr(self.func, "__name__", type(self.func).__name__)

    def set_path(self, path: str) -> None:
        self.path = path

    def set_title(self, title: str) -> None:
        self.title = title

    def set_description(self, description: str) -> None:
        self.description = description

    def set_http_mapper(self, *mappings: str) -> None:
        self.http_mapper = list(mappings)

    def set_param_types(self, *schemas: Any) -> None:
        self.param_types = list(schemas)

    def set_return_type(self, schema: Any) -> None:
        self.return_type = schema

    def call(self, *args: Any, context: Any = None) -> Any:
        """Call the wrapped callable, passing ``context`` if it asks for one."""
        if self.accepts_context and context is not None:
            return self.func(*args, context=context)
        return self.func(*args)

    async def invoke(self, *args: Any, context: Any = None, invoker: Optional["SafeInvoker"] = None) -> Any:
        """Validated call that returns an ErrorValue instead of raising."""
        from .invoker import default_invoker

        return await (invoker or default_invoker()).invoke(self, *args, context=context)

    def openapi_path(self) -> dict[str, Any]:
        return docs.openapi_path(self)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)


def _detect_context_support(func: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    param = signature.parameters.get("context")
    if param is not None and param.kind is inspect.Parameter.KEYWORD_ONLY:
        return True
    return any(p.kind is inspect.Parameter.VAR_KEYWORD for p in signature.parameters.values())


def as_descriptor(target: Callable[..., Any]) -> CallableDescriptor:
    """Return ``target`` if it is already a descriptor, otherwise wrap it."""
    if isinstance(target, CallableDescriptor):
        return target
    return CallableDescriptor(func=target)


def function(
    path: Optional[str] = None,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    param_types: Optional[list[Any]] = None,
    return_type: Any = None,
    http_mapper: Optional[list[str]] = None,
    registry: Optional["Registry"] = None,
):
    """
    Decorator that attaches metadata to a callable.

    The decorated name is bound to a ``CallableDescriptor`` that still calls
    through to the original function. Pass ``registry`` to register it in
    the same step.

    Usage:
        @function(
            path="/greet",
            title="Greet",
            param_types=[{"type": "string"}],
            http_mapper=["body:name"],
        )
        def greet(name):
            return f"Hello {name}"
    """

    def decorator(func: Callable[..., Any]) -> CallableDescriptor:
        descriptor = as_descriptor(func)
        if path is not None:
            descriptor.set_path(path)
        if title is not None:
            descriptor.set_title(title)
        if description is not None:
            descriptor.set_description(description)
        if param_types is not None:
            descriptor.set_param_types(*param_types)
        if return_type is not None:
            descriptor.set_return_type(return_type)
        if http_mapper is not None:
            descriptor.set_http_mapper(*http_mapper)

        if registry is not None:
            registry.register(descriptor)

        return descriptor

    return decorator
