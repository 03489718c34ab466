"""Function set registry: path-keyed descriptors with HTTP and direct dispatch.

The registry provides:
- Registration of a callable, a list of callables, or a nested namespace
- Removal and exact-path lookup
- Direct validated invocation by path
- A request handler for Starlette/FastAPI pipelines
- Documentation fragments and a console summary
"""

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Callable, Optional, Union

from rich.console import Console
from starlette.requests import Request
from starlette.responses import Response

from . import docs
from .config import DUPLICATE_POLICIES, get_duplicate_policy, get_path_separator
from .descriptor import CallableDescriptor, as_descriptor
from .errors import DuplicatePathError, ErrorValue, RegistrationError, RoutingError
from .http import CallNext, HttpDispatchAdapter
from .invoker import SafeInvoker, default_invoker
from .loader import load_tree
from .table import print_table

logger = logging.getLogger(__name__)

Namespace = Mapping[str, Union[Callable[..., Any], "Namespace"]]
Registrable = Union[Callable[..., Any], list[Callable[..., Any]], tuple[Callable[..., Any], ...], Namespace]


def flatten_namespace(
    tree: Namespace,
    base: str = "",
    separator: str = "/",
) -> list[tuple[str, Callable[..., Any]]]:
    """
    Depth-first list of (path, callable) pairs.

    Examples:
        {"a": {"b": f}} -> [("/a/b", f)]
        {"x": f, "y": 3} -> [("/x", f)]

    Leaves that are not callable are skipped.
    """
    entries = []
    for key, value in tree.items():
        path = base + separator + key
        if isinstance(value, Mapping):
            entries.extend(flatten_namespace(value, path, separator))
        elif callable(value):
            entries.append((path, value))
        else:
            logger.debug(f"Skipping non-callable namespace entry {path}")
    return entries


class Registry:
    """
    Ordered collection of descriptors keyed by path.

    Example:
        >>> registry = Registry()
        >>> registry.register({"math": {"add": add}})
        >>> await registry.invoke("/math/add", 1, 2)
        3
    """

    def __init__(
        self,
        *,
        separator: Optional[str] = None,
        duplicates: Optional[str] = None,
        invoker: Optional[SafeInvoker] = None,
        error_status: Optional[int] = None,
    ) -> None:
        self._descriptors: dict[str, CallableDescriptor] = {}
        self.separator = separator or get_path_separator()
        self.duplicates = duplicates or get_duplicate_policy()
        if self.duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"duplicates must be one of {DUPLICATE_POLICIES}")
        self.invoker = invoker or default_invoker()
        self.error_status = error_status

    # ─────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────

    def register(self, target: Registrable) -> "Registry":
        """
        Register a callable, a list of callables, or a nested namespace.

        The whole batch is checked before anything is added: on error the
        registry and every descriptor's path are left unchanged.
        """
        entries = self._plan(target)
        self._check(entries)
        for path, descriptor in entries:
            descriptor.set_path(path)
            self._add(descriptor)
        return self

    def _plan(self, target: Registrable) -> list[tuple[str, CallableDescriptor]]:
        if isinstance(target, Mapping):
            return [
                (path, as_descriptor(func))
                for path, func in flatten_namespace(target, separator=self.separator)
            ]
        if isinstance(target, (list, tuple)):
            entries = []
            for item in target:
                entries.extend(self._plan(item))
            return entries
        if callable(target):
            descriptor = as_descriptor(target)
            return [(descriptor.path, descriptor)]
        raise RegistrationError(f"Cannot register {target!r}: expected a callable, list or mapping")

    def _check(self, entries: list[tuple[str, CallableDescriptor]]) -> None:
        registered_at = {id(d): path for path, d in self._descriptors.items()}
        batch_paths: set[str] = set()
        batch_descriptors: dict[int, str] = {}

        for path, descriptor in entries:
            if not path:
                raise RegistrationError(f"Function '{descriptor.name}' has no path")

            current = registered_at.get(id(descriptor))
            if current is not None and current != path:
                raise RegistrationError(
                    f"Function '{descriptor.name}' is already registered at '{current}'"
                )
            planned = batch_descriptors.setdefault(id(descriptor), path)
            if planned != path:
                raise RegistrationError(
                    f"Function '{descriptor.name}' cannot be registered at both '{planned}' and '{path}'"
                )

            if self.duplicates == "error" and (path in self._descriptors or path in batch_paths):
                raise DuplicatePathError(path)
            batch_paths.add(path)

    def register_path(
        self,
        base_path: Union[str, Path],
        *,
        export_name: Optional[str] = None,
        extensions: Optional[tuple[str, ...]] = None,
    ) -> "Registry":
        """Load callables from a directory tree and register them."""
        return self.register(load_tree(base_path, export_name=export_name, extensions=extensions))

    def _add(self, descriptor: CallableDescriptor) -> None:
        path = descriptor.path
        if path in self._descriptors:
            logger.warning(f"Overwriting function registered at '{path}'")
            del self._descriptors[path]

        self._descriptors[path] = descriptor
        logger.debug(f"Registered {descriptor.name} at {path}")

    def unregister(self, target: Union[str, Callable[..., Any]]) -> bool:
        """Remove by path, descriptor, or wrapped callable. Returns True if found."""
        for path, descriptor in self._descriptors.items():
            if target == path or descriptor is target or descriptor.func is target:
                del self._descriptors[path]
                logger.debug(f"Unregistered {descriptor.name} from {path}")
                return True
        return False

    def clear(self) -> None:
        self._descriptors.clear()

    # ─────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────

    def lookup(self, path: str) -> Optional[CallableDescriptor]:
        """Exact, case-sensitive path match."""
        return self._descriptors.get(path)

    def __getitem__(self, path: str) -> CallableDescriptor:
        descriptor = self.lookup(path)
        if descriptor is None:
            raise RoutingError(path)
        return descriptor

    def __contains__(self, path: object) -> bool:
        return path in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[CallableDescriptor]:
        return iter(list(self._descriptors.values()))

    # ─────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────

    async def invoke(self, path: str, *args: Any, context: Any = None) -> Any:
        """
        Validated call by path.

        Unknown paths produce a routing ErrorValue, so callers branch on
        ``is_error`` for every failure.
        """
        descriptor = self.lookup(path)
        if descriptor is None:
            error = RoutingError(path)
            logger.info(str(error))
            return ErrorValue.from_error(error)
        return await self.invoker.invoke(descriptor, *args, context=context)

    def adapter(self, descriptor: CallableDescriptor) -> HttpDispatchAdapter:
        return HttpDispatchAdapter(descriptor, self.invoker, self.error_status)

    async def http_handler(self, request: Request, call_next: CallNext) -> Response:
        """Serve the request if a descriptor owns its path, else pass it on."""
        descriptor = self.lookup(request.url.path)
        if descriptor is None:
            return await call_next(request)
        return await self.adapter(descriptor).handle(request, call_next)

    def get_http_handler(self) -> Callable[[Request, CallNext], Any]:
        async def handler(request: Request, call_next: CallNext) -> Response:
            return await self.http_handler(request, call_next)

        return handler

    # ─────────────────────────────────────────────────────────────────
    # Documentation
    # ─────────────────────────────────────────────────────────────────

    def documentation_paths(self) -> dict[str, Any]:
        return docs.collect_paths(self)

    def print_table(self, console: Optional[Console] = None) -> None:
        print_table(self, console=console)
