"""HTTP dispatch: match a request, extract arguments, invoke, answer."""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from fastapi.encoders import jsonable_encoder
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .config import get_error_status
from .errors import ErrorValue, InvocationError, is_error
from .invoker import SafeInvoker, default_invoker

if TYPE_CHECKING:
    from .descriptor import CallableDescriptor
    from .registry import Registry

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

SPECIFIER_DELIMITER = ":"
DISPATCH_METHOD = "POST"


async def request_view(request: Request) -> dict[str, Any]:
    """
    Plain mapping of the parts of a request that specifiers can address.

    ``body`` is the decoded JSON body, the raw text when the body is not
    JSON, or None when the request has no body. ``headers`` keeps
    Starlette's case-insensitive header mapping.
    """
    raw = await request.body()
    if not raw:
        body = None
    else:
        try:
            body = json.loads(raw)
        except ValueError:
            body = raw.decode("utf-8", errors="replace")

    return {
        "method": request.method,
        "path": request.url.path,
        "body": body,
        "headers": request.headers,
        "query": dict(request.query_params),
        "cookies": dict(request.cookies),
        "path_params": dict(request.path_params),
    }


def resolve_specifier(source: Any, specifier: str) -> Any:
    """
    Walk ``source`` one segment at a time.

    Examples:
        "body:user:id" -> source["body"]["user"]["id"]
        "body:items:0" -> source["body"]["items"][0]

    A segment that cannot be followed resolves the whole specifier to None.
    """
    current = source
    for segment in specifier.split(SPECIFIER_DELIMITER):
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return current


def extract_arguments(view: Mapping[str, Any], http_mapper: Optional[Sequence[str]]) -> list[Any]:
    """Without a mapper the body is the only argument."""
    if http_mapper is None:
        return [view.get("body")]
    return [resolve_specifier(view, specifier) for specifier in http_mapper]


class HttpDispatchAdapter:
    """Serves POST requests for one descriptor and passes everything else on."""

    def __init__(
        self,
        descriptor: "CallableDescriptor",
        invoker: Optional[SafeInvoker] = None,
        error_status: Optional[int] = None,
    ) -> None:
        self.descriptor = descriptor
        self.invoker = invoker or default_invoker()
        self.error_status = error_status if error_status is not None else get_error_status()

    def matches(self, request: Request) -> bool:
        return request.method == DISPATCH_METHOD and request.url.path == self.descriptor.path

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        if not self.matches(request):
            return await call_next(request)

        view = await request_view(request)
        args = extract_arguments(view, self.descriptor.http_mapper)
        result = await self.invoker.invoke(self.descriptor, *args, context=view)

        if not is_error(result):
            try:
                return JSONResponse(status_code=200, content=jsonable_encoder(result))
            except (TypeError, ValueError) as exc:
                result = ErrorValue.from_error(InvocationError.from_exception(exc))

        logger.warning(f"{request.method} {request.url.path} -> {self.error_status}: {result}")
        return JSONResponse(status_code=self.error_status, content=str(result))


class FunctionSetMiddleware(BaseHTTPMiddleware):
    """Middleware that serves a registry and hands unmatched requests to the app."""

    def __init__(self, app, registry: "Registry") -> None:
        super().__init__(app)
        self.registry = registry

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        return await self.registry.http_handler(request, call_next)
