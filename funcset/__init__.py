"""Function sets: callables with metadata, served over HTTP and documented as OpenAPI paths."""

from .descriptor import CallableDescriptor, as_descriptor, function
from .docs import collect_paths, openapi_path
from .errors import (
    DuplicatePathError,
    ErrorKind,
    ErrorValue,
    FunctionSetError,
    InvocationError,
    RegistrationError,
    RoutingError,
    ValidationError,
    is_error,
)
from .http import FunctionSetMiddleware, HttpDispatchAdapter, extract_arguments, resolve_specifier
from .invoker import SafeInvoker
from .loader import load_tree
from .registry import Registry, flatten_namespace
from .table import build_table, print_table
from .validation import (
    JsonSchemaValidator,
    PydanticValidator,
    SchemaValidator,
    Validator,
    validate_arguments,
)

__all__ = [
    "CallableDescriptor",
    "as_descriptor",
    "function",
    "collect_paths",
    "openapi_path",
    "DuplicatePathError",
    "ErrorKind",
    "ErrorValue",
    "FunctionSetError",
    "InvocationError",
    "RegistrationError",
    "RoutingError",
    "ValidationError",
    "is_error",
    "FunctionSetMiddleware",
    "HttpDispatchAdapter",
    "extract_arguments",
    "resolve_specifier",
    "SafeInvoker",
    "load_tree",
    "Registry",
    "flatten_namespace",
    "build_table",
    "print_table",
    "JsonSchemaValidator",
    "PydanticValidator",
    "SchemaValidator",
    "Validator",
    "validate_arguments",
]
