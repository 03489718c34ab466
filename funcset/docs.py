"""OpenAPI path fragments generated from descriptors."""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PydanticUserError, TypeAdapter

if TYPE_CHECKING:
    from .descriptor import CallableDescriptor

JSON_MEDIA_TYPE = "application/json"


class ParameterDoc(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: Literal["body", "header"] = Field(alias="in")
    required: bool = True
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class OperationDoc(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: str = Field(alias="operationId")
    consumes: list[str] = Field(default_factory=lambda: [JSON_MEDIA_TYPE])
    produces: list[str] = Field(default_factory=lambda: [JSON_MEDIA_TYPE])
    parameters: list[ParameterDoc] = Field(default_factory=list)
    responses: dict[str, dict[str, Any]] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)


def parameter_location(specifier: str) -> str:
    """Specifiers starting with "body" live in the body, everything else in headers."""
    return "body" if specifier.startswith("body") else "header"


def schema_for(param_type: Any) -> Optional[dict[str, Any]]:
    """JSON schema for a declared parameter type, if one can be derived."""
    if param_type is None:
        return None
    if isinstance(param_type, Mapping):
        return dict(param_type)
    try:
        return TypeAdapter(param_type).json_schema()
    except (PydanticUserError, NameError, TypeError):
        return None


def document_key(path: Optional[str]) -> str:
    return "/" + (path or "").lstrip("/")


def operation_doc(descriptor: "CallableDescriptor") -> OperationDoc:
    param_types = descriptor.param_types or []
    parameters = []
    for index, specifier in enumerate(descriptor.http_mapper or []):
        parameters.append(
            ParameterDoc(
                name=specifier.split(":")[-1],
                location=parameter_location(specifier),
                schema_=schema_for(param_types[index]) if index < len(param_types) else None,
            )
        )

    success: dict[str, Any] = {"description": "Function result"}
    returns = schema_for(descriptor.return_type)
    if returns is not None:
        success["schema"] = returns

    return OperationDoc(
        summary=descriptor.title,
        description=descriptor.description,
        operation_id=descriptor.name,
        parameters=parameters,
        responses={
            "200": success,
            "502": {"description": "Invalid arguments or failed invocation"},
        },
    )


def openapi_path(descriptor: "CallableDescriptor") -> dict[str, Any]:
    """Path-item fragment describing the descriptor's POST operation."""
    operation = operation_doc(descriptor).model_dump(by_alias=True, exclude_none=True)
    return {document_key(descriptor.path): {"post": operation}}


def collect_paths(descriptors: Iterable["CallableDescriptor"]) -> dict[str, Any]:
    """Merge fragments into a single ``paths`` object."""
    paths: dict[str, Any] = {}
    for descriptor in descriptors:
        paths.update(openapi_path(descriptor))
    return paths
