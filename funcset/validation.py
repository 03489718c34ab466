"""Argument validation against per-position schemas."""

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Protocol, runtime_checkable

from jsonschema import FormatChecker, exceptions as jsonschema_exceptions, validators
from pydantic import PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError


@runtime_checkable
class Validator(Protocol):
    """Checks one value against one schema."""

    def errors(self, value: Any, schema: Any) -> list[str]:
        """Return diagnostics; an empty list means the value is valid."""
        ...


class JsonSchemaValidator:
    """Validates values against JSON schema mappings."""

    def __init__(self, check_formats: bool = True) -> None:
        self._format_checker = FormatChecker() if check_formats else None

    def errors(self, value: Any, schema: Any) -> list[str]:
        validator_cls = validators.validator_for(schema)
        try:
            validator_cls.check_schema(schema)
        except jsonschema_exceptions.SchemaError as exc:
            return [f"invalid schema: {exc.message}"]

        validator = validator_cls(schema, format_checker=self._format_checker)
        found = sorted(validator.iter_errors(value), key=lambda e: list(e.absolute_path))
        messages = []
        for error in found:
            location = "/".join(str(part) for part in error.absolute_path)
            messages.append(f"{location}: {error.message}" if location else error.message)
        return messages


class PydanticValidator:
    """Validates values against Python types and pydantic models."""

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict

    def errors(self, value: Any, schema: Any) -> list[str]:
        try:
            adapter = TypeAdapter(schema)
        except (PydanticUserError, NameError, TypeError) as exc:
            return [f"invalid schema: {exc}"]

        try:
            adapter.validate_python(value, strict=self.strict)
        except PydanticValidationError as exc:
            messages = []
            for err in exc.errors():
                loc = ".".join(str(part) for part in err.get("loc", ()))
                msg = err.get("msg", "invalid value")
                messages.append(f"{loc}: {msg}" if loc else msg)
            return messages
        return []


class SchemaValidator:
    """Default validator: mappings are JSON schemas, anything else a Python type."""

    def __init__(
        self,
        json_schema: Optional[JsonSchemaValidator] = None,
        python_types: Optional[PydanticValidator] = None,
    ) -> None:
        self.json_schema = json_schema or JsonSchemaValidator()
        self.python_types = python_types or PydanticValidator()

    def errors(self, value: Any, schema: Any) -> list[str]:
        if isinstance(schema, Mapping) or isinstance(schema, bool):
            return self.json_schema.errors(value, schema)
        return self.python_types.errors(value, schema)


def validate_arguments(
    args: Sequence[Any],
    param_types: Optional[Sequence[Any]],
    validator: Validator,
) -> None:
    """
    Check positional arguments against their declared schemas.

    Arguments past the end of ``param_types`` are not checked. Raises
    ``ValidationError`` for the first failing position.
    """
    if not param_types:
        return

    for index, value in enumerate(args):
        if index >= len(param_types):
            break
        diagnostics = validator.errors(value, param_types[index])
        if diagnostics:
            raise ValidationError(index, diagnostics)
