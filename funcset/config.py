"""Environment-driven settings, read at call time so tests can override them."""

import os

DEFAULT_SEPARATOR = "/"
DEFAULT_ERROR_STATUS = 502
DEFAULT_EXPORT_NAME = "handler"
DUPLICATE_POLICIES = ("error", "replace")


def get_path_separator() -> str:
    """Separator used when flattening namespaces into paths."""
    separator = os.getenv("FUNCSET_PATH_SEPARATOR", DEFAULT_SEPARATOR)
    if not separator:
        raise ValueError("FUNCSET_PATH_SEPARATOR must not be empty")
    return separator


def get_duplicate_policy() -> str:
    """What a registry does when a path is registered twice."""
    policy = os.getenv("FUNCSET_DUPLICATE_POLICY", "error").strip().lower()
    if policy not in DUPLICATE_POLICIES:
        raise ValueError(f"FUNCSET_DUPLICATE_POLICY must be one of {DUPLICATE_POLICIES}")
    return policy


def get_error_status() -> int:
    """HTTP status sent for failed invocations."""
    raw = os.getenv("FUNCSET_ERROR_STATUS", str(DEFAULT_ERROR_STATUS))
    try:
        status = int(raw)
    except ValueError as exc:
        raise ValueError(f"FUNCSET_ERROR_STATUS must be an integer, got {raw!r}") from exc
    if not 100 <= status <= 599:
        raise ValueError(f"FUNCSET_ERROR_STATUS out of range: {status}")
    return status


def get_export_name() -> str:
    """Module attribute the loader treats as the default export."""
    return os.getenv("FUNCSET_EXPORT_NAME", DEFAULT_EXPORT_NAME)


def get_source_extensions() -> tuple[str, ...]:
    """
    File extensions the loader imports.

    Examples:
        ".py" -> (".py",)
        ".py, .pyw" -> (".py", ".pyw")
    """
    raw = os.getenv("FUNCSET_SOURCE_EXTENSIONS", ".py")
    return tuple(ext.strip() for ext in raw.split(",") if ext.strip())
