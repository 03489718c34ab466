"""Build a nested namespace of callables from a directory of modules."""

import importlib.util
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Union

from .config import get_export_name, get_source_extensions

logger = logging.getLogger(__name__)

MODULE_PREFIX = "funcset_loaded"


def _module_name(path: Path) -> str:
    digest = abs(hash(str(path.resolve())))
    return f"{MODULE_PREFIX}_{path.stem}_{digest:x}"


def _import_file(path: Path) -> Any:
    name = _module_name(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def _strip_extension(filename: str, extensions: tuple[str, ...]) -> Optional[str]:
    for ext in extensions:
        if filename.endswith(ext):
            return filename[: -len(ext)]
    return None


def load_tree(
    base_path: Union[str, Path],
    *,
    export_name: Optional[str] = None,
    extensions: Optional[tuple[str, ...]] = None,
) -> dict[str, Any]:
    """
    Scan a directory into {name: callable | nested dict}.

    Files with a recognised extension are imported and contribute their
    ``export_name`` attribute under the file name without extension, when
    that attribute is callable. Subdirectories become nested dicts.
    Dunder files and ``__pycache__`` are ignored.
    """
    export_name = export_name or get_export_name()
    extensions = extensions or get_source_extensions()
    base = Path(base_path)
    tree: dict[str, Any] = {}

    with os.scandir(base) as entries:
        dirents = sorted(entries, key=lambda e: e.name)

    for entry in dirents:
        if entry.name.startswith("__"):
            continue

        if entry.is_file():
            name = _strip_extension(entry.name, extensions)
            if name is None:
                continue
            module = _import_file(base / entry.name)
            export = getattr(module, export_name, None)
            if not callable(export):
                logger.debug(f"Skipping {entry.path}: no callable '{export_name}'")
                continue
            tree[name] = export
        elif entry.is_dir():
            tree[entry.name] = load_tree(base / entry.name, export_name=export_name, extensions=extensions)

    return tree
