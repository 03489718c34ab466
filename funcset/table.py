"""Console summary of registered functions."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from .descriptor import CallableDescriptor

COLUMNS = (
    ("path", 40),
    ("title", 20),
    ("params #", 10),
    ("description", 60),
)


def build_table(descriptors: Iterable["CallableDescriptor"]) -> Table:
    table = Table(title="Functions")
    for name, width in COLUMNS:
        table.add_column(name, max_width=width, overflow="ellipsis", no_wrap=name == "params #")

    for fn in descriptors:
        table.add_row(
            fn.path or "",
            fn.title or "",
            str(len(fn.param_types)) if fn.param_types is not None else "",
            fn.description or "",
        )
    return table


def print_table(descriptors: Iterable["CallableDescriptor"], console: Optional[Console] = None) -> None:
    (console or Console()).print(build_table(descriptors))
