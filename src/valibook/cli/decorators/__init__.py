"""CLI decorators for common options and error handling."""

from valibook.cli.decorators.error_handling import handle_errors
from valibook.cli.decorators.options import (
    with_output_file,
    with_table_filter,
    with_table_kind,
)

__all__ = [
    "handle_errors",
    "with_output_file",
    "with_table_filter",
    "with_table_kind",
]
