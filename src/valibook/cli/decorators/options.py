"""Common CLI option decorators."""

from __future__ import annotations

import click

from valibook.core.types import TableKind


def with_output_file(f):
    """Add --output option to command.

    Example:
        @click.command()
        @with_output_file
        def my_command(output):
            pass
    """
    return click.option(
        "--output",
        "-o",
        type=click.Path(),
        help="Output file path (.json report, or .txt protocol)",
    )(f)


def with_table_kind(f):
    """Add --kind option (table role) to command."""
    return click.option(
        "--kind",
        "-k",
        required=True,
        type=click.Choice([kind.value for kind in TableKind], case_sensitive=False),
        callback=lambda ctx, param, value: TableKind(value.upper()),
        help="Role of the table: SOURCE, TARGET, FORBIDDEN or RANGE",
    )(f)


def with_table_filter(f):
    """Add repeatable --table option to command.

    Example:
        @click.command()
        @with_table_filter
        def my_command(tables):
            pass
    """
    return click.option(
        "--table",
        "-t",
        "tables",
        multiple=True,
        help="Restrict to this table (repeatable)",
    )(f)
