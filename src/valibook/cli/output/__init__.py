"""CLI output helpers."""

from valibook.cli.output.formatters import OutputFormatter

__all__ = ["OutputFormatter"]
