"""Output formatting utilities for CLI."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import click

from valibook.core.validation.report import ValidationReport


class OutputFormatter:
    """Format output for CLI display.

    Provides consistent formatting for different types of CLI output,
    including success messages, errors, warnings, and validation reports.

    Example:
        >>> out = OutputFormatter()
        >>> out.success("Table uploaded")
        >>> out.stats({"rows": 100, "columns": 5})
    """

    @staticmethod
    def success(message: str) -> None:
        click.echo(f"✓ {message}")

    @staticmethod
    def error(message: str, abort: bool = False) -> None:
        """Display error message.

        Args:
            message: Error message to display
            abort: Whether to abort command execution after displaying error
        """
        click.echo(f"❌ {message}", err=True)
        if abort:
            raise click.Abort()

    @staticmethod
    def warning(message: str) -> None:
        click.echo(f"⚠️  {message}")

    @staticmethod
    def info(message: str) -> None:
        click.echo(f"ℹ️  {message}")

    @staticmethod
    def section(title: str) -> None:
        click.echo(f"\n{title}")

    @staticmethod
    def stats(stats_dict: Dict[str, Any], indent: str = "   ") -> None:
        """Display statistics dictionary in key: value format."""
        for key, value in stats_dict.items():
            click.echo(f"{indent}{key}: {value}")

    @staticmethod
    def list_items(items: List[str], indent: str = "   ", bullet: str = "-") -> None:
        for item in items:
            click.echo(f"{indent}{bullet} {item}")

    @staticmethod
    def table_summary(
        table_name: str,
        kind: str,
        row_count: int,
        col_count: int,
        primary_key: Optional[str] = None,
        indent: str = "   ",
    ) -> None:
        """Display table summary in consistent format.

        Args:
            table_name: Name of the table
            kind: Table role (SOURCE, TARGET, ...)
            row_count: Number of rows
            col_count: Number of columns
            primary_key: Primary key column name (if any)
            indent: Indentation string
        """
        pk_str = f", PK={primary_key}" if primary_key else ""
        click.echo(
            f"{indent}✓ {table_name} [{kind}]: {row_count} rows, {col_count} columns{pk_str}"
        )

    @staticmethod
    def progress_start(message: str) -> None:
        click.echo(f"\n🔍 {message}")

    @staticmethod
    def next_steps(title: str, steps: List[str]) -> None:
        click.echo(f"\n{title}")
        for step in steps:
            click.echo(f"   - {step}")

    @classmethod
    def report(cls, report: ValidationReport, limit: int = 20) -> None:
        """Display a validation report summary and its first failures.

        Args:
            report: Report to display
            limit: Maximum number of entries shown per section
        """
        summary = report.summary
        cls.section("📋 Validation summary:")
        cls.stats(
            {
                "Checks": summary["totalChecks"],
                "Passed": summary["passed"],
                "Failed": summary["failed"],
            }
        )

        if report.setup_errors:
            cls.section("Setup errors:")
            cls.list_items([f"{s.pair}: {s.message}" for s in report.setup_errors[:limit]])

        if report.errors:
            cls.section("Integrity errors:")
            cls.list_items(
                [
                    f"{e.fk_table}.{e.fk_column} -> {e.pk_table}.{e.pk_column}: "
                    f"{e.missing_count} missing ({', '.join(e.missing_values)}"
                    f"{f', +{e.more_count} more' if e.more_count else ''})"
                    for e in report.errors[:limit]
                ]
            )

        failures = [f for f in report.reconciliation if f.is_failure]
        if failures:
            cls.section("Reconciliation:")
            cls.list_items(
                [
                    f"{f.kind.value} {f.target_table} {f.join_key}={f.key}"
                    + (f" {f.column}: {f.expected!r} != {f.actual!r}" if f.column else "")
                    for f in failures[:limit]
                ]
            )
            if len(failures) > limit:
                click.echo(f"   ... and {len(failures) - limit} more")

        if report.forbidden:
            cls.section("Forbidden values:")
            cls.list_items(
                [
                    f"{e.target_table}.{e.column}: {e.count} from {e.forbidden_table} "
                    f"({', '.join(e.found_values)})"
                    for e in report.forbidden[:limit]
                ]
            )

        if report.rule_failures:
            cls.section("Rule failures:")
            cls.list_items(
                [
                    f"{r.table}.{r.column} {r.rule_type}: {r.failed_count} "
                    f"({', '.join(r.samples)})"
                    for r in report.rule_failures[:limit]
                ]
            )

        for warning in report.warnings:
            cls.warning(warning)

        if report.is_clean:
            cls.success("All checks passed")
        else:
            cls.error(f"{summary['failed']} checks failed")
