"""Table management commands - upload, list, remove, key and scope flags."""

from __future__ import annotations

import click

from valibook.cli.decorators import handle_errors, with_table_kind
from valibook.cli.handlers import ProjectHandler
from valibook.cli.output import OutputFormatter
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


def _project(ctx) -> ProjectHandler:
    return ProjectHandler(get_config(), ctx.obj.get("project"))


@click.command(name="upload")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@with_table_kind
@click.option("--name", "-n", help="Table name (default: file name)")
@click.option("--overwrite", is_flag=True, help="Replace an existing table")
@handle_errors
@click.pass_context
def upload_cmd(ctx, file_path, kind, name, overwrite):
    """Upload a spreadsheet as a project table.

    \b
    Examples:
        valibook upload customers.xlsx --kind SOURCE
        valibook upload export.csv --kind TARGET --name crm_export
        valibook upload blacklist.csv --kind FORBIDDEN --overwrite
    """
    project = _project(ctx)
    table = project.upload(file_path, kind, name=name, overwrite=overwrite)

    out.success(f"Uploaded {table.name}")
    out.table_summary(table.name, table.kind.value, table.row_count, len(table.columns))
    for col in table.columns:
        samples = ", ".join(col.sample_values)
        click.echo(
            f"      {col.name}: {col.unique_count} unique, {col.null_count} empty"
            f"{f' ({samples})' if samples else ''}"
        )


@click.command(name="tables")
@handle_errors
@click.pass_context
def tables_cmd(ctx):
    """List project tables and their links."""
    project = _project(ctx)
    summaries = project.list_tables()
    if not summaries:
        out.info("No tables uploaded yet")
        return

    out.section(f"📊 Tables ({len(summaries)}):")
    for summary in summaries:
        out.table_summary(
            summary["name"],
            summary["kind"],
            summary["row_count"],
            summary["num_columns"],
            primary_key=summary["primary_key"],
        )

    links = project.store.links()
    if links:
        out.section(f"🔗 Links ({len(links)}):")
        out.list_items([project.describe_link(link) for link in links])


@click.command(name="remove-table")
@click.argument("name")
@handle_errors
@click.pass_context
def remove_table_cmd(ctx, name):
    """Remove a table together with its columns and links."""
    _project(ctx).remove_table(name)
    out.success(f"Removed {name}")


@click.command(name="set-key")
@click.argument("table")
@click.argument("column")
@click.option("--unset", is_flag=True, help="Clear the flag instead")
@handle_errors
@click.pass_context
def set_key_cmd(ctx, table, column, unset):
    """Mark COLUMN as the primary key of TABLE."""
    col = _project(ctx).set_primary_key(table, column, not unset)
    out.success(f"{col.qualified_name} primary key: {col.is_primary_key}")


@click.command(name="set-scope")
@click.argument("table")
@click.argument("column")
@click.option("--unset", is_flag=True, help="Clear the flag instead")
@handle_errors
@click.pass_context
def set_scope_cmd(ctx, table, column, unset):
    """Mark COLUMN as the validation scope column of TABLE."""
    col = _project(ctx).set_validation_scope(table, column, not unset)
    out.success(f"{col.qualified_name} validation scope: {col.is_validation_scope}")
