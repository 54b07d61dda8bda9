"""Validate command."""

from __future__ import annotations

import click

from valibook.cli.decorators import handle_errors, with_output_file, with_table_filter
from valibook.cli.handlers import ProjectHandler, ValidationHandler
from valibook.cli.output import OutputFormatter
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


@click.command(name="validate")
@with_table_filter
@click.option("--scope", "scope_table", help="Table whose keys limit the checked rows")
@with_output_file
@click.option("--protocol", is_flag=True, help="Print the full protocol text")
@click.option(
    "--fail-on-error",
    is_flag=True,
    help="Exit with status 1 when any check fails",
)
@handle_errors
@click.pass_context
def validate_cmd(ctx, tables, scope_table, output, protocol, fail_on_error):
    """Validate project tables using the accepted links and rules.

    \b
    Examples:
        valibook validate
        valibook validate --table crm_export --scope active_accounts
        valibook validate --output report.json
        valibook validate --protocol --output protocol.txt
    """
    config = get_config()
    project = ProjectHandler(config, ctx.obj.get("project"))
    handler = ValidationHandler(config, project)

    out.progress_start("Validating...")
    report = handler.run(tables=list(tables), scope_table=scope_table)

    if protocol:
        click.echo(report.protocol)
    else:
        out.report(report)

    if output:
        path = handler.save_report(report, output)
        out.success(f"Report saved to {path}")

    if fail_on_error and not report.is_clean:
        ctx.exit(1)
