"""CLI entry point for Valibook."""

from __future__ import annotations

import click

from valibook import __version__
from valibook.cli.commands import links, rules_group, serve, tables, validate
from valibook.utils.config import get_config, load_config
from valibook.utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to config.yml file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Logging level",
)
@click.option(
    "--project",
    type=click.Path(dir_okay=False),
    help="Project metadata file (default: data.project_file)",
)
@click.pass_context
def cli(ctx, config, log_level, project):
    """Valibook - link spreadsheet columns and validate them.

    \b
    Examples:
        # Upload a source of truth and a table to check
        valibook upload customers.xlsx --kind SOURCE
        valibook upload crm_export.csv --kind TARGET

        # Discover and accept column links
        valibook discover --apply

        # Validate and save the report
        valibook validate --output report.json
    """
    ctx.ensure_object(dict)

    setup_logging(level=log_level)

    if config:
        ctx.obj["config"] = load_config(config)
    else:
        ctx.obj["config"] = get_config()
    ctx.obj["project"] = project


cli.add_command(tables.upload_cmd)
cli.add_command(tables.tables_cmd)
cli.add_command(tables.remove_table_cmd)
cli.add_command(tables.set_key_cmd)
cli.add_command(tables.set_scope_cmd)
cli.add_command(links.discover_cmd)
cli.add_command(links.link_cmd)
cli.add_command(links.unlink_cmd)
cli.add_command(rules_group.rules_group)
cli.add_command(validate.validate_cmd)
cli.add_command(serve.serve_cmd)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
