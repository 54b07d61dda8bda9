"""Link commands - discover, link, unlink."""

from __future__ import annotations

import click

from valibook.cli.decorators import handle_errors
from valibook.cli.handlers import DiscoveryHandler, ProjectHandler
from valibook.cli.output import OutputFormatter
from valibook.core.linkage import DiscoveryMode
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


@click.command(name="discover")
@click.option(
    "--mode",
    "-m",
    type=click.Choice([mode.value for mode in DiscoveryMode], case_sensitive=False),
    default=DiscoveryMode.ALL.value,
    help="Suggest source mappings, cross-table references or both",
)
@click.option("--apply", "apply_links", is_flag=True, help="Accept all suggestions")
@handle_errors
@click.pass_context
def discover_cmd(ctx, mode, apply_links):
    """Suggest column links from names and shared values.

    \b
    Examples:
        valibook discover
        valibook discover --mode references
        valibook discover --apply
    """
    config = get_config()
    project = ProjectHandler(config, ctx.obj.get("project"))
    handler = DiscoveryHandler(config, project)

    out.progress_start("Discovering links...")
    suggestions = handler.discover(DiscoveryMode(mode.lower()), apply=apply_links)

    if not suggestions:
        out.info("No new link suggestions")
        return

    out.section(f"💡 Suggestions ({len(suggestions)}):")
    out.list_items([handler.describe(s) for s in suggestions])

    if apply_links:
        out.success(f"Applied {len(suggestions)} links")
    else:
        out.next_steps("Next steps:", ["Run 'valibook discover --apply' to accept them"])


@click.command(name="link")
@click.argument("checked")
@click.argument("reference")
@click.option("--key", "is_key", is_flag=True, help="Use this link as the join key")
@click.option("--codebook", help="Table whose key values the checked column must use")
@handle_errors
@click.pass_context
def link_cmd(ctx, checked, reference, is_key, codebook):
    """Link CHECKED (table.column) to REFERENCE (table.column).

    \b
    Examples:
        valibook link crm.customer_id customers.id --key
        valibook link crm.state customers.status --codebook states
    """
    project = ProjectHandler(get_config(), ctx.obj.get("project"))
    link = project.link(checked, reference, is_key=is_key, codebook=codebook)
    out.success(f"Linked {project.describe_link(link)}")


@click.command(name="unlink")
@click.argument("checked")
@handle_errors
@click.pass_context
def unlink_cmd(ctx, checked):
    """Remove the link of CHECKED (table.column)."""
    project = ProjectHandler(get_config(), ctx.obj.get("project"))
    if project.unlink(checked):
        out.success(f"Removed link of {checked}")
    else:
        out.warning(f"{checked} has no link")
