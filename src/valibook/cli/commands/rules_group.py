"""Validation rule commands - import, list, delete, clear."""

from __future__ import annotations

import click

from valibook.cli.decorators import handle_errors
from valibook.cli.handlers import ProjectHandler, RulesHandler
from valibook.cli.output import OutputFormatter
from valibook.utils.config import get_config

out = OutputFormatter()


def _handler(ctx) -> RulesHandler:
    return RulesHandler(ProjectHandler(get_config(), ctx.obj.get("project")))


@click.group(name="rules")
def rules_group():
    """Manage structured validation rules.

    Rules are proposed outside Valibook and imported from JSON or YAML.
    """
    pass


@rules_group.command(name="import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@handle_errors
@click.pass_context
def import_cmd(ctx, file_path):
    """Import rules from FILE_PATH (JSON or YAML list of descriptors).

    \b
    Example descriptor:
        {"table": "customers", "column": "vat", "type": "REGEX",
         "value": "^CZ[0-9]+$", "description": "Czech VAT number"}
    """
    added, problems = _handler(ctx).import_rules(file_path)
    out.success(f"Imported {len(added)} rules")
    for problem in problems:
        out.warning(problem)


@rules_group.command(name="list")
@handle_errors
@click.pass_context
def list_cmd(ctx):
    """List stored rules."""
    rules = _handler(ctx).list_rules()
    if not rules:
        out.info("No rules defined")
        return
    out.section(f"📏 Rules ({len(rules)}):")
    out.list_items(
        [
            f"{rule.id}: {rule.table}.{rule.column} {rule.rule_type}"
            f"{f' {rule.rule_value}' if rule.rule_value else ''}"
            f"{f' - {rule.description}' if rule.description else ''}"
            for rule in rules
        ]
    )


@rules_group.command(name="delete")
@click.argument("rule_id")
@handle_errors
@click.pass_context
def delete_cmd(ctx, rule_id):
    """Delete the rule RULE_ID."""
    if _handler(ctx).delete_rule(rule_id):
        out.success(f"Deleted rule {rule_id}")
    else:
        out.error(f"Unknown rule: {rule_id}", abort=True)


@rules_group.command(name="clear")
@click.confirmation_option(prompt="Delete all rules?")
@handle_errors
@click.pass_context
def clear_cmd(ctx):
    """Delete every rule."""
    count = _handler(ctx).clear_rules()
    out.success(f"Deleted {count} rules")
