"""Business logic for validation rule commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Tuple

import yaml

from valibook.cli.handlers.project_handler import ProjectHandler
from valibook.core.rules import ValidationRule, rule_from_dict
from valibook.errors import RuleDefinitionError
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


class RulesHandler:
    """Handler for rule import, listing and deletion."""

    def __init__(self, project: ProjectHandler):
        self.project = project

    def read_descriptors(self, file_path: str | Path) -> List[Any]:
        """Read rule descriptors from a JSON or YAML file.

        The file holds either a list of descriptors or a mapping with a
        ``rules`` list.
        """
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if isinstance(data, dict):
            data = data.get("rules", [])
        if not isinstance(data, list):
            raise ValueError(f"{file_path} must contain a list of rules")
        return data

    def import_rules(
        self, file_path: str | Path
    ) -> Tuple[List[ValidationRule], List[str]]:
        """Parse and store rules.

        Returns:
            Tuple of (stored rules, problems with rejected descriptors)
        """
        parsed: List[ValidationRule] = []
        problems: List[str] = []
        for position, descriptor in enumerate(self.read_descriptors(file_path), start=1):
            try:
                parsed.append(rule_from_dict(descriptor))
            except RuleDefinitionError as e:
                problems.append(f"Rule #{position}: {e}")

        added = self.project.store.add_rules(parsed)
        added_ids = {rule.id for rule in added}
        for rule in parsed:
            if rule.id not in added_ids:
                problems.append(f"Rule {rule.id}: unknown column {rule.table}.{rule.column}")

        if added:
            self.project.save()
        logger.info(f"Imported {len(added)} rules, rejected {len(problems)}")
        return added, problems

    def list_rules(self) -> List[ValidationRule]:
        return self.project.store.rules()

    def delete_rule(self, rule_id: str) -> bool:
        deleted = self.project.store.delete_rule(rule_id)
        if deleted:
            self.project.save()
        return deleted

    def clear_rules(self) -> int:
        count = self.project.store.clear_rules()
        self.project.save()
        return count
