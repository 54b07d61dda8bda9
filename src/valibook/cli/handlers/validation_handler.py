"""Business logic for validation commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence

from valibook.cli.handlers.project_handler import ProjectHandler
from valibook.core.validation import ValidationReport, Validator
from valibook.utils.config import Config


class ValidationHandler:
    """Handler for validation runs and report export.

    Example:
        >>> handler = ValidationHandler(config, project)
        >>> report = handler.run(scope_table="active_accounts")
        >>> handler.save_report(report, "report.json")
    """

    def __init__(self, config: Config, project: ProjectHandler):
        self.config = config
        self.project = project

    def run(
        self,
        tables: Optional[Sequence[str]] = None,
        scope_table: Optional[str] = None,
    ) -> ValidationReport:
        validator = Validator(
            self.project.store,
            self.project.loader,
            config=self.config.section("validation"),
        )
        return validator.validate(tables=tables or None, scope_table=scope_table)

    def save_report(self, report: ValidationReport, output_file: str | Path) -> Path:
        """Write the report as JSON, or as protocol text for ``.txt`` files."""
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix.lower() == ".txt":
            path.write_text(report.protocol, encoding="utf-8")
        else:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        return path
