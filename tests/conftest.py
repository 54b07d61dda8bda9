"""Shared fixtures for Valibook tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pandas as pd
import pytest

from valibook.connectors import TabularLoader
from valibook.core.context import RunContext
from valibook.core.store import ProjectStore
from valibook.core.types import Link, LinkMetadata, Table, TableKind
from valibook.utils.config import Config, set_config


@pytest.fixture(autouse=True)
def default_config():
    """Run every test against the built-in defaults."""
    set_config(Config())
    yield
    set_config(None)


def write_csv(path: Path, columns: Dict[str, List]) -> Path:
    pd.DataFrame(columns).to_csv(path, index=False)
    return path


class ProjectBuilder:
    """Builds a project from in-test CSV files."""

    def __init__(self, root: Path):
        self.root = root
        self.store = ProjectStore(path=root / "project.json")
        self.loader = TabularLoader()

    def add(self, name: str, kind: TableKind, columns: Dict[str, List]) -> Table:
        path = write_csv(self.root / f"{name}.csv", columns)
        return self.store.register_upload(name, kind, path, self.loader)

    def link(self, checked: str, reference: str, **metadata) -> Link:
        checked_col = self.store.find_column(*checked.split("."))
        reference_col = self.store.find_column(*reference.split("."))
        return self.store.apply_link(
            checked_col.id, reference_col.id, LinkMetadata(**metadata)
        )

    def context(self) -> RunContext:
        return RunContext(self.store, self.loader)


@pytest.fixture
def builder(tmp_path) -> ProjectBuilder:
    return ProjectBuilder(tmp_path)


@pytest.fixture
def scenario_a(builder) -> ProjectBuilder:
    """Source {id: 1,2,3, amt: 10,20,30}, checked {id: 1,2, amt: 10,25}."""
    builder.add("src", TableKind.SOURCE, {"id": [1, 2, 3], "amt": [10, 20, 30]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 2], "amt": [10, 25]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.amt", "src.amt")
    return builder
