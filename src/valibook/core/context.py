"""Run-scoped cache of loaded tables and value sets."""

from __future__ import annotations

from threading import Lock
from typing import Dict, List, Optional, Set

from valibook.connectors.base import BaseLoader, LoadedTable
from valibook.core.store import ColumnStore
from valibook.core.value_index import DEFAULT_SAMPLE_LIMIT, ValueIndex, cell
from valibook.errors import LoadError
from valibook.utils.logging import get_logger
from valibook.utils.timing import TimingContext

logger = get_logger(__name__)


class RunContext:
    """Caches shared by every checker of one discovery or validation run.

    Each table is read from storage at most once. A table that cannot be
    loaded is recorded as a warning and behaves as if it had no rows.
    Safe to share between worker threads.

    Example:
        >>> context = RunContext(store, TabularLoader())
        >>> values = context.value_set("customers:0")
    """

    def __init__(
        self,
        store: ColumnStore,
        loader: Optional[BaseLoader] = None,
        sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    ):
        self.store = store
        self.loader = loader
        self.sample_limit = sample_limit
        self.warnings: List[str] = []

        self._lock = Lock()
        self._table_locks: Dict[str, Lock] = {}
        self._loaded: Dict[str, LoadedTable] = {}
        self._indexes: Dict[str, ValueIndex] = {}
        self._value_sets: Dict[str, Set[str]] = {}

    def preload(self, loaded: LoadedTable) -> None:
        """Seed the cache with rows that are already in memory."""
        with self._lock:
            self._loaded[loaded.name] = loaded

    def _table_lock(self, table_name: str) -> Lock:
        with self._lock:
            return self._table_locks.setdefault(table_name, Lock())

    def warn(self, message: str) -> None:
        logger.warning(message)
        with self._lock:
            self.warnings.append(message)

    def load(self, table_name: str) -> LoadedTable:
        """Rows of a table, read once per run."""
        with self._table_lock(table_name):
            with self._lock:
                cached = self._loaded.get(table_name)
            if cached is not None:
                return cached

            loaded = self._read(table_name)
            with self._lock:
                self._loaded[table_name] = loaded
            return loaded

    def _read(self, table_name: str) -> LoadedTable:
        location = self.store.location_of(table_name)
        if location is None:
            self.warn(f"Table {table_name} has no stored file; treated as empty")
            return LoadedTable.empty(table_name)
        if self.loader is None:
            self.warn(f"No loader configured to read {table_name}; treated as empty")
            return LoadedTable.empty(table_name)

        try:
            with TimingContext("load_table"):
                loaded = self.loader.load_table(table_name, location)
        except LoadError as e:
            self.warn(f"Skipping table {table_name}: {e}")
            return LoadedTable.empty(table_name)

        logger.info(f"Loaded {table_name}: {loaded.row_count} rows")
        return loaded

    def rows(self, table_name: str) -> List[List[str]]:
        return self.load(table_name).rows

    def value_index(self, table_name: str) -> ValueIndex:
        """Sampled value index of a table, built once per run."""
        with self._lock:
            cached = self._indexes.get(table_name)
        if cached is not None:
            return cached

        table = self.store.table(table_name)
        index = ValueIndex.build(table, self.rows(table_name), self.sample_limit)
        with self._lock:
            return self._indexes.setdefault(table_name, index)

    def column_values(self, column_id: str) -> List[str]:
        """Trimmed value of a column in every row, empty cells included."""
        col = self.store.column(column_id)
        return [cell(row, col.index) for row in self.rows(col.table_name)]

    def value_set(self, column_id: str) -> Set[str]:
        """Distinct non-empty values of a column across all rows."""
        with self._lock:
            cached = self._value_sets.get(column_id)
        if cached is not None:
            return cached

        values = {v for v in self.column_values(column_id) if v}
        with self._lock:
            return self._value_sets.setdefault(column_id, values)
