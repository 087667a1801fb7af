"""
core/backup/store.py

Table store interface consumed by the backup engine.

The application layer provides the SQLAlchemy implementation; the in-memory
store here backs unit tests and dry runs.
"""
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class TableStoreError(Exception):
    """Raised by a store when a table operation fails."""

    def __init__(self, table: str, message: str):
        self.table = table
        self.message = message
        super().__init__(f"{table}: {message}")


class ITableStore(ABC):
    """Per-table persistence operations used by backup/restore."""

    @abstractmethod
    def select_rows(self, table: str, limit: int) -> List[Row]:
        """Read up to ``limit`` rows of ``table``."""

    @abstractmethod
    def insert_rows(self, table: str, rows: List[Row]) -> int:
        """Insert one batch, returning the number of rows written."""

    @abstractmethod
    def delete_all(self, table: str) -> int:
        """Remove every row of ``table``."""

    def checkpoint(self) -> None:
        """Make the work done so far durable. No-op by default."""


class InMemoryTableStore(ITableStore):
    """
    Dict-backed store.

    ``foreign_keys`` maps a table to ``{column: referenced_table}``; inserts
    referencing a missing id and deletes of still-referenced rows fail the
    same way a relational store with FK constraints would.
    """

    def __init__(
        self,
        data: Optional[Dict[str, List[Row]]] = None,
        foreign_keys: Optional[Dict[str, Dict[str, str]]] = None,
    ):
        self.tables: Dict[str, List[Row]] = copy.deepcopy(data) if data else {}
        self.foreign_keys = foreign_keys or {}
        self.failing_reads: Dict[str, str] = {}
        self.failing_inserts: Dict[str, str] = {}
        self.operations: List[tuple] = []

    def select_rows(self, table: str, limit: int) -> List[Row]:
        self.operations.append(("select", table))
        if table in self.failing_reads:
            raise TableStoreError(table, self.failing_reads[table])
        return [dict(row) for row in self.tables.get(table, [])[:limit]]

    def insert_rows(self, table: str, rows: List[Row]) -> int:
        self.operations.append(("insert", table, len(rows)))
        if table in self.failing_inserts:
            raise TableStoreError(table, self.failing_inserts[table])

        for row in rows:
            for column, target in self.foreign_keys.get(table, {}).items():
                ref = row.get(column)
                if ref is None:
                    continue
                if not any(r.get("id") == ref for r in self.tables.get(target, [])):
                    raise TableStoreError(
                        table, f"foreign key {column} references missing {target}.id={ref}"
                    )

        self.tables.setdefault(table, []).extend(dict(row) for row in rows)
        return len(rows)

    def delete_all(self, table: str) -> int:
        self.operations.append(("delete", table))
        existing = self.tables.get(table, [])
        ids = {row.get("id") for row in existing}

        for other, columns in self.foreign_keys.items():
            if other == table:
                continue
            for column, target in columns.items():
                if target != table:
                    continue
                if any(row.get(column) in ids for row in self.tables.get(other, [])):
                    raise TableStoreError(
                        table, f"rows still referenced by {other}.{column}"
                    )

        self.tables[table] = []
        return len(existing)

    def count(self, table: str) -> int:
        return len(self.tables.get(table, []))
