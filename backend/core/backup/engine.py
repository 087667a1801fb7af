"""
core/backup/engine.py

Backup/restore engine - exports every registered collection into a single
snapshot and replays a snapshot back into a table store.

Consistency model:
- Export is best-effort: no locks, a failing table yields an empty list plus
  a recorded error, the snapshot itself still succeeds.
- Restore deletes in deletion order, then inserts in insertion order, in
  fixed-size batches. The first failing batch stops the restore; tables
  already written are left as they are (no compensating rollback).
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from core.backup.registry import EntityCollectionRegistry
from core.backup.store import ITableStore, Row, TableStoreError

logger = logging.getLogger(__name__)

DEFAULT_ROW_LIMIT = 10000
DEFAULT_BATCH_SIZE = 500


class BackupError(Exception):
    """Base error for backup/restore failures tied to a table."""

    def __init__(self, table: str, message: str):
        self.table = table
        self.message = message
        super().__init__(f"{table}: {message}")


class DeleteError(BackupError):
    """Truncating a table failed during restore."""

    def __str__(self) -> str:
        return f"Delete failed for {self.table}: {self.message}"


class BatchInsertError(BackupError):
    """A batch insert failed during restore."""

    def __init__(self, table: str, batch_index: int, message: str):
        self.batch_index = batch_index
        super().__init__(table, message)

    def __str__(self) -> str:
        return f"Insert failed for {self.table}: {self.message}"


def chunk(rows: List[Row], size: int = DEFAULT_BATCH_SIZE) -> Iterator[List[Row]]:
    """Split rows into consecutive batches of at most ``size``."""
    if size <= 0:
        raise ValueError("Batch size must be positive")
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


@dataclass
class SnapshotMetadata:
    """Snapshot header."""

    created_at: datetime
    created_by: Optional[str]
    tables_count: int
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "created_at": self.created_at.isoformat(),
            "created_by": self.created_by,
            "tables_count": self.tables_count,
        }
        if self.errors:
            result["errors"] = list(self.errors)
        return result


@dataclass
class Snapshot:
    """Point-in-time export of every registered collection."""

    metadata: SnapshotMetadata
    data: Dict[str, List[Row]]

    def to_dict(self) -> Dict[str, Any]:
        return {"metadata": self.metadata.to_dict(), "data": self.data}

    def row_counts(self) -> Dict[str, int]:
        return {table: len(rows) for table, rows in self.data.items()}

    @property
    def filename(self) -> str:
        return f"backup-{self.metadata.created_at.date().isoformat()}.json"


@dataclass
class RestoreReport:
    """Rows inserted per registered table."""

    restored: Dict[str, int]

    @property
    def total_rows(self) -> int:
        return sum(self.restored.values())

    def to_dict(self) -> Dict[str, Any]:
        return {"restored": dict(self.restored)}


def extract_table_data(payload: Any) -> Dict[str, List[Row]]:
    """
    Accept a Snapshot, a full snapshot dict, ``{"data": {...}}`` or a bare
    ``{table: rows}`` map and return the table map.

    Raises:
        ValueError: if the payload is not a mapping of table name to row list
    """
    if isinstance(payload, Snapshot):
        return payload.data
    if not isinstance(payload, Mapping):
        raise ValueError("Invalid backup payload")

    raw = payload.get("data", payload)
    if isinstance(raw, Mapping) and isinstance(raw.get("data"), Mapping):
        raw = raw["data"]
    if not isinstance(raw, Mapping):
        raise ValueError("Invalid backup payload")

    tables: Dict[str, List[Row]] = {}
    for name, rows in raw.items():
        if name == "metadata":
            continue
        if rows is None:
            rows = []
        if not isinstance(rows, list) or not all(isinstance(r, Mapping) for r in rows):
            raise ValueError(f"Invalid rows for table {name}")
        tables[name] = [dict(r) for r in rows]
    return tables


class BackupEngine:
    """
    Export/restore over an ``ITableStore``.

    Example:
        >>> engine = BackupEngine(registry, store)
        >>> snapshot = engine.export_snapshot(created_by="admin-id")
        >>> engine.restore_snapshot(snapshot, truncate=True).restored
    """

    def __init__(
        self,
        registry: EntityCollectionRegistry,
        store: ITableStore,
        row_limit: int = DEFAULT_ROW_LIMIT,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if row_limit <= 0:
            raise ValueError("Row limit must be positive")
        if batch_size <= 0:
            raise ValueError("Batch size must be positive")
        self.registry = registry
        self.store = store
        self.row_limit = row_limit
        self.batch_size = batch_size

    def export_snapshot(self, created_by: Optional[str] = None,
                        now: Optional[datetime] = None) -> Snapshot:
        """Read every registered table into a snapshot."""
        tables = self.registry.export_order
        data: Dict[str, List[Row]] = {}
        errors: List[str] = []

        logger.info(f"Starting backup of {len(tables)} tables...")
        for table in tables:
            try:
                rows = self.store.select_rows(table, self.row_limit)
            except TableStoreError as e:
                logger.error(f"Error backing up {table}: {e.message}")
                errors.append(f"{table}: {e.message}")
                data[table] = []
                continue
            except Exception as e:
                logger.exception(f"Exception backing up {table}")
                errors.append(f"{table}: {e}")
                data[table] = []
                continue

            data[table] = list(rows or [])
            logger.debug(f"{table}: {len(data[table])} rows")

        metadata = SnapshotMetadata(
            created_at=now or datetime.now(timezone.utc),
            created_by=created_by,
            tables_count=len(tables),
            errors=errors,
        )
        logger.info(f"Backup complete. Total tables: {len(tables)}, Errors: {len(errors)}")
        return Snapshot(metadata=metadata, data=data)

    def restore_snapshot(
        self,
        snapshot: Any,
        tables: Optional[Iterable[str]] = None,
        truncate: bool = True,
    ) -> RestoreReport:
        """
        Replay a snapshot into the store.

        Args:
            snapshot: Snapshot, snapshot dict or raw ``{table: rows}`` map
            tables: Subset of registered tables to restore, default all
            truncate: Delete existing rows of the selected tables first

        Returns:
            RestoreReport with a row count for every registered table

        Raises:
            ValueError: invalid payload or unknown table names
            DeleteError: truncating a table failed
            BatchInsertError: a batch insert failed
        """
        table_data = extract_table_data(snapshot)
        selected = set(self.registry.select(tables))

        ignored = sorted(name for name in table_data if name not in self.registry)
        if ignored:
            logger.warning(f"Ignoring unregistered tables in snapshot: {', '.join(ignored)}")

        if truncate:
            for table in self.registry.deletion_order:
                if table not in selected:
                    continue
                try:
                    self.store.delete_all(table)
                except TableStoreError as e:
                    logger.error(f"Delete failed for {table}: {e.message}")
                    raise DeleteError(table, e.message) from e
            try:
                self.store.checkpoint()
            except TableStoreError as e:
                logger.error(f"Commit after delete failed: {e.message}")
                raise DeleteError(e.table, e.message) from e

        restored: Dict[str, int] = {name: 0 for name in self.registry.insertion_order}
        for table in self.registry.insertion_order:
            if table not in selected:
                continue
            rows = table_data.get(table) or []
            if not rows:
                continue

            total = 0
            for index, batch in enumerate(chunk(rows, self.batch_size)):
                try:
                    total += self.store.insert_rows(table, batch)
                except TableStoreError as e:
                    logger.error(f"Insert failed for {table} (batch {index}): {e.message}")
                    raise BatchInsertError(table, index, e.message) from e
            try:
                self.store.checkpoint()
            except TableStoreError as e:
                logger.error(f"Commit failed for {table}: {e.message}")
                raise BatchInsertError(table, index, e.message) from e
            restored[table] = total
            logger.info(f"Restored {table}: {total} rows")

        return RestoreReport(restored=restored)


__all__ = [
    "DEFAULT_ROW_LIMIT",
    "DEFAULT_BATCH_SIZE",
    "BackupError",
    "DeleteError",
    "BatchInsertError",
    "chunk",
    "SnapshotMetadata",
    "Snapshot",
    "RestoreReport",
    "extract_table_data",
    "BackupEngine",
]
