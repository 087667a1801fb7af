"""
core/backup - 备份/恢复模块

- registry: 实体集合注册表（插入顺序、删除顺序、导出顺序）
- store: 表存储接口
- engine: 快照导出与恢复

使用方式:
    >>> from core.backup import EntityCollectionRegistry, BackupEngine, InMemoryTableStore
    >>> engine = BackupEngine(EntityCollectionRegistry(["roles", "user_roles"]), InMemoryTableStore())
    >>> snapshot = engine.export_snapshot(created_by="admin")
"""

from core.backup.registry import EntityCollectionRegistry

from core.backup.store import (
    Row,
    TableStoreError,
    ITableStore,
    InMemoryTableStore,
)

from core.backup.engine import (
    DEFAULT_ROW_LIMIT,
    DEFAULT_BATCH_SIZE,
    BackupError,
    DeleteError,
    BatchInsertError,
    chunk,
    SnapshotMetadata,
    Snapshot,
    RestoreReport,
    extract_table_data,
    BackupEngine,
)

__all__ = [
    "EntityCollectionRegistry",
    "Row",
    "TableStoreError",
    "ITableStore",
    "InMemoryTableStore",
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
