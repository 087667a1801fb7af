"""
备份服务 - 组装 BackupEngine（酒店注册表 + SQLAlchemy 表存储）
"""
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import Base
from app.models.ontology import new_id
from app.system.backup_registry import HOTEL_BACKUP_REGISTRY
from app.system.services.audit_service import AuditService
from app.system.services.backup_store import SqlAlchemyTableStore
from core.backup import BackupEngine, RestoreReport, Snapshot, EntityCollectionRegistry

logger = logging.getLogger(__name__)


class BackupService:
    """数据库 JSON 快照导出 / 恢复"""

    def __init__(self, db: Session, registry: Optional[EntityCollectionRegistry] = None):
        self.db = db
        self.registry = registry or HOTEL_BACKUP_REGISTRY
        self.engine = BackupEngine(
            registry=self.registry,
            store=SqlAlchemyTableStore(db, Base.metadata),
            row_limit=settings.BACKUP_ROW_LIMIT,
            batch_size=settings.RESTORE_BATCH_SIZE,
        )

    def export(self, created_by: Optional[str] = None,
               now: Optional[datetime] = None) -> Snapshot:
        logger.info(f"Backup export requested by {created_by}")
        return self.engine.export_snapshot(created_by=created_by, now=now)

    def restore(self, payload: Any, tables: Optional[Iterable[str]] = None,
                truncate: bool = True, requested_by: Optional[str] = None) -> RestoreReport:
        logger.info(f"Restore requested by {requested_by} (truncate={truncate})")
        report = self.engine.restore_snapshot(payload, tables=tables, truncate=truncate)
        AuditService(self.db).create_log(
            "backup_restored", "backup", new_id(), user_id=requested_by,
            metadata={"truncate": truncate, "restored": dict(report.restored)},
        )
        self.db.commit()
        logger.info(f"Restore finished: {report.total_rows} rows")
        return report
