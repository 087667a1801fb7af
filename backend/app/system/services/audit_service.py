"""
审计日志服务 - 记录用户开通、角色变更、备份恢复等管理操作

写入只 flush，由调用方所在事务统一提交。
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.ontology import AuditLog

logger = logging.getLogger(__name__)

AUDIT_LIST_LIMIT = 100


class AuditService:
    """审计日志服务"""

    def __init__(self, db: Session):
        self.db = db

    def create_log(self, action: str, entity_type: str, entity_id: str,
                   user_id: Optional[str] = None,
                   old_values: Optional[Dict[str, Any]] = None,
                   new_values: Optional[Dict[str, Any]] = None,
                   metadata: Optional[Dict[str, Any]] = None,
                   ip_address: Optional[str] = None) -> AuditLog:
        log = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
            new_values=new_values,
            metadata_=metadata or {},
            ip_address=ip_address,
        )
        self.db.add(log)
        self.db.flush()
        logger.debug(f"Audit {action} on {entity_type}:{entity_id} by {user_id}")
        return log

    def get_logs(self, entity_type: Optional[str] = None, entity_id: Optional[str] = None,
                 action: Optional[str] = None, limit: int = AUDIT_LIST_LIMIT) -> List[AuditLog]:
        """按时间倒序查询，可按实体类型 / 实体 ID / 动作过滤"""
        query = self.db.query(AuditLog)
        if entity_type:
            query = query.filter(AuditLog.entity_type == entity_type)
        if entity_id:
            query = query.filter(AuditLog.entity_id == entity_id)
        if action:
            query = query.filter(AuditLog.action == action)
        return query.order_by(AuditLog.created_at.desc()).limit(limit).all()
