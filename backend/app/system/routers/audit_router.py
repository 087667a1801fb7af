"""
审计日志 API 路由
前缀: /system/audit-logs
需要 settings.view
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.security.auth import require_permission
from app.security.permissions import Permission
from app.system.schemas import AuditLogResponse
from app.system.services.audit_service import AUDIT_LIST_LIMIT, AuditService
from core.security.context import AuthContext

router = APIRouter(prefix="/system/audit-logs", tags=["审计日志"])


@router.get("", response_model=List[AuditLogResponse])
def list_audit_logs(
    entity_type: Optional[str] = Query(None, description="如 user / role / user_role / backup"),
    entity_id: Optional[str] = None,
    action: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_permission(Permission.SETTINGS_VIEW)),
):
    """最近的审计日志（按时间倒序，最多 100 条）"""
    logs = AuditService(db).get_logs(
        entity_type=entity_type, entity_id=entity_id, action=action, limit=AUDIT_LIST_LIMIT,
    )
    return [AuditLogResponse.model_validate(log) for log in logs]
