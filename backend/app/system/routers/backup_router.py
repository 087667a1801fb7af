"""
备份恢复 API 路由
前缀: /system/backup
仅管理员（管理员角色或 settings.manage / staff.manage）可调用
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.security.auth import require_backup_admin
from app.system.schemas import RestoreRequest, RestoreResponse
from app.system.services.backup_service import BackupService
from core.backup import BackupError
from core.security.context import AuthContext

router = APIRouter(prefix="/system/backup", tags=["备份恢复"])


@router.post("/export")
def export_backup(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_backup_admin),
):
    """导出全部业务表为 JSON 快照"""
    snapshot = BackupService(db).export(created_by=ctx.user_id)
    return JSONResponse(
        content=jsonable_encoder(snapshot.to_dict()),
        headers={"Content-Disposition": f'attachment; filename="{snapshot.filename}"'},
    )


@router.post("/restore", response_model=RestoreResponse)
def restore_backup(
    data: RestoreRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_backup_admin),
):
    """从 JSON 快照恢复；失败时已写入的表不会回滚"""
    service = BackupService(db)
    try:
        report = service.restore(
            data.data, tables=data.tables, truncate=data.truncate,
            requested_by=ctx.user_id,
        )
    except (BackupError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return report.to_dict()
