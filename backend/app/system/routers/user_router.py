"""
用户开通 API 路由
前缀: /system/users
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.security.auth import require_backup_admin
from app.system.schemas import UserCreate, UserUpdate, UserResponse
from app.system.services.user_service import UserService
from core.security.context import AuthContext

router = APIRouter(prefix="/system/users", tags=["用户管理"])


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_backup_admin),
):
    """开通用户（首次登录需修改密码）"""
    service = UserService(db)
    try:
        return service.create_user(
            name=data.name, email=data.email, password=data.password,
            role_id=data.role_id, created_by=ctx.user_id,
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    data: UserUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_backup_admin),
):
    """更新用户资料、角色与员工档案关联"""
    service = UserService(db)
    if not service.get_user(user_id):
        raise HTTPException(status_code=404, detail="用户不存在")
    try:
        return service.update_user(
            user_id, updated_by=ctx.user_id, **data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
