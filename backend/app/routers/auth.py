"""
认证路由 - 登录、当前会话、修改密码、路由守卫查询、导航
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.hotel.routes import navigation_for, requirement_for
from app.security.auth import get_optional_auth_context, require_login
from app.system.schemas import LoginRequest, LoginResponse, PasswordChange
from app.system.services.user_service import UserService
from core.security.context import AuthContext
from core.security.guard import evaluate_guard

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """用户登录"""
    service = UserService(db)
    try:
        result = service.authenticate(data.email, data.password)
        if not result:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="邮箱或密码错误"
            )
        return result
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@router.get("/me")
def get_current_user_info(ctx: AuthContext = Depends(require_login(allow_password_reset=True))):
    """获取当前会话（角色、有效权限、是否需改密）"""
    return ctx.to_dict()


@router.post("/change-password")
def change_password(
    data: PasswordChange,
    ctx: AuthContext = Depends(require_login(allow_password_reset=True)),
    db: Session = Depends(get_db)
):
    """修改密码，成功后清除强制改密标记"""
    service = UserService(db)
    try:
        service.change_password(ctx.user_id, data.old_password, data.new_password)
        return {"message": "密码修改成功"}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/guard")
def check_route(
    path: str = Query(..., description="前端页面路由，如 /finance"),
    ctx: AuthContext = Depends(get_optional_auth_context),
):
    """对一次页面导航做守卫判定"""
    decision = evaluate_guard(
        ctx, path, requirement_for(path),
        login_path=settings.LOGIN_PATH,
        reset_path=settings.RESET_PASSWORD_PATH,
    )
    return decision.to_dict()


@router.get("/navigation")
def get_navigation(ctx: AuthContext = Depends(require_login(allow_password_reset=True))):
    """当前用户可见的侧边栏导航"""
    return [item.to_dict() for item in navigation_for(ctx)]
