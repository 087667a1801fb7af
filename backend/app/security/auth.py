"""
认证与授权模块

- JWT bearer token（sub = 用户ID）+ bcrypt 密码哈希
- 每个请求基于 PermissionResolver 构建 AuthContext
- require_permission / require_role / require_backup_admin 按与前端路由守卫相同的顺序判定：
  未认证(401) → 需重置密码(403) → 缺少权限/角色(403)
"""
import bcrypt
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.system.models.user import AuthUser, Profile
from core.security.context import AuthContext
from core.security.permission import PermissionKey, has_role, permission_key

logger = logging.getLogger(__name__)

PASSWORD_RESET_DETAIL = "需要先修改密码"

security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """密码哈希"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(user_id: str, email: Optional[str] = None) -> str:
    """创建 JWT token"""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": str(user_id), "exp": expire}
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证凭证"
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AuthUser:
    """获取当前登录用户"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="未提供认证凭证"
        )

    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    user = db.query(AuthUser).filter(AuthUser.id == user_id).first() if user_id else None

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户不存在"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="账号已停用"
        )

    return user


def build_auth_context(db: Session, user: AuthUser) -> AuthContext:
    """根据数据库中的角色分配和用户资料构建 AuthContext"""
    from app.system.services.rbac_service import PermissionResolver

    resolver = PermissionResolver(db)
    roles = resolver.resolve_roles(user.id)
    permissions = resolver.resolve_effective_permissions(user.id)
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()

    return AuthContext.build(
        user_id=user.id,
        email=user.email,
        roles=[r.name for r in roles],
        permissions=permissions,
        password_reset_required=bool(profile and profile.password_reset_required),
    )


async def get_auth_context(
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> AuthContext:
    """当前请求的认证上下文"""
    return build_auth_context(db, current_user)


async def get_optional_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AuthContext:
    """未登录或凭证无效时返回匿名上下文（供路由守卫查询使用）"""
    if credentials is None:
        return AuthContext.anonymous()
    try:
        user = await get_current_user(credentials, db)
    except HTTPException:
        return AuthContext.anonymous()
    return build_auth_context(db, user)


def _ensure_password_rotated(ctx: AuthContext, allow_password_reset: bool) -> None:
    if ctx.password_reset_required and not allow_password_reset:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=PASSWORD_RESET_DETAIL
        )


def require_login(allow_password_reset: bool = False):
    """仅要求登录（仍受强制改密约束）"""
    async def login_checker(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        _ensure_password_rotated(ctx, allow_password_reset)
        return ctx
    return login_checker


def require_permission(*permission_codes: PermissionKey, allow_password_reset: bool = False):
    """权限检查依赖 - 支持多个权限码（OR 逻辑）"""
    codes = [permission_key(c) for c in permission_codes]

    async def permission_checker(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        _ensure_password_rotated(ctx, allow_password_reset)
        if any(ctx.has_permission(code) for code in codes):
            return ctx
        logger.info(f"Permission denied for user {ctx.user_id}: needs {codes}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"缺少权限: {', '.join(codes)}"
        )
    return permission_checker


def require_role(role_name: str, allow_password_reset: bool = False):
    """角色检查依赖（名称大小写不敏感）"""
    async def role_checker(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        _ensure_password_rotated(ctx, allow_password_reset)
        if ctx.has_role(role_name):
            return ctx
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"缺少角色: {role_name}"
        )
    return role_checker


def is_backup_admin(ctx: AuthContext) -> bool:
    """管理员角色，或拥有任一管理权限"""
    if any(has_role(ctx.roles, name) for name in settings.ADMIN_ROLE_NAMES):
        return True
    return any(ctx.has_permission(code) for code in settings.BACKUP_MANAGE_PERMISSIONS)


async def require_backup_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """备份/恢复/用户开通的管理员校验，在任何副作用之前执行"""
    _ensure_password_rotated(ctx, False)
    if not is_backup_admin(ctx):
        logger.warning(f"Admin access denied for user {ctx.user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="需要管理员权限"
        )
    return ctx
