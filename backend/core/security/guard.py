"""
core/security/guard.py - 路由守卫决策表

状态按固定顺序判定，每次导航独立重新计算，不缓存"禁止"结论：
    LOADING → UNAUTHENTICATED → PASSWORD_RESET_REQUIRED → FORBIDDEN → AUTHORIZED
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.security.context import AuthContext
from core.security.permission import PermissionKey, permission_key


class GuardState(str, Enum):
    """守卫状态"""
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    PASSWORD_RESET_REQUIRED = "password_reset_required"
    FORBIDDEN = "forbidden"
    AUTHORIZED = "authorized"


@dataclass(frozen=True)
class RouteRequirement:
    """路由声明的访问要求（均为空表示仅需登录）"""
    permission: Optional[PermissionKey] = None
    role: Optional[str] = None
    public: bool = False


@dataclass(frozen=True)
class GuardDecision:
    """守卫判定结果"""
    state: GuardState
    redirect_to: Optional[str] = None
    return_to: Optional[str] = None
    missing_permission: Optional[str] = None
    missing_role: Optional[str] = None
    message: str = ""

    @property
    def allowed(self) -> bool:
        return self.state == GuardState.AUTHORIZED

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "allowed": self.allowed,
            "redirect_to": self.redirect_to,
            "return_to": self.return_to,
            "missing_permission": self.missing_permission,
            "missing_role": self.missing_role,
            "message": self.message,
        }


def _normalize(path: str) -> str:
    path = (path or "/").split("?", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def evaluate_guard(
    ctx: AuthContext,
    path: str,
    requirement: Optional[RouteRequirement] = None,
    login_path: str = "/auth",
    reset_path: str = "/reset-password",
) -> GuardDecision:
    """
    对一次导航做守卫判定

    Args:
        ctx: 当前会话的认证上下文
        path: 请求的路由
        requirement: 路由要求，None 等价于"仅需登录"
        login_path: 未登录时的跳转目标
        reset_path: 强制改密流程的路由

    Returns:
        GuardDecision
    """
    requirement = requirement or RouteRequirement()
    location = path
    path = _normalize(path)

    if requirement.public:
        return GuardDecision(state=GuardState.AUTHORIZED)

    if ctx.is_loading:
        return GuardDecision(state=GuardState.LOADING)

    if not ctx.is_authenticated():
        return GuardDecision(
            state=GuardState.UNAUTHENTICATED,
            redirect_to=login_path,
            return_to=location,
            message="请先登录",
        )

    if ctx.password_reset_required and path != _normalize(reset_path):
        return GuardDecision(
            state=GuardState.PASSWORD_RESET_REQUIRED,
            redirect_to=reset_path,
            message="请先修改密码",
        )

    if requirement.permission is not None and not ctx.has_permission(requirement.permission):
        key = permission_key(requirement.permission)
        return GuardDecision(
            state=GuardState.FORBIDDEN,
            missing_permission=key,
            message=f"访问被拒绝，缺少权限: {key}",
        )

    if requirement.role and not ctx.has_role(requirement.role):
        return GuardDecision(
            state=GuardState.FORBIDDEN,
            missing_role=requirement.role,
            message=f"访问被拒绝，缺少角色: {requirement.role}",
        )

    return GuardDecision(state=GuardState.AUTHORIZED)


__all__ = [
    "GuardState",
    "RouteRequirement",
    "GuardDecision",
    "evaluate_guard",
]
