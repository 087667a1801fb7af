"""
core/security - 安全模块

包含框架的核心安全组件：
- permission: 权限/角色判定原语与权限提供者接口
- context: 会话认证上下文与生命周期管理
- guard: 路由守卫决策表

使用方式:
    >>> from core.security import AuthContext, evaluate_guard, RouteRequirement
    >>> ctx = AuthContext.build(user_id="u1", roles=["Front Desk"],
    ...                         permissions=["rooms.view"])
    >>> evaluate_guard(ctx, "/rooms", RouteRequirement(permission="rooms.view")).allowed
    True
"""

from core.security.permission import (
    PermissionKey,
    permission_key,
    has_permission,
    has_any_permission,
    has_role,
    IPermissionProvider,
)

from core.security.context import (
    SessionInfo,
    LoadedAuthState,
    AuthStateLoader,
    AuthContext,
    AuthStateManager,
)

from core.security.guard import (
    GuardState,
    RouteRequirement,
    GuardDecision,
    evaluate_guard,
)

__all__ = [
    # 权限判定
    "PermissionKey",
    "permission_key",
    "has_permission",
    "has_any_permission",
    "has_role",
    "IPermissionProvider",
    # 认证上下文
    "SessionInfo",
    "LoadedAuthState",
    "AuthStateLoader",
    "AuthContext",
    "AuthStateManager",
    # 路由守卫
    "GuardState",
    "RouteRequirement",
    "GuardDecision",
    "evaluate_guard",
]
