"""
core - 酒店管理后台的框架层

独立于具体业务表与 Web 框架，包含：
- security: 权限判定原语、会话认证上下文、路由守卫
- backup: 实体集合注册表、表存储接口、快照导出与恢复

使用方式:
    >>> from core.security import AuthContext, evaluate_guard
    >>> from core.backup import EntityCollectionRegistry, BackupEngine
"""

from core.security import (
    AuthContext,
    AuthStateManager,
    GuardDecision,
    RouteRequirement,
    evaluate_guard,
    has_permission,
    has_role,
)
from core.backup import (
    BackupEngine,
    BackupError,
    EntityCollectionRegistry,
    Snapshot,
)

__version__ = "1.0.0"

__all__ = [
    # 安全
    "AuthContext",
    "AuthStateManager",
    "GuardDecision",
    "RouteRequirement",
    "evaluate_guard",
    "has_permission",
    "has_role",
    # 备份
    "BackupEngine",
    "BackupError",
    "EntityCollectionRegistry",
    "Snapshot",
]
