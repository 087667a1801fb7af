"""
core/security/permission.py - 权限判定原语

权限是不透明的字符串标识（"<area>.<verb>"），这里只做精确匹配：
- 无通配符："*" 不是超级权限
- 无层级："rooms.manage" 不隐含 "rooms.view"

IPermissionProvider 由 app 层实现（见 app.system.services.rbac_service.PermissionResolver）。
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import AbstractSet, Any, Iterable, List, Set, Union

PermissionKey = Union[str, Enum]


def permission_key(value: PermissionKey) -> str:
    """统一为字符串键（枚举取 value）"""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def has_permission(effective: AbstractSet[Any], key: PermissionKey) -> bool:
    """精确成员判定；effective 为空或 None 时恒为 False（默认拒绝）"""
    if not effective:
        return False
    wanted = permission_key(key)
    return any(permission_key(p) == wanted for p in effective)


def has_any_permission(effective: AbstractSet[Any], keys: Iterable[PermissionKey]) -> bool:
    """任一权限满足即可（OR 逻辑）"""
    return any(has_permission(effective, k) for k in keys)


def _role_name(role: Any) -> str:
    if isinstance(role, str):
        return role
    return getattr(role, "name", "") or ""


def has_role(roles: Iterable[Any], name: str) -> bool:
    """角色名匹配，大小写不敏感；roles 可以是名称或带 name 属性的对象"""
    if not name:
        return False
    wanted = name.strip().lower()
    return any(_role_name(r).strip().lower() == wanted for r in roles or [])


class IPermissionProvider(ABC):
    """权限提供者接口 - app 层实现此接口以对接动态 RBAC"""

    @abstractmethod
    def get_user_permissions(self, user_id: str) -> Set[str]:
        """获取用户当前有效的权限码集合（失败时返回空集）"""

    @abstractmethod
    def get_user_roles(self, user_id: str) -> List[str]:
        """获取用户当前有效的角色名列表"""

    def has_permission(self, user_id: str, permission_code: PermissionKey) -> bool:
        """检查用户是否拥有指定权限码"""
        return has_permission(self.get_user_permissions(user_id), permission_code)


__all__ = [
    "PermissionKey",
    "permission_key",
    "has_permission",
    "has_any_permission",
    "has_role",
    "IPermissionProvider",
]
