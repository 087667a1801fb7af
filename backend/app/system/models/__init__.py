"""
系统管理 ORM 模型
"""
from app.system.models.rbac import Role, UserRole
from app.system.models.user import AuthUser, Profile

__all__ = [
    "Role", "UserRole",
    "AuthUser", "Profile",
]
