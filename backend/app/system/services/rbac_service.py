"""
RBAC Service - 角色管理 + 用户角色分配 + 有效权限解析
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.security.permissions import Permission, is_known_permission, parse_permissions
from app.system.models.rbac import Role, UserRole
from app.system.services.audit_service import AuditService
from core.security.permission import IPermissionProvider

logger = logging.getLogger(__name__)


def _role_values(role: Role) -> dict:
    return {
        "name": role.name,
        "description": role.description,
        "permissions": list(role.permissions or []),
    }


class RoleService:
    """角色管理服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_roles(self) -> List[Role]:
        return self.db.query(Role).order_by(Role.name).all()

    def get_role_by_id(self, role_id: str) -> Optional[Role]:
        return self.db.query(Role).filter(Role.id == role_id).first()

    def get_role_by_name(self, name: str) -> Optional[Role]:
        """按名称查找（大小写不敏感）"""
        return self.db.query(Role).filter(func.lower(Role.name) == name.strip().lower()).first()

    def _require_role(self, role_id: str) -> Role:
        role = self.get_role_by_id(role_id)
        if not role:
            raise ValueError(f"角色 ID {role_id} 不存在")
        return role

    def create_role(self, name: str, description: str = "",
                    permissions: Optional[List[str]] = None,
                    is_system_role: bool = False,
                    performed_by: Optional[str] = None) -> Role:
        name = (name or "").strip()
        if not name:
            raise ValueError("角色名称不能为空")
        if self.get_role_by_name(name):
            raise ValueError(f"角色名称 '{name}' 已存在")

        keys = parse_permissions(permissions or [])
        role = Role(
            name=name, description=description,
            permissions=[k.value for k in keys],
            is_system_role=is_system_role,
        )
        self.db.add(role)
        self.db.flush()
        AuditService(self.db).create_log(
            "role_created", "role", role.id, user_id=performed_by,
            new_values=_role_values(role),
        )
        logger.info(f"Role created: {name} ({len(keys)} permissions)")
        return role

    def update_role(self, role_id: str, performed_by: Optional[str] = None, **kwargs) -> Role:
        role = self._require_role(role_id)
        old_values = _role_values(role)

        if "name" in kwargs and kwargs["name"] is not None:
            new_name = kwargs.pop("name").strip()
            if not new_name:
                raise ValueError("角色名称不能为空")
            existing = self.get_role_by_name(new_name)
            if existing and existing.id != role.id:
                raise ValueError(f"角色名称 '{new_name}' 已存在")
            role.name = new_name

        if "permissions" in kwargs and kwargs["permissions"] is not None:
            role.permissions = [k.value for k in parse_permissions(kwargs.pop("permissions"))]

        if "description" in kwargs and kwargs["description"] is not None:
            role.description = kwargs.pop("description")

        self.db.flush()
        AuditService(self.db).create_log(
            "role_updated", "role", role.id, user_id=performed_by,
            old_values=old_values, new_values=_role_values(role),
        )
        return role

    def set_role_permissions(self, role_id: str, keys: List[str],
                             performed_by: Optional[str] = None) -> Role:
        """整体替换角色权限"""
        role = self._require_role(role_id)
        old_permissions = list(role.permissions or [])
        role.permissions = [k.value for k in parse_permissions(keys)]
        self.db.flush()
        AuditService(self.db).create_log(
            "role_updated", "role", role.id, user_id=performed_by,
            old_values={"permissions": old_permissions},
            new_values={"permissions": list(role.permissions)},
        )
        logger.info(f"Role permissions replaced: {role.name} -> {len(role.permissions)}")
        return role

    def delete_role(self, role_id: str, performed_by: Optional[str] = None) -> None:
        role = self._require_role(role_id)
        if role.is_system_role:
            raise ValueError(f"系统内置角色 '{role.name}' 不可删除")

        active = self.db.query(UserRole).filter(
            UserRole.role_id == role_id, UserRole.is_active == True
        ).count()
        if active > 0:
            raise ValueError(f"角色 '{role.name}' 仍分配给 {active} 个用户，请先撤销")

        AuditService(self.db).create_log(
            "role_deleted", "role", role.id, user_id=performed_by,
            old_values=_role_values(role),
        )
        self.db.query(UserRole).filter(UserRole.role_id == role_id).delete()
        self.db.delete(role)
        self.db.flush()
        logger.info(f"Role deleted: {role.name}")


class RoleAssignmentService:
    """用户-角色分配服务"""

    def __init__(self, db: Session):
        self.db = db

    def _get_assignment(self, user_id: str, role_id: str) -> Optional[UserRole]:
        return self.db.query(UserRole).filter(
            UserRole.user_id == user_id, UserRole.role_id == role_id
        ).first()

    def assign_role(self, user_id: str, role_id: str, assigned_by: Optional[str] = None,
                    valid_from: Optional[datetime] = None,
                    valid_until: Optional[datetime] = None) -> UserRole:
        """分配角色；已有 (user, role) 记录时重新激活"""
        role = self.db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise ValueError(f"角色 ID {role_id} 不存在")

        valid_from = valid_from or datetime.utcnow()
        if valid_until is not None and valid_until <= valid_from:
            raise ValueError("失效时间必须晚于生效时间")

        assignment = self._get_assignment(user_id, role_id)
        if assignment is None:
            assignment = UserRole(user_id=user_id, role_id=role_id)
            self.db.add(assignment)
        assignment.is_active = True
        assignment.valid_from = valid_from
        assignment.valid_until = valid_until
        assignment.assigned_by = assigned_by
        self.db.flush()
        AuditService(self.db).create_log(
            "role_assigned", "user_role", user_id, user_id=assigned_by,
            new_values={"role_id": role.id, "role_name": role.name},
        )
        logger.info(f"Role {role.name} assigned to user {user_id} by {assigned_by}")
        return assignment

    def revoke_role(self, user_id: str, role_id: str,
                    revoked_by: Optional[str] = None) -> UserRole:
        """撤销分配：只置为非激活，保留记录"""
        assignment = self._get_assignment(user_id, role_id)
        if assignment is None or not assignment.is_active:
            raise ValueError(f"用户 {user_id} 没有有效的角色 {role_id}")
        assignment.is_active = False
        self.db.flush()
        AuditService(self.db).create_log(
            "role_revoked", "user_role", user_id, user_id=revoked_by,
            old_values={
                "role_id": role_id,
                "role_name": assignment.role.name if assignment.role else None,
            },
        )
        logger.info(f"Role {role_id} revoked from user {user_id}")
        return assignment

    def get_assignments(self, user_id: str) -> List[UserRole]:
        return self.db.query(UserRole).filter(UserRole.user_id == user_id).all()

    def get_active_assignments(self, user_id: str, at: Optional[datetime] = None) -> List[UserRole]:
        """激活且在有效期内的分配"""
        at = at or datetime.utcnow()
        return [ur for ur in self.get_assignments(user_id) if ur.is_effective(at)]

    def replace_user_role(self, user_id: str, role_id: str,
                          assigned_by: Optional[str] = None) -> UserRole:
        """单角色模式：停用全部分配后激活指定角色"""
        self.db.query(UserRole).filter(UserRole.user_id == user_id).update(
            {UserRole.is_active: False}, synchronize_session="fetch"
        )
        return self.assign_role(user_id, role_id, assigned_by=assigned_by)


@dataclass(frozen=True)
class ResolvedRole:
    """解析后的角色快照"""
    id: str
    name: str
    permissions: tuple

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "permissions": list(self.permissions)}


class PermissionResolver(IPermissionProvider):
    """
    有效权限 = 用户全部有效分配的角色权限并集

    数据库异常时记录日志并返回空集合（拒绝优先）。
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_roles(self, user_id: str, at: Optional[datetime] = None) -> List[ResolvedRole]:
        at = at or datetime.utcnow()
        try:
            rows = (
                self.db.query(UserRole, Role)
                .join(Role, UserRole.role_id == Role.id)
                .filter(UserRole.user_id == user_id, UserRole.is_active == True)
                .all()
            )
        except SQLAlchemyError:
            logger.exception(f"Error fetching roles for user {user_id}")
            return []

        roles = []
        for assignment, role in rows:
            if not assignment.is_effective(at):
                continue
            roles.append(ResolvedRole(
                id=role.id, name=role.name,
                permissions=tuple(role.permissions or []),
            ))
        return sorted(roles, key=lambda r: r.name)

    def resolve_effective_permissions(self, user_id: str,
                                      at: Optional[datetime] = None) -> FrozenSet[Permission]:
        effective: Set[Permission] = set()
        for role in self.resolve_roles(user_id, at):
            for key in role.permissions:
                if not is_known_permission(key):
                    logger.warning(f"Role {role.name} references unknown permission {key!r}, skipped")
                    continue
                effective.add(Permission(key))
        return frozenset(effective)

    def get_user_permissions(self, user_id: str) -> Set[str]:
        return {p.value for p in self.resolve_effective_permissions(user_id)}

    def get_user_roles(self, user_id: str) -> List[str]:
        return [r.name for r in self.resolve_roles(user_id)]
