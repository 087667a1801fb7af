"""
RBAC API 路由 - 权限目录 + 角色管理 + 用户角色分配
前缀: /system/permissions, /system/roles, /system/users/{user_id}/roles
读取需要 staff.view，写操作需要 staff.manage
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.security.auth import require_permission
from app.security.permissions import Permission, get_group_icon, group_permissions, list_permissions
from app.system.schemas import (
    PermissionGroupResponse, PermissionResponse,
    RoleCreate, RoleUpdate, RolePermissionsUpdate, RoleResponse,
    UserRoleAssign, UserRoleResponse,
)
from app.system.services.rbac_service import RoleService, RoleAssignmentService
from core.security.context import AuthContext

require_staff_view = require_permission(Permission.STAFF_VIEW)
require_staff_manage = require_permission(Permission.STAFF_MANAGE)


# ========== Permission Router ==========

permission_router = APIRouter(prefix="/system/permissions", tags=["权限管理"])


@permission_router.get("", response_model=List[PermissionResponse])
def get_permission_catalog(ctx: AuthContext = Depends(require_staff_view)):
    """获取权限目录"""
    return [p.to_dict() for p in list_permissions()]


@permission_router.get("/groups", response_model=List[PermissionGroupResponse])
def get_permission_groups(ctx: AuthContext = Depends(require_staff_view)):
    """按功能分组的权限目录"""
    return [
        PermissionGroupResponse(
            group=group,
            icon=get_group_icon(group),
            permissions=[PermissionResponse(**p.to_dict()) for p in perms],
        )
        for group, perms in group_permissions().items()
    ]


# ========== Role Router ==========

role_router = APIRouter(prefix="/system/roles", tags=["角色管理"])


@role_router.get("", response_model=List[RoleResponse])
def list_roles(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_view),
):
    """获取角色列表"""
    return [RoleResponse.model_validate(r) for r in RoleService(db).get_roles()]


@role_router.get("/{role_id}", response_model=RoleResponse)
def get_role(
    role_id: str,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_view),
):
    """获取角色详情"""
    role = RoleService(db).get_role_by_id(role_id)
    if not role:
        raise HTTPException(status_code=404, detail="角色不存在")
    return RoleResponse.model_validate(role)


@role_router.post("", response_model=RoleResponse, status_code=201)
def create_role(
    data: RoleCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_manage),
):
    """创建角色"""
    service = RoleService(db)
    try:
        role = service.create_role(
            name=data.name,
            description=data.description,
            permissions=data.permissions,
            performed_by=ctx.user_id,
        )
        db.commit()
        return RoleResponse.model_validate(role)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@role_router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: str,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_manage),
):
    """更新角色"""
    service = RoleService(db)
    if not service.get_role_by_id(role_id):
        raise HTTPException(status_code=404, detail="角色不存在")
    try:
        role = service.update_role(
            role_id, performed_by=ctx.user_id, **data.model_dump(exclude_unset=True)
        )
        db.commit()
        return RoleResponse.model_validate(role)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@role_router.put("/{role_id}/permissions", response_model=RoleResponse)
def set_role_permissions(
    role_id: str,
    data: RolePermissionsUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_manage),
):
    """整体替换角色权限"""
    service = RoleService(db)
    if not service.get_role_by_id(role_id):
        raise HTTPException(status_code=404, detail="角色不存在")
    try:
        role = service.set_role_permissions(role_id, data.permissions, performed_by=ctx.user_id)
        db.commit()
        return RoleResponse.model_validate(role)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@role_router.delete("/{role_id}", status_code=204)
def delete_role(
    role_id: str,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_manage),
):
    """删除角色"""
    service = RoleService(db)
    if not service.get_role_by_id(role_id):
        raise HTTPException(status_code=404, detail="角色不存在")
    try:
        service.delete_role(role_id, performed_by=ctx.user_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


# ========== User-Role Router ==========

user_role_router = APIRouter(prefix="/system/users", tags=["用户角色"])


def _to_response(assignment) -> UserRoleResponse:
    resp = UserRoleResponse.model_validate(assignment)
    resp.role_name = assignment.role.name if assignment.role else None
    return resp


@user_role_router.get("/{user_id}/roles", response_model=List[UserRoleResponse])
def get_user_roles(
    user_id: str,
    active_only: bool = False,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_view),
):
    """获取用户的角色分配"""
    service = RoleAssignmentService(db)
    assignments = service.get_active_assignments(user_id) if active_only else service.get_assignments(user_id)
    return [_to_response(a) for a in assignments]


@user_role_router.post("/{user_id}/roles", response_model=UserRoleResponse, status_code=201)
def assign_user_role(
    user_id: str,
    data: UserRoleAssign,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_manage),
):
    """分配角色"""
    service = RoleAssignmentService(db)
    try:
        assignment = service.assign_role(
            user_id, data.role_id, assigned_by=ctx.user_id,
            valid_from=data.valid_from, valid_until=data.valid_until,
        )
        db.commit()
        return _to_response(assignment)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@user_role_router.delete("/{user_id}/roles/{role_id}", response_model=UserRoleResponse)
def revoke_user_role(
    user_id: str,
    role_id: str,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff_manage),
):
    """撤销角色（停用分配，保留记录）"""
    service = RoleAssignmentService(db)
    try:
        assignment = service.revoke_role(user_id, role_id, revoked_by=ctx.user_id)
        db.commit()
        return _to_response(assignment)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
