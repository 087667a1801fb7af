"""
System Pydantic schemas - 认证、RBAC、用户开通、备份恢复
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


# ============== 认证 Schemas ==============

class LoginRequest(BaseModel):
    email: str
    password: str


class LoginUser(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: LoginUser
    roles: List[str] = []
    permissions: List[str] = []
    password_reset_required: bool = False


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)


# ============== 权限目录 Schemas ==============

class PermissionResponse(BaseModel):
    key: str
    label: str
    description: str
    group: str


class PermissionGroupResponse(BaseModel):
    group: str
    icon: str
    permissions: List[PermissionResponse]


# ============== 角色 Schemas ==============

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = ""
    permissions: List[str] = []


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[List[str]] = None


class RolePermissionsUpdate(BaseModel):
    permissions: List[str]


class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    permissions: List[str] = []
    is_system_role: bool = False
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== 用户角色 Schemas ==============

class UserRoleAssign(BaseModel):
    role_id: str
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    role_id: str
    role_name: Optional[str] = None
    is_active: bool
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    assigned_by: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


# ============== 用户开通 Schemas ==============

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role_id: str


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    role_id: Optional[str] = None
    staff_id: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== 审计日志 Schemas ==============

class AuditLogResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    # ORM 列属性名为 metadata_
    metadata: Optional[Dict[str, Any]] = Field(None,
                                               validation_alias=AliasChoices("metadata_", "metadata"))
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== 备份恢复 Schemas ==============

class RestoreRequest(BaseModel):
    data: Dict[str, Any]
    tables: Optional[List[str]] = None
    truncate: bool = True


class RestoreResponse(BaseModel):
    restored: Dict[str, int]
