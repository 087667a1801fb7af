# Security module
from app.security.auth import (
    get_password_hash, verify_password, create_access_token,
    get_current_user, get_auth_context,
    require_login, require_permission, require_role, require_backup_admin,
)
from app.security.permissions import (
    Permission, PermissionDef, UnknownPermissionError,
    list_permissions, group_permissions, parse_permissions,
)

__all__ = [
    'get_password_hash', 'verify_password', 'create_access_token',
    'get_current_user', 'get_auth_context',
    'require_login', 'require_permission', 'require_role', 'require_backup_admin',
    'Permission', 'PermissionDef', 'UnknownPermissionError',
    'list_permissions', 'group_permissions', 'parse_permissions',
]
