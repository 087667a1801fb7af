"""
集中定义权限目录

权限键格式 "<area>.<verb>"，是封闭枚举：角色只能引用这里列出的键。
group 仅用于界面分组展示，不构成授权边界。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from core.security.permission import PermissionKey, permission_key


class UnknownPermissionError(ValueError):
    """权限键不在目录中"""

    def __init__(self, keys: List[str]):
        self.keys = keys
        super().__init__(f"未知权限: {', '.join(keys)}")


class Permission(str, Enum):
    """权限码枚举"""
    # 房间
    ROOMS_VIEW = "rooms.view"
    ROOMS_MANAGE = "rooms.manage"
    # 客人
    GUESTS_VIEW = "guests.view"
    GUESTS_MANAGE = "guests.manage"
    # 预订
    BOOKINGS_VIEW = "bookings.view"
    BOOKINGS_CREATE = "bookings.create"
    BOOKINGS_MANAGE = "bookings.manage"
    # 客房清洁
    HOUSEKEEPING_VIEW = "housekeeping.view"
    HOUSEKEEPING_CREATE = "housekeeping.create"
    HOUSEKEEPING_MANAGE = "housekeeping.manage"
    # 维修
    MAINTENANCE_VIEW = "maintenance.view"
    MAINTENANCE_CREATE = "maintenance.create"
    MAINTENANCE_MANAGE = "maintenance.manage"
    # 库存
    INVENTORY_VIEW = "inventory.view"
    INVENTORY_CREATE = "inventory.create"
    INVENTORY_MANAGE = "inventory.manage"
    # POS
    POS_VIEW = "pos.view"
    POS_CREATE = "pos.create"
    POS_MANAGE = "pos.manage"
    # 财务
    FINANCE_VIEW = "finance.view"
    FINANCE_CREATE = "finance.create"
    FINANCE_MANAGE = "finance.manage"
    # 报表
    REPORTS_VIEW = "reports.view"
    REPORTS_EXPORT = "reports.export"
    # 退款
    REFUNDS_VIEW = "refunds.view"
    REFUNDS_CREATE = "refunds.create"
    REFUNDS_APPROVE = "refunds.approve"
    # 员工
    STAFF_VIEW = "staff.view"
    STAFF_MANAGE = "staff.manage"
    # 设置
    SETTINGS_VIEW = "settings.view"
    SETTINGS_MANAGE = "settings.manage"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PermissionDef:
    """权限定义（键、显示名、说明、分组）"""
    key: Permission
    label: str
    description: str
    group: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "key": self.key.value,
            "label": self.label,
            "description": self.description,
            "group": self.group,
        }


ALL_PERMISSIONS: List[PermissionDef] = [
    PermissionDef(Permission.ROOMS_VIEW, "View Rooms", "See room list, status, and availability", "Rooms"),
    PermissionDef(Permission.ROOMS_MANAGE, "Manage Rooms", "Edit room details, pricing, and status", "Rooms"),

    PermissionDef(Permission.GUESTS_VIEW, "View Guests", "See guest profiles and history", "Guests"),
    PermissionDef(Permission.GUESTS_MANAGE, "Manage Guests", "Edit guest information and records", "Guests"),

    PermissionDef(Permission.BOOKINGS_VIEW, "View Bookings", "See reservations list and calendar", "Bookings"),
    PermissionDef(Permission.BOOKINGS_CREATE, "Create Bookings", "Make new reservations and check-ins", "Bookings"),
    PermissionDef(Permission.BOOKINGS_MANAGE, "Manage Bookings", "Modify, cancel, or check out bookings", "Bookings"),

    PermissionDef(Permission.HOUSEKEEPING_VIEW, "View Housekeeping", "See tasks and cleaning status", "Housekeeping"),
    PermissionDef(Permission.HOUSEKEEPING_CREATE, "Create Tasks", "Add new housekeeping tasks", "Housekeeping"),
    PermissionDef(Permission.HOUSEKEEPING_MANAGE, "Manage Tasks", "Assign, reassign, and update all tasks", "Housekeeping"),

    PermissionDef(Permission.MAINTENANCE_VIEW, "View Maintenance", "See reported issues and progress", "Maintenance"),
    PermissionDef(Permission.MAINTENANCE_CREATE, "Report Issues", "Create new maintenance reports", "Maintenance"),
    PermissionDef(Permission.MAINTENANCE_MANAGE, "Manage Issues", "Assign, prioritize, and resolve issues", "Maintenance"),

    PermissionDef(Permission.INVENTORY_VIEW, "View Inventory", "See stock levels and transactions", "Inventory"),
    PermissionDef(Permission.INVENTORY_CREATE, "Add Items", "Add new inventory items and stock", "Inventory"),
    PermissionDef(Permission.INVENTORY_MANAGE, "Manage Inventory", "Adjust stock, write-offs, and suppliers", "Inventory"),

    PermissionDef(Permission.POS_VIEW, "View POS", "See POS items and transaction history", "Point of Sale"),
    PermissionDef(Permission.POS_CREATE, "Create Sales", "Process new sales and orders", "Point of Sale"),
    PermissionDef(Permission.POS_MANAGE, "Manage POS", "Edit items, void transactions, and settings", "Point of Sale"),

    PermissionDef(Permission.FINANCE_VIEW, "View Finance", "See financial reports and summaries", "Finance"),
    PermissionDef(Permission.FINANCE_CREATE, "Record Transactions", "Add expenses, income entries", "Finance"),
    PermissionDef(Permission.FINANCE_MANAGE, "Manage Finance", "Edit records, approve payments, salaries", "Finance"),

    PermissionDef(Permission.REPORTS_VIEW, "View Reports", "Access analytics and dashboards", "Reports"),
    PermissionDef(Permission.REPORTS_EXPORT, "Export Reports", "Download and export report data", "Reports"),

    PermissionDef(Permission.REFUNDS_VIEW, "View Refunds", "See refund requests and status", "Refunds"),
    PermissionDef(Permission.REFUNDS_CREATE, "Request Refunds", "Submit new refund requests", "Refunds"),
    PermissionDef(Permission.REFUNDS_APPROVE, "Approve Refunds", "Accept or reject refund requests", "Refunds"),

    PermissionDef(Permission.STAFF_VIEW, "View Staff", "See employee list and profiles", "Staff"),
    PermissionDef(Permission.STAFF_MANAGE, "Manage Staff", "Add, edit, and manage staff records", "Staff"),

    PermissionDef(Permission.SETTINGS_VIEW, "View Settings", "See system configuration", "Settings"),
    PermissionDef(Permission.SETTINGS_MANAGE, "Manage Settings", "Change system configuration", "Settings"),
]

PERMISSION_GROUPS: List[str] = list(dict.fromkeys(p.group for p in ALL_PERMISSIONS))

_GROUP_ICONS = {
    "Rooms": "🛏️",
    "Guests": "👤",
    "Bookings": "📅",
    "Housekeeping": "🧹",
    "Maintenance": "🔧",
    "Inventory": "📦",
    "Point of Sale": "🛒",
    "Finance": "💰",
    "Reports": "📊",
    "Refunds": "💳",
    "Staff": "👥",
    "Settings": "⚙️",
}


def list_permissions() -> List[PermissionDef]:
    """返回完整权限目录"""
    return list(ALL_PERMISSIONS)


def group_permissions(catalog: Optional[Iterable[PermissionDef]] = None) -> Dict[str, List[PermissionDef]]:
    """按功能分组（保持目录顺序），仅用于展示"""
    groups: Dict[str, List[PermissionDef]] = {}
    for perm in ALL_PERMISSIONS if catalog is None else catalog:
        groups.setdefault(perm.group, []).append(perm)
    return groups


def get_group_icon(group: str) -> str:
    return _GROUP_ICONS.get(group, "📋")


def get_permission_def(key: PermissionKey) -> PermissionDef:
    permission = parse_permission(key)
    return next(p for p in ALL_PERMISSIONS if p.key == permission)


def is_known_permission(key: PermissionKey) -> bool:
    try:
        Permission(permission_key(key))
    except ValueError:
        return False
    return True


def parse_permission(key: PermissionKey) -> Permission:
    """字符串 → Permission，未知键抛 UnknownPermissionError"""
    if isinstance(key, Permission):
        return key
    try:
        return Permission(permission_key(key))
    except ValueError:
        raise UnknownPermissionError([permission_key(key)])


def parse_permissions(keys: Iterable[PermissionKey]) -> List[Permission]:
    """校验一组权限键，去重并保持顺序；任何未知键都会导致整体失败"""
    result: List[Permission] = []
    unknown: List[str] = []
    for key in keys or []:
        if not is_known_permission(key):
            unknown.append(permission_key(key))
            continue
        permission = parse_permission(key)
        if permission not in result:
            result.append(permission)
    if unknown:
        raise UnknownPermissionError(unknown)
    return result
