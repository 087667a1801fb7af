"""
前端页面路由 → 访问要求

路由守卫（/auth/guard）和侧边栏导航（/auth/navigation）共用这张表。
未登记的路由按"仅需登录"处理。
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.security.permissions import Permission
from core.security.context import AuthContext
from core.security.guard import RouteRequirement


@dataclass(frozen=True)
class NavItem:
    """侧边栏导航项"""
    path: str
    title: str
    requirement: RouteRequirement

    def to_dict(self) -> dict:
        return {"path": self.path, "title": self.title}


LOGIN_ONLY = RouteRequirement()
PUBLIC = RouteRequirement(public=True)

ROUTE_REQUIREMENTS: Dict[str, RouteRequirement] = {
    "/": PUBLIC,
    "/auth": PUBLIC,
    "/dashboard": LOGIN_ONLY,
    "/rooms": RouteRequirement(permission=Permission.ROOMS_VIEW),
    "/reservations": RouteRequirement(permission=Permission.BOOKINGS_VIEW),
    "/guests": RouteRequirement(permission=Permission.GUESTS_VIEW),
    "/pos": RouteRequirement(permission=Permission.POS_VIEW),
    "/housekeeping": RouteRequirement(permission=Permission.HOUSEKEEPING_VIEW),
    "/maintenance": RouteRequirement(permission=Permission.MAINTENANCE_VIEW),
    "/inventory": RouteRequirement(permission=Permission.INVENTORY_VIEW),
    "/reports": RouteRequirement(permission=Permission.REPORTS_VIEW),
    "/finance": RouteRequirement(permission=Permission.FINANCE_VIEW),
    "/refunds": RouteRequirement(permission=Permission.REFUNDS_VIEW),
    "/reviews": LOGIN_ONLY,
    "/settings": RouteRequirement(permission=Permission.SETTINGS_VIEW),
    "/staff-admin": RouteRequirement(permission=Permission.STAFF_MANAGE),
    "/my-profile": LOGIN_ONLY,
    "/reset-password": LOGIN_ONLY,
}

NAVIGATION: List[NavItem] = [
    NavItem("/dashboard", "Dashboard", ROUTE_REQUIREMENTS["/dashboard"]),
    NavItem("/rooms", "Rooms", ROUTE_REQUIREMENTS["/rooms"]),
    NavItem("/reservations", "Reservations", ROUTE_REQUIREMENTS["/reservations"]),
    NavItem("/guests", "Guests", ROUTE_REQUIREMENTS["/guests"]),
    NavItem("/pos", "Point of Sale", ROUTE_REQUIREMENTS["/pos"]),
    NavItem("/housekeeping", "Housekeeping", ROUTE_REQUIREMENTS["/housekeeping"]),
    NavItem("/maintenance", "Maintenance", ROUTE_REQUIREMENTS["/maintenance"]),
    NavItem("/inventory", "Inventory", ROUTE_REQUIREMENTS["/inventory"]),
    NavItem("/reports", "Reports", ROUTE_REQUIREMENTS["/reports"]),
    NavItem("/finance", "Finance", ROUTE_REQUIREMENTS["/finance"]),
    NavItem("/refunds", "Refunds", ROUTE_REQUIREMENTS["/refunds"]),
    NavItem("/reviews", "Reviews", ROUTE_REQUIREMENTS["/reviews"]),
    NavItem("/settings", "Settings", ROUTE_REQUIREMENTS["/settings"]),
    NavItem("/staff-admin", "Staff Admin", ROUTE_REQUIREMENTS["/staff-admin"]),
]


def _normalize(path: str) -> str:
    path = (path or "/").split("?", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def requirement_for(path: str) -> Optional[RouteRequirement]:
    """查找路由要求；子路径继承最近的已登记前缀（/rooms/101 → /rooms）"""
    path = _normalize(path)
    if path in ROUTE_REQUIREMENTS:
        return ROUTE_REQUIREMENTS[path]
    while "/" in path.strip("/"):
        path = path.rsplit("/", 1)[0]
        if path in ROUTE_REQUIREMENTS:
            return ROUTE_REQUIREMENTS[path]
    return None


def _visible(ctx: AuthContext, requirement: RouteRequirement) -> bool:
    if requirement.permission is not None and not ctx.has_permission(requirement.permission):
        return False
    if requirement.role is not None and not ctx.has_role(requirement.role):
        return False
    return True


def navigation_for(ctx: AuthContext) -> List[NavItem]:
    """当前上下文可见的导航项；未登录或加载中时为空"""
    if not ctx.is_authenticated() or ctx.is_loading:
        return []
    return [item for item in NAVIGATION if _visible(ctx, item.requirement)]
