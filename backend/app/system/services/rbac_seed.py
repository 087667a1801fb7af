"""
RBAC 种子数据 - 初始化内置角色
"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.security.permissions import Permission
from app.system.models.rbac import Role

logger = logging.getLogger(__name__)

P = Permission

SEED_ROLES = [
    {
        "name": "Administrator",
        "description": "Full access to every module",
        "permissions": [p.value for p in Permission],
        "is_system_role": True,
    },
    {
        "name": "Manager",
        "description": "Runs daily hotel operations",
        "permissions": [p.value for p in (
            P.ROOMS_VIEW, P.ROOMS_MANAGE, P.GUESTS_VIEW, P.GUESTS_MANAGE,
            P.BOOKINGS_VIEW, P.BOOKINGS_CREATE, P.BOOKINGS_MANAGE,
            P.HOUSEKEEPING_VIEW, P.HOUSEKEEPING_CREATE, P.HOUSEKEEPING_MANAGE,
            P.MAINTENANCE_VIEW, P.MAINTENANCE_CREATE, P.MAINTENANCE_MANAGE,
            P.INVENTORY_VIEW, P.INVENTORY_CREATE, P.INVENTORY_MANAGE,
            P.POS_VIEW, P.POS_CREATE, P.POS_MANAGE,
            P.FINANCE_VIEW, P.REPORTS_VIEW, P.REPORTS_EXPORT,
            P.REFUNDS_VIEW, P.REFUNDS_CREATE, P.REFUNDS_APPROVE,
            P.STAFF_VIEW, P.SETTINGS_VIEW,
        )],
        "is_system_role": True,
    },
    {
        "name": "Front Desk",
        "description": "Reservations, check-in and guest service",
        "permissions": [p.value for p in (
            P.ROOMS_VIEW, P.GUESTS_VIEW, P.GUESTS_MANAGE,
            P.BOOKINGS_VIEW, P.BOOKINGS_CREATE, P.BOOKINGS_MANAGE,
            P.HOUSEKEEPING_VIEW, P.MAINTENANCE_VIEW, P.MAINTENANCE_CREATE,
            P.POS_VIEW, P.POS_CREATE, P.REFUNDS_VIEW, P.REFUNDS_CREATE,
        )],
        "is_system_role": True,
    },
    {
        "name": "Housekeeping Supervisor",
        "description": "Cleaning tasks and room supplies",
        "permissions": [p.value for p in (
            P.ROOMS_VIEW, P.HOUSEKEEPING_VIEW, P.HOUSEKEEPING_CREATE, P.HOUSEKEEPING_MANAGE,
            P.INVENTORY_VIEW, P.MAINTENANCE_VIEW, P.MAINTENANCE_CREATE,
        )],
        "is_system_role": True,
    },
    {
        "name": "Maintenance",
        "description": "Reported issues and repairs",
        "permissions": [p.value for p in (
            P.ROOMS_VIEW, P.MAINTENANCE_VIEW, P.MAINTENANCE_CREATE, P.MAINTENANCE_MANAGE,
            P.INVENTORY_VIEW,
        )],
        "is_system_role": True,
    },
    {
        "name": "Accountant",
        "description": "Finance, refunds and reporting",
        "permissions": [p.value for p in (
            P.FINANCE_VIEW, P.FINANCE_CREATE, P.FINANCE_MANAGE,
            P.REPORTS_VIEW, P.REPORTS_EXPORT,
            P.REFUNDS_VIEW, P.REFUNDS_APPROVE, P.POS_VIEW, P.BOOKINGS_VIEW,
        )],
        "is_system_role": True,
    },
]


def seed_rbac_data(db: Session) -> dict:
    """Seed built-in roles. Idempotent - skips roles that already exist (name match ignores case).

    Returns dict with count of created items.
    """
    stats = {"roles": 0}

    for role_def in SEED_ROLES:
        existing = db.query(Role).filter(func.lower(Role.name) == role_def["name"].lower()).first()
        if not existing:
            db.add(Role(**role_def))
            stats["roles"] += 1

    if stats["roles"] > 0:
        db.commit()
        logger.info(f"Seeded {stats['roles']} built-in roles")
    return stats
