"""
酒店备份集合注册表 - 导出/恢复/测试共用的唯一数据源

插入顺序：被引用的表在前；删除顺序由注册表取反得到。
新增业务表时只需在这里按外键依赖插入到合适位置。
"""
from core.backup.registry import EntityCollectionRegistry

HOTEL_BACKUP_TABLES = [
    # 身份与权限
    "profiles",
    "roles",
    "user_roles",
    # 员工与设置
    "staff",
    "staff_secrets",
    "property_settings",
    "notification_settings",
    "system_preferences",
    # 客人 / 房间 / 预订
    "guests",
    "room_types",
    "rooms",
    "bookings",
    "room_supplies",
    # 客房清洁 / 维修
    "housekeeping_staff",
    "housekeeping_tasks",
    "maintenance_staff",
    "maintenance_issues",
    # 库存 / POS
    "inventory_items",
    "pos_items",
    "pos_transactions",
    # 客诉 / 退款 / 评价
    "room_assessments",
    "guest_issues",
    "refund_requests",
    "booking_notifications",
    "reviews",
    # 财务 / 审计
    "finance_transactions",
    "expenses",
    "audit_logs",
]

HOTEL_BACKUP_REGISTRY = EntityCollectionRegistry(HOTEL_BACKUP_TABLES)
