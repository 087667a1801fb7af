"""
酒店业务实体表
这些表本身的 CRUD 不在本服务范围内，这里定义它们是为了备份/恢复：
外键关系决定了 app.system.backup_registry 中的插入/删除顺序。

主键统一为 UUID 字符串；user_id 一类字段指向认证用户，不建外键约束
（认证用户表不在备份范围内）。
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, Text, Boolean, Numeric, JSON
)
from app.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


# ============== 员工与设置 ==============

class Staff(Base):
    """员工档案"""
    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=True, index=True)  # 关联登录账号
    name = Column(String(100), nullable=False)
    email = Column(String(200))
    phone = Column(String(30))
    department = Column(String(50), nullable=False)
    employment_type = Column(String(30), default="full_time")
    status = Column(String(20), default="active")
    joined_date = Column(Date, nullable=False)
    contract_end_date = Column(Date)
    avatar_url = Column(String(500))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class StaffSecret(Base):
    """员工口令（前台切换操作员用）"""
    __tablename__ = "staff_secrets"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    secret_code = Column(String(100), nullable=False)
    description = Column(String(200))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PropertySettings(Base):
    """酒店基本信息"""
    __tablename__ = "property_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    address = Column(String(300))
    city = Column(String(100))
    country = Column(String(100))
    phone = Column(String(30))
    email = Column(String(200))
    website = Column(String(200))
    logo_url = Column(String(500))
    currency = Column(String(10), default="KES")
    timezone = Column(String(50))
    check_in_time = Column(String(10), default="14:00")
    check_out_time = Column(String(10), default="11:00")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class NotificationSettings(Base):
    """通知偏好"""
    __tablename__ = "notification_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=True, index=True)
    email_notifications = Column(Boolean, default=True)
    sms_notifications = Column(Boolean, default=False)
    booking_confirmations = Column(Boolean, default=True)
    payment_alerts = Column(Boolean, default=True)
    low_stock_alerts = Column(Boolean, default=True)
    maintenance_alerts = Column(Boolean, default=True)
    daily_reports = Column(Boolean, default=False)
    weekly_reports = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SystemPreferences(Base):
    """系统偏好"""
    __tablename__ = "system_preferences"

    id = Column(String(36), primary_key=True, default=new_id)
    language = Column(String(10), default="en")
    date_format = Column(String(20), default="YYYY-MM-DD")
    time_format = Column(String(10), default="24h")
    auto_backup = Column(Boolean, default=False)
    maintenance_mode = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============== 客人 / 房间 / 预订 ==============

class Guest(Base):
    """客人"""
    __tablename__ = "guests"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(200))
    id_number = Column(String(50))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class RoomType(Base):
    """房型"""
    __tablename__ = "room_types"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(50), nullable=False)
    description = Column(Text)
    base_price = Column(Numeric(10, 2), nullable=False)
    max_occupancy = Column(Integer, default=2)
    amenities = Column(JSON)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Room(Base):
    """房间"""
    __tablename__ = "rooms"

    id = Column(String(36), primary_key=True, default=new_id)
    number = Column(String(10), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    floor = Column(Integer, nullable=False)
    room_type_id = Column(String(36), ForeignKey("room_types.id"), nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    max_occupancy = Column(Integer, default=2)
    amenities = Column(JSON)
    occupancy_status = Column(String(20), default="vacant")
    cleaning_status = Column(String(20), default="clean")
    maintenance_status = Column(String(20), default="operational")
    # 与 bookings 互相引用，这一侧不建外键
    current_booking_id = Column(String(36))
    current_guest_id = Column(String(36))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Booking(Base):
    """预订"""
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_id)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    room_type = Column(String(50), nullable=False)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guests_count = Column(Integer, default=1)
    status = Column(String(20), default="confirmed")
    total_amount = Column(Numeric(10, 2), default=0)
    paid_amount = Column(Numeric(10, 2), default=0)
    payment_method = Column(String(20))
    special_requests = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class RoomSupply(Base):
    """客房补给记录"""
    __tablename__ = "room_supplies"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    item_name = Column(String(100), nullable=False)
    quantity = Column(Integer, default=1)
    unit_cost = Column(Numeric(10, 2), default=0)
    total_cost = Column(Numeric(10, 2), default=0)
    is_complimentary = Column(Boolean, default=False)
    restocked_by = Column(String(36))
    restocked_at = Column(DateTime, default=datetime.utcnow)


# ============== 客房清洁 / 维修 ==============

class HousekeepingStaff(Base):
    """客房清洁人员"""
    __tablename__ = "housekeeping_staff"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    name = Column(String(100), nullable=False)
    specialty = Column(JSON)
    is_available = Column(Boolean, default=True)
    tasks_assigned = Column(Integer, default=0)
    tasks_completed = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class HousekeepingTask(Base):
    """清洁任务"""
    __tablename__ = "housekeeping_tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    room_id = Column(String(36), ForeignKey("rooms.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    room_name = Column(String(100))
    task_type = Column(String(30), nullable=False)
    status = Column(String(20), default="pending")
    priority = Column(String(20), default="normal")
    assigned_to = Column(String(36), ForeignKey("housekeeping_staff.id"), nullable=True)
    assigned_to_name = Column(String(100))
    estimated_minutes = Column(Integer)
    amenities = Column(JSON)
    actual_added = Column(JSON)
    actual_added_notes = Column(Text)
    restock_notes = Column(Text)
    notes = Column(Text)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MaintenanceStaff(Base):
    """维修人员"""
    __tablename__ = "maintenance_staff"

    id = Column(String(36), primary_key=True, default=new_id)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    name = Column(String(100), nullable=False)
    specialty = Column(JSON)
    is_available = Column(Boolean, default=True)
    issues_assigned = Column(Integer, default=0)
    issues_resolved = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MaintenanceIssue(Base):
    """维修工单"""
    __tablename__ = "maintenance_issues"

    id = Column(String(36), primary_key=True, default=new_id)
    room_id = Column(String(36), ForeignKey("rooms.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    room_name = Column(String(100))
    title = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(30), nullable=False)
    priority = Column(String(20), default="medium")
    status = Column(String(20), default="open")
    assigned_to = Column(String(36), ForeignKey("maintenance_staff.id"), nullable=True)
    assigned_to_name = Column(String(100))
    reported_by = Column(String(36))
    reported_at = Column(DateTime, default=datetime.utcnow)
    resolved_at = Column(DateTime)
    resolution_notes = Column(Text)
    cost = Column(Numeric(10, 2))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============== 库存 / POS ==============

class InventoryItem(Base):
    """库存物品"""
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    sku = Column(String(50))
    category = Column(String(50), nullable=False)
    unit = Column(String(20), nullable=False)
    unit_cost = Column(Numeric(10, 2), default=0)
    selling_price = Column(Numeric(10, 2))
    current_stock = Column(Integer, default=0)
    opening_stock = Column(Integer)
    purchases_in = Column(Integer)
    stock_out = Column(Integer)
    min_stock = Column(Integer, default=0)
    max_stock = Column(Integer, default=0)
    supplier = Column(String(100))
    last_restocked = Column(DateTime)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class POSItem(Base):
    """POS 商品"""
    __tablename__ = "pos_items"

    id = Column(String(36), primary_key=True, default=new_id)
    inventory_item_id = Column(String(36), ForeignKey("inventory_items.id"), nullable=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    category = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    cost = Column(Numeric(10, 2), default=0)
    stock_quantity = Column(Integer)
    is_available = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class POSTransaction(Base):
    """POS 交易"""
    __tablename__ = "pos_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=True)
    guest_name = Column(String(100))
    room_number = Column(String(10))
    staff_id = Column(String(36))
    staff_name = Column(String(100))
    items = Column(JSON, nullable=False)
    subtotal = Column(Numeric(10, 2), default=0)
    tax = Column(Numeric(10, 2), default=0)
    total = Column(Numeric(10, 2), default=0)
    payment_method = Column(String(20), nullable=False)
    status = Column(String(20), default="completed")
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============== 退房检查 / 客诉 / 退款 ==============

class RoomAssessment(Base):
    """退房查房记录"""
    __tablename__ = "room_assessments"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    overall_condition = Column(String(20), nullable=False)
    damages_found = Column(Boolean, default=False)
    damage_description = Column(Text)
    damage_cost = Column(Numeric(10, 2))
    missing_items = Column(JSON)
    extra_cleaning_required = Column(Boolean, default=False)
    photos = Column(JSON)
    notes = Column(Text)
    assessed_by = Column(String(36))
    assessment_date = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)


class GuestIssue(Base):
    """客人问题记录"""
    __tablename__ = "guest_issues"

    id = Column(String(36), primary_key=True, default=new_id)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=False)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    issue_type = Column(String(30), nullable=False)
    severity = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    cost_incurred = Column(Numeric(10, 2))
    resolved = Column(Boolean, default=False)
    notes = Column(Text)
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)


class RefundRequest(Base):
    """退款申请"""
    __tablename__ = "refund_requests"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=True)
    room_assessment_id = Column(String(36), ForeignKey("room_assessments.id"), nullable=True)
    room_number = Column(String(10), nullable=False)
    amount_paid = Column(Numeric(10, 2), nullable=False)
    deductions = Column(Numeric(10, 2), default=0)
    refund_amount = Column(Numeric(10, 2), nullable=False)
    items_utilized = Column(JSON)
    reason = Column(Text, nullable=False)
    status = Column(String(20), default="pending")
    rejection_reason = Column(Text)
    requested_by = Column(String(36))
    approved_by = Column(String(36))
    approved_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BookingNotification(Base):
    """预订通知"""
    __tablename__ = "booking_notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Review(Base):
    """住客评价"""
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=True)
    guest_name = Column(String(100), nullable=False)
    guest_phone = Column(String(30), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    is_approved = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============== 财务 / 审计 ==============

class FinanceTransaction(Base):
    """财务流水"""
    __tablename__ = "finance_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    type = Column(String(20), nullable=False)  # income, expense
    category = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    payment_method = Column(String(20))
    payment_status = Column(String(20), default="completed")
    reference = Column(String(100))
    room_number = Column(String(10))
    vendor = Column(String(100))
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Expense(Base):
    """费用支出"""
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=new_id)
    date = Column(Date, nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    supplier = Column(String(100))
    total_cost = Column(Numeric(12, 2), nullable=False)
    etims_amount = Column(Numeric(12, 2))
    non_etims_amount = Column(Numeric(12, 2))
    payment_method = Column(String(20), nullable=False)
    reference = Column(String(100))
    status = Column(String(20), default="pending")
    approved_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AuditLog(Base):
    """审计日志"""
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), nullable=False)
    old_values = Column(JSON)
    new_values = Column(JSON)
    metadata_ = Column("metadata", JSON)  # metadata 是 declarative 保留名
    ip_address = Column(String(50))
    created_at = Column(DateTime, default=datetime.utcnow)
