# Hotel entity tables
from app.models.ontology import (
    Staff, StaffSecret, PropertySettings, NotificationSettings, SystemPreferences,
    Guest, RoomType, Room, Booking, RoomSupply,
    HousekeepingStaff, HousekeepingTask, MaintenanceStaff, MaintenanceIssue,
    InventoryItem, POSItem, POSTransaction,
    RoomAssessment, GuestIssue, RefundRequest, BookingNotification, Review,
    FinanceTransaction, Expense, AuditLog,
)

__all__ = [
    'Staff', 'StaffSecret', 'PropertySettings', 'NotificationSettings', 'SystemPreferences',
    'Guest', 'RoomType', 'Room', 'Booking', 'RoomSupply',
    'HousekeepingStaff', 'HousekeepingTask', 'MaintenanceStaff', 'MaintenanceIssue',
    'InventoryItem', 'POSItem', 'POSTransaction',
    'RoomAssessment', 'GuestIssue', 'RefundRequest', 'BookingNotification', 'Review',
    'FinanceTransaction', 'Expense', 'AuditLog',
]
