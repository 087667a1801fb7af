"""
RBAC ORM 模型 - 角色 + 用户角色分配

- Role.permissions: 权限键的有序列表（JSON），键必须来自权限目录
- UserRole: 带有效期的分配关系；撤销只置 is_active=False，不物理删除
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, Text, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.ontology import new_id


class Role(Base):
    """角色表"""
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text)
    permissions = Column(JSON, nullable=False, default=list)
    is_system_role = Column(Boolean, default=False)  # 内置角色，不可删除
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = relationship("UserRole", back_populates="role")

    def __repr__(self):
        return f"<Role(name={self.name!r}, permissions={len(self.permissions or [])})>"


class UserRole(Base):
    """用户-角色分配"""
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=False, index=True)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=False)
    is_active = Column(Boolean, default=True)
    valid_from = Column(DateTime, default=datetime.utcnow)
    valid_until = Column(DateTime, nullable=True)  # 为空表示长期有效
    assigned_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    role = relationship("Role", back_populates="assignments")

    def is_effective(self, at: datetime) -> bool:
        """在时间点 at 是否生效"""
        if not self.is_active:
            return False
        if self.valid_from is not None and self.valid_from > at:
            return False
        if self.valid_until is not None and self.valid_until <= at:
            return False
        return True
