"""
认证用户 + 用户资料

- AuthUser: 登录身份（邮箱 + 密码哈希），不在业务备份范围内
- Profile: 用户资料，password_reset_required 标记强制改密
"""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime
from app.database import Base
from app.models.ontology import new_id


class AuthUser(Base):
    """认证用户"""
    __tablename__ = "auth_users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(200), unique=True, nullable=False, index=True)
    password_hash = Column(String(200), nullable=False)
    full_name = Column(String(100))
    is_active = Column(Boolean, default=True)
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Profile(Base):
    """用户资料"""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), unique=True, nullable=False, index=True)
    full_name = Column(String(100))
    email = Column(String(200))
    avatar_url = Column(String(500))
    password_reset_required = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
