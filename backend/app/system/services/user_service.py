"""
用户服务 - 登录认证、用户开通、资料更新、修改密码

新开通的用户带 password_reset_required 标记，首次登录后必须先改密。
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.ontology import Staff
from app.security.auth import get_password_hash, verify_password, create_access_token, build_auth_context
from app.system.models.rbac import Role
from app.system.models.user import AuthUser, Profile
from app.system.services.audit_service import AuditService
from app.system.services.rbac_service import RoleAssignmentService

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[AuthUser]:
        return self.db.query(AuthUser).filter(AuthUser.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[AuthUser]:
        return self.db.query(AuthUser).filter(
            func.lower(AuthUser.email) == (email or "").strip().lower()
        ).first()

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.user_id == user_id).first()

    def _upsert_profile(self, user: AuthUser, **fields) -> Profile:
        profile = self.get_profile(user.id)
        if profile is None:
            profile = Profile(user_id=user.id, email=user.email, full_name=user.full_name)
            self.db.add(profile)
        for key, value in fields.items():
            setattr(profile, key, value)
        return profile

    def authenticate(self, email: str, password: str) -> Optional[dict]:
        """认证登录，返回 token 及会话的角色/权限"""
        user = self.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        if not user.is_active:
            raise ValueError("账号已停用")

        user.last_login_at = datetime.utcnow()
        self.db.commit()

        ctx = build_auth_context(self.db, user)
        token = create_access_token(user.id, user.email)
        return {
            'access_token': token,
            'token_type': 'bearer',
            'user': {
                'id': user.id,
                'email': user.email,
                'full_name': user.full_name,
            },
            'roles': list(ctx.roles),
            'permissions': sorted(ctx.permissions),
            'password_reset_required': ctx.password_reset_required,
        }

    def create_user(self, name: str, email: str, password: str, role_id: str,
                    created_by: Optional[str] = None) -> AuthUser:
        """开通用户：认证账号 + 资料（需改密）+ 一个有效角色"""
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password or not role_id:
            raise ValueError("姓名、邮箱、密码和角色均为必填项")

        if self.get_user_by_email(email):
            raise ValueError(f"邮箱 '{email}' 已被注册")

        role = self.db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise ValueError(f"角色 ID {role_id} 不存在")

        user = AuthUser(
            email=email,
            password_hash=get_password_hash(password),
            full_name=name,
        )
        self.db.add(user)
        self.db.flush()

        self._upsert_profile(user, full_name=name, email=email, password_reset_required=True)
        RoleAssignmentService(self.db).assign_role(user.id, role.id, assigned_by=created_by)
        AuditService(self.db).create_log(
            "user_created", "user", user.id, user_id=created_by,
            new_values={"email": email, "full_name": name, "role_id": role.id},
        )

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User provisioned: {email} with role {role.name} by {created_by}")
        return user

    def update_user(self, user_id: str, full_name: Optional[str] = None,
                    email: Optional[str] = None, role_id: Optional[str] = None,
                    staff_id: Optional[str] = None,
                    updated_by: Optional[str] = None) -> AuthUser:
        """更新资料、替换角色（单角色）、关联员工档案"""
        user = self.get_user(user_id)
        if not user:
            raise ValueError("用户不存在")
        old_values = {"email": user.email, "full_name": user.full_name}

        if email is not None:
            email = email.strip()
            existing = self.get_user_by_email(email)
            if existing and existing.id != user.id:
                raise ValueError(f"邮箱 '{email}' 已被注册")
            user.email = email
        if full_name is not None:
            user.full_name = full_name.strip()

        self._upsert_profile(user, full_name=user.full_name, email=user.email)

        if role_id is not None:
            RoleAssignmentService(self.db).replace_user_role(user.id, role_id, assigned_by=updated_by)

        if staff_id is not None:
            staff = self.db.query(Staff).filter(Staff.id == staff_id).first()
            if not staff:
                raise ValueError(f"员工档案 {staff_id} 不存在")
            self.db.query(Staff).filter(Staff.user_id == user.id, Staff.id != staff_id).update(
                {Staff.user_id: None}, synchronize_session="fetch"
            )
            staff.user_id = user.id

        new_values = {"email": user.email, "full_name": user.full_name}
        if role_id is not None:
            new_values["role_id"] = role_id
        if staff_id is not None:
            new_values["staff_id"] = staff_id
        AuditService(self.db).create_log(
            "user_updated", "user", user.id, user_id=updated_by,
            old_values=old_values, new_values=new_values,
        )

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User updated: {user.email} by {updated_by}")
        return user

    def change_password(self, user_id: str, old_password: str, new_password: str) -> bool:
        """修改密码（本人操作），同时清除强制改密标记"""
        user = self.get_user(user_id)
        if not user:
            raise ValueError("用户不存在")

        if not verify_password(old_password, user.password_hash):
            raise ValueError("原密码错误")

        if old_password == new_password:
            raise ValueError("新密码不能与原密码相同")

        user.password_hash = get_password_hash(new_password)
        self._upsert_profile(user, password_reset_required=False)
        self.db.commit()
        logger.info(f"Password changed for user {user.email}")
        return True
