"""
用户服务测试 - 认证、开通、改密
"""
import pytest

from app.security.auth import decode_token
from app.system.services.user_service import UserService


class TestAuthenticate:

    def test_returns_token_and_session(self, db_session, front_desk_user):
        result = UserService(db_session).authenticate("front@hotel.test", "123456")
        assert decode_token(result["access_token"])["sub"] == front_desk_user.id
        assert result["roles"] == ["Front Desk"]
        assert result["permissions"] == ["bookings.create", "bookings.view", "rooms.view"]

    def test_records_last_login(self, db_session, front_desk_user):
        UserService(db_session).authenticate("front@hotel.test", "123456")
        db_session.refresh(front_desk_user)
        assert front_desk_user.last_login_at is not None

    def test_bad_password(self, db_session, front_desk_user):
        assert UserService(db_session).authenticate("front@hotel.test", "bad") is None

    def test_inactive_checked_after_password(self, db_session, front_desk_user):
        front_desk_user.is_active = False
        db_session.commit()
        service = UserService(db_session)
        assert service.authenticate("front@hotel.test", "bad") is None
        with pytest.raises(ValueError, match="账号已停用"):
            service.authenticate("front@hotel.test", "123456")


class TestProvisioning:

    def test_requires_all_fields(self, db_session, front_desk_role):
        with pytest.raises(ValueError, match="均为必填项"):
            UserService(db_session).create_user("", "x@hotel.test", "123456", front_desk_role.id)

    def test_created_user_gets_role_and_reset_flag(self, db_session, admin_user, front_desk_role):
        service = UserService(db_session)
        user = service.create_user("赵六", "zhao@hotel.test", "init-pass", front_desk_role.id,
                                   created_by=admin_user.id)
        assert service.get_profile(user.id).password_reset_required is True
        result = service.authenticate("zhao@hotel.test", "init-pass")
        assert result["password_reset_required"] is True
        assert result["roles"] == ["Front Desk"]


class TestChangePassword:

    def test_same_password_rejected(self, db_session, front_desk_user):
        with pytest.raises(ValueError, match="不能与原密码相同"):
            UserService(db_session).change_password(front_desk_user.id, "123456", "123456")

    def test_creates_missing_profile(self, db_session, front_desk_user):
        service = UserService(db_session)
        db_session.delete(service.get_profile(front_desk_user.id))
        db_session.commit()

        service.change_password(front_desk_user.id, "123456", "654321")
        assert service.get_profile(front_desk_user.id).password_reset_required is False
