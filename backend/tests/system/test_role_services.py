"""
角色管理 / 角色分配 / 种子数据 服务层测试
"""
from datetime import datetime, timedelta

import pytest

from app.security.permissions import Permission, UnknownPermissionError
from app.system.models.rbac import Role, UserRole
from app.system.services.rbac_seed import SEED_ROLES, seed_rbac_data
from app.system.services.rbac_service import PermissionResolver, RoleAssignmentService, RoleService


class TestRoleService:

    def test_create_role_normalizes_keys(self, db_session):
        role = RoleService(db_session).create_role(
            "Night Auditor", permissions=["finance.view", Permission.REPORTS_VIEW, "finance.view"]
        )
        assert role.permissions == ["finance.view", "reports.view"]
        assert role.is_system_role is False

    def test_create_role_collects_all_unknown_keys(self, db_session):
        with pytest.raises(UnknownPermissionError) as exc:
            RoleService(db_session).create_role("Broken", permissions=["rooms.veiw", "rooms.view", "*"])
        assert exc.value.keys == ["rooms.veiw", "*"]
        assert db_session.query(Role).count() == 0

    def test_unknown_permission_is_value_error(self):
        assert issubclass(UnknownPermissionError, ValueError)

    def test_empty_name(self, db_session):
        with pytest.raises(ValueError, match="不能为空"):
            RoleService(db_session).create_role("  ")

    def test_get_role_by_name_case_insensitive(self, db_session, front_desk_role):
        assert RoleService(db_session).get_role_by_name("front desk").id == front_desk_role.id

    def test_rename_to_existing_name(self, db_session, admin_role, front_desk_role):
        with pytest.raises(ValueError, match="已存在"):
            RoleService(db_session).update_role(front_desk_role.id, name="ADMINISTRATOR")

    def test_update_keeps_unspecified_fields(self, db_session, front_desk_role):
        role = RoleService(db_session).update_role(front_desk_role.id, description="Reception desk")
        assert role.description == "Reception desk"
        assert role.permissions == ["rooms.view", "bookings.view", "bookings.create"]

    def test_delete_role_with_inactive_history(self, db_session, front_desk_role, front_desk_user):
        RoleAssignmentService(db_session).revoke_role(front_desk_user.id, front_desk_role.id)
        RoleService(db_session).delete_role(front_desk_role.id)
        db_session.commit()
        assert db_session.query(Role).filter(Role.id == front_desk_role.id).first() is None
        assert db_session.query(UserRole).count() == 0

    def test_delete_missing_role(self, db_session):
        with pytest.raises(ValueError, match="不存在"):
            RoleService(db_session).delete_role("missing")


class TestRoleAssignmentService:

    def test_active_assignments_respect_window(self, db_session, no_role_user, front_desk_role):
        now = datetime(2026, 3, 1, 12, 0, 0)
        service = RoleAssignmentService(db_session)
        service.assign_role(no_role_user.id, front_desk_role.id,
                            valid_from=now - timedelta(days=1), valid_until=now + timedelta(days=1))

        assert len(service.get_active_assignments(no_role_user.id, at=now)) == 1
        assert service.get_active_assignments(no_role_user.id, at=now + timedelta(days=2)) == []

    def test_replace_user_role(self, db_session, front_desk_user, front_desk_role, staff_manager_role):
        service = RoleAssignmentService(db_session)
        service.replace_user_role(front_desk_user.id, staff_manager_role.id)
        db_session.commit()

        active = service.get_active_assignments(front_desk_user.id)
        assert [a.role_id for a in active] == [staff_manager_role.id]
        assert PermissionResolver(db_session).get_user_roles(front_desk_user.id) == ["HR"]

    def test_revoke_twice(self, db_session, front_desk_user, front_desk_role):
        service = RoleAssignmentService(db_session)
        service.revoke_role(front_desk_user.id, front_desk_role.id)
        with pytest.raises(ValueError):
            service.revoke_role(front_desk_user.id, front_desk_role.id)


class TestSeed:

    def test_seed_is_idempotent(self, db_session):
        assert seed_rbac_data(db_session) == {"roles": len(SEED_ROLES)}
        assert seed_rbac_data(db_session) == {"roles": 0}
        assert db_session.query(Role).count() == len(SEED_ROLES)

    def test_seed_roles_use_known_keys(self):
        known = {p.value for p in Permission}
        for role in SEED_ROLES:
            assert set(role["permissions"]) <= known, role["name"]

    def test_administrator_has_everything(self, db_session):
        seed_rbac_data(db_session)
        admin = RoleService(db_session).get_role_by_name("Administrator")
        assert admin.is_system_role is True
        assert len(admin.permissions) == 31

    def test_seed_skips_role_differing_only_in_case(self, db_session):
        """已存在小写的 administrator 时不再插入 Administrator"""
        RoleService(db_session).create_role("administrator", permissions=["rooms.view"])
        db_session.commit()

        assert seed_rbac_data(db_session) == {"roles": len(SEED_ROLES) - 1}
        matches = db_session.query(Role).filter(Role.name.in_(["administrator", "Administrator"])).all()
        assert [r.name for r in matches] == ["administrator"]
