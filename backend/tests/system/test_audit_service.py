"""
审计日志服务测试 - 写入、查询，以及角色 / 用户操作的审计记录
"""
from datetime import datetime, timedelta

import pytest

from app.models.ontology import AuditLog
from app.system.services.audit_service import AuditService
from app.system.services.rbac_service import RoleAssignmentService, RoleService
from app.system.services.user_service import UserService


def _actions(db_session, **filters):
    return [log.action for log in AuditService(db_session).get_logs(**filters)]


@pytest.fixture
def seeded_logs(db_session):
    now = datetime.utcnow()
    logs = [
        AuditLog(action="role_created", entity_type="role", entity_id="r-1",
                 created_at=now - timedelta(hours=2)),
        AuditLog(action="role_assigned", entity_type="user_role", entity_id="u-1",
                 created_at=now - timedelta(hours=1)),
        AuditLog(action="role_updated", entity_type="role", entity_id="r-1",
                 created_at=now - timedelta(minutes=5)),
        AuditLog(action="role_created", entity_type="role", entity_id="r-2",
                 created_at=now),
    ]
    db_session.add_all(logs)
    db_session.commit()
    return logs


class TestCreateLog:

    def test_creates_entry(self, db_session):
        log = AuditService(db_session).create_log(
            "role_created", "role", "r-1", user_id="u-1",
            new_values={"name": "Night Auditor"},
        )
        db_session.commit()
        assert log.id is not None
        assert log.created_at is not None
        assert log.new_values == {"name": "Night Auditor"}
        assert log.old_values is None
        assert log.metadata_ == {}


class TestGetLogs:

    def test_newest_first(self, db_session, seeded_logs):
        assert _actions(db_session) == ["role_created", "role_updated", "role_assigned", "role_created"]

    def test_filter_by_entity(self, db_session, seeded_logs):
        assert _actions(db_session, entity_type="role", entity_id="r-1") == ["role_updated", "role_created"]
        assert _actions(db_session, entity_type="user_role") == ["role_assigned"]

    def test_filter_by_action(self, db_session, seeded_logs):
        assert len(AuditService(db_session).get_logs(action="role_created")) == 2

    def test_default_limit(self, db_session):
        db_session.add_all([
            AuditLog(action="role_updated", entity_type="role", entity_id=f"r-{i}")
            for i in range(105)
        ])
        db_session.commit()
        assert len(AuditService(db_session).get_logs()) == 100


class TestRoleAudit:
    """角色管理与分配都会留下审计记录"""

    def test_role_lifecycle(self, db_session, admin_user):
        service = RoleService(db_session)
        role = service.create_role("Night Auditor", permissions=["finance.view"],
                                   performed_by=admin_user.id)
        service.update_role(role.id, performed_by=admin_user.id, name="Night Audit")
        service.set_role_permissions(role.id, ["reports.view"], performed_by=admin_user.id)
        service.delete_role(role.id, performed_by=admin_user.id)
        db_session.commit()

        logs = AuditService(db_session).get_logs(entity_type="role", entity_id=role.id)
        assert sorted(log.action for log in logs) == [
            "role_created", "role_deleted", "role_updated", "role_updated",
        ]
        assert all(log.user_id == admin_user.id for log in logs)

        deleted = next(log for log in logs if log.action == "role_deleted")
        assert deleted.old_values["name"] == "Night Audit"
        assert deleted.old_values["permissions"] == ["reports.view"]

    def test_update_records_old_and_new(self, db_session, front_desk_role):
        RoleService(db_session).update_role(front_desk_role.id, name="Reception")
        db_session.commit()

        log = AuditService(db_session).get_logs(entity_id=front_desk_role.id)[0]
        assert log.old_values["name"] == "Front Desk"
        assert log.new_values["name"] == "Reception"

    def test_assign_and_revoke(self, db_session, admin_user, no_role_user, front_desk_role):
        service = RoleAssignmentService(db_session)
        service.assign_role(no_role_user.id, front_desk_role.id, assigned_by=admin_user.id)
        service.revoke_role(no_role_user.id, front_desk_role.id, revoked_by=admin_user.id)
        db_session.commit()

        logs = AuditService(db_session).get_logs(entity_type="user_role", entity_id=no_role_user.id)
        assert sorted(log.action for log in logs) == ["role_assigned", "role_revoked"]
        revoked = next(log for log in logs if log.action == "role_revoked")
        assert revoked.old_values == {"role_id": front_desk_role.id, "role_name": "Front Desk"}

    def test_failed_revoke_not_logged(self, db_session, no_role_user, front_desk_role):
        with pytest.raises(ValueError):
            RoleAssignmentService(db_session).revoke_role(no_role_user.id, front_desk_role.id)
        assert AuditService(db_session).get_logs() == []


class TestUserAudit:

    def test_provisioning_logged(self, db_session, admin_user, front_desk_role):
        user = UserService(db_session).create_user("赵六", "zhao@grandhotel.cn", "init-pass",
                                                   front_desk_role.id, created_by=admin_user.id)

        created = AuditService(db_session).get_logs(entity_type="user", entity_id=user.id)
        assert [log.action for log in created] == ["user_created"]
        assert created[0].user_id == admin_user.id
        assert created[0].new_values == {
            "email": "zhao@grandhotel.cn", "full_name": "赵六", "role_id": front_desk_role.id,
        }
        assert _actions(db_session, entity_type="user_role", entity_id=user.id) == ["role_assigned"]

    def test_update_logged(self, db_session, admin_user, front_desk_user):
        UserService(db_session).update_user(front_desk_user.id, full_name="前台小李",
                                            updated_by=admin_user.id)

        log = AuditService(db_session).get_logs(entity_type="user", entity_id=front_desk_user.id)[0]
        assert log.action == "user_updated"
        assert log.old_values == {"email": "front@hotel.test", "full_name": "前台小王"}
        assert log.new_values == {"email": "front@hotel.test", "full_name": "前台小李"}
