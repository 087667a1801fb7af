"""
用户开通 API 测试
"""
from datetime import date

import pytest

from app.models.ontology import Staff
from app.system.models.rbac import UserRole
from app.system.models.user import AuthUser, Profile


class TestCreateUser:
    """开通用户"""

    def test_create_user(self, client, db_session, admin_user, admin_headers, front_desk_role):
        response = client.post("/system/users", headers=admin_headers, json={
            "name": "王五", "email": "wangwu@grandhotel.cn",
            "password": "init-pass", "role_id": front_desk_role.id,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "wangwu@grandhotel.cn"
        assert data["full_name"] == "王五"

        profile = db_session.query(Profile).filter(Profile.user_id == data["id"]).one()
        assert profile.password_reset_required is True
        assignment = db_session.query(UserRole).filter(UserRole.user_id == data["id"]).one()
        assert assignment.role_id == front_desk_role.id
        assert assignment.assigned_by == admin_user.id

    def test_new_user_must_change_password(self, client, admin_headers, front_desk_role):
        client.post("/system/users", headers=admin_headers, json={
            "name": "王五", "email": "wangwu@grandhotel.cn",
            "password": "init-pass", "role_id": front_desk_role.id,
        })
        login = client.post("/auth/login", json={"email": "wangwu@grandhotel.cn", "password": "init-pass"})
        assert login.json()["password_reset_required"] is True

        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        guard = client.get("/auth/guard", params={"path": "/rooms"}, headers=headers).json()
        assert guard["state"] == "password_reset_required"

    def test_duplicate_email(self, client, admin_headers, make_user, front_desk_role):
        make_user("front@grandhotel.cn")
        response = client.post("/system/users", headers=admin_headers, json={
            "name": "重复", "email": "FRONT@grandhotel.cn",
            "password": "init-pass", "role_id": front_desk_role.id,
        })
        assert response.status_code == 400
        assert "已被注册" in response.json()["detail"]

    def test_unknown_role(self, client, db_session, admin_headers):
        response = client.post("/system/users", headers=admin_headers, json={
            "name": "王五", "email": "wangwu@grandhotel.cn",
            "password": "init-pass", "role_id": "missing",
        })
        assert response.status_code == 400
        assert db_session.query(AuthUser).filter(AuthUser.email == "wangwu@grandhotel.cn").first() is None

    def test_invalid_payload(self, client, admin_headers, front_desk_role):
        response = client.post("/system/users", headers=admin_headers, json={
            "name": "王五", "email": "not-an-email",
            "password": "123", "role_id": front_desk_role.id,
        })
        assert response.status_code == 422

    @pytest.mark.parametrize("email", ["a@b..c", "a@.b.c", "a@b.c.", "<x>@y.z", "a b@grandhotel.cn"])
    def test_malformed_email_rejected(self, client, db_session, admin_user, admin_headers,
                                      front_desk_role, email):
        response = client.post("/system/users", headers=admin_headers, json={
            "name": "王五", "email": email,
            "password": "init-pass", "role_id": front_desk_role.id,
        })
        assert response.status_code == 422
        assert db_session.query(AuthUser).count() == 1

    def test_forbidden_for_front_desk(self, client, front_desk_headers, front_desk_role):
        response = client.post("/system/users", headers=front_desk_headers, json={
            "name": "王五", "email": "wangwu@grandhotel.cn",
            "password": "init-pass", "role_id": front_desk_role.id,
        })
        assert response.status_code == 403


class TestUpdateUser:
    """更新用户"""

    def test_update_profile_fields(self, client, db_session, admin_headers, front_desk_user):
        response = client.put(f"/system/users/{front_desk_user.id}", headers=admin_headers, json={
            "full_name": "前台小李", "email": "li@grandhotel.cn",
        })
        assert response.status_code == 200
        assert response.json()["email"] == "li@grandhotel.cn"

        db_session.expire_all()
        profile = db_session.query(Profile).filter(Profile.user_id == front_desk_user.id).one()
        assert profile.full_name == "前台小李"
        assert profile.email == "li@grandhotel.cn"

    def test_replace_role(self, client, db_session, admin_headers, front_desk_user,
                          front_desk_role, staff_manager_role, front_desk_headers):
        response = client.put(f"/system/users/{front_desk_user.id}", headers=admin_headers,
                              json={"role_id": staff_manager_role.id})
        assert response.status_code == 200

        me = client.get("/auth/me", headers=front_desk_headers).json()
        assert me["roles"] == ["HR"]
        assert "rooms.view" not in me["permissions"]

        db_session.expire_all()
        old = db_session.query(UserRole).filter(
            UserRole.user_id == front_desk_user.id, UserRole.role_id == front_desk_role.id
        ).one()
        assert old.is_active is False

    def test_link_staff(self, client, db_session, admin_headers, front_desk_user):
        db_session.add_all([
            Staff(id="s-1", name="小王", department="front_office", joined_date=date(2025, 1, 1),
                  user_id=front_desk_user.id),
            Staff(id="s-2", name="小王", department="front_office", joined_date=date(2025, 6, 1)),
        ])
        db_session.commit()

        response = client.put(f"/system/users/{front_desk_user.id}", headers=admin_headers,
                              json={"staff_id": "s-2"})
        assert response.status_code == 200

        db_session.expire_all()
        assert db_session.query(Staff).filter(Staff.id == "s-2").one().user_id == front_desk_user.id
        assert db_session.query(Staff).filter(Staff.id == "s-1").one().user_id is None

    def test_unknown_staff(self, client, admin_headers, front_desk_user):
        response = client.put(f"/system/users/{front_desk_user.id}", headers=admin_headers,
                              json={"staff_id": "missing"})
        assert response.status_code == 400

    def test_email_taken(self, client, admin_headers, make_user, front_desk_user):
        make_user("manager@grandhotel.cn")
        response = client.put(f"/system/users/{front_desk_user.id}", headers=admin_headers,
                              json={"email": "manager@grandhotel.cn"})
        assert response.status_code == 400

    def test_update_rejects_malformed_email(self, client, admin_headers, front_desk_user):
        response = client.put(f"/system/users/{front_desk_user.id}", headers=admin_headers,
                              json={"email": "li@grandhotel..cn"})
        assert response.status_code == 422

    def test_missing_user(self, client, admin_headers):
        response = client.put("/system/users/missing", headers=admin_headers, json={"full_name": "x"})
        assert response.status_code == 404
