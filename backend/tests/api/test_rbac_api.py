"""
RBAC API 测试 - 权限目录、角色管理、用户角色分配
"""
from app.system.models.rbac import Role, UserRole


class TestPermissionAPI:
    """权限目录"""

    def test_list_permissions(self, client, admin_headers):
        response = client.get("/system/permissions", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 31
        assert data[0] == {
            "key": "rooms.view", "label": "View Rooms",
            "description": "See room list, status, and availability", "group": "Rooms",
        }

    def test_grouped_permissions(self, client, admin_headers):
        data = client.get("/system/permissions/groups", headers=admin_headers).json()
        assert [g["group"] for g in data][:3] == ["Rooms", "Guests", "Bookings"]
        assert data[0]["icon"] == "🛏️"
        assert len(data[2]["permissions"]) == 3

    def test_requires_staff_view(self, client, front_desk_headers):
        response = client.get("/system/permissions", headers=front_desk_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "缺少权限: staff.view"

    def test_requires_login(self, client):
        assert client.get("/system/permissions").status_code == 401


class TestRoleAPI:
    """角色管理"""

    def test_create_role(self, client, admin_headers):
        response = client.post("/system/roles", headers=admin_headers, json={
            "name": "Night Auditor",
            "description": "Overnight finance checks",
            "permissions": ["finance.view", "reports.view", "finance.view"],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Night Auditor"
        assert data["permissions"] == ["finance.view", "reports.view"]
        assert data["is_system_role"] is False

    def test_create_role_unknown_permission_rejected(self, client, admin_headers, db_session):
        response = client.post("/system/roles", headers=admin_headers, json={
            "name": "Typo", "permissions": ["rooms.veiw"],
        })
        assert response.status_code == 400
        assert "rooms.veiw" in response.json()["detail"]
        assert db_session.query(Role).filter(Role.name == "Typo").first() is None

    def test_create_duplicate_name_case_insensitive(self, client, admin_headers, admin_role):
        response = client.post("/system/roles", headers=admin_headers, json={
            "name": "administrator", "permissions": [],
        })
        assert response.status_code == 400

    def test_create_requires_staff_manage(self, client, make_role, make_user, headers_for):
        viewer = make_user("viewer@hotel.test", roles=[make_role("Viewer", ["staff.view"])])
        response = client.post("/system/roles", headers=headers_for(viewer), json={
            "name": "X", "permissions": [],
        })
        assert response.status_code == 403
        assert response.json()["detail"] == "缺少权限: staff.manage"

    def test_list_and_get_roles(self, client, admin_headers, front_desk_role):
        roles = client.get("/system/roles", headers=admin_headers).json()
        assert [r["name"] for r in roles] == ["Administrator", "Front Desk"]

        detail = client.get(f"/system/roles/{front_desk_role.id}", headers=admin_headers).json()
        assert detail["permissions"] == ["rooms.view", "bookings.view", "bookings.create"]

    def test_get_missing_role(self, client, admin_headers):
        assert client.get("/system/roles/missing", headers=admin_headers).status_code == 404

    def test_update_role(self, client, admin_headers, front_desk_role):
        response = client.put(f"/system/roles/{front_desk_role.id}", headers=admin_headers, json={
            "name": "Reception", "permissions": ["rooms.view", "guests.view"],
        })
        assert response.status_code == 200
        assert response.json()["name"] == "Reception"
        assert response.json()["permissions"] == ["rooms.view", "guests.view"]

    def test_set_role_permissions(self, client, admin_headers, front_desk_role):
        response = client.put(f"/system/roles/{front_desk_role.id}/permissions", headers=admin_headers,
                              json={"permissions": ["pos.view", "pos.create"]})
        assert response.status_code == 200
        assert response.json()["permissions"] == ["pos.view", "pos.create"]

    def test_set_role_permissions_rejects_unknown(self, client, admin_headers, front_desk_role):
        response = client.put(f"/system/roles/{front_desk_role.id}/permissions", headers=admin_headers,
                              json={"permissions": ["*"]})
        assert response.status_code == 400

    def test_permission_change_takes_effect_next_request(self, client, admin_headers,
                                                          front_desk_role, front_desk_headers):
        """权限集合每次请求重新计算"""
        assert client.get("/auth/guard", params={"path": "/finance"},
                          headers=front_desk_headers).json()["state"] == "forbidden"
        client.put(f"/system/roles/{front_desk_role.id}/permissions", headers=admin_headers,
                   json={"permissions": ["finance.view"]})
        assert client.get("/auth/guard", params={"path": "/finance"},
                          headers=front_desk_headers).json()["state"] == "authorized"

    def test_delete_role(self, client, admin_headers, make_role, db_session):
        role = make_role("Temp", ["rooms.view"])
        response = client.delete(f"/system/roles/{role.id}", headers=admin_headers)
        assert response.status_code == 204
        assert db_session.query(Role).filter(Role.name == "Temp").first() is None

    def test_delete_system_role_rejected(self, client, admin_headers, admin_role):
        response = client.delete(f"/system/roles/{admin_role.id}", headers=admin_headers)
        assert response.status_code == 400
        assert "不可删除" in response.json()["detail"]

    def test_delete_role_in_use_rejected(self, client, admin_headers, front_desk_role, front_desk_user):
        response = client.delete(f"/system/roles/{front_desk_role.id}", headers=admin_headers)
        assert response.status_code == 400


class TestUserRoleAPI:
    """用户角色分配"""

    def test_assign_and_list(self, client, admin_headers, admin_user, no_role_user, front_desk_role):
        response = client.post(f"/system/users/{no_role_user.id}/roles", headers=admin_headers,
                               json={"role_id": front_desk_role.id})
        assert response.status_code == 201
        data = response.json()
        assert data["role_name"] == "Front Desk"
        assert data["assigned_by"] == admin_user.id
        assert data["is_active"] is True

        listed = client.get(f"/system/users/{no_role_user.id}/roles", headers=admin_headers).json()
        assert [a["role_id"] for a in listed] == [front_desk_role.id]

    def test_assign_unknown_role(self, client, admin_headers, no_role_user):
        response = client.post(f"/system/users/{no_role_user.id}/roles", headers=admin_headers,
                               json={"role_id": "missing"})
        assert response.status_code == 400

    def test_assign_invalid_window(self, client, admin_headers, no_role_user, front_desk_role):
        response = client.post(f"/system/users/{no_role_user.id}/roles", headers=admin_headers, json={
            "role_id": front_desk_role.id,
            "valid_from": "2026-05-01T00:00:00",
            "valid_until": "2026-04-01T00:00:00",
        })
        assert response.status_code == 400

    def test_revoke_deactivates(self, client, db_session, admin_headers, front_desk_user,
                                front_desk_role, front_desk_headers):
        response = client.delete(f"/system/users/{front_desk_user.id}/roles/{front_desk_role.id}",
                                 headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        db_session.expire_all()
        assignment = db_session.query(UserRole).filter(UserRole.user_id == front_desk_user.id).one()
        assert assignment.is_active is False

        me = client.get("/auth/me", headers=front_desk_headers).json()
        assert me["permissions"] == []

    def test_revoke_missing_assignment(self, client, admin_headers, no_role_user, front_desk_role):
        response = client.delete(f"/system/users/{no_role_user.id}/roles/{front_desk_role.id}",
                                 headers=admin_headers)
        assert response.status_code == 400

    def test_reassign_reactivates(self, client, admin_headers, front_desk_user, front_desk_role, db_session):
        client.delete(f"/system/users/{front_desk_user.id}/roles/{front_desk_role.id}", headers=admin_headers)
        response = client.post(f"/system/users/{front_desk_user.id}/roles", headers=admin_headers,
                               json={"role_id": front_desk_role.id})
        assert response.status_code == 201
        db_session.expire_all()
        assert db_session.query(UserRole).filter(UserRole.user_id == front_desk_user.id).count() == 1
