"""Integration tests for menu administration."""

import pytest

from rbac_admin.db.models import Menu
from tests.factories import create_menu

pytestmark = [pytest.mark.integration, pytest.mark.db]

UNKNOWN_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture
def chain(db_session):
    """a -> b -> c"""
    a = create_menu(db_session, code="a")
    b = create_menu(db_session, code="b", parent=a)
    c = create_menu(db_session, code="c", parent=b)
    db_session.commit()
    return a, b, c


class TestListMenus:
    def test_requires_menu_read(self, client, user_factory, auth_headers):
        user = user_factory(permissions=["dashboard:read"])
        assert client.get("/api/system/menus", headers=auth_headers(user)).status_code == 403

    def test_flat_list_includes_hidden_and_parents(self, client, db_session, seeded, admin_headers):
        create_menu(db_session, code="secret", is_visible=False, order=99)
        db_session.commit()

        data = client.get("/api/system/menus", headers=admin_headers).json()
        by_code = {m["code"]: m for m in data}
        assert "secret" in by_code
        assert by_code["roles"]["parent"]["code"] == "system"
        assert by_code["dashboard"]["parent"] is None
        assert [p["code"] for p in by_code["users"]["permissions"]] == ["user:read"]

    def test_get_unknown(self, client, admin_headers):
        assert client.get(f"/api/system/menus/{UNKNOWN_ID}", headers=admin_headers).status_code == 404


class TestCreateMenu:
    def test_create_child(self, client, seeded, admin_headers):
        system = seeded["menus"]["system"]
        perm = seeded["permissions"]["admin:all"]
        response = client.post(
            "/api/system/menus",
            json={
                "code": "audit",
                "name": "Audit",
                "path": "/system/audit",
                "parentId": str(system.id),
                "order": 3,
                "permissionIds": [str(perm.id)],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["parentId"] == str(system.id)
        assert data["parent"]["code"] == "system"
        assert [p["code"] for p in data["permissions"]] == ["admin:all"]

    def test_duplicate_code(self, client, seeded, admin_headers):
        response = client.post("/api/system/menus", json={"code": "users", "name": "Again"}, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_parent(self, client, admin_headers):
        response = client.post(
            "/api/system/menus",
            json={"code": "lost", "name": "Lost", "parentId": UNKNOWN_ID},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_requires_menu_write(self, client, user_factory, auth_headers):
        user = user_factory(permissions=["menu:read"])
        response = client.post("/api/system/menus", json={"code": "x", "name": "X"}, headers=auth_headers(user))
        assert response.status_code == 403


class TestUpdateMenu:
    def test_rename_and_reorder(self, client, chain, admin_headers):
        a, _, _ = chain
        response = client.patch(
            f"/api/system/menus/{a.id}", json={"name": "Alpha", "order": 7, "isVisible": False}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert (data["name"], data["order"], data["isVisible"]) == ("Alpha", 7, False)

    def test_code_is_immutable(self, client, chain, admin_headers):
        a, _, _ = chain
        response = client.patch(f"/api/system/menus/{a.id}", json={"code": "z"}, headers=admin_headers)
        assert response.status_code == 400

    def test_self_parent(self, client, chain, admin_headers):
        a, _, _ = chain
        response = client.patch(f"/api/system/menus/{a.id}", json={"parentId": str(a.id)}, headers=admin_headers)
        assert response.status_code == 400

    def test_descendant_parent_is_cycle(self, client, chain, admin_headers):
        a, _, c = chain
        response = client.patch(f"/api/system/menus/{a.id}", json={"parentId": str(c.id)}, headers=admin_headers)
        assert response.status_code == 400
        assert "cycle" in response.json()["detail"]

    def test_unknown_parent(self, client, chain, admin_headers):
        a, _, _ = chain
        response = client.patch(f"/api/system/menus/{a.id}", json={"parentId": UNKNOWN_ID}, headers=admin_headers)
        assert response.status_code == 400

    def test_move_to_root_with_null_parent(self, client, chain, admin_headers):
        _, _, c = chain
        response = client.patch(f"/api/system/menus/{c.id}", json={"parentId": None}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["parentId"] is None

    def test_omitted_parent_is_unchanged(self, client, chain, admin_headers):
        _, b, c = chain
        response = client.patch(f"/api/system/menus/{c.id}", json={"name": "C"}, headers=admin_headers)
        assert response.json()["parentId"] == str(b.id)

    def test_valid_reparent(self, client, chain, admin_headers):
        a, _, c = chain
        response = client.patch(f"/api/system/menus/{c.id}", json={"parentId": str(a.id)}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["parent"]["code"] == "a"


class TestDeleteMenu:
    def test_delete_leaf(self, client, db_session, chain, admin_headers):
        _, _, c = chain
        c_id = c.id
        assert client.delete(f"/api/system/menus/{c_id}", headers=admin_headers).status_code == 204
        db_session.expire_all()
        assert db_session.get(Menu, c_id) is None

    def test_cannot_delete_parent(self, client, chain, admin_headers):
        a, _, _ = chain
        response = client.delete(f"/api/system/menus/{a.id}", headers=admin_headers)
        assert response.status_code == 400

    def test_delete_unknown(self, client, admin_headers):
        assert client.delete(f"/api/system/menus/{UNKNOWN_ID}", headers=admin_headers).status_code == 404
