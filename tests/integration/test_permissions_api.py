"""Integration tests for the permission catalogue."""

import pytest

from tests.factories import create_permission

pytestmark = [pytest.mark.integration, pytest.mark.db]


class TestPermissionsApi:
    def test_ordered_by_resource_then_action(self, client, db_session, user_factory, auth_headers):
        for code in ("zeta:write", "alpha:write", "alpha:read"):
            create_permission(db_session, code=code)
        db_session.commit()
        reader = user_factory(permissions=["permission:read"])

        data = client.get("/api/permissions", headers=auth_headers(reader)).json()
        pairs = [(p["resource"], p["action"]) for p in data]
        assert pairs == sorted(pairs)
        assert ("alpha", "read") in pairs

    def test_create_derives_resource_and_action(self, client, admin_headers):
        response = client.post(
            "/api/permissions",
            json={"code": "report:export", "name": "Export reports"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["resource"] == "report"
        assert data["action"] == "export"

    @pytest.mark.parametrize(
        "code", ["report", "report:export:all", "Report:Export", "user:read\n", "report:export\n"]
    )
    def test_invalid_code(self, client, admin_headers, code):
        response = client.post("/api/permissions", json={"code": code, "name": "Bad"}, headers=admin_headers)
        assert response.status_code == 400

    def test_duplicate_code(self, client, admin_headers):
        response = client.post(
            "/api/permissions", json={"code": "user:read", "name": "Dup"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_delete(self, client, db_session, admin_headers):
        perm = create_permission(db_session, code="temp:read")
        db_session.commit()
        assert client.delete(f"/api/permissions/{perm.id}", headers=admin_headers).status_code == 204
        assert client.delete(f"/api/permissions/{perm.id}", headers=admin_headers).status_code == 404

    def test_write_requires_permission_write(self, client, user_factory, auth_headers):
        reader = user_factory(permissions=["permission:read"])
        response = client.post(
            "/api/permissions", json={"code": "x:read", "name": "X"}, headers=auth_headers(reader)
        )
        assert response.status_code == 403
