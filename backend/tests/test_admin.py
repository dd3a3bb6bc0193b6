"""
ReportDesk Backend — Admin API Tests
======================================

What we test:
    ✅ Every admin route refuses regular users (403) and anonymous calls (401)
    ✅ User listing, newest first, without password hashes
    ✅ Role changes: valid roles only, never on one's own account
    ✅ Deleting a user removes their reports; self-delete always refused
    ✅ Dashboard statistics
"""

import pytest

from reportdesk.models.user import Role


class TestAdminAccess:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/admin/users"),
            ("get", "/api/admin/stats"),
            ("delete", "/api/admin/users/1"),
        ],
    )
    async def test_regular_user_is_forbidden(self, test_client, user_headers, method, path):
        response = await getattr(test_client, method)(path, headers=user_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "Requires role: admin"

    @pytest.mark.asyncio
    async def test_role_change_by_regular_user_is_forbidden(self, test_client, user, user_headers):
        response = await test_client.put(
            f"/api/admin/users/{user.id}/role",
            json={"role": "admin"},
            headers=user_headers,
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_is_unauthorized(self, test_client):
        response = await test_client.get("/api/admin/users")
        assert response.status_code == 401


class TestUserManagement:

    @pytest.mark.asyncio
    async def test_list_users_newest_first(self, test_client, admin, user, admin_headers):
        response = await test_client.get("/api/admin/users", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [u["username"] for u in body["users"]] == ["regular", "boss"]
        assert all("password_hash" not in u for u in body["users"])

    @pytest.mark.asyncio
    async def test_promote_user(self, test_client, user, admin_headers, headers_for):
        response = await test_client.put(
            f"/api/admin/users/{user.id}/role",
            json={"role": "admin"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

        # The promotion takes effect on the user's existing token
        as_user = await test_client.get("/api/admin/stats", headers=headers_for(user))
        assert as_user.status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_role_is_400(self, test_client, user, admin_headers):
        response = await test_client.put(
            f"/api/admin/users/{user.id}/role",
            json={"role": "superuser"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_cannot_change_own_role(self, test_client, admin, admin_headers):
        response = await test_client.put(
            f"/api/admin/users/{admin.id}/role",
            json={"role": "user"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_role_change_for_missing_user_is_404(self, test_client, admin_headers):
        response = await test_client.put(
            "/api/admin/users/999/role",
            json={"role": "admin"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_user_cascades_to_reports(
        self, test_client, user, user_headers, admin_headers
    ):
        created = await test_client.post(
            "/api/reports",
            json={"title": "Server lag", "description": "Lag spikes at spawn"},
            headers=user_headers,
        )
        report_id = created.json()["report"]["id"]

        response = await test_client.delete(f"/api/admin/users/{user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == f"User {user.email} deleted successfully"

        gone = await test_client.get(f"/api/reports/{report_id}", headers=admin_headers)
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, test_client, admin, admin_headers):
        response = await test_client.delete(f"/api/admin/users/{admin.id}", headers=admin_headers)

        assert response.status_code == 400
        still_there = await test_client.get("/api/auth/me", headers=admin_headers)
        assert still_there.status_code == 200

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self_even_with_other_admins(
        self, test_client, admin, admin_headers, make_user
    ):
        await make_user("second-boss", role=Role.ADMIN)

        response = await test_client.delete(f"/api/admin/users/{admin.id}", headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_missing_user_is_404(self, test_client, admin_headers):
        response = await test_client.delete("/api/admin/users/999", headers=admin_headers)
        assert response.status_code == 404


class TestStats:

    @pytest.mark.asyncio
    async def test_stats_counts(self, test_client, user, user_headers, admin_headers):
        for title in ("First report", "Second report"):
            await test_client.post(
                "/api/reports",
                json={"title": title, "description": "Lag spikes at spawn"},
                headers=user_headers,
            )
        await test_client.post(
            "/api/content/page",
            json={"pageName": "rules", "content": "<p>Be nice</p>"},
            headers=admin_headers,
        )

        response = await test_client.get("/api/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_users"] == 2
        assert stats["total_admins"] == 1
        assert stats["total_reports"] == 2
        assert stats["reports_by_status"] == {
            "pending": 2,
            "in_progress": 0,
            "resolved": 0,
            "closed": 0,
        }
        assert stats["total_pages"] == 1
