"""End-to-end tests for /api/teams."""

from httpx import AsyncClient


async def _create(client: AsyncClient, name: str, country: str = "Spain") -> str:
    response = await client.post("/api/teams", json={"name": name, "country": country})
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


class TestTeamLifecycle:
    async def test_user_forbidden_admin_allowed(self, new_client, register_and_login):
        """User A (role user) cannot create; user B promoted to admin can, once per name."""
        user_a = await new_client()
        await register_and_login(user_a, "usera", "a@example.com")
        response = await user_a.post("/api/teams", json={"name": "Alpha", "country": "Spain"})
        assert response.status_code == 403

        user_b = await new_client()
        await register_and_login(user_b, "userb", "b@example.com", admin=True)
        response = await user_b.post("/api/teams", json={"name": "Alpha", "country": "Spain"})
        assert response.status_code == 201
        assert response.json()["message"] == "Team added successfully"
        assert response.json()["data"]["id"]

        response = await user_b.post("/api/teams", json={"name": "alpha", "country": "Spain"})
        assert response.status_code == 400
        assert response.json() == {"status": "error", "error": "Team already exists"}

    async def test_view_team(self, admin_client: AsyncClient):
        team_id = await _create(admin_client, "Alpha", "Spain")
        response = await admin_client.get(f"/api/teams/{team_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Team fetched successfully"
        assert body["data"]["id"] == team_id
        assert body["data"]["name"] == "Alpha"
        assert body["data"]["country"] == "Spain"
        assert "createdAt" in body["data"]

    async def test_view_unknown_team(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/teams/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404
        assert response.json()["error"] == "Team not found"

    async def test_malformed_id_is_validation_error(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/teams/not-a-uuid")
        assert response.status_code == 422

    async def test_update_team(self, admin_client: AsyncClient):
        team_id = await _create(admin_client, "Alpha", "Spain")
        response = await admin_client.patch(f"/api/teams/{team_id}", json={"country": "Portugal"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Alpha"
        assert data["country"] == "Portugal"

    async def test_update_unknown_team(self, admin_client: AsyncClient):
        response = await admin_client.patch(
            "/api/teams/00000000-0000-0000-0000-000000000000", json={"country": "Peru"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Team does not exist"

    async def test_rename_collision(self, admin_client: AsyncClient):
        await _create(admin_client, "Alpha")
        beta_id = await _create(admin_client, "Beta")
        response = await admin_client.patch(f"/api/teams/{beta_id}", json={"name": "ALPHA"})
        assert response.status_code == 400

    async def test_remove_team(self, admin_client: AsyncClient):
        team_id = await _create(admin_client, "Alpha")
        response = await admin_client.delete(f"/api/teams/{team_id}")
        assert response.status_code == 200
        assert response.json()["message"] == "Team removed successfully"
        assert (await admin_client.get(f"/api/teams/{team_id}")).status_code == 404

    async def test_remove_unknown_team_is_ok(self, admin_client: AsyncClient):
        response = await admin_client.delete("/api/teams/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 200

    async def test_blank_name_is_validation_error(self, admin_client: AsyncClient):
        response = await admin_client.post("/api/teams", json={"name": "   ", "country": "Spain"})
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation failed"
        assert body["errors"]


class TestTeamSearch:
    async def test_pagination_metadata(self, admin_client: AsyncClient):
        for i in range(25):
            await _create(admin_client, f"Team {i:02d}")
        response = await admin_client.get("/api/teams/search")
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["items"]) == 10
        assert data["pagination"] == {"total": 25, "totalPages": 3, "currentPage": 1, "pageSize": 10}

    async def test_non_positive_page_and_limit_use_defaults(self, admin_client: AsyncClient):
        await _create(admin_client, "Alpha")
        response = await admin_client.get("/api/teams/search", params={"page": 0, "limit": -5})
        pagination = response.json()["data"]["pagination"]
        assert pagination["currentPage"] == 1
        assert pagination["pageSize"] == 10

    async def test_limit_above_hundred_returns_single_page(self, admin_client: AsyncClient):
        for i in range(3):
            await _create(admin_client, f"Team {i:02d}")
        response = await admin_client.get("/api/teams/search", params={"limit": 150})
        data = response.json()["data"]
        assert len(data["items"]) == 3
        assert data["pagination"] == {"total": 3, "totalPages": 1, "currentPage": 1, "pageSize": 150}

    async def test_filters_and_sort(self, admin_client: AsyncClient):
        await _create(admin_client, "Celtic", "Scotland")
        await _create(admin_client, "Rangers", "Scotland")
        await _create(admin_client, "Arsenal", "England")
        response = await admin_client.get(
            "/api/teams/search", params={"country": "SCOT", "sortBy": "name", "order": "desc"}
        )
        names = [t["name"] for t in response.json()["data"]["items"]]
        assert names == ["Rangers", "Celtic"]

    async def test_unknown_sort_key_rejected(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/teams/search", params={"sortBy": "password"})
        assert response.status_code == 422
        assert response.json()["error"] == "Validation failed"

    async def test_identical_searches_are_identical(self, admin_client: AsyncClient):
        for name in ["Delta", "Alpha", "Charlie", "Bravo"]:
            await _create(admin_client, name, "Spain")
        params = {"sortBy": "country", "limit": 2, "page": 2}
        first = await admin_client.get("/api/teams/search", params=params)
        second = await admin_client.get("/api/teams/search", params=params)
        assert first.json()["data"] == second.json()["data"]

    async def test_regular_user_can_search(self, user_client: AsyncClient):
        response = await user_client.get("/api/teams/search")
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []
