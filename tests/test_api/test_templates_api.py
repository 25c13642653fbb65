import pytest


class TestStyleTemplatesAPI:
    @pytest.mark.asyncio
    async def test_create_and_filter_by_platform(self, async_client):
        linkedin = {
            "platform": "linkedin",
            "name": "Thought leader",
            "examples": ["Here is what I learned this week..."],
            "tone": "professional",
        }
        bluesky = {"platform": "bluesky", "name": "Casual", "examples": []}

        created = await async_client.post("/api/v1/templates", json=linkedin)
        assert created.status_code == 201
        assert created.json()["characteristics"] == []
        assert (await async_client.post("/api/v1/templates", json=bluesky)).status_code == 201

        response = await async_client.get("/api/v1/templates", params={"platform": "linkedin"})
        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["Thought leader"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"platform": "myspace", "name": "x", "examples": []},
        {"platform": "threads", "name": "", "examples": []},
        {"platform": "threads", "name": "n" * 51, "examples": []},
        {"platform": "threads", "name": "ok", "examples": "not a list"},
    ])
    async def test_create_validation(self, async_client, payload):
        response = await async_client.post("/api/v1/templates", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_only_one_default_per_platform(self, async_client):
        first = (await async_client.post(
            "/api/v1/templates", json={"platform": "threads", "name": "A", "is_default": True}
        )).json()
        second = (await async_client.post(
            "/api/v1/templates", json={"platform": "threads", "name": "B", "is_default": True}
        )).json()

        first_now = (await async_client.get(f"/api/v1/templates/{first['id']}")).json()
        assert first_now["is_default"] is False
        assert second["is_default"] is True

        await async_client.patch(f"/api/v1/templates/{first['id']}", json={"is_default": True})
        second_now = (await async_client.get(f"/api/v1/templates/{second['id']}")).json()
        assert second_now["is_default"] is False

    @pytest.mark.asyncio
    async def test_update_and_delete(self, async_client):
        template = (await async_client.post(
            "/api/v1/templates", json={"platform": "twitter", "name": "Short", "examples": ["a"]}
        )).json()

        response = await async_client.patch(
            f"/api/v1/templates/{template['id']}",
            json={"tone": "witty", "characteristics": ["emoji", "questions"]}
        )
        assert response.status_code == 200
        assert response.json()["tone"] == "witty"
        assert response.json()["characteristics"] == ["emoji", "questions"]

        assert (await async_client.delete(f"/api/v1/templates/{template['id']}")).status_code == 200
        assert (await async_client.get(f"/api/v1/templates/{template['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_foreign_template_is_forbidden(self, async_client, test_db, other_user):
        from src.repositories.style_template_repository import StyleTemplateRepository
        template = StyleTemplateRepository(test_db).create(
            other_user.user_id, platform="threads", name="Theirs", examples=[]
        )
        assert (await async_client.get(f"/api/v1/templates/{template.id}")).status_code == 403
        assert (await async_client.patch(f"/api/v1/templates/{template.id}", json={"name": "x"})).status_code == 403
