import pytest


class TestHealthAPI:
    @pytest.mark.asyncio
    async def test_health_at_root_and_api_prefix(self, async_client):
        for path in ("/health", "/api/v1/health"):
            response = await async_client.get(path)
            assert response.status_code == 200
            assert response.json()["database"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, async_client):
        response = await async_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"

        response = await async_client.get("/health")
        assert len(response.headers["x-request-id"]) == 36
