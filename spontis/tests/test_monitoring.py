import pytest


class TestMonitoringEndpoints:

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    @pytest.mark.asyncio
    async def test_health_without_redis(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["redis"] == "disconnected"
        assert data["dependencies"]["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_with_redis(self, test_client, fake_redis):
        response = await test_client.get("/health")
        assert response.json()["dependencies"]["redis"] == "connected"

    @pytest.mark.asyncio
    async def test_readiness_needs_redis(self, test_client):
        response = await test_client.get("/readiness")
        assert response.status_code == 503
        assert response.json()["ready"] is False

    @pytest.mark.asyncio
    async def test_readiness_with_redis(self, test_client, fake_redis):
        response = await test_client.get("/readiness")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, test_client, setup_db, user_headers, create_pricing_set_factory):
        await create_pricing_set_factory()
        await test_client.post("/quotes/calc", json={"distance_km": 1, "surface_m2": 1}, headers=user_headers)

        response = await test_client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert 'quotes_computed_total{source="api"}' in body
        assert 'endpoint="/quotes/calc"' in body
        assert "http_request_duration_seconds" in body
