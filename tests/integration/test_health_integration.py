import pytest


@pytest.mark.asyncio
async def test_health_check_is_anonymous(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "User Management API",
        "version": "0.1.0",
    }


@pytest.mark.asyncio
async def test_health_check_has_correlation_id(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "probe-1"})

    assert response.headers["x-correlation-id"] == "probe-1"
