import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.main import create_app


@pytest_asyncio.fixture
async def limited_client(test_settings, database):
    settings = test_settings.model_copy(update={
        "rate_limit_enabled": True,
        "rate_limit_requests": 3,
        "rate_limit_period": 900,
    })
    app = create_app(settings, database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_rate_limit_headers(limited_client):
    """Test that rate limit headers are present"""
    response = await limited_client.get("/auth/me")
    assert response.status_code == 401

    assert response.headers["X-RateLimit-Limit"] == "3"
    assert response.headers["X-RateLimit-Remaining"] == "2"
    assert response.headers["X-RateLimit-Reset"] == "900"


@pytest.mark.asyncio
async def test_requests_over_limit_are_rejected(limited_client):
    for _ in range(3):
        response = await limited_client.get("/dashboards")
        assert response.status_code == 401

    response = await limited_client.get("/dashboards")
    assert response.status_code == 429
    assert response.json()["detail"] == "Too many requests, please try again later."
    assert response.headers["Retry-After"] == "900"
    assert response.headers["X-RateLimit-Remaining"] == "0"


@pytest.mark.asyncio
async def test_health_is_never_limited(limited_client):
    for _ in range(5):
        response = await limited_client.get("/health")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers


@pytest.mark.asyncio
async def test_disabled_limiter_adds_no_headers(client):
    response = await client.get("/auth/me")
    assert "X-RateLimit-Limit" not in response.headers
