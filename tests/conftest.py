import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from uuid import uuid4

from app.core.config import Settings
from app.core.database import Database
from app.main import create_app


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file"""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'datapulse-test.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        redis_url=None,
        rate_limit_enabled=False,
        static_dir=str(tmp_path / "no-frontend")
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database(test_settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def client(test_settings, database):
    app = create_app(test_settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def register(client):
    """Register a fresh account and return its auth headers"""

    async def _register(company: str | None = "Test Corp") -> dict[str, str]:
        payload = {
            "email": f"user-{uuid4().hex[:10]}@datapulse.io",
            "name": "Test User",
            "password": "securePassword123!",
        }
        if company:
            payload["company"] = company

        response = await client.post("/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register


@pytest_asyncio.fixture
async def auth_headers(register):
    return await register()


@pytest_asyncio.fixture
async def other_auth_headers(register):
    """Credentials for a second, unrelated organization"""
    return await register("Other Corp")
