import pytest

from app.core.security import create_access_token


REGISTRATION = {
    "email": "founder@datapulse.io",
    "name": "Ada Founder",
    "password": "securePassword123!",
    "company": "Pulse Labs",
}


@pytest.mark.asyncio
async def test_register_login_and_profile(client):
    response = await client.post("/auth/register", json=REGISTRATION)
    assert response.status_code == 201

    data = response.json()
    assert data["message"] == "Account created successfully"
    assert data["token"]
    assert data["user"]["email"] == REGISTRATION["email"]
    assert data["user"]["role"] == "admin"
    assert "password_hash" not in data["user"]

    response = await client.post("/auth/login", json={
        "email": REGISTRATION["email"],
        "password": REGISTRATION["password"],
    })
    assert response.status_code == 200
    token = response.json()["token"]

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200

    profile = response.json()
    assert profile["user"]["name"] == "Ada Founder"
    assert profile["user"]["created_at"]
    assert profile["organization"]["name"] == "Pulse Labs"
    assert profile["organization"]["plan"] == "starter"
    assert profile["organization"]["member_role"] == "owner"


@pytest.mark.asyncio
async def test_registration_creates_default_dashboard(client):
    response = await client.post("/auth/register", json={**REGISTRATION, "company": None})
    headers = {"Authorization": f"Bearer {response.json()['token']}"}

    response = await client.get("/auth/me", headers=headers)
    assert response.json()["organization"]["name"] == "Ada Founder's Organization"

    response = await client.get("/dashboards", headers=headers)
    dashboards = response.json()["dashboards"]
    assert [d["name"] for d in dashboards] == ["My First Dashboard"]


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(client):
    assert (await client.post("/auth/register", json=REGISTRATION)).status_code == 201

    response = await client.post("/auth/register", json={**REGISTRATION, "name": "Someone Else"})
    assert response.status_code == 409
    assert response.json()["detail"] == "An account with this email already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize("override", [
    {"email": "not-an-email"},
    {"password": "short"},
    {"name": "A"},
])
async def test_register_validation(client, override):
    response = await client.post("/auth/register", json={**REGISTRATION, **override})
    assert response.status_code == 400
    assert response.json()["detail"] == "Validation failed"


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(client):
    await client.post("/auth/register", json=REGISTRATION)

    response = await client.post("/auth/login", json={
        "email": REGISTRATION["email"],
        "password": "wrongPassword!",
    })
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"

    response = await client.post("/auth/login", json={
        "email": "nobody@datapulse.io",
        "password": "whatever123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_missing_and_invalid_tokens(client, test_settings):
    response = await client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"

    forged = create_access_token(
        test_settings.model_copy(update={"jwt_secret": "someone-elses-secret"}),
        "user-id", "x@datapulse.io", "org-id"
    )
    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"

    expired = create_access_token(
        test_settings.model_copy(update={"token_ttl": -60}),
        "user-id", "x@datapulse.io", "org-id"
    )
    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_for_deleted_user_returns_404(client, test_settings):
    token = create_access_token(test_settings, "missing-user", "ghost@datapulse.io", "org-id")

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404
