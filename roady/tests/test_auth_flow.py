"""
Integration tests for the identity collaborator.

Verifies Signup -> Login -> Me -> Logout.
"""

import pytest
from sqlalchemy import func, select

from roady.app.models.user import User


async def count_users(db_session) -> int:
    result = await db_session.execute(select(func.count(User.id)))
    return result.scalar()


@pytest.mark.asyncio
async def test_signup_returns_user_and_token(client):
    response = await client.post("/auth/signup", json={
        "email": "rider@test.com",
        "username": "rider",
        "password": "password123"
    })
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["email"] == "rider@test.com"
    assert data["user"]["username"] == "rider"
    assert set(data["user"]) == {"id", "email", "username", "createdAt"}


@pytest.mark.asyncio
async def test_signup_duplicate_email_creates_no_row(client, signup, db_session):
    await signup("rider")

    response = await client.post("/auth/signup", json={
        "email": "rider@test.com",
        "username": "someone_else",
        "password": "password123"
    })
    assert response.status_code == 409
    data = response.json()
    assert data["success"] is False
    assert "already exists" in data["error"]
    assert await count_users(db_session) == 1


@pytest.mark.asyncio
async def test_signup_duplicate_username_rejected(client, signup):
    await signup("rider")

    response = await client.post("/auth/signup", json={
        "email": "other@test.com",
        "username": "rider",
        "password": "password123"
    })
    assert response.status_code == 409
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_signup_invalid_email_is_400(client):
    response = await client.post("/auth/signup", json={
        "email": "not-an-email",
        "username": "rider",
        "password": "password123"
    })
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("login", ["rider", "rider@test.com"])
async def test_login_with_username_or_email(client, signup, login):
    user_id, _ = await signup("rider")

    response = await client.post("/auth/login", json={"emailOrUsername": login, "password": "password123"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"]["id"] == user_id


@pytest.mark.asyncio
async def test_login_wrong_password(client, signup):
    await signup("rider")

    response = await client.post("/auth/login", json={"emailOrUsername": "rider", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_unknown_user(client):
    response = await client.post("/auth/login", json={"emailOrUsername": "ghost", "password": "password123"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_returns_same_token(client, signup):
    user_id, headers = await signup("rider")

    response = await client.get("/auth/me", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == user_id
    assert headers["Authorization"] == f"Bearer {data['token']}"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_raw_user_id_is_not_a_token(client, signup):
    user_id, _ = await signup("rider")

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {user_id}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(client, signup, mock_redis):
    _, headers = await signup("rider")

    response = await client.post("/auth/logout", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "revoked": True}
    assert len(mock_redis.store) == 1

    response = await client.get("/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["error"] == "Token has been revoked"


@pytest.mark.asyncio
async def test_me_accepts_token_without_bearer_prefix(client, signup):
    user_id, headers = await signup("rider")
    token = headers["Authorization"].split(" ", 1)[1]

    response = await client.get("/auth/me", headers={"Authorization": token})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == user_id
    assert response.json()["token"] == token
