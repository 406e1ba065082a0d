import pytest
from httpx import AsyncClient


async def login(client: AsyncClient) -> dict:
    response = await client.post("/users/login", json={"username": "alice", "password": "secret123"})
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_refresh_rotates_token(client: AsyncClient, registered, load_identity):
    session = await login(client)

    response = await client.post("/users/refresh-token", json={"refresh_token": session["refresh_token"]})

    assert response.status_code == 200
    pair = response.json()
    assert pair["refresh_token"] != session["refresh_token"]
    assert response.cookies["refreshToken"] == pair["refresh_token"]

    stored = await load_identity("alice")
    assert stored.active_refresh_token == pair["refresh_token"]


@pytest.mark.asyncio
async def test_refresh_from_cookie(client: AsyncClient, registered):
    await login(client)

    # No body: the refreshToken cookie from login is used
    response = await client.post("/users/refresh-token")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_reused_refresh_token_revokes_session(client: AsyncClient, registered, load_identity):
    session = await login(client)
    rotated = await client.post("/users/refresh-token", json={"refresh_token": session["refresh_token"]})
    assert rotated.status_code == 200

    replay = await client.post("/users/refresh-token", json={"refresh_token": session["refresh_token"]})

    assert replay.status_code == 401
    assert replay.json()["error"]["code"] == "REFRESH_TOKEN_REUSE_DETECTED"
    cleared = replay.headers.get_list("set-cookie")
    assert any(c.startswith("refreshToken=") and "Max-Age=0" in c for c in cleared)
    assert any(c.startswith("accessToken=") and "Max-Age=0" in c for c in cleared)

    stored = await load_identity("alice")
    assert stored.active_refresh_token is None

    # The legitimately rotated token is dead too
    follow_up = await client.post(
        "/users/refresh-token", json={"refresh_token": rotated.json()["refresh_token"]}
    )
    assert follow_up.status_code == 401


@pytest.mark.asyncio
async def test_refresh_with_access_token_is_invalid(client: AsyncClient, registered):
    session = await login(client)

    response = await client.post("/users/refresh-token", json={"refresh_token": session["access_token"]})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_without_token(client: AsyncClient):
    response = await client.post("/users/refresh-token")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"
