"""Router tests for the users API."""

from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_current_user(client, john, as_user):
    response = await client.get("/api/user", headers=as_user(john))

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == john.id
    assert data["email"] == "john@example.com"
    assert data["is_admin"] is False


@pytest.mark.asyncio
async def test_invalid_identity_header(client):
    response = await client.get("/api/user", headers={"X-User-Id": "abc"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid X-User-Id header"


@pytest.mark.asyncio
async def test_admin_lists_users(client, admin, john, jane, as_user):
    response = await client.get("/api/users", headers=as_user(admin))

    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {
        "admin@example.com",
        "john@example.com",
        "jane@example.com",
    }


@pytest.mark.asyncio
async def test_regular_user_cannot_list(client, john, as_user):
    response = await client.get("/api/users", headers=as_user(john))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_user(client, admin, as_user):
    response = await client.post(
        "/api/users",
        json={"name": "Bob Johnson", "email": "bob@example.com"},
        headers=as_user(admin),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Bob Johnson"
    assert data["is_admin"] is False


@pytest.mark.asyncio
async def test_create_user_duplicate_email(client, admin, john, as_user):
    response = await client.post(
        "/api/users",
        json={"name": "John Again", "email": "john@example.com"},
        headers=as_user(admin),
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "The email has already been taken."


@pytest.mark.asyncio
async def test_create_user_invalid_email(client, admin, as_user):
    response = await client.post(
        "/api/users", json={"name": "X", "email": "not-an-email"}, headers=as_user(admin)
    )

    assert response.status_code == 422
    assert response.json()["type"] == "validation-error"


@pytest.mark.asyncio
async def test_get_user_self_or_admin(client, admin, john, jane, as_user):
    self_view = await client.get(f"/api/users/{john.id}", headers=as_user(john))
    admin_view = await client.get(f"/api/users/{john.id}", headers=as_user(admin))
    other_view = await client.get(f"/api/users/{john.id}", headers=as_user(jane))
    missing = await client.get("/api/users/999", headers=as_user(admin))

    assert self_view.status_code == 200
    assert admin_view.status_code == 200
    assert other_view.status_code == 403
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_update_user(client, admin, john, jane, as_user):
    response = await client.put(
        f"/api/users/{john.id}",
        json={"name": "Johnny Doe", "email": "johnny@example.com", "is_admin": True},
        headers=as_user(admin),
    )
    clash = await client.put(
        f"/api/users/{john.id}",
        json={"name": "Johnny Doe", "email": "jane@example.com"},
        headers=as_user(admin),
    )

    assert response.status_code == 200
    assert response.json()["email"] == "johnny@example.com"
    assert response.json()["is_admin"] is True
    assert clash.status_code == 422


@pytest.mark.asyncio
async def test_delete_user_removes_their_tasks(client, admin, john, as_user):
    created = await client.post(
        "/api/tasks",
        json={"title": "T", "description": "D", "user_id": john.id},
        headers=as_user(admin),
    )

    response = await client.delete(f"/api/users/{john.id}", headers=as_user(admin))

    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}
    task = await client.get(f"/api/tasks/{created.json()['id']}", headers=as_user(admin))
    assert task.status_code == 404


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client, admin, as_user):
    response = await client.delete(f"/api/users/{admin.id}", headers=as_user(admin))

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete yourself"
