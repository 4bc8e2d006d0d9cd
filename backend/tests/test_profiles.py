"""
Tests for profile endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_profile_missing_until_saved(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/profiles/me", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_save_and_read_profile(client: AsyncClient, auth_headers, user_a):
    saved = await client.put(
        "/api/v1/profiles/me",
        json={"email": "alice@example.com", "full_name": "Alice Example"},
        headers=auth_headers,
    )
    assert saved.status_code == 200
    assert saved.json()["id"] == str(user_a.user_id)
    assert saved.json()["is_admin"] is False

    updated = await client.put(
        "/api/v1/profiles/me",
        json={"email": "alice@example.org", "full_name": "Alice E."},
        headers=auth_headers,
    )
    assert updated.json()["full_name"] == "Alice E."

    response = await client.get("/api/v1/profiles/me", headers=auth_headers)
    assert response.json()["email"] == "alice@example.org"


@pytest.mark.asyncio
async def test_admin_flag_comes_from_token(client: AsyncClient, admin_headers):
    response = await client.put(
        "/api/v1/profiles/me",
        json={"email": "admin@example.com", "full_name": "Admin", "is_admin": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["is_admin"] is True


@pytest.mark.asyncio
async def test_booking_creates_profile(client: AsyncClient, auth_headers, test_event):
    await client.post(
        "/api/v1/bookings/",
        json={"event_id": str(test_event.id), "seats_booked": 1},
        headers=auth_headers,
    )

    response = await client.get("/api/v1/profiles/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_profile_rejects_bad_email(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/profiles/me",
        json={"email": "not-an-email"},
        headers=auth_headers,
    )
    assert response.status_code == 422
