"""
Tests for health, metrics and cache fallbacks.
"""

import pytest
from httpx import AsyncClient

from ticketing.services.cache_service import get_cached_listing, invalidate_event_cache, make_listing_key


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_request_id_header_round_trip(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_metrics_count_reservations(client: AsyncClient, auth_headers, small_event):
    await client.post(
        "/api/v1/bookings/",
        json={"event_id": str(small_event.id), "seats_booked": 9},
        headers=auth_headers,
    )

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert 'reservation_attempts_total{outcome="insufficient_seats"}' in response.text


def test_listing_key_covers_filters():
    plain = make_listing_key(1, 20, True, False, None)
    searched = make_listing_key(1, 20, True, False, "Jazz")
    assert plain.startswith("events:list:")
    assert plain != searched
    assert searched == make_listing_key(1, 20, True, False, "jazz")


@pytest.mark.asyncio
async def test_cache_disabled_is_a_miss():
    assert await get_cached_listing(make_listing_key(1, 20, True, False, None)) is None
    await invalidate_event_cache()
