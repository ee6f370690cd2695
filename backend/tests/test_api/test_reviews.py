"""Tests for review endpoints."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestReviews:
    async def test_review_and_list(
        self, client: AsyncClient, client_headers, test_client_user, test_artist, make_booking
    ) -> None:
        booking = await make_booking(test_client_user, test_artist, status="completed")
        response = await client.post(
            "/api/v1/reviews",
            json={"booking_id": str(booking.id), "rating": 4, "comment": "Healed beautifully"},
            headers=client_headers,
        )
        assert response.status_code == 201
        assert response.json()["artist_id"] == str(test_artist.id)

        listing = await client.get(f"/api/v1/reviews/artist/{test_artist.id}", headers=client_headers)
        assert listing.status_code == 200
        data = listing.json()
        assert data["total_reviews"] == 1
        assert data["average_rating"] == 4.0
        assert data["rating_distribution"]["4"] == 1
        assert data["items"][0]["comment"] == "Healed beautifully"

    async def test_rating_out_of_range(
        self, client: AsyncClient, client_headers, test_client_user, test_artist, make_booking
    ) -> None:
        booking = await make_booking(test_client_user, test_artist, status="completed")
        response = await client.post(
            "/api/v1/reviews", json={"booking_id": str(booking.id), "rating": 6}, headers=client_headers
        )
        assert response.status_code == 422

    async def test_duplicate_review(
        self, client: AsyncClient, client_headers, test_client_user, test_artist, make_booking
    ) -> None:
        booking = await make_booking(test_client_user, test_artist, status="completed")
        body = {"booking_id": str(booking.id), "rating": 5}
        assert (await client.post("/api/v1/reviews", json=body, headers=client_headers)).status_code == 201
        assert (await client.post("/api/v1/reviews", json=body, headers=client_headers)).status_code == 409

    async def test_unfinished_booking(
        self, client: AsyncClient, client_headers, test_client_user, test_artist, make_booking
    ) -> None:
        booking = await make_booking(test_client_user, test_artist, status="scheduled")
        response = await client.post(
            "/api/v1/reviews", json={"booking_id": str(booking.id), "rating": 5}, headers=client_headers
        )
        assert response.status_code == 422
