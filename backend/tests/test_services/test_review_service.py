"""Tests for the review service."""

import uuid

import pytest

from inkbook.core.exceptions import ConflictError, NotFoundError, OwnershipError, ValidationError
from inkbook.schemas.review import ReviewCreate
from inkbook.services.review_service import create_review, list_artist_reviews


class TestCreateReview:
    async def test_review_completed_booking(self, db_session, test_client_user, test_artist, make_booking):
        booking = await make_booking(test_client_user, test_artist, status="completed")
        review = await create_review(
            db_session, test_client_user, ReviewCreate(booking_id=booking.id, rating=5, comment="  Great  ")
        )
        assert review.artist_id == test_artist.id
        assert review.rating == 5
        assert review.comment == "Great"
        assert review.created_at is not None

    @pytest.mark.parametrize("status", ["pending", "scheduled", "cancelled", "expired"])
    async def test_only_completed(self, db_session, test_client_user, test_artist, make_booking, status):
        booking = await make_booking(test_client_user, test_artist, status=status)
        with pytest.raises(ValidationError):
            await create_review(db_session, test_client_user, ReviewCreate(booking_id=booking.id, rating=4))

    async def test_only_the_client(self, db_session, test_client_user, test_artist, outsider, make_booking):
        booking = await make_booking(test_client_user, test_artist, status="completed")
        with pytest.raises(OwnershipError):
            await create_review(db_session, test_artist, ReviewCreate(booking_id=booking.id, rating=1))
        with pytest.raises(OwnershipError):
            await create_review(db_session, outsider, ReviewCreate(booking_id=booking.id, rating=1))

    async def test_one_review_per_booking(self, db_session, test_client_user, test_artist, make_booking):
        booking = await make_booking(test_client_user, test_artist, status="completed")
        await create_review(db_session, test_client_user, ReviewCreate(booking_id=booking.id, rating=5))
        with pytest.raises(ConflictError):
            await create_review(db_session, test_client_user, ReviewCreate(booking_id=booking.id, rating=3))

    async def test_unknown_booking(self, db_session, test_client_user):
        with pytest.raises(NotFoundError):
            await create_review(db_session, test_client_user, ReviewCreate(booking_id=uuid.uuid4(), rating=5))


class TestListArtistReviews:
    async def test_aggregates(self, db_session, test_artist, make_user, make_booking):
        for rating in (5, 4, 4):
            reviewer = await make_user("client")
            booking = await make_booking(reviewer, test_artist, status="completed")
            await create_review(db_session, reviewer, ReviewCreate(booking_id=booking.id, rating=rating))

        data = await list_artist_reviews(db_session, test_artist.id)
        assert data["total_reviews"] == 3
        assert data["average_rating"] == 4.3
        assert data["rating_distribution"] == {1: 0, 2: 0, 3: 0, 4: 2, 5: 1}
        assert len(data["items"]) == 3

    async def test_no_reviews(self, db_session, test_artist):
        data = await list_artist_reviews(db_session, test_artist.id)
        assert data["total_reviews"] == 0
        assert data["average_rating"] == 0.0
