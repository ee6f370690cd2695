"""Review service — client ratings of completed bookings."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkbook.core.exceptions import ConflictError, NotFoundError, OwnershipError, ValidationError
from inkbook.domain.booking_state import BookingStatus
from inkbook.models.booking import Booking
from inkbook.models.review import Review
from inkbook.models.user import User
from inkbook.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)


async def create_review(db: AsyncSession, client: User, body: ReviewCreate) -> Review:
    """Attach the client's review to a completed booking. One review per booking."""
    booking = await db.get(Booking, body.booking_id)
    if booking is None:
        raise NotFoundError("Booking", str(body.booking_id))
    if booking.client_id != client.id:
        raise OwnershipError("Only the client of this booking can review it")
    if booking.status != BookingStatus.COMPLETED:
        raise ValidationError("Only completed bookings can be reviewed")

    existing = await db.execute(select(Review.id).where(Review.booking_id == booking.id))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("This booking has already been reviewed")

    review = Review(
        booking_id=booking.id,
        client_id=client.id,
        artist_id=booking.artist_id,
        rating=body.rating,
        comment=(body.comment or "").strip() or None,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError as e:
        raise ConflictError("This booking has already been reviewed") from e
    await db.refresh(review)

    logger.info("Client %s reviewed booking %s (%d/5)", client.id, booking.id, body.rating)
    return review


async def list_artist_reviews(db: AsyncSession, artist_id: uuid.UUID) -> dict:
    """Reviews of an artist, newest first, with average and 1-5 distribution."""
    result = await db.execute(
        select(Review).where(Review.artist_id == artist_id).order_by(Review.created_at.desc())
    )
    reviews = list(result.scalars().all())

    distribution = {rating: 0 for rating in range(1, 6)}
    for review in reviews:
        distribution[review.rating] += 1

    average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0.0
    return {
        "items": reviews,
        "total_reviews": len(reviews),
        "average_rating": average,
        "rating_distribution": distribution,
    }
