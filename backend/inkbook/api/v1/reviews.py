"""Reviews API router.

Clients review completed bookings; anyone signed in can read an artist's
reviews.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from inkbook.api.deps import get_current_active_user, get_db
from inkbook.models.user import User
from inkbook.schemas.review import ArtistReviewsResponse, ReviewCreate, ReviewResponse
from inkbook.services import review_service

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ReviewResponse:
    """Review a completed booking as its client."""
    review = await review_service.create_review(db, current_user, body)
    return ReviewResponse.model_validate(review)


@router.get("/artist/{artist_id}", response_model=ArtistReviewsResponse)
async def list_artist_reviews(
    artist_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ArtistReviewsResponse:
    data = await review_service.list_artist_reviews(db, artist_id)
    return ArtistReviewsResponse(
        items=[ReviewResponse.model_validate(r) for r in data.pop("items")],
        **data,
    )
