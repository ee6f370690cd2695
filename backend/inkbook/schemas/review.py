"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Schema for reviewing a completed booking."""

    booking_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    client_id: uuid.UUID
    artist_id: uuid.UUID
    rating: int
    comment: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ArtistReviewsResponse(BaseModel):
    """All reviews of an artist with the aggregate shown on the profile."""

    items: list[ReviewResponse]
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int]
