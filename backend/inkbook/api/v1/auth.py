"""Auth API router — the authenticated user's profile.

Sign-up, login and token refresh live with the identity provider.
"""

from fastapi import APIRouter, Depends

from inkbook.api.deps import get_current_active_user
from inkbook.models.user import User
from inkbook.schemas.auth import UserResponse

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    """Return the currently authenticated user's profile."""
    return UserResponse.model_validate(current_user)
