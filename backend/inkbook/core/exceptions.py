"""Booking exceptions.

Each exception is an ``HTTPException`` so FastAPI renders it as
``{"detail": ...}`` with the right status code wherever it surfaces.
"""

from fastapi import HTTPException, status


class BookingError(HTTPException):
    """Base class for booking lifecycle errors."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(BookingError):
    """Input rejected before any store write."""

    def __init__(self, detail: str = "Validation failed") -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class TransitionError(ValidationError):
    """The requested status change is not a legal edge."""

    def __init__(self, current: str, trigger: str, reason: str | None = None) -> None:
        self.current = current
        self.trigger = trigger
        detail = f"Cannot {trigger} a booking that is {current}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail=detail)


class OwnershipError(BookingError):
    """The acting user is not allowed to act on this booking."""

    def __init__(self, detail: str = "You are not a participant in this booking") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(BookingError):
    """Resource not found."""

    def __init__(self, resource: str = "Booking", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(BookingError):
    """The row changed since it was read, or a duplicate would be created."""

    def __init__(self, detail: str = "Booking was modified by someone else. Refresh and try again.") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class StoreError(BookingError):
    """The database rejected or failed a write."""

    def __init__(self, detail: str = "Could not update booking. Please try again.") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
