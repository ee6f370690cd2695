"""Status labels for the booking progress tracker.

Maps every (status, viewer role) pair to what the UI shows. Text is English;
localisation happens in the client.
"""

from dataclasses import dataclass
from enum import Enum

from inkbook.domain.booking_state import BookingStatus


class ViewerRole(str, Enum):
    CLIENT = "client"
    ARTIST = "artist"


@dataclass(frozen=True)
class StatusDisplay:
    label: str
    icon: str
    tone: str  # success, info, warning, error, muted


_SAME_FOR_BOTH = {
    BookingStatus.EXPIRED: StatusDisplay("REQUEST EXPIRED", "⏰", "muted"),
    BookingStatus.SCHEDULED: StatusDisplay("APPOINTMENT SCHEDULED", "✅", "success"),
    BookingStatus.RESCHEDULED: StatusDisplay("APPOINTMENT CHANGED", "🔄", "info"),
    BookingStatus.CANCELLED: StatusDisplay("APPOINTMENT CANCELLED", "🚫", "error"),
    BookingStatus.COMPLETED: StatusDisplay("TATTOO COMPLETED", "🎉", "success"),
}

STATUS_DISPLAY: dict[tuple[BookingStatus, ViewerRole], StatusDisplay] = {
    (BookingStatus.PENDING, ViewerRole.CLIENT): StatusDisplay("REQUEST SENT", "⏳", "warning"),
    (BookingStatus.PENDING, ViewerRole.ARTIST): StatusDisplay("REQUEST RECEIVED", "📬", "info"),
    **{(status, role): display for status, display in _SAME_FOR_BOTH.items() for role in ViewerRole},
}

# Statuses whose booking carries appointment details worth opening.
_CLICKABLE = frozenset(
    {
        BookingStatus.SCHEDULED,
        BookingStatus.RESCHEDULED,
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
    }
)


def status_display(status: str, role: str) -> StatusDisplay:
    return STATUS_DISPLAY[(BookingStatus(status), ViewerRole(role))]


def is_clickable(status: str, role: str) -> bool:
    """Whether the booking card opens a details view for this viewer."""
    ViewerRole(role)
    return BookingStatus(status) in _CLICKABLE


def shows_progress_tracker(status: str, role: str) -> bool:
    """Artists looking at a pending request get the schedule action instead."""
    return not (BookingStatus(status) == BookingStatus.PENDING and ViewerRole(role) == ViewerRole.ARTIST)
