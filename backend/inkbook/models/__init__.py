"""SQLAlchemy models for InkBook.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from inkbook.models.booking import Booking
from inkbook.models.message import Message
from inkbook.models.review import Review
from inkbook.models.user import User

__all__ = [
    "Booking",
    "Message",
    "Review",
    "User",
]
