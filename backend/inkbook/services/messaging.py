"""Structured chat messages sent on booking events.

Messages are written after the booking transaction has committed, in their
own session. A failed send is logged and dropped; it never undoes the
booking change that triggered it.
"""

import json
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inkbook.models.message import Message

logger = logging.getLogger(__name__)

BOOKING_REQUEST = "booking_request"
APPOINTMENT_SCHEDULED = "appointment_scheduled"
APPOINTMENT_RESCHEDULED = "appointment_rescheduled"
APPOINTMENT_CANCELLED = "appointment_cancelled"


def conversation_id_for(user_a: uuid.UUID, user_b: uuid.UUID) -> str:
    """Stable conversation key for a pair of users, independent of order."""
    first, second = sorted([str(user_a), str(user_b)])
    return f"{first}__{second}"


def booking_payload(message_type: str, booking_id: uuid.UUID) -> dict[str, str]:
    return {"type": message_type, "booking_id": str(booking_id)}


async def send_structured_message(
    session_factory: async_sessionmaker[AsyncSession],
    sender_id: uuid.UUID,
    receiver_id: uuid.UUID,
    payload: dict,
) -> Message | None:
    """Persist a JSON message from ``sender_id`` to ``receiver_id``.

    Returns the stored message, or ``None`` if the write failed.
    """
    message = Message(
        conversation_id=conversation_id_for(sender_id, receiver_id),
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=json.dumps(payload),
    )
    try:
        async with session_factory() as db:
            db.add(message)
            await db.commit()
    except SQLAlchemyError:
        logger.warning(
            "Could not deliver %s message from %s to %s",
            payload.get("type"),
            sender_id,
            receiver_id,
            exc_info=True,
        )
        return None

    logger.info("Sent %s message to %s", payload.get("type"), receiver_id)
    return message
