"""Seed the database with sample artists, clients and bookings.

Covers every booking status, plus one stale request and one past
appointment so the sweep jobs have work to do on the first run.

Run from ``backend/``:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import datetime, time, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from inkbook.auth.jwt import create_access_token
from inkbook.core.clock import system_clock
from inkbook.database import async_session_factory, engine
from inkbook.models.booking import Booking
from inkbook.models.message import Message
from inkbook.models.review import Review
from inkbook.models.user import User

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ARTISTS = [
    {"email": "mara@inkbook.dev", "name": "Mara Quill"},
    {"email": "tomas@inkbook.dev", "name": "Tomas Reyes"},
]

CLIENTS = [
    {"email": "lea@example.com", "name": "Lea Novak"},
    {"email": "sam@example.com", "name": "Sam Okafor"},
    {"email": "ivy@example.com", "name": "Ivy Chen"},
]

SEED_EMAILS = [u["email"] for u in ARTISTS + CLIENTS]


def _at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day.date(), time(hour, minute))


def _build_bookings(artists: list[User], clients: list[User], now: datetime, local_now: datetime) -> list[dict]:
    """One booking per status, spread across artist/client pairs."""
    mara, tomas = artists
    lea, sam, ivy = clients

    appointment = {
        "appointment_duration": 120,
        "deposit_amount": Decimal("80.00"),
        "total_amount": Decimal("320.00"),
        "artist_notes": "Bring the reference printout. Eat beforehand.",
    }

    return [
        # Fresh request, waiting for the artist
        {
            "client": lea,
            "artist": mara,
            "status": "pending",
            "subject": "Fine-line botanical sleeve",
            "tattoo_style": "fine line",
            "body_area": "forearm",
            "size_category": "large",
            "color_preferences": "black and grey",
            "budget_min": Decimal("300.00"),
            "budget_max": Decimal("600.00"),
            "created_at": now - timedelta(days=2),
        },
        # Stale request, picked up by the expiry sweep
        {
            "client": sam,
            "artist": mara,
            "status": "pending",
            "subject": "Small wave on the ankle",
            "tattoo_style": "minimalist",
            "body_area": "ankle",
            "size_category": "small",
            "created_at": now - timedelta(days=20),
        },
        # Upcoming appointment
        {
            "client": ivy,
            "artist": mara,
            "status": "scheduled",
            "subject": "Koi fish on the shoulder blade",
            "appointment_date": _at(local_now + timedelta(days=7), 14),
            "created_at": now - timedelta(days=5),
            **appointment,
        },
        # Moved appointment
        {
            "client": lea,
            "artist": tomas,
            "status": "rescheduled",
            "subject": "Lettering on the ribs",
            "appointment_date": _at(local_now + timedelta(days=10), 11, 30),
            "created_at": now - timedelta(days=8),
            **appointment,
        },
        # Past appointment, picked up by the completion sweep
        {
            "client": sam,
            "artist": tomas,
            "status": "scheduled",
            "subject": "Geometric mandala on the back",
            "appointment_date": _at(local_now - timedelta(days=1), 10),
            "created_at": now - timedelta(days=14),
            **appointment,
        },
        # Finished and reviewable
        {
            "client": ivy,
            "artist": tomas,
            "status": "completed",
            "subject": "Traditional swallow",
            "appointment_date": _at(local_now - timedelta(days=30), 16),
            "created_at": now - timedelta(days=45),
            **appointment,
        },
        # Cancelled by the client
        {
            "client": lea,
            "artist": tomas,
            "status": "cancelled",
            "subject": "Cover-up on the wrist",
            "appointment_date": _at(local_now + timedelta(days=3), 9),
            "created_at": now - timedelta(days=12),
            **appointment,
        },
        # Request nobody answered
        {
            "client": ivy,
            "artist": mara,
            "status": "expired",
            "subject": "Moon phases along the spine",
            "created_at": now - timedelta(days=60),
        },
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample marketplace data.

    Idempotent: removes the seed users and everything attached to them,
    then re-creates them.
    """
    now = system_clock.now()
    local_now = system_clock.local_now()

    async with async_session_factory() as session:
        result = await session.execute(select(User.id).where(User.email.in_(SEED_EMAILS)))
        existing_ids = list(result.scalars().all())

        if existing_ids:
            print(f"⚠️  {len(existing_ids)} seed users already exist. Deleting and re-seeding...")
            await session.execute(delete(Review).where(Review.client_id.in_(existing_ids)))
            await session.execute(delete(Message).where(Message.sender_id.in_(existing_ids)))
            await session.execute(
                delete(Booking).where(Booking.client_id.in_(existing_ids) | Booking.artist_id.in_(existing_ids))
            )
            await session.execute(delete(User).where(User.id.in_(existing_ids)))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Create users
        # ------------------------------------------------------------------
        artists = [User(role="artist", is_active=True, **data) for data in ARTISTS]
        clients = [User(role="client", is_active=True, **data) for data in CLIENTS]
        session.add_all(artists + clients)
        await session.flush()

        print(f"✅ Created {len(artists)} artists and {len(clients)} clients")

        # ------------------------------------------------------------------
        # 2. Create bookings
        # ------------------------------------------------------------------
        bookings: list[Booking] = []
        for data in _build_bookings(artists, clients, now, local_now):
            client = data.pop("client")
            artist = data.pop("artist")
            booking = Booking(client_id=client.id, artist_id=artist.id, updated_at=data["created_at"], **data)
            session.add(booking)
            bookings.append(booking)
            print(f"   🖋  {booking.status:<12} {client.name} → {artist.name}: {booking.subject}")

        await session.flush()

        # ------------------------------------------------------------------
        # 3. Review the completed booking
        # ------------------------------------------------------------------
        completed = next(b for b in bookings if b.status == "completed")
        session.add(
            Review(
                booking_id=completed.id,
                client_id=completed.client_id,
                artist_id=completed.artist_id,
                rating=5,
                comment="Clean lines and a very calm session.",
            )
        )
        await session.commit()

    await engine.dispose()

    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Users:     {len(artists) + len(clients)}")
    print(f"   Bookings:  {len(bookings)}")
    print("   Reviews:   1")
    print("=" * 60)
    print("🔑 Development tokens:")
    for user in artists + clients:
        print(f"   {user.role:<7} {user.email:<22} {create_access_token({'sub': str(user.id)})}")
    print("🎉 Done! Run `python -m inkbook.jobs` to see the sweeps pick up the stale rows.")


if __name__ == "__main__":
    asyncio.run(seed())
