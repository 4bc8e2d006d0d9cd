"""
Sample events for local runs.

    python -m ticketing.db.seed

Dates are relative to today so the events show up as upcoming. Seeding is
skipped when the events table already has rows.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.logging import get_logger, setup_logging
from ticketing.db.base import utcnow
from ticketing.db.session import AsyncSessionLocal, engine, guarded
from ticketing.models.event import Event

logger = get_logger(__name__)

IMAGE_BASE = "https://images.pexels.com/photos"

# (title, description, days ahead, hour, location, seats, price, image id)
SAMPLE_EVENTS = [
    (
        "Tech Conference",
        "Keynotes from leading tech companies and workshops on AI, Cloud Computing and Web Development.",
        30, 9, "Convention Center, Downtown", 500, "49.99", 2774556,
    ),
    (
        "Music Festival Summer Bash",
        "Live performances from top artists across multiple genres, with food trucks and craft beverages.",
        60, 18, "City Park Amphitheater", 2000, "79.99", 1105666,
    ),
    (
        "Business Leadership Summit",
        "Panel discussions, breakout sessions and a networking lunch with industry leaders.",
        45, 8, "Grand Hotel Ballroom", 300, "149.99", 1181406,
    ),
    (
        "Food & Wine Tasting Experience",
        "Gourmet dishes paired with fine wines, hosted by renowned chefs and sommeliers.",
        50, 19, "Riverside Restaurant", 150, "99.99", 1267320,
    ),
    (
        "Startup Pitch Competition",
        "Startups pitch to top investors. Cash prizes for winners.",
        35, 14, "Innovation Hub", 400, "29.99", 3184291,
    ),
    (
        "Art Exhibition Opening Night",
        "Contemporary work from local and international artists. Complimentary refreshments included.",
        40, 18, "Modern Art Gallery", 200, "25.00", 1839919,
    ),
]


async def seed_sample_events(db: AsyncSession) -> int:
    """Insert the sample events into an empty table. Returns how many were added."""
    async with guarded(db, "seed_sample_events"):
        existing = (await db.execute(select(func.count()).select_from(Event))).scalar()
        if existing:
            logger.info("seed_skipped", existing_events=existing)
            return 0

        today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        for title, description, days, hour, location, seats, price, image in SAMPLE_EVENTS:
            db.add(
                Event(
                    title=title,
                    description=description,
                    event_date=today + timedelta(days=days, hours=hour),
                    location=location,
                    total_seats=seats,
                    available_seats=seats,
                    price=Decimal(price),
                    image_url=f"{IMAGE_BASE}/{image}/pexels-photo-{image}.jpeg",
                )
            )
        await db.commit()

    logger.info("seed_completed", events_added=len(SAMPLE_EVENTS))
    return len(SAMPLE_EVENTS)


async def main() -> None:
    setup_logging()
    async with AsyncSessionLocal() as session:
        await seed_sample_events(session)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
