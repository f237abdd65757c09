"""Release pending bookings whose payment window has passed.

Meant for cron:
    docker compose exec backend python -m scripts.expire_pending_bookings
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from casa.database import async_session_factory, engine
from casa.services.booking_service import expire_stale_bookings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("expire_pending_bookings")


async def main() -> int:
    async with async_session_factory() as session:
        expired = await expire_stale_bookings(session)
        await session.commit()
    await engine.dispose()

    for booking in expired:
        logger.info("Released booking %s (%s)", booking.id, booking.confirmation_code)
    return len(expired)


if __name__ == "__main__":
    count = asyncio.run(main())
    print(f"Expired {count} pending bookings")
