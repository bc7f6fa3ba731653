"""Application entry point.

Opens the document store, applies migrations, seeds the ID counter and
reports what the store holds. Front ends import :class:`ApplicationInitializer`
and drive the returned services themselves.
"""

from __future__ import annotations

import asyncio

from config import load_config
from core import setup_logger
from core.app_initializer import ApplicationInitializer

config = load_config()

# Setup logging
logger = setup_logger(
    name="waitlist",
    level=config.log_level,
    log_file=config.log_file,
    colored=True
)


async def main() -> None:
    """Main application entry point."""
    app = ApplicationInitializer(config)
    services = await app.initialize()
    try:
        events = await services.event_service.list_events()
        organizers = await services.users.list_organizers()
        logger.info(f"Store ready: {len(events)} events, {len(organizers)} organizers")
    finally:
        await app.cleanup()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
