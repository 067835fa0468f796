"""
QuakeBot - Application Entry Point
==================================

Bootstrap
---------
- Logging
- Config validation
- Database initialization and schema creation
- Handler context and bot construction
- Graceful shutdown

Run with ``python -m quakebot.main``.
"""

import asyncio
import signal
import sys

from quakebot.bot.context import BotContext
from quakebot.bot.quake_bot import QuakeBot
from quakebot.core.config.config import Config
from quakebot.core.database.service import DatabaseInitializationError, DatabaseService
from quakebot.core.logging.logger import get_logger, setup_logging, shutdown_logging

logger = get_logger(__name__)


# ============================================================================
# Application Bootstrap
# ============================================================================

async def _startup() -> QuakeBot:
    """Initialize all infrastructure components before launching the bot."""
    logger.info("========== QUAKEBOT INITIALIZATION START ==========")

    # Step 1: Validate configuration early
    try:
        Config.validate()
        logger.info("✓ Configuration validated", extra=Config.get_config_summary())
    except Exception as exc:
        logger.critical(f"Configuration validation failed: {exc}")
        raise

    # Step 2: Initialize database service and schema
    try:
        await DatabaseService.initialize()
        await DatabaseService.create_schema()
        if not await DatabaseService.health_check():
            raise DatabaseInitializationError("Database did not answer the startup health check")
        logger.info("✓ Database service initialized")
    except Exception as exc:
        logger.critical(f"Database initialization failed: {exc}", exc_info=True)
        raise

    # Step 3: Initialize bot
    try:
        bot = QuakeBot(BotContext.from_config(Config))
        logger.info("✓ Bot initialized")
    except Exception as exc:
        logger.critical(f"Bot initialization failed: {exc}", exc_info=True)
        raise

    logger.info("========== INFRASTRUCTURE INITIALIZED SUCCESSFULLY ==========")
    return bot


# ============================================================================
# Application Shutdown
# ============================================================================

async def _shutdown(bot: QuakeBot | None) -> None:
    """Gracefully shut down the bot and infrastructure services."""
    logger.info("========== QUAKEBOT SHUTDOWN START ==========")

    # Step 1: Close bot if active
    if bot and not bot.is_closed():
        try:
            await bot.close()
            logger.info("✓ Bot closed")
        except Exception as exc:
            logger.error(f"Error while closing bot: {exc}", exc_info=True)

    # Step 2: Shutdown database
    try:
        await DatabaseService.shutdown()
        logger.info("✓ Database service shut down")
    except Exception as exc:
        logger.error(f"Database service shutdown error: {exc}", exc_info=True)

    logger.info("========== SHUTDOWN COMPLETE ==========")


# ============================================================================
# Application Entrypoint
# ============================================================================

async def main() -> None:
    """
    Lifecycle:
        1. Validate configuration
        2. Initialize infrastructure (database, schema)
        3. Start bot
        4. Handle shutdown gracefully
    """
    bot: QuakeBot | None = None

    try:
        bot = await _startup()

        logger.info("Starting QuakeBot...")
        await bot.start(Config.DISCORD_TOKEN)

    except asyncio.CancelledError:
        logger.warning("Asyncio task cancellation received; shutting down gracefully.")
        raise

    except KeyboardInterrupt:
        logger.info("Manual shutdown via keyboard interrupt.")

    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        sys.exit(1)

    finally:
        await _shutdown(bot)


# ============================================================================
# Process Startup
# ============================================================================

def _install_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    """Install signal handlers for graceful shutdown in production."""
    try:
        loop.add_signal_handler(signal.SIGTERM, loop.stop)
        logger.debug("SIGTERM handler installed")
    except NotImplementedError:
        logger.debug("SIGTERM not supported on this platform (likely Windows)")


def run() -> None:
    # setup_logging() reads the logging settings from Config
    Config.load()
    setup_logging()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    _install_signal_handlers(loop)

    try:
        loop.run_until_complete(main())
    except KeyboardInterrupt:
        logger.info("Bot manually stopped via keyboard interrupt.")
    except Exception as exc:
        logger.critical(f"Startup failure: {exc}", exc_info=True)
        sys.exit(1)
    finally:
        loop.close()
        logger.info("Event loop closed.")
        shutdown_logging()


if __name__ == "__main__":
    run()
