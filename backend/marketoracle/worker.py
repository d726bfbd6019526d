import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy import text

from marketoracle.config import get_database_identity, settings
from marketoracle.database import AsyncSessionLocal
from marketoracle.tasks.resolve import run_resolution_pipeline

logger = logging.getLogger(__name__)

_missing_market_key_logged = False


async def wait_for_required_tables(max_attempts: int = 30, sleep_seconds: int = 2) -> None:
    for attempt in range(1, max_attempts + 1):
        try:
            async with AsyncSessionLocal() as session:
                await session.execute(text("SELECT 1 FROM picks LIMIT 1"))
                await session.execute(text("SELECT 1 FROM resolution_leases LIMIT 1"))
            if attempt > 1:
                logger.info("database schema ready after retry: attempts=%s", attempt)
            return
        except Exception:
            if attempt == max_attempts:
                logger.exception("database schema not ready after retries")
                raise
            logger.warning(
                "database schema not ready; waiting before retry: attempt=%s/%s sleep_seconds=%s",
                attempt,
                max_attempts,
                sleep_seconds,
            )
            await asyncio.sleep(sleep_seconds)


async def run_resolution_task() -> None:
    global _missing_market_key_logged

    if not settings.twelve_data_api_key and not _missing_market_key_logged:
        logger.error("TWELVE_DATA_API_KEY is missing; equity picks will stay active until it is configured")
        _missing_market_key_logged = True

    try:
        summary = await run_resolution_pipeline()
    except Exception:
        logger.exception("resolution cycle failed; retrying on next interval")
        return

    if not summary["lease_acquired"]:
        logger.info("resolution cycle skipped: lease held by another run key=%s", summary["lease_key"])
        return
    logger.info(
        "resolution cycle complete: processed=%s closed=%s providers=%s weeks=%s errors=%s next_run_minutes=%s",
        summary["picks_processed"],
        summary["picks_closed"],
        len(summary["providers_updated"]),
        len(summary["weeks_ranked"]),
        len(summary["errors"]),
        settings.resolution_interval_minutes,
    )


async def main() -> None:
    db_host, db_name = get_database_identity()
    logger.info(
        "worker startup: database_host=%s database_name=%s twelve_data_key_set=%s interval_minutes=%s",
        db_host,
        db_name,
        bool(settings.twelve_data_api_key),
        settings.resolution_interval_minutes,
    )

    await wait_for_required_tables()
    await run_resolution_task()

    sched = AsyncIOScheduler(timezone="UTC")
    sched.add_job(run_resolution_task, "interval", minutes=settings.resolution_interval_minutes)
    sched.start()

    while True:
        await asyncio.sleep(3600)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    asyncio.run(main())
