"""
Job Scheduler Module.

Manages the periodic embedding backfill.
"""

from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from config.settings import get_settings
from src.api.dependencies import get_embedding_cache
from src.connections.postgres import get_postgres
from src.jobs.backfill import EmbeddingBackfill

scheduler_log = logger.bind(module="Scheduler")

# Scheduler instance
_scheduler = AsyncIOScheduler(timezone="UTC")


async def run_backfill_job() -> None:
    """Scheduled job to embed listings that are missing an embedding."""
    settings = get_settings()
    try:
        scheduler_log.info("Running scheduled backfill job...")
        postgres = await get_postgres()
        cache = await get_embedding_cache()
        backfill = EmbeddingBackfill(postgres.listings(), cache)
        await backfill.run(settings.backfill.batch_size)
    except Exception as e:
        scheduler_log.error(f"Backfill job failed: {e}")


def setup_jobs() -> None:
    """Setup the interval backfill job plus an immediate startup run."""
    backfill = get_settings().backfill

    _scheduler.add_job(
        run_backfill_job,
        IntervalTrigger(minutes=backfill.interval_minutes, timezone="UTC"),
        id="backfill_job",
        name=f"Embedding backfill (every {backfill.interval_minutes} min)",
        replace_existing=True,
    )

    # Run immediately on startup
    _scheduler.add_job(
        run_backfill_job,
        trigger="date",
        run_date=datetime.now(timezone.utc),
        id="backfill_job_startup",
        name="Startup backfill",
        replace_existing=True,
    )
    scheduler_log.info(f"Backfill scheduled every {backfill.interval_minutes}min")


def start() -> None:
    """Start the scheduler."""
    setup_jobs()
    _scheduler.start()
    scheduler_log.info("Scheduler started")


def shutdown() -> None:
    """Shutdown the scheduler."""
    _scheduler.shutdown(wait=False)
    scheduler_log.info("Scheduler stopped")
