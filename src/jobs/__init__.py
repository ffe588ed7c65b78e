"""Jobs module for scheduled tasks."""

from src.jobs import scheduler
from src.jobs.backfill import EmbeddingBackfill

__all__ = ["EmbeddingBackfill", "scheduler"]
