#!/usr/bin/env python3
"""
Run one embedding backfill batch by hand.

Usage:
    uv run python scripts/run_backfill.py
    uv run python scripts/run_backfill.py --batch 200
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from src.api.dependencies import get_embedding_cache  # noqa: E402
from src.connections.postgres import close_postgres, get_postgres  # noqa: E402
from src.connections.redis import close_redis  # noqa: E402
from src.jobs.backfill import EmbeddingBackfill  # noqa: E402


async def main(batch_size: int):
    """Backfill one batch and print the counts."""
    try:
        postgres = await get_postgres()
        backfill = EmbeddingBackfill(postgres.listings(), await get_embedding_cache())
        result = await backfill.run(batch_size)
        print(f"Checked: {result['checked']}, updated: {result['updated']}, failed: {result['failed']}")

    except Exception as e:
        print(f"Error: {e}")
        import traceback

        traceback.print_exc()

    finally:
        await close_redis()
        await close_postgres()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Backfill missing listing embeddings")
    parser.add_argument("--batch", type=int, default=50, help="Listings to process")

    args = parser.parse_args()
    asyncio.run(main(args.batch))
