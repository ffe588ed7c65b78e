#!/usr/bin/env python3
"""
Manual search against the configured listing store.

Usage:
    uv run python scripts/try_search.py --type room "quiet furnished room near campus"
    uv run python scripts/try_search.py --type roommate --top 10 "tidy professional, no pets"
    uv run python scripts/try_search.py --type room --budget 1000 1500 "cheap room" --raw
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from src.api.dependencies import get_embedding_cache, get_pipeline  # noqa: E402
from src.connections.postgres import close_postgres  # noqa: E402
from src.connections.redis import close_redis  # noqa: E402
from src.modules.search import ExplicitFilters, SearchRequest, StructuredFilters  # noqa: E402


async def main(listing_type: str, description: str, top_n: int, budget: list[float] | None, raw: bool):
    """Run one search and print the ranked results."""
    filters = StructuredFilters()
    if budget:
        filters = StructuredFilters(
            budget_min=budget[0],
            budget_max=budget[1],
            explicit=ExplicitFilters(budget_min=True, budget_max=True),
        )

    request = SearchRequest(
        userId="manual-search",
        searchType=listing_type,
        description=description,
        structuredFilters=filters,
        topN=top_n,
    )

    try:
        pipeline = await get_pipeline(await get_embedding_cache())
        response = await pipeline.search(request)

        print(f"\n{'=' * 60}")
        print(f"Results: {len(response.matches)} matches (strategy: {response.strategy.value if response.strategy else 'none'})")
        print(f"{'=' * 60}\n")

        if response.message:
            print(response.message)

        for i, match in enumerate(response.matches, 1):
            print(f"--- Match {i} ---")
            if raw:
                print(json.dumps(match.model_dump(mode="json", by_alias=True), indent=2))
            else:
                print(match.listing)
                print(f"  combined={match.combined_score} structured={match.structured_score}")
                print(f"  {match.explanation}")
            print()

    except Exception as e:
        print(f"Error: {e}")
        import traceback

        traceback.print_exc()

    finally:
        await close_redis()
        await close_postgres()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a manual match search")
    parser.add_argument("description", help="Free-text search description")
    parser.add_argument(
        "--type", dest="listing_type", choices=["room", "roommate"], default="room",
        help="Listing type to search",
    )
    parser.add_argument("--top", type=int, default=5, help="Number of matches to return")
    parser.add_argument(
        "--budget", type=float, nargs=2, metavar=("MIN", "MAX"), help="Explicit budget range"
    )
    parser.add_argument("--raw", action="store_true", help="Show full match data")

    args = parser.parse_args()
    asyncio.run(main(args.listing_type, args.description, args.top, args.budget, args.raw))
