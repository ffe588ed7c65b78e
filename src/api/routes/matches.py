"""Match routes."""

from fastapi import APIRouter, HTTPException
from loguru import logger

from src.api.dependencies import Pipeline
from src.matching import CandidateStoreError
from src.modules.search import MatchResponse, SearchRequest

matches_log = logger.bind(module="Matches")

router = APIRouter(prefix="/matches", tags=["Matches"])


@router.post("", response_model=MatchResponse, response_model_by_alias=True)
async def find_matches(data: SearchRequest, pipeline: Pipeline) -> MatchResponse:
    """
    Rank candidate listings against a search.

    Searching for a room ranks room listings, searching for a roommate ranks
    roommate listings. The searcher's own listings are never returned.
    An empty result is still a success and carries a message.
    """
    try:
        response = await pipeline.search(data)
    except CandidateStoreError as e:
        matches_log.error(f"Failed to load candidates for {data.searcher_id}: {e}")
        raise HTTPException(
            status_code=500, detail="Failed to find matches. Please try again."
        )

    matches_log.info(
        f"{data.listing_type} search for {data.searcher_id}: "
        f"{len(response.matches)} matches via {response.strategy.value if response.strategy else 'none'}"
    )
    return response
