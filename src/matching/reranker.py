"""
LLM re-ranking of filtered candidates.

The model only returns an ordering, so each rank position is given a
synthetic descending score to keep results sortable alongside the other
strategies. The response format is a parse contract the model may break;
anything unparsable is skipped and an empty result signals total failure.
"""

import re

from loguru import logger

from src.matching.exceptions import RerankError
from src.modules.listings.models import ListingType
from src.modules.search.models import MatchResult, RankingStrategy
from src.providers.base import CompletionProvider

rerank_log = logger.bind(module="Reranker")

SYSTEM_PROMPT = "You are an expert at matching people with rooms and roommates."
RANKING_MARKER = "RANKING:"

# "1. ID: abc123 - Close to campus and quiet"
_RANK_LINE = re.compile(
    r"^\d+[.)]\s*ID:\s*\[?(?P<id>[^\s\]]+?)(?:\]\s*|\s+)-\s*(?P<reason>.+)$",
    re.IGNORECASE,
)


def rank_score(rank: int) -> float:
    """Synthetic score for a 1-based rank: 1.0, 0.85, 0.70, ... floor 0.1."""
    return max(0.1, round(1.0 - (rank - 1) * 0.15, 2))


def describe_candidate(index: int, match: MatchResult, listing_type: ListingType) -> str:
    """One prompt line describing a candidate."""
    listing = match.listing
    details = [
        f"ID: {listing.id}",
        f"Title: {listing.title or 'N/A'}",
        f"Type: {listing.type}",
    ]
    if listing_type == "room":
        details.append(f"Price: ${listing.price:g}/month" if listing.price else "Price: N/A")
        if listing.address:
            details.append(f"Address: {listing.address}")
        attrs = listing.structured
        if attrs.bedrooms:
            details.append(f"Bedrooms: {attrs.bedrooms}")
        if attrs.bathrooms:
            details.append(f"Bathrooms: {attrs.bathrooms:g}")
        details.append(f"Furnished: {'Yes' if attrs.furnished else 'No'}")
    details.append(f"Description: {listing.description}")
    return f"{index}. " + " | ".join(details)


def build_prompt(
    search_text: str,
    candidates: list[MatchResult],
    top_n: int,
    listing_type: ListingType,
) -> str:
    """Build the ranking prompt for the completion provider."""
    wanted = min(top_n, len(candidates))
    purpose = "room rentals" if listing_type == "room" else "roommate matching"
    listings = "\n\n".join(
        describe_candidate(i, match, listing_type)
        for i, match in enumerate(candidates, start=1)
    )
    return f"""You are an intelligent matching system for {purpose}.

USER'S REQUEST:
"{search_text}"

FILTERED CANDIDATES:
{listings}

TASK:
Rank these {len(candidates)} candidates from BEST to WORST match based on how well they satisfy the user's request. Consider:
- Content relevance and match quality
- Specific preferences mentioned in the user's description
- Overall suitability for the user's needs

INSTRUCTIONS:
1. Return ONLY the top {wanted} rankings
2. For each ranking, provide the ID and a brief explanation (1-2 sentences) of why it's a good match
3. Use this exact format:

{RANKING_MARKER}
1. ID: <id> - <brief explanation>
2. ID: <id> - <brief explanation>

Be concise but specific."""


def parse_ranking(response: str, candidates: list[MatchResult]) -> list[MatchResult]:
    """
    Parse a ranking response back into ordered results.

    Only lines after the RANKING: marker are read. Unknown and repeated IDs
    are skipped.

    Args:
        response: Raw model output
        candidates: Candidates that were offered to the model

    Returns:
        Ranked results (empty if nothing parsed)
    """
    by_id = {match.listing.id: match for match in candidates}
    ranked: list[MatchResult] = []
    seen: set[str] = set()
    started = False

    for line in (response or "").splitlines():
        line = line.strip()
        if not started:
            started = RANKING_MARKER in line
            continue
        if not line:
            continue

        parsed = _RANK_LINE.match(line.replace("*", ""))
        if not parsed:
            continue

        listing_id = parsed.group("id")
        candidate = by_id.get(listing_id)
        if candidate is None:
            rerank_log.warning(f"Model returned unknown listing ID {listing_id!r}; skipped")
            continue
        if listing_id in seen:
            continue
        seen.add(listing_id)

        score = rank_score(len(ranked) + 1)
        ranked.append(
            candidate.model_copy(
                update={
                    "combined_score": score,
                    "semantic_score": score,
                    "explanation": parsed.group("reason").strip(),
                    "ranked_by": RankingStrategy.AI,
                }
            )
        )

    return ranked


class LLMReranker:
    """Orders candidates with an LLM completion."""

    def __init__(self, provider: CompletionProvider, max_candidates: int = 40):
        """
        Initialize reranker.

        Args:
            provider: Completion provider
            max_candidates: Most candidates listed in one prompt
        """
        self._provider = provider
        self.max_candidates = max_candidates

    async def rerank(
        self,
        search_text: str,
        candidates: list[MatchResult],
        top_n: int,
        listing_type: ListingType = "room",
    ) -> list[MatchResult]:
        """
        Ask the model for the top N candidates in order.

        Args:
            search_text: Searcher's free text
            candidates: Filtered candidates
            top_n: How many to return
            listing_type: Type being searched

        Returns:
            Up to top_n ranked results; the input unchanged if it already
            fits; empty if the response could not be parsed

        Raises:
            RerankError: If the provider call fails
        """
        if len(candidates) <= top_n:
            return candidates

        offered = sorted(candidates, key=lambda m: m.structured_score, reverse=True)
        offered = offered[: self.max_candidates]
        prompt = build_prompt(search_text, offered, top_n, listing_type)

        rerank_log.info(f"Requesting AI ranking of {len(offered)} candidates (top {top_n})")
        try:
            response = await self._provider.complete(SYSTEM_PROMPT, prompt)
        except Exception as e:
            raise RerankError(f"Completion provider failed: {e}") from e

        ranked = parse_ranking(response, offered)
        if not ranked:
            rerank_log.warning("AI ranking response had no parsable lines")
        return ranked[:top_n]
