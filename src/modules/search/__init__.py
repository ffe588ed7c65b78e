"""Search module."""

from src.modules.search.models import (
    ExplicitFilters,
    MatchResponse,
    MatchResult,
    RankingStrategy,
    SearchRequest,
    StructuredFilters,
)

__all__ = [
    "ExplicitFilters",
    "MatchResponse",
    "MatchResult",
    "RankingStrategy",
    "SearchRequest",
    "StructuredFilters",
]
