"""
Matching module for ranking listings against a search.

This module provides the scoring primitives and the ranking pipeline that
combines them with embeddings and LLM re-ranking.
"""

from src.matching.candidates import CandidatePool, ListingStore, is_candidate
from src.matching.embedding_cache import EmbeddingCache, EmbeddingStore, cache_key
from src.matching.exceptions import (
    CandidateStoreError,
    MatchingError,
    PreferenceParseError,
    RerankError,
)
from src.matching.keywords import (
    extract_keywords,
    jaccard,
    meaningful_words,
    semantic_word_overlap,
    text_similarity,
)
from src.matching.pipeline import RankingPipeline
from src.matching.preferences import ParsedPreferences, PreferenceParser
from src.matching.reranker import LLMReranker, parse_ranking
from src.matching.structured import StructuredScore, StructuredScorer
from src.matching.vector_math import cosine_similarity, geo_distance_km

__all__ = [
    # Math
    "cosine_similarity",
    "geo_distance_km",
    # Keywords
    "extract_keywords",
    "jaccard",
    "meaningful_words",
    "semantic_word_overlap",
    "text_similarity",
    # Scoring
    "StructuredScore",
    "StructuredScorer",
    # Collaborators
    "CandidatePool",
    "ListingStore",
    "is_candidate",
    "EmbeddingCache",
    "EmbeddingStore",
    "cache_key",
    "LLMReranker",
    "parse_ranking",
    "PreferenceParser",
    "ParsedPreferences",
    # Pipeline
    "RankingPipeline",
    # Errors
    "MatchingError",
    "CandidateStoreError",
    "RerankError",
    "PreferenceParseError",
]
