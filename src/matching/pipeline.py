"""
Ranking pipeline.

One search walks a fallback chain, stopping at the first stage that can
produce an ordering:

1. AI ranked: structured scores gate the pool (>= 0.1), then the LLM
   orders the survivors. If the LLM fails, survivors are ordered by
   structured score (or the embedding stage runs, if configured).
2. Embedding similarity: cosine similarity of embeddings blended with
   keyword overlap and a light structured score.
3. Keyword only: keyword overlap blended with the structured score.

Candidates are loaded once per search. A store failure is the only error
that propagates; every other failure degrades to the next stage.
"""

import asyncio

from loguru import logger

from config.settings import MatchingSettings
from src.matching.candidates import CandidatePool
from src.matching.embedding_cache import EmbeddingCache
from src.matching.exceptions import RerankError
from src.matching.keywords import extract_keywords, jaccard, text_similarity
from src.matching.reranker import LLMReranker
from src.matching.structured import StructuredScorer
from src.matching.vector_math import cosine_similarity, is_zero_vector, zero_vector
from src.modules.listings.models import Listing
from src.modules.search.models import (
    MatchResponse,
    MatchResult,
    RankingStrategy,
    SearchRequest,
)

pipeline_log = logger.bind(module="Pipeline")

NO_MATCHES_MESSAGE = (
    "No matches found. Try adjusting your preferences or expanding your search criteria."
)


def sort_by_combined(results: list[MatchResult], top_n: int) -> list[MatchResult]:
    """Stable descending sort on combined score, sliced to top_n."""
    return sorted(results, key=lambda m: m.combined_score, reverse=True)[:top_n]


class RankingPipeline:
    """Matches a search request against candidate listings."""

    def __init__(
        self,
        candidates: CandidatePool,
        embedding_cache: EmbeddingCache | None = None,
        reranker: LLMReranker | None = None,
        scorer: StructuredScorer | None = None,
        settings: MatchingSettings | None = None,
        log=None,
    ):
        """
        Initialize pipeline.

        Args:
            candidates: Candidate pool
            embedding_cache: Embedding cache, None disables the embedding stage
            reranker: LLM reranker, None skips the AI stage
            scorer: Structured scorer
            settings: Matching settings
            log: loguru logger for pipeline events
        """
        self._candidates = candidates
        self._embeddings = embedding_cache
        self._reranker = reranker
        self.settings = settings or MatchingSettings()
        self._log = log or pipeline_log
        self._scorer = scorer or StructuredScorer(log=self._log)

    @property
    def embeddings_available(self) -> bool:
        """True if the embedding stage can run."""
        return self._embeddings is not None and self._embeddings.available

    async def search(self, request: SearchRequest) -> MatchResponse:
        """
        Run a search and wrap the results for the API.

        Raises:
            CandidateStoreError: If the listing store cannot be read
        """
        matches, strategy = await self._run(request)
        return MatchResponse(
            matches=matches,
            strategy=strategy,
            message=None if matches else NO_MATCHES_MESSAGE,
        )

    async def match(self, request: SearchRequest) -> list[MatchResult]:
        """
        Run a search and return at most top_n ordered results.

        Raises:
            CandidateStoreError: If the listing store cannot be read
        """
        matches, _ = await self._run(request)
        return matches

    async def _run(
        self, request: SearchRequest
    ) -> tuple[list[MatchResult], RankingStrategy | None]:
        keywords = (
            request.keywords
            if request.keywords is not None
            else extract_keywords(request.description)
        )
        explicit = request.filters.explicit.active_names()
        self._log.bind(
            listing_type=request.listing_type, keywords=keywords, explicit_filters=explicit
        ).info(
            f"Search for {request.listing_type} by {request.searcher_id} "
            f"(filters: {', '.join(explicit) or 'NONE'})"
        )

        candidates = await self._candidates.fetch(request.listing_type, request.searcher_id)
        if not candidates:
            self._log.info("No candidates found")
            return [], None

        if self._reranker is not None:
            results, strategy = await self._ai_ranked(request, keywords, candidates)
        elif self.embeddings_available:
            results, strategy = await self._embedding_ranked(request, keywords, candidates)
        else:
            results, strategy = self._keyword_ranked(request, keywords, candidates)

        self._log.bind(strategy=strategy, count=len(results)).info(
            f"Returning {len(results)} matches ranked by {strategy.value if strategy else 'none'}"
        )
        return results, strategy

    # ========== AI Ranked ==========

    async def _ai_ranked(
        self, request: SearchRequest, keywords: list[str], candidates: list[Listing]
    ) -> tuple[list[MatchResult], RankingStrategy | None]:
        survivors = []
        for listing in candidates:
            result = self._scorer.score(listing, request.filters, request.listing_type)
            if result.score < self.settings.min_structured_score:
                continue
            survivors.append(
                MatchResult(
                    listing=listing,
                    structured_score=result.score,
                    explanation=result.explanation,
                    factors=result.factors,
                )
            )

        self._log.info(f"{len(survivors)} of {len(candidates)} candidates passed structured scoring")
        if not survivors:
            return [], None

        if len(survivors) <= request.top_n:
            return self._rank_by_structured(survivors, request.top_n, tagged=False), RankingStrategy.STRUCTURED

        try:
            ranked = await self._reranker.rerank(
                request.description, survivors, request.top_n, request.listing_type
            )
        except RerankError as e:
            self._log.warning(f"AI ranking failed: {e}")
            ranked = []

        if ranked:
            return ranked, RankingStrategy.AI

        if self.settings.fallback_strategy == "embedding" and self.embeddings_available:
            self._log.info("Falling back to embedding similarity")
            return await self._embedding_ranked(request, keywords, candidates)

        self._log.info("Falling back to structured score ordering")
        return self._rank_by_structured(survivors, request.top_n, tagged=True), RankingStrategy.STRUCTURED

    def _rank_by_structured(
        self, survivors: list[MatchResult], top_n: int, tagged: bool
    ) -> list[MatchResult]:
        """Order by structured score; tagged results say they were filter-ranked."""
        ordered = sorted(survivors, key=lambda m: m.structured_score, reverse=True)[:top_n]
        results = []
        for rank, match in enumerate(ordered, start=1):
            explanation = match.explanation
            if tagged:
                explanation = f"Ranked {rank} by filter score. {explanation}"
            results.append(
                match.model_copy(
                    update={
                        "combined_score": match.structured_score,
                        "semantic_score": 0.0,
                        "explanation": explanation,
                        "ranked_by": RankingStrategy.STRUCTURED,
                    }
                )
            )
        return results

    # ========== Embedding Similarity ==========

    async def _embedding_ranked(
        self, request: SearchRequest, keywords: list[str], candidates: list[Listing]
    ) -> tuple[list[MatchResult], RankingStrategy]:
        try:
            user_vector = await self._embeddings.get_embedding(request.description)
            if is_zero_vector(user_vector):
                self._log.warning("Searcher embedding unavailable; using keyword matching")
                return self._keyword_ranked(request, keywords, candidates)

            semaphore = asyncio.Semaphore(self.settings.max_concurrent_embeddings)
            listing_vectors = await asyncio.gather(
                *(self._listing_embedding(listing, semaphore) for listing in candidates)
            )
            results = [
                self._score_similarity(request, keywords, listing, user_vector, vector)
                for listing, vector in zip(candidates, listing_vectors)
            ]
        except Exception as e:
            self._log.exception(f"Embedding matching failed: {e}")
            return self._keyword_ranked(request, keywords, candidates)

        return sort_by_combined(results, request.top_n), RankingStrategy.EMBEDDING

    async def _listing_embedding(
        self, listing: Listing, semaphore: asyncio.Semaphore
    ) -> list[float]:
        """Reuse the stored embedding if usable, else go through the cache."""
        if listing.has_usable_embedding(self._embeddings.dimensions):
            return listing.embedding
        text = listing.embedding_text()
        if not text:
            return zero_vector(self._embeddings.dimensions)
        async with semaphore:
            return await self._embeddings.get_embedding(text)

    def _score_similarity(
        self,
        request: SearchRequest,
        keywords: list[str],
        listing: Listing,
        user_vector: list[float],
        listing_vector: list[float],
    ) -> MatchResult:
        s = self.settings
        basic = self._scorer.score_basic(listing, request.filters, request.listing_type)
        keyword_score = jaccard(keywords, listing.keywords)

        if is_zero_vector(listing_vector):
            semantic = text_similarity(
                request.description, keywords, listing.embedding_text(), listing.keywords
            )
        else:
            semantic = max(0.0, cosine_similarity(user_vector, listing_vector))

        blend = semantic * s.semantic_weight + keyword_score * s.keyword_weight
        combined = self._blend_structured(request, blend, basic.score)

        self._log.bind(
            listing_id=listing.id, semantic=round(semantic, 3),
            keyword=round(keyword_score, 3), combined=round(combined, 3),
        ).debug(f"Similarity score for {listing.id}: {combined:.3f}")

        return MatchResult(
            listing=listing,
            structured_score=basic.score,
            semantic_score=blend,
            combined_score=combined,
            explanation=(
                f"{basic.explanation}. Semantic: {round(semantic * 100)}%. "
                f"Keywords: {round(keyword_score * 100)}%"
            ),
            factors=basic.factors,
            ranked_by=RankingStrategy.EMBEDDING,
        )

    # ========== Keyword Only ==========

    def _keyword_ranked(
        self, request: SearchRequest, keywords: list[str], candidates: list[Listing]
    ) -> tuple[list[MatchResult], RankingStrategy]:
        results = []
        for listing in candidates:
            basic = self._scorer.score_basic(listing, request.filters, request.listing_type)
            keyword_score = jaccard(keywords, listing.keywords)
            combined = self._blend_structured(request, keyword_score, basic.score)
            results.append(
                MatchResult(
                    listing=listing,
                    structured_score=basic.score,
                    semantic_score=keyword_score,
                    combined_score=combined,
                    explanation=f"{basic.explanation}. Keywords: {round(keyword_score * 100)}%",
                    factors=basic.factors,
                    ranked_by=RankingStrategy.KEYWORD,
                )
            )
        return sort_by_combined(results, request.top_n), RankingStrategy.KEYWORD

    def _blend_structured(self, request: SearchRequest, text_score: float, structured: float) -> float:
        """Mix in the structured score only when the searcher set a filter."""
        if not request.filters.explicit.any_set:
            return text_score
        weight = self.settings.structured_weight
        return text_score * (1 - weight) + structured * weight
