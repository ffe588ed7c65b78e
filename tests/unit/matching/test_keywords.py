"""
Unit tests for src/matching/keywords.py
"""

import pytest

from src.matching.keywords import (
    extract_keywords,
    jaccard,
    meaningful_words,
    semantic_word_overlap,
    text_similarity,
)


# ============================================================
# meaningful_words / extract_keywords tests
# ============================================================


class TestMeaningfulWords:
    """Tests for meaningful_words function."""

    def test_drops_stopwords_and_short_words(self):
        """Stopwords and words of two characters or fewer should be dropped."""
        words = meaningful_words("I am looking for a quiet room with the view")
        assert words == {"looking", "quiet", "room", "view"}

    def test_strips_punctuation_and_case(self):
        """Punctuation should be removed and words lowercased."""
        assert meaningful_words("Clean, TIDY... kitchen!") == {"clean", "tidy", "kitchen"}

    def test_empty_text(self):
        """Empty or missing text should yield no words."""
        assert meaningful_words("") == set()
        assert meaningful_words(None) == set()


class TestExtractKeywords:
    """Tests for extract_keywords function."""

    def test_first_occurrence_order(self):
        """Keywords should keep first-occurrence order without repeats."""
        assert extract_keywords("Quiet, clean room near the campus!") == [
            "quiet", "clean", "room", "near", "campus",
        ]

    def test_deduplicates(self):
        """Repeated words should appear once."""
        assert extract_keywords("quiet quiet QUIET room") == ["quiet", "room"]

    def test_limit(self):
        """Result should be capped at the limit."""
        text = "alpha bravo charlie delta echo foxtrot golf hotel india juliet kilo lima"
        assert len(extract_keywords(text)) == 10
        assert extract_keywords(text, limit=3) == ["alpha", "bravo", "charlie"]


# ============================================================
# jaccard tests
# ============================================================


class TestJaccard:
    """Tests for jaccard function."""

    def test_identical_sets(self):
        """Identical keyword sets should score 1."""
        assert jaccard(["quiet", "clean"], ["clean", "quiet"]) == 1.0

    def test_partial_overlap(self):
        """Overlap should be intersection over union."""
        assert jaccard(["quiet", "clean", "cheap"], ["quiet", "clean", "pets"]) == pytest.approx(0.5)

    def test_case_insensitive(self):
        """Keywords should be compared case-insensitively."""
        assert jaccard(["Quiet"], ["quiet"]) == 1.0

    def test_both_empty(self):
        """Two empty sets should score 0."""
        assert jaccard([], []) == 0.0
        assert jaccard(None, None) == 0.0

    @pytest.mark.parametrize(
        "a, b",
        [
            (["quiet", "clean"], ["clean"]),
            (["a1", "b2", "c3"], ["c3", "d4"]),
            ([], ["pets"]),
            (["gym", "parking"], ["GYM", "pool", "spa"]),
        ],
    )
    def test_symmetric(self, a, b):
        """Jaccard should not depend on argument order."""
        assert jaccard(a, b) == jaccard(b, a)


# ============================================================
# semantic_word_overlap / text_similarity tests
# ============================================================


class TestSemanticWordOverlap:
    """Tests for semantic_word_overlap function."""

    def test_synonyms_match(self):
        """Words in the same group should count as matched."""
        assert semantic_word_overlap({"quiet"}, {"peaceful"}) == 1.0

    def test_unknown_words_count_toward_total(self):
        """Words outside every group still count in the denominator."""
        assert semantic_word_overlap({"quiet", "balcony"}, {"calm"}) == 0.5

    def test_no_user_words(self):
        """No user words should score 0."""
        assert semantic_word_overlap(set(), {"calm"}) == 0.0


class TestTextSimilarity:
    """Tests for text_similarity function."""

    def test_identical_text_and_keywords(self):
        """Identical text and keywords should score 1."""
        text = "quiet tidy student"
        keywords = ["quiet", "tidy"]
        assert text_similarity(text, keywords, text, keywords) == pytest.approx(1.0)

    def test_nothing_in_common(self):
        """Unrelated text should score 0."""
        assert text_similarity("quiet room", ["quiet"], "garage parking", ["garage"]) == 0.0

    def test_synonyms_only(self):
        """Synonym matches alone should contribute the group weight."""
        score = text_similarity("quiet", [], "peaceful", [])
        assert score == pytest.approx(0.2)
