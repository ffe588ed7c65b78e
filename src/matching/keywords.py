"""
Keyword and word-group similarity.

Cheap text signals used alongside embeddings, and instead of them when no
embedding is available.
"""

import re
from collections.abc import Iterable

STOPWORDS = frozenset(
    {
        "the", "and", "for", "with", "you", "your", "this", "that", "are", "was",
        "have", "but", "not", "from", "all", "will", "just", "get", "like",
        "very", "really",
    }
)

# Words in the same group are treated as meaning the same thing
SYNONYM_GROUPS: tuple[frozenset[str], ...] = (
    frozenset({"quiet", "peaceful", "calm"}),
    frozenset({"clean", "tidy", "organized"}),
    frozenset({"friendly", "social", "outgoing"}),
    frozenset({"student", "college", "university"}),
    frozenset({"professional", "career", "working"}),
    frozenset({"furnished", "equipped", "provided"}),
    frozenset({"modern", "new", "contemporary"}),
    frozenset({"spacious", "large", "roomy"}),
    frozenset({"cozy", "comfortable", "warm"}),
    frozenset({"downtown", "central", "urban"}),
    frozenset({"suburban", "residential", "neighborhood"}),
    frozenset({"pet-friendly", "pets", "animals"}),
    frozenset({"parking", "garage", "spot"}),
    frozenset({"gym", "fitness", "workout"}),
    frozenset({"kitchen", "cooking", "meals"}),
    frozenset({"private", "own", "personal"}),
    frozenset({"shared", "common", "communal"}),
)

_NON_WORD = re.compile(r"[^\w\s]")


def _tokens(text: str) -> list[str]:
    """Lowercased words with punctuation removed, in order."""
    cleaned = _NON_WORD.sub(" ", (text or "").lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOPWORDS]


def meaningful_words(text: str) -> set[str]:
    """
    Extract the set of meaningful words from free text.

    Stopwords and words of two characters or fewer are dropped.
    """
    return set(_tokens(text))


def extract_keywords(description: str, limit: int = 10) -> list[str]:
    """
    Pull search keywords out of a free-text description.

    Args:
        description: Searcher's free text
        limit: Maximum number of keywords

    Returns:
        Up to `limit` meaningful words, first occurrence order

    Examples:
        >>> extract_keywords("Quiet, clean room near the campus!")
        ['quiet', 'clean', 'room', 'near', 'campus']
    """
    seen: dict[str, None] = {}
    for word in _tokens(description):
        seen.setdefault(word, None)
        if len(seen) >= limit:
            break
    return list(seen)


def jaccard(user_keywords: Iterable[str], post_keywords: Iterable[str]) -> float:
    """
    Jaccard overlap of two case-normalized keyword sets.

    Returns:
        |intersection| / |union|, or 0.0 when both are empty
    """
    u = {k.lower() for k in user_keywords or []}
    p = {k.lower() for k in post_keywords or []}
    union = u | p
    if not union:
        return 0.0
    return len(u & p) / len(union)


def _group_of(word: str) -> frozenset[str] | None:
    for group in SYNONYM_GROUPS:
        if word in group:
            return group
    return None


def semantic_word_overlap(user_words: Iterable[str], post_words: Iterable[str]) -> float:
    """
    Share of the user's words whose synonym group appears in the post.

    Words outside every group still count toward the total.

    Args:
        user_words: Meaningful words from the searcher's text
        post_words: Meaningful words from the listing's text

    Returns:
        matched / total, or 0.0 when the user has no words
    """
    post = set(post_words)
    total = matched = 0
    for word in set(user_words):
        total += 1
        group = _group_of(word)
        if group and not group.isdisjoint(post):
            matched += 1
    return matched / total if total else 0.0


def text_similarity(
    user_text: str,
    user_keywords: Iterable[str],
    post_text: str,
    post_keywords: Iterable[str],
) -> float:
    """
    Blend keyword, direct-word and word-group overlap into one score.

    Used as the semantic signal for a listing when its embedding cannot be
    computed.
    """
    user_words = meaningful_words(user_text)
    post_words = meaningful_words(post_text)

    keyword_score = jaccard(user_keywords, post_keywords)
    direct_score = len(user_words & post_words) / len(user_words) if user_words else 0.0
    group_score = semantic_word_overlap(user_words, post_words)

    return keyword_score * 0.5 + direct_score * 0.3 + group_score * 0.2
