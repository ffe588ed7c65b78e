"""Matching engine exceptions."""


class MatchingError(Exception):
    """Base class for matching engine errors."""


class CandidateStoreError(MatchingError):
    """The listing store could not be read. Nothing to rank; not degradable."""


class RerankError(MatchingError):
    """The LLM ranking pass failed; callers fall back to a weaker strategy."""


class PreferenceParseError(MatchingError):
    """Preferences could not be extracted from free text."""
