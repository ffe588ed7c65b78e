"""
Structured preference extraction from free text.

Asks the LLM for a small JSON object and falls back to per-field regexes
when the model does not return valid JSON.
"""

import json
import re

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.matching.exceptions import PreferenceParseError
from src.modules.search.models import StructuredFilters
from src.providers.base import CompletionProvider

prefs_log = logger.bind(module="Preferences")

SYSTEM_PROMPT = "You extract structured housing preferences from tenant descriptions."

_BEDROOMS = re.compile(r'"bedrooms"\s*:\s*(\d+)')
_BUDGET_MAX = re.compile(r'"budgetMax"\s*:\s*(\d+(?:\.\d+)?)')
_FURNISHED = re.compile(r'"furnished"\s*:\s*(true|false)', re.IGNORECASE)


class ParsedPreferences(BaseModel):
    """Preferences extracted from a search description (None = unspecified)."""

    model_config = ConfigDict(populate_by_name=True)

    bedrooms: int | None = None
    budget_max: float | None = Field(default=None, alias="budgetMax")
    furnished: bool | None = None

    def to_filters(self, base: StructuredFilters | None = None) -> StructuredFilters:
        """
        Merge extracted preferences into filters, marking them explicit.

        Args:
            base: Existing filters to update (defaults to a fresh set)

        Returns:
            New StructuredFilters instance
        """
        filters = (base or StructuredFilters()).model_copy(deep=True)
        if self.bedrooms is not None:
            filters.bedrooms = self.bedrooms
            filters.explicit.bedrooms = True
        if self.budget_max is not None:
            filters.budget_max = self.budget_max
            filters.explicit.budget_max = True
        if self.furnished is not None:
            filters.furnished = self.furnished
            filters.explicit.furnished = True
        return filters


def build_prompt(description: str) -> str:
    """Build the extraction prompt."""
    return f'''Extract from the following tenant-search description exactly three fields as JSON:

1. bedrooms: integer number of bedrooms desired (or null)
2. budgetMax: maximum monthly rent in USD (or null)
3. furnished: true if they want furnished, false if not, or null if unspecified

Only output the JSON object, e.g.:

{{"bedrooms":2,"budgetMax":1500,"furnished":true}}

Description:
"""{description.strip()}"""'''


def parse_response(text: str) -> ParsedPreferences:
    """
    Parse the model output into preferences.

    Args:
        text: Raw model output

    Returns:
        ParsedPreferences (all None if nothing could be read)
    """
    text = (text or "").strip()
    try:
        data = json.loads(text)
        if isinstance(data, dict):
            return ParsedPreferences.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        prefs_log.debug(f"Preference JSON unusable ({e}); using regex fallback")

    bedrooms = _BEDROOMS.search(text)
    budget = _BUDGET_MAX.search(text)
    furnished = _FURNISHED.search(text)
    return ParsedPreferences(
        bedrooms=int(bedrooms.group(1)) if bedrooms else None,
        budget_max=float(budget.group(1)) if budget else None,
        furnished=furnished.group(1).lower() == "true" if furnished else None,
    )


class PreferenceParser:
    """Extracts structured preferences with an LLM."""

    def __init__(self, provider: CompletionProvider):
        self._provider = provider

    async def parse(self, description: str) -> ParsedPreferences:
        """
        Extract bedrooms, max budget and furnished preference.

        Raises:
            PreferenceParseError: If the provider call fails
        """
        try:
            text = await self._provider.complete(SYSTEM_PROMPT, build_prompt(description))
        except Exception as e:
            raise PreferenceParseError(f"Completion provider failed: {e}") from e

        prefs = parse_response(text)
        prefs_log.info(
            f"Parsed preferences: bedrooms={prefs.bedrooms}, "
            f"budget_max={prefs.budget_max}, furnished={prefs.furnished}"
        )
        return prefs
