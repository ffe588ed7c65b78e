"""Preference extraction routes."""

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from src.api.dependencies import Preferences
from src.matching import ParsedPreferences, PreferenceParseError

prefs_route_log = logger.bind(module="Preferences")

router = APIRouter(prefix="/preferences", tags=["Preferences"])


class ParseRequest(BaseModel):
    """Request body for preference extraction."""

    description: str = Field(..., min_length=1, max_length=4000)


@router.post("/parse", response_model=ParsedPreferences, response_model_by_alias=True)
async def parse_preferences(data: ParseRequest, parser: Preferences) -> ParsedPreferences:
    """Extract bedrooms, max budget and furnished preference from a description."""
    if parser is None:
        raise HTTPException(status_code=503, detail="Preference extraction is not configured")

    try:
        return await parser.parse(data.description)
    except PreferenceParseError as e:
        prefs_route_log.error(f"Preference extraction failed: {e}")
        raise HTTPException(status_code=502, detail="Preference extraction failed")
