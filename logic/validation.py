"""Pydantic schemas for validating operation inputs and model payloads."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from closet_app.errors import ValidationError

FeedbackValue = Literal["loved", "liked", "neutral", "disliked"]
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class FeedbackInput(BaseModel):
    """Feedback submission for one outfit."""

    outfit_id: str = Field(min_length=1)
    feedback: Optional[FeedbackValue] = None
    was_worn: Optional[bool] = None


class HistoryQuery(BaseModel):
    """Paging parameters for outfit history."""

    limit: int = Field(default=30, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class RecommendationPayload(BaseModel):
    """Shape the outfit recommender must return."""

    outfit: List[str] = Field(min_length=1)
    reasoning: str = ""

    @field_validator("outfit", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(item_id) for item_id in value]
        return value


class WeatherSuitabilityPayload(BaseModel):
    warm: bool = False
    cool: bool = False
    cold: bool = False
    rainy: bool = False


class GarmentAnalysis(BaseModel):
    """One clothing item extracted from a photo by the vision model."""

    item_type: str = Field(min_length=1)
    color_primary: Optional[str] = None
    color_secondary: Optional[str] = None
    pattern: Optional[str] = None
    style: Optional[str] = None
    formality_level: int = Field(default=3, ge=1, le=5)
    weather_suitability: WeatherSuitabilityPayload = WeatherSuitabilityPayload()
    description: Optional[str] = None


def to_closet_error(exc: PydanticValidationError) -> ValidationError:
    """Translate the first pydantic error into a field-scoped ValidationError."""

    errors = exc.errors()
    first = errors[0] if errors else {}
    location = first.get("loc") or ()
    field = str(location[0]) if location else None
    message = f"Invalid {field}" if field else "Invalid input"
    if first.get("msg"):
        message = f"{message}: {first['msg']}"
    return ValidationError(message, field=field)


def validate_feedback(
    outfit_id: Optional[str], feedback: Optional[str], was_worn: Optional[bool]
) -> FeedbackInput:
    try:
        return FeedbackInput.model_validate(
            {"outfit_id": outfit_id or "", "feedback": feedback or None, "was_worn": was_worn}
        )
    except PydanticValidationError as exc:
        raise to_closet_error(exc) from exc


def validate_history_query(limit: int, offset: int) -> HistoryQuery:
    try:
        return HistoryQuery.model_validate({"limit": limit, "offset": offset})
    except PydanticValidationError as exc:
        raise to_closet_error(exc) from exc


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the first JSON object in model output, tolerating markdown fences."""

    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ValueError("No valid JSON found in response")
    return json.loads(match.group(0))


def extract_json_array(text: str) -> List[Any]:
    """Return the first JSON array in model output, tolerating markdown fences."""

    match = _JSON_ARRAY.search(text or "")
    if not match:
        raise ValueError("No valid JSON found in response")
    return json.loads(match.group(0))


__all__ = [
    "FeedbackInput",
    "FeedbackValue",
    "GarmentAnalysis",
    "HistoryQuery",
    "RecommendationPayload",
    "WeatherSuitabilityPayload",
    "extract_json_array",
    "extract_json_object",
    "to_closet_error",
    "validate_feedback",
    "validate_history_query",
]
