"""Outfit recommender strategies: Gemini-backed and deterministic rule-based.

Recommenders receive the user's active items, the weather snapshot and a list
of recently generated outfits. The recent outfits are a hint to avoid
repetition, not a hard constraint; callers never check results against them.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import google.generativeai as genai
from pydantic import ValidationError

from closet_app.config import DEFAULT_GEMINI_MODEL
from closet_app.errors import RecommendationError
from closet_app.logging_config import get_logger, log_event
from logic.outfit_builder import build_outfit, describe_outfit
from logic.validation import RecommendationPayload, extract_json_object
from models.clothing_item import ClothingItem
from models.outfit import RecommendationResult
from models.weather import WeatherConditions
from tools.observability import instrument_tool

LOGGER = get_logger(__name__)


class OutfitRecommender(ABC):
    """Pluggable outfit selection strategy."""

    @abstractmethod
    def recommend(
        self,
        items: Sequence[ClothingItem],
        weather: WeatherConditions,
        recent_outfits: Sequence[Sequence[str]],
    ) -> RecommendationResult:
        """Return chosen item ids (a subset of ``items``) and a short rationale."""


def build_recommendation_prompt(
    items: Sequence[ClothingItem],
    weather: WeatherConditions,
    recent_outfits: Sequence[Sequence[str]],
    user_style: str = "balanced",
) -> str:
    """Render the stylist prompt sent to the generative model."""

    precipitation = ""
    if weather.precipitation_probability:
        precipitation = f"- Precipitation chance: {weather.precipitation_probability:.0f}%\n"
    catalog = [item.to_dict() for item in items]
    for entry in catalog:
        entry.pop("user_id", None)
        entry.pop("image_url", None)
        entry.pop("created_at", None)
    return (
        "You are a personal stylist. Put together one coordinated outfit from the wardrobe below.\n\n"
        "WEATHER:\n"
        f"- Temperature: {weather.temperature:.0f}°F (feels like {weather.feels_like:.0f}°F)\n"
        f"- Conditions: {weather.description}\n"
        f"- Humidity: {weather.humidity:.0f}%\n"
        f"{precipitation}\n"
        "WARDROBE ITEMS:\n"
        f"{json.dumps(catalog, indent=2)}\n\n"
        "RECENT OUTFITS (item id lists, newest first; avoid repeating them):\n"
        f"{json.dumps([list(ids) for ids in recent_outfits], indent=2)}\n\n"
        f"STYLE PREFERENCE: {user_style}\n\n"
        "Rules:\n"
        "1. Dress for the weather.\n"
        "2. Coordinate colors and styles.\n"
        "3. Include at least a top, a bottom (or a dress) and shoes; add outerwear or accessories when the weather calls for it.\n"
        "4. Use only ids from WARDROBE ITEMS.\n\n"
        'Return only a JSON object: {"outfit": ["item_id", ...], "reasoning": "2-3 sentences"}'
    )


class GeminiOutfitRecommender(OutfitRecommender):
    """Delegates selection to a Gemini generative model."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        model: Any | None = None,
        user_style: str = "balanced",
    ) -> None:
        if model is None:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self.model = model
        self.user_style = user_style

    @instrument_tool("recommend_outfit")
    def recommend(
        self,
        items: Sequence[ClothingItem],
        weather: WeatherConditions,
        recent_outfits: Sequence[Sequence[str]],
    ) -> RecommendationResult:
        prompt = build_recommendation_prompt(items, weather, recent_outfits, self.user_style)
        try:
            response = self.model.generate_content(
                prompt, generation_config={"response_mime_type": "application/json"}
            )
            payload = RecommendationPayload.model_validate(extract_json_object(response.text))
        except (ValidationError, ValueError) as exc:
            log_event(LOGGER, logging.WARNING, "recommendation_unparseable", details=str(exc))
            raise RecommendationError("Failed to generate outfit recommendation") from exc
        except Exception as exc:  # noqa: BLE001
            log_event(LOGGER, logging.ERROR, "recommendation_upstream_failed", exc_info=True)
            raise RecommendationError("Failed to generate outfit recommendation") from exc
        return RecommendationResult(outfit=payload.outfit, reasoning=payload.reasoning)


class RuleBasedOutfitRecommender(OutfitRecommender):
    """Offline recommender built on the deterministic outfit builder."""

    def recommend(
        self,
        items: Sequence[ClothingItem],
        weather: WeatherConditions,
        recent_outfits: Sequence[Sequence[str]],
    ) -> RecommendationResult:
        result = build_outfit(items, weather, recent_outfits)
        if not result.items:
            raise RecommendationError("Could not assemble a top, bottom and shoes from the wardrobe")
        log_event(
            LOGGER,
            logging.INFO,
            "rule_based_recommendation",
            combinations_scored=result.diagnostics.get("combinations_scored"),
            repeat=result.diagnostics.get("repeat"),
        )
        chosen: List[str] = [item.item_id for item in result.items]
        return RecommendationResult(outfit=chosen, reasoning=describe_outfit(result.items, weather))


__all__ = [
    "GeminiOutfitRecommender",
    "OutfitRecommender",
    "RuleBasedOutfitRecommender",
    "build_recommendation_prompt",
]
