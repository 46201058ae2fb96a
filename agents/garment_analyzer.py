"""Gemini vision analysis of closet photos."""

from __future__ import annotations

import logging
from typing import Any, List

import google.generativeai as genai
from pydantic import ValidationError

from closet_app.config import DEFAULT_GEMINI_MODEL
from closet_app.errors import AnalysisError
from closet_app.logging_config import get_logger, log_event
from logic.validation import GarmentAnalysis, extract_json_array
from tools.observability import instrument_tool

LOGGER = get_logger(__name__)

ANALYSIS_PROMPT = """Identify every visible clothing item in this photo. For each item report:

- item_type: shirt, t-shirt, blouse, pants, jeans, shorts, skirt, dress, jacket, coat, sweater, hoodie, shoes, sneakers, boots or accessories
- color_primary: a specific color name
- color_secondary: a second color, or null
- pattern: solid, striped, plaid, floral, geometric, polka dot, ...
- style: casual, formal, business casual, sporty, bohemian, preppy, ...
- formality_level: 1 (gym wear) to 5 (suits and gowns)
- weather_suitability: {"warm": above 75°F, "cool": 50-75°F, "cold": below 50°F, "rainy": water-resistant}, each true or false
- description: two or three sentences

Return only a JSON array of objects with exactly those keys."""


class GeminiGarmentAnalyzer:
    """Extracts structured garment attributes from a photo."""

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = DEFAULT_GEMINI_MODEL,
        model: Any | None = None,
    ) -> None:
        if model is None:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self.model = model

    @instrument_tool("analyze_garment_photo")
    def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> List[GarmentAnalysis]:
        if not image_bytes:
            raise AnalysisError("Image is empty")
        try:
            response = self.model.generate_content(
                [ANALYSIS_PROMPT, {"mime_type": mime_type, "data": image_bytes}],
                generation_config={"response_mime_type": "application/json"},
            )
            raw_items = extract_json_array(response.text)
        except ValueError as exc:
            log_event(LOGGER, logging.WARNING, "garment_analysis_unparseable", details=str(exc))
            raise AnalysisError("Failed to analyze clothing image") from exc
        except Exception as exc:  # noqa: BLE001
            log_event(LOGGER, logging.ERROR, "garment_analysis_failed", exc_info=True)
            raise AnalysisError("Failed to analyze clothing image") from exc

        analyses: List[GarmentAnalysis] = []
        for raw in raw_items:
            try:
                analyses.append(GarmentAnalysis.model_validate(raw))
            except ValidationError as exc:
                log_event(LOGGER, logging.WARNING, "garment_entry_skipped", details=str(exc))
        return analyses


__all__ = ["ANALYSIS_PROMPT", "GeminiGarmentAnalyzer"]
