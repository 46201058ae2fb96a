"""Mapping logic from garment analysis output to :class:`ClothingItem`."""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, List

from logic.validation import GarmentAnalysis
from models.clothing_item import ClothingItem, WeatherSuitability

logger = logging.getLogger(__name__)


def map_analysis_to_item(user_id: str, image_url: str, analysis: GarmentAnalysis) -> ClothingItem:
    """Build a validated, active :class:`ClothingItem` from one analysis entry.

    Raises a :class:`ValueError` if the image reference is missing.
    """

    if not image_url or not image_url.strip():
        raise ValueError("Missing image URL for analysed garment")

    item = ClothingItem(
        item_id=uuid.uuid4().hex,
        user_id=user_id,
        image_url=image_url.strip(),
        item_type=analysis.item_type,
        color_primary=analysis.color_primary,
        color_secondary=analysis.color_secondary,
        pattern=(analysis.pattern or "").strip().lower() or None,
        style=(analysis.style or "").strip().lower() or None,
        formality_level=analysis.formality_level,
        weather_suitability=WeatherSuitability.from_dict(analysis.weather_suitability.model_dump()),
        description=analysis.description,
    )
    logger.debug(
        "Mapped garment analysis to ClothingItem",
        extra={"item_type": item.item_type, "slot": item.slot},
    )
    return item


def map_analyses(user_id: str, image_url: str, analyses: Iterable[GarmentAnalysis]) -> List[ClothingItem]:
    """Map every garment found in one photo; they share the photo's image reference."""

    return [map_analysis_to_item(user_id, image_url, analysis) for analysis in analyses]


__all__ = ["map_analyses", "map_analysis_to_item"]
