"""Deterministic weather filtering over clothing items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from models.clothing_item import ClothingItem
from models.weather import WeatherConditions


@dataclass(frozen=True)
class FilteringResult:
    """Captures the outcome of a single filtering step."""

    items: List[ClothingItem]
    removed: Dict[str, str]
    debug: Dict[str, object]


def _has_any_flag(item: ClothingItem) -> bool:
    flags = item.weather_suitability
    return flags.warm or flags.cool or flags.cold or flags.rainy


def filter_by_weather(items: List[ClothingItem], weather: WeatherConditions) -> FilteringResult:
    """Keep items suitable for the current temperature band.

    Items with no suitability flags at all are kept, since the analysis
    simply did not classify them. Rain never removes an item; it only
    shapes which outerwear is preferred later.
    """

    band = weather.temperature_band
    removed: Dict[str, str] = {}
    kept: List[ClothingItem] = []
    for item in items:
        if not item.is_active:
            removed[item.item_id] = "inactive"
            continue
        if _has_any_flag(item) and not item.weather_suitability.supports(band):
            removed[item.item_id] = f"not suitable for {band} weather"
            continue
        kept.append(item)

    debug = {
        "input_count": len(items),
        "kept_count": len(kept),
        "removed_count": len(removed),
        "temperature_band": band,
        "rainy": weather.is_rainy,
    }
    return FilteringResult(items=kept, removed=removed, debug=debug)


def outerwear_required(weather: WeatherConditions) -> bool:
    """Cold or wet days call for a layer on top."""

    return weather.temperature_band == "cold" or weather.is_rainy


__all__ = ["FilteringResult", "filter_by_weather", "outerwear_required"]
