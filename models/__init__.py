"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.clothing_item import ClothingItem, WeatherSuitability, from_raw_metadata
from models.outfit import HydratedOutfit, OutfitRecord, RecommendationResult
from models.weather import WeatherConditions

__all__ = [
    "ClothingItem",
    "HydratedOutfit",
    "OutfitRecord",
    "RecommendationResult",
    "WeatherConditions",
    "WeatherSuitability",
    "from_raw_metadata",
]
