"""Outfit record schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from models.clothing_item import ClothingItem
from models.weather import WeatherConditions

GENERATION_DAILY = "daily"
GENERATION_REGENERATED = "regenerated"


@dataclass
class OutfitRecord:
    """One generated outfit for one user on one calendar date."""

    outfit_id: str
    user_id: str
    outfit_date: date
    item_ids: List[str]
    weather: WeatherConditions
    reasoning: str
    was_worn: Optional[bool] = None
    feedback: Optional[str] = None
    generation: str = GENERATION_DAILY
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class HydratedOutfit:
    """An outfit record with its item ids resolved to clothing items."""

    record: OutfitRecord
    items: List[ClothingItem]

    @property
    def outfit_id(self) -> str:
        return self.record.outfit_id

    def to_dict(self) -> Dict[str, Any]:
        record = self.record
        return {
            "id": record.outfit_id,
            "date": record.outfit_date.isoformat(),
            "items": [item.to_dict() for item in self.items],
            "item_ids": list(record.item_ids),
            "weather": record.weather.to_dict(),
            "reasoning": record.reasoning,
            "was_worn": record.was_worn,
            "feedback": record.feedback,
            "generation": record.generation,
            "created_at": record.created_at.isoformat(),
        }


@dataclass(frozen=True)
class RecommendationResult:
    """Transient output of an outfit recommender."""

    outfit: List[str]
    reasoning: str


__all__ = [
    "GENERATION_DAILY",
    "GENERATION_REGENERATED",
    "HydratedOutfit",
    "OutfitRecord",
    "RecommendationResult",
]
