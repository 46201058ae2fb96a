"""Clothing item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.taxonomy import (
    WEATHER_FLAGS,
    normalize_color_name,
    normalize_item_type,
    slot_for,
    validate_formality,
)


@dataclass
class WeatherSuitability:
    """Independent suitability flags; an item may fit several bands at once."""

    warm: bool = False
    cool: bool = False
    cold: bool = False
    rainy: bool = False

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "WeatherSuitability":
        raw = raw or {}
        return cls(**{flag: bool(raw.get(flag, False)) for flag in WEATHER_FLAGS})

    def supports(self, band: str) -> bool:
        return bool(getattr(self, band, False))


@dataclass
class ClothingItem:
    """Represents one cataloged garment."""

    item_id: str
    user_id: str
    image_url: str
    item_type: str
    color_primary: Optional[str] = None
    color_secondary: Optional[str] = None
    pattern: Optional[str] = None
    style: Optional[str] = None
    formality_level: Optional[int] = None
    weather_suitability: WeatherSuitability = field(default_factory=WeatherSuitability)
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.item_type = normalize_item_type(self.item_type)
        if self.color_primary:
            self.color_primary = normalize_color_name(self.color_primary)
        if self.color_secondary:
            self.color_secondary = normalize_color_name(self.color_secondary)
        if self.formality_level is not None:
            self.formality_level = validate_formality(self.formality_level)
        if isinstance(self.weather_suitability, dict):
            self.weather_suitability = WeatherSuitability.from_dict(self.weather_suitability)

    @property
    def slot(self) -> str:
        return slot_for(self.item_type)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for API responses and recommender prompts."""

        return {
            "id": self.item_id,
            "user_id": self.user_id,
            "image_url": self.image_url,
            "item_type": self.item_type,
            "color_primary": self.color_primary,
            "color_secondary": self.color_secondary,
            "pattern": self.pattern,
            "style": self.style,
            "formality_level": self.formality_level,
            "weather_suitability": {
                flag: self.weather_suitability.supports(flag) for flag in WEATHER_FLAGS
            },
            "description": self.description,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }


def from_raw_metadata(metadata: Dict[str, Any]) -> ClothingItem:
    """Factory to build a :class:`ClothingItem` from loose metadata."""

    required_fields = ["item_id", "user_id", "image_url", "item_type"]
    missing = [name for name in required_fields if not metadata.get(name)]
    if missing:
        raise ValueError(f"Missing required fields for ClothingItem: {missing}")

    formality = metadata.get("formality_level")
    return ClothingItem(
        item_id=str(metadata["item_id"]),
        user_id=str(metadata["user_id"]),
        image_url=str(metadata["image_url"]),
        item_type=str(metadata["item_type"]),
        color_primary=metadata.get("color_primary"),
        color_secondary=metadata.get("color_secondary"),
        pattern=metadata.get("pattern"),
        style=metadata.get("style"),
        formality_level=int(formality) if formality is not None else None,
        weather_suitability=WeatherSuitability.from_dict(metadata.get("weather_suitability")),
        description=metadata.get("description"),
        is_active=bool(metadata.get("is_active", True)),
    )


__all__ = ["ClothingItem", "WeatherSuitability", "from_raw_metadata"]
