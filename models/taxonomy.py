"""Canonical taxonomy definitions for clothing items.

This module centralises the labels the vision analysis is asked to produce and
maps each garment type onto an outfit slot. Helper functions keep validation
consistent across ingestion, storage and the recommenders.
"""

from typing import Dict, List


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace("_", " ").replace("-", " ")


SLOTS: Dict[str, List[str]] = {
    "top": ["shirt", "t shirt", "tshirt", "blouse", "sweater", "hoodie", "tank top", "polo", "top"],
    "bottom": ["pants", "jeans", "shorts", "skirt", "trousers", "leggings", "chinos"],
    "one_piece": ["dress", "jumpsuit"],
    "outerwear": ["jacket", "coat", "blazer", "cardigan", "raincoat", "parka"],
    "shoes": ["shoes", "sneakers", "boots", "sandals", "loafers", "heels"],
    "accessory": ["accessories", "accessory", "hat", "scarf", "belt", "bag"],
}

PATTERNS = ["solid", "striped", "plaid", "floral", "geometric", "polka dot"]
STYLES = ["casual", "formal", "business casual", "sporty", "bohemian", "preppy"]
FEEDBACK_VALUES = ("loved", "liked", "neutral", "disliked")
WEATHER_FLAGS = ("warm", "cool", "cold", "rainy")

FORMALITY_MIN = 1
FORMALITY_MAX = 5

COLOR_MAP = {
    "navy blue": "navy",
    "light blue": "blue",
    "sky blue": "blue",
    "off white": "white",
    "cream": "beige",
    "tan": "beige",
    "grey": "gray",
    "olive": "green",
    "burgundy": "red",
}


def normalize_item_type(value: str) -> str:
    """Normalise a garment type, keeping unknown types verbatim (lower-cased)."""

    key = _normalize_key(value)
    if not key:
        raise ValueError("item_type must not be empty")
    return key


def slot_for(item_type: str) -> str:
    """Return the outfit slot for a garment type, or ``other`` when unknown."""

    key = _normalize_key(item_type)
    for slot, types in SLOTS.items():
        if key in types:
            return slot
    return "other"


def validate_formality(value: int) -> int:
    """Validate a formality level on the 1 (gym wear) to 5 (gowns) scale."""

    level = int(value)
    if not FORMALITY_MIN <= level <= FORMALITY_MAX:
        raise ValueError(
            f"formality_level must be between {FORMALITY_MIN} and {FORMALITY_MAX}, got {value}"
        )
    return level


def normalize_color_name(raw_string: str) -> str:
    """Map a raw color string to a canonical color name."""

    key = raw_string.strip().lower()
    return COLOR_MAP.get(key, key)


__all__ = [
    "SLOTS",
    "PATTERNS",
    "STYLES",
    "FEEDBACK_VALUES",
    "WEATHER_FLAGS",
    "normalize_item_type",
    "slot_for",
    "validate_formality",
    "normalize_color_name",
]
