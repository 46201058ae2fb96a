"""Deterministic outfit assembly helpers with transparent diagnostics."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from logic.contextual_filtering import filter_by_weather, outerwear_required
from models.clothing_item import ClothingItem
from models.weather import WeatherConditions

logger = logging.getLogger(__name__)

MAX_PER_SLOT = 6


@dataclass(frozen=True)
class OutfitBuildResult:
    items: List[ClothingItem]
    diagnostics: Dict[str, object]


def _group_by_slot(items: Sequence[ClothingItem]) -> Dict[str, List[ClothingItem]]:
    grouped: Dict[str, List[ClothingItem]] = {}
    for item in items:
        grouped.setdefault(item.slot, []).append(item)
    for values in grouped.values():
        values.sort(key=lambda i: i.item_id)
    return grouped


def _base_combinations(grouped: Dict[str, List[ClothingItem]]) -> List[List[ClothingItem]]:
    shoes = grouped.get("shoes", [])[:MAX_PER_SLOT]
    combos: List[List[ClothingItem]] = []
    for top in grouped.get("top", [])[:MAX_PER_SLOT]:
        for bottom in grouped.get("bottom", [])[:MAX_PER_SLOT]:
            for pair in shoes:
                combos.append([top, bottom, pair])
    for one_piece in grouped.get("one_piece", [])[:MAX_PER_SLOT]:
        for pair in shoes:
            combos.append([one_piece, pair])
    return combos


def _formality_spread(items: Sequence[ClothingItem]) -> int:
    levels = [item.formality_level for item in items if item.formality_level is not None]
    if len(levels) < 2:
        return 0
    return max(levels) - min(levels)


def _pick_outerwear(grouped: Dict[str, List[ClothingItem]], weather: WeatherConditions) -> Optional[ClothingItem]:
    layers = grouped.get("outerwear", [])
    if not layers:
        return None
    if weather.is_rainy:
        rain_ready = [item for item in layers if item.weather_suitability.rainy]
        if rain_ready:
            return rain_ready[0]
    return layers[0]


def build_outfit(
    candidates: Sequence[ClothingItem],
    weather: WeatherConditions,
    recent_outfits: Sequence[Sequence[str]] = (),
) -> OutfitBuildResult:
    """Select a coherent outfit for the weather, steering away from recent combinations."""

    filtered = filter_by_weather(list(candidates), weather)
    grouped = _group_by_slot(filtered.items)
    diagnostics: Dict[str, object] = {
        "weather_filter": filtered.debug,
        "removed": filtered.removed,
        "used_unfiltered_fallback": False,
    }

    combos = _base_combinations(grouped)
    if not combos:
        # Weather flags can be too strict for a small closet; retry on everything active.
        grouped = _group_by_slot([item for item in candidates if item.is_active])
        combos = _base_combinations(grouped)
        diagnostics["used_unfiltered_fallback"] = True
    if not combos:
        logger.info("Insufficient items for a base outfit: slots=%s", sorted(grouped))
        diagnostics["reason"] = "missing_required_slots"
        return OutfitBuildResult(items=[], diagnostics=diagnostics)

    layer = _pick_outerwear(grouped, weather) if outerwear_required(weather) else None
    recent_sets: Set[FrozenSet[str]] = {frozenset(ids) for ids in recent_outfits}
    recent_items: Set[str] = {item_id for ids in recent_outfits for item_id in ids}

    def score(combo: List[ClothingItem]) -> Tuple[int, int, int, List[str]]:
        outfit = combo + ([layer] if layer else [])
        ids = [item.item_id for item in outfit]
        is_repeat = 1 if frozenset(ids) in recent_sets else 0
        overlap = sum(1 for item_id in ids if item_id in recent_items)
        return is_repeat, overlap, _formality_spread(outfit), ids

    best = min(combos, key=score)
    best_score = score(best)
    chosen = best + ([layer] if layer else [])
    diagnostics.update(
        {
            "combinations_scored": len(combos),
            "repeat": bool(best_score[0]),
            "recent_overlap": best_score[1],
            "formality_spread": best_score[2],
            "outerwear_added": layer.item_id if layer else None,
            "chosen_ids": [item.item_id for item in chosen],
        }
    )
    logger.info("Selected outfit from %s combinations", len(combos))
    return OutfitBuildResult(items=chosen, diagnostics=diagnostics)


def describe_outfit(items: Sequence[ClothingItem], weather: WeatherConditions) -> str:
    """Short user-facing rationale for a rule-built outfit."""

    pieces = []
    for item in items:
        color = f"{item.color_primary} " if item.color_primary else ""
        pieces.append(f"{color}{item.item_type}")
    summary = ", ".join(pieces)
    layer_note = " A layer on top keeps you covered." if any(i.slot == "outerwear" for i in items) else ""
    return (
        f"{summary.capitalize()} suits {weather.temperature:.0f}°F and {weather.description}."
        f"{layer_note}"
    )


__all__ = ["MAX_PER_SLOT", "OutfitBuildResult", "build_outfit", "describe_outfit"]
