"""Shared fixtures for Closet Concierge tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Sequence

import pytest

from agents.orchestrator import OutfitOrchestrator
from agents.outfit_recommender import OutfitRecommender
from memory.user_profile import UserProfile, UserProfileStore
from models.clothing_item import ClothingItem, WeatherSuitability
from models.outfit import RecommendationResult
from models.weather import WeatherConditions
from tools.outfit_store import SQLiteOutfitStore
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.weather_provider import MockWeatherProvider

TODAY = date(2025, 3, 10)
FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_item(item_id: str, item_type: str, user_id: str = "user-1", **kwargs) -> ClothingItem:
    flags = kwargs.pop("flags", ())
    return ClothingItem(
        item_id=item_id,
        user_id=user_id,
        image_url=f"https://cdn.example.com/{item_id}.jpg",
        item_type=item_type,
        weather_suitability=WeatherSuitability(**{flag: True for flag in flags}),
        **kwargs,
    )


def make_weather(temperature: float = 62, description: str = "clear sky", main: str = "Clear") -> WeatherConditions:
    return WeatherConditions(
        temperature=temperature,
        feels_like=temperature - 2,
        temp_min=temperature - 5,
        temp_max=temperature + 5,
        humidity=60,
        description=description,
        main=main,
    )


@dataclass
class StubRecommender(OutfitRecommender):
    """Returns the first three candidates and remembers what it was asked."""

    calls: List[dict] = field(default_factory=list)
    extra_ids: List[str] = field(default_factory=list)

    def recommend(
        self,
        items: Sequence[ClothingItem],
        weather: WeatherConditions,
        recent_outfits: Sequence[Sequence[str]],
    ) -> RecommendationResult:
        self.calls.append(
            {
                "items": [item.item_id for item in items],
                "weather": weather,
                "recent_outfits": [list(ids) for ids in recent_outfits],
            }
        )
        chosen = [item.item_id for item in items[:3]] + list(self.extra_ids)
        return RecommendationResult(outfit=chosen, reasoning="Stub pick.")


@dataclass
class Harness:
    wardrobe: SQLiteWardrobeStore
    outfits: SQLiteOutfitStore
    profiles: UserProfileStore
    weather: MockWeatherProvider
    recommender: StubRecommender
    orchestrator: OutfitOrchestrator

    def add_items(self, *items: ClothingItem) -> None:
        for item in items:
            self.wardrobe.create_item(item)

    def add_basic_wardrobe(self, user_id: str = "user-1") -> None:
        self.add_items(
            make_item(f"{user_id}-tee", "t-shirt", user_id=user_id, flags=("warm", "cool")),
            make_item(f"{user_id}-jeans", "jeans", user_id=user_id, flags=("cool", "cold")),
            make_item(f"{user_id}-sneakers", "sneakers", user_id=user_id, flags=("warm", "cool")),
        )


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "closet.db"


@pytest.fixture
def harness(db_path: Path) -> Harness:
    wardrobe = SQLiteWardrobeStore(db_path)
    outfits = SQLiteOutfitStore(db_path)
    profiles = UserProfileStore(db_path)
    profiles.save_profile(UserProfile(user_id="user-1", location_key="10001"))
    weather = MockWeatherProvider(make_weather())
    recommender = StubRecommender()
    orchestrator = OutfitOrchestrator(
        wardrobe_store=wardrobe,
        outfit_store=outfits,
        profile_store=profiles,
        weather_provider=weather,
        recommender=recommender,
        clock=lambda: FIXED_NOW,
    )
    return Harness(wardrobe, outfits, profiles, weather, recommender, orchestrator)
