"""Daily outfit orchestration: idempotency, regeneration, feedback and history."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from agents.outfit_recommender import RuleBasedOutfitRecommender
from closet_app.errors import (
    ConfigurationError,
    InsufficientWardrobeError,
    NotFoundError,
    RecommendationError,
    ValidationError,
)
from conftest import FIXED_NOW, TODAY, make_item, make_weather
from memory.user_profile import UserProfile
from models.outfit import GENERATION_DAILY, GENERATION_REGENERATED, OutfitRecord
from tools.outfit_store import SQLiteOutfitStore


def _past_outfit(user_id: str, outfit_date: date, item_ids: list[str]) -> OutfitRecord:
    return OutfitRecord(
        outfit_id=f"past-{outfit_date.isoformat()}",
        user_id=user_id,
        outfit_date=outfit_date,
        item_ids=item_ids,
        weather=make_weather(),
        reasoning="earlier pick",
    )


def test_daily_outfit_is_created_once_per_day(harness) -> None:
    harness.add_basic_wardrobe()

    first = harness.orchestrator.get_or_create_daily_outfit("user-1")
    second = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert first.outfit_id == second.outfit_id
    assert first.record.outfit_date == TODAY
    assert first.record.generation == GENERATION_DAILY
    assert len(harness.recommender.calls) == 1
    assert harness.weather.calls == ["10001"]
    assert len(harness.outfits.list_for_date("user-1", TODAY)) == 1


def test_explicit_today_overrides_clock(harness) -> None:
    harness.add_basic_wardrobe()
    target = date(2025, 4, 1)

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1", today=target)

    assert outfit.record.outfit_date == target


def test_invalid_timezone_falls_back_to_utc(harness) -> None:
    harness.add_basic_wardrobe()
    harness.profiles.upsert_profile("user-1", {"timezone": "Not/AZone"})

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert outfit.record.outfit_date == FIXED_NOW.date()


def test_profile_timezone_moves_today_across_the_date_line(harness) -> None:
    harness.add_basic_wardrobe()
    harness.profiles.upsert_profile("user-1", {"timezone": "America/New_York"})
    harness.orchestrator.clock = lambda: datetime(2025, 3, 10, 2, 0, tzinfo=timezone.utc)

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert outfit.record.outfit_date == date(2025, 3, 9)


def test_regenerate_creates_distinct_records_and_excludes_today(harness) -> None:
    harness.add_basic_wardrobe()
    daily = harness.orchestrator.get_or_create_daily_outfit("user-1")

    regenerated = [harness.orchestrator.regenerate_outfit("user-1") for _ in range(3)]

    ids = {daily.outfit_id} | {outfit.outfit_id for outfit in regenerated}
    assert len(ids) == 4
    assert all(outfit.record.generation == GENERATION_REGENERATED for outfit in regenerated)
    assert len(harness.outfits.list_for_date("user-1", TODAY)) == 4
    assert harness.recommender.calls[1]["recent_outfits"] == [daily.record.item_ids]

    latest = harness.orchestrator.get_or_create_daily_outfit("user-1")
    assert latest.outfit_id == regenerated[-1].outfit_id


@pytest.mark.parametrize("count", [0, 1, 2])
def test_insufficient_wardrobe_is_rejected_without_persisting(harness, count: int) -> None:
    types = ["t-shirt", "jeans", "sneakers"]
    harness.add_items(*[make_item(f"item-{i}", types[i]) for i in range(count)])

    with pytest.raises(InsufficientWardrobeError) as excinfo:
        harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert excinfo.value.active_count == count
    assert "upload more photos" in excinfo.value.message
    assert harness.outfits.list_history("user-1") == []
    assert harness.recommender.calls == []


def test_three_items_is_enough(harness) -> None:
    harness.add_basic_wardrobe()

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert len(outfit.items) == 3


def test_inactive_items_do_not_count_towards_the_minimum(harness) -> None:
    harness.add_basic_wardrobe()
    harness.wardrobe.deactivate_item("user-1", "user-1-jeans")

    with pytest.raises(InsufficientWardrobeError):
        harness.orchestrator.regenerate_outfit("user-1")


def test_missing_location_is_a_configuration_error(harness) -> None:
    harness.profiles.save_profile(UserProfile(user_id="user-2"))
    harness.add_basic_wardrobe("user-2")

    with pytest.raises(ConfigurationError, match="location not set"):
        harness.orchestrator.get_or_create_daily_outfit("user-2")
    with pytest.raises(ConfigurationError):
        harness.orchestrator.regenerate_outfit("nobody")
    assert harness.weather.calls == []


def test_exclusion_window_covers_the_trailing_week(harness) -> None:
    harness.add_basic_wardrobe()
    for days_ago, ids in ((1, ["a"]), (6, ["b"]), (8, ["c"])):
        harness.outfits.create_outfit(_past_outfit("user-1", TODAY - timedelta(days=days_ago), ids))
    harness.outfits.create_outfit(_past_outfit("user-2", TODAY - timedelta(days=2), ["other-user"]))

    harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert harness.recommender.calls[0]["recent_outfits"] == [["a"], ["b"]]


def test_unknown_item_ids_are_dropped_on_hydration(harness) -> None:
    harness.add_basic_wardrobe()
    harness.recommender.extra_ids = ["ghost-item"]

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert "ghost-item" in outfit.record.item_ids
    assert "ghost-item" not in [item.item_id for item in outfit.items]
    assert len(outfit.items) == 3


def test_feedback_updates_only_the_owners_record(harness) -> None:
    harness.add_basic_wardrobe()
    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    with pytest.raises(NotFoundError):
        harness.orchestrator.submit_feedback("user-2", outfit.outfit_id, feedback="disliked")
    with pytest.raises(NotFoundError):
        harness.orchestrator.submit_feedback("user-1", "missing-outfit", feedback="liked")

    updated = harness.orchestrator.submit_feedback("user-1", outfit.outfit_id, feedback="loved", was_worn=True)

    assert updated.record.feedback == "loved"
    assert updated.record.was_worn is True
    assert len(updated.items) == 3
    assert len(harness.recommender.calls) == 1


def test_feedback_overwrites_both_fields(harness) -> None:
    harness.add_basic_wardrobe()
    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")
    harness.orchestrator.submit_feedback("user-1", outfit.outfit_id, feedback="liked", was_worn=True)

    updated = harness.orchestrator.submit_feedback("user-1", outfit.outfit_id, was_worn=False)

    assert updated.record.was_worn is False
    assert updated.record.feedback is None


def test_feedback_values_are_validated(harness) -> None:
    harness.add_basic_wardrobe()
    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    with pytest.raises(ValidationError) as excinfo:
        harness.orchestrator.submit_feedback("user-1", outfit.outfit_id, feedback="amazing")
    assert excinfo.value.field == "feedback"

    with pytest.raises(ValidationError) as excinfo:
        harness.orchestrator.submit_feedback("user-1", "", feedback="loved")
    assert excinfo.value.field == "outfit_id"

    stored = harness.outfits.get_outfit("user-1", outfit.outfit_id)
    assert stored.feedback is None


def test_history_is_newest_first_and_paginated(harness) -> None:
    harness.add_basic_wardrobe()
    for days_ago in (3, 2, 1):
        harness.orchestrator.get_or_create_daily_outfit("user-1", today=TODAY - timedelta(days=days_ago))

    history = harness.orchestrator.list_history("user-1", limit=2, offset=0)
    rest = harness.orchestrator.list_history("user-1", limit=2, offset=2)

    assert [o.record.outfit_date for o in history] == [TODAY - timedelta(days=1), TODAY - timedelta(days=2)]
    assert [o.record.outfit_date for o in rest] == [TODAY - timedelta(days=3)]
    assert harness.orchestrator.list_history("user-2") == []


@pytest.mark.parametrize("limit, offset, field", [(0, 0, "limit"), (101, 0, "limit"), (10, -1, "offset")])
def test_history_paging_is_validated(harness, limit: int, offset: int, field: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        harness.orchestrator.list_history("user-1", limit=limit, offset=offset)
    assert excinfo.value.field == field


def test_recommender_failure_persists_nothing(harness) -> None:
    harness.add_basic_wardrobe()
    harness.orchestrator.recommender = RuleBasedOutfitRecommender()
    harness.wardrobe.deactivate_item("user-1", "user-1-sneakers")
    harness.add_items(make_item("scarf", "scarf"))

    with pytest.raises(RecommendationError):
        harness.orchestrator.get_or_create_daily_outfit("user-1")
    assert harness.outfits.list_history("user-1") == []


class _RacingOutfitStore(SQLiteOutfitStore):
    """Hides today's record from the first lookup, like a concurrent writer would."""

    def __init__(self, database_path) -> None:
        super().__init__(database_path)
        self.hidden_lookups = 1

    def latest_for_date(self, user_id, outfit_date):
        if self.hidden_lookups:
            self.hidden_lookups -= 1
            return None
        return super().latest_for_date(user_id, outfit_date)


def test_concurrent_daily_creation_returns_the_existing_record(harness, db_path) -> None:
    harness.add_basic_wardrobe()
    racing_store = _RacingOutfitStore(db_path)
    racing_store.create_outfit(_past_outfit("user-1", TODAY, ["winner"]))
    harness.orchestrator.outfit_store = racing_store

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert outfit.outfit_id == f"past-{TODAY.isoformat()}"
    assert len(racing_store.list_for_date("user-1", TODAY)) == 1


def test_cold_rain_scenario_and_frozen_snapshot(harness) -> None:
    harness.orchestrator.recommender = RuleBasedOutfitRecommender()
    harness.weather.conditions = make_weather(45, "light rain", "Rain")
    harness.add_items(
        make_item("tee", "t-shirt", flags=("warm",)),
        make_item("shorts", "shorts", flags=("warm",)),
        make_item("sandals", "sandals", flags=("warm",)),
        make_item("blazer", "blazer", flags=("cool",)),
        make_item("sweater", "sweater", flags=("cool", "cold")),
        make_item("jeans", "jeans", flags=("cool", "cold")),
        make_item("boots", "boots", flags=("cold", "rainy")),
        make_item("raincoat", "raincoat", flags=("cool", "cold", "rainy")),
    )

    outfit = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert sorted(outfit.record.item_ids) == ["boots", "jeans", "raincoat", "sweater"]
    assert outfit.record.weather.temperature == 45
    assert outfit.record.weather.description == "light rain"

    harness.weather.conditions = make_weather(80, "clear sky", "Clear")
    replay = harness.orchestrator.get_or_create_daily_outfit("user-1")

    assert replay.outfit_id == outfit.outfit_id
    assert replay.record.weather.temperature == 45
    assert replay.record.weather.description == "light rain"
    assert len(harness.weather.calls) == 1
