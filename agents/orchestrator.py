"""Daily outfit orchestration for Closet Concierge.

The orchestrator ties the wardrobe, weather provider, recommender and outfit
history together. Records are written last, so a failure at any earlier step
leaves nothing behind.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from closet_app.errors import ConfigurationError, InsufficientWardrobeError, NotFoundError
from closet_app.logging_config import get_logger, log_event, operation_context
from logic.repeat_avoidance import DEFAULT_WINDOW_DAYS, exclusion_set, regeneration_exclusion_set
from logic.validation import validate_feedback, validate_history_query
from memory.user_profile import UserProfile, UserProfileStore
from models.clothing_item import ClothingItem
from models.outfit import GENERATION_DAILY, GENERATION_REGENERATED, HydratedOutfit, OutfitRecord
from models.weather import WeatherConditions
from agents.outfit_recommender import OutfitRecommender
from tools.outfit_store import DuplicateDailyOutfitError, OutfitStore
from tools.wardrobe_store import WardrobeStore
from tools.weather_provider import WeatherProvider

LOGGER = get_logger(__name__)

MIN_WARDROBE_ITEMS = 3


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_outfit_id() -> str:
    return uuid.uuid4().hex


class OutfitOrchestrator:
    """Generates, regenerates and records daily outfits per user."""

    def __init__(
        self,
        wardrobe_store: WardrobeStore,
        outfit_store: OutfitStore,
        profile_store: UserProfileStore,
        weather_provider: WeatherProvider,
        recommender: OutfitRecommender,
        clock: Callable[[], datetime] = _utc_now,
        window_days: int = DEFAULT_WINDOW_DAYS,
        min_items: int = MIN_WARDROBE_ITEMS,
        id_factory: Callable[[], str] = _new_outfit_id,
    ) -> None:
        self.wardrobe_store = wardrobe_store
        self.outfit_store = outfit_store
        self.profile_store = profile_store
        self.weather_provider = weather_provider
        self.recommender = recommender
        self.clock = clock
        self.window_days = window_days
        self.min_items = min_items
        self.id_factory = id_factory

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _require_profile(self, user_id: str) -> UserProfile:
        profile = self.profile_store.get_profile(user_id)
        if profile is None or not (profile.location_key or "").strip():
            raise ConfigurationError("location not set")
        return profile

    def _resolve_today(self, profile: UserProfile, today: Optional[date]) -> date:
        if today is not None:
            return today
        return profile.local_time(self.clock()).date()

    def _active_items(self, user_id: str) -> List[ClothingItem]:
        items = self.wardrobe_store.list_active(user_id)
        if len(items) < self.min_items:
            log_event(
                LOGGER,
                logging.INFO,
                "wardrobe_insufficient",
                active_count=len(items),
                minimum=self.min_items,
            )
            raise InsufficientWardrobeError(len(items), self.min_items)
        return items

    def hydrate(self, record: OutfitRecord) -> HydratedOutfit:
        """Resolve item ids to items; ids that no longer resolve are dropped."""

        items = self.wardrobe_store.get_by_ids(record.item_ids)
        return HydratedOutfit(record=record, items=items)

    def _generate(
        self,
        user_id: str,
        outfit_date: date,
        location_key: str,
        recent_outfits: List[List[str]],
        generation: str,
    ) -> OutfitRecord:
        weather: WeatherConditions = self.weather_provider.current(location_key)
        items = self._active_items(user_id)
        result = self.recommender.recommend(items, weather, recent_outfits)
        record = OutfitRecord(
            outfit_id=self.id_factory(),
            user_id=user_id,
            outfit_date=outfit_date,
            item_ids=list(result.outfit),
            weather=weather,
            reasoning=result.reasoning,
            generation=generation,
            created_at=self.clock(),
        )
        return self.outfit_store.create_outfit(record)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    def get_or_create_daily_outfit(self, user_id: str, today: Optional[date] = None) -> HydratedOutfit:
        """Return today's outfit, generating and persisting one on first request."""

        with operation_context("orchestrator.get_or_create_daily_outfit"):
            profile = self._require_profile(user_id)
            outfit_date = self._resolve_today(profile, today)

            existing = self.outfit_store.latest_for_date(user_id, outfit_date)
            if existing is not None:
                log_event(
                    LOGGER,
                    logging.INFO,
                    "daily_outfit_reused",
                    outfit_id=existing.outfit_id,
                    outfit_date=outfit_date.isoformat(),
                )
                return self.hydrate(existing)

            recent = exclusion_set(self.outfit_store, user_id, outfit_date, self.window_days)
            try:
                record = self._generate(
                    user_id, outfit_date, profile.location_key, recent, GENERATION_DAILY
                )
            except DuplicateDailyOutfitError:
                existing = self.outfit_store.latest_for_date(user_id, outfit_date)
                if existing is None:
                    raise
                log_event(
                    LOGGER,
                    logging.INFO,
                    "daily_outfit_race_resolved",
                    outfit_id=existing.outfit_id,
                    outfit_date=outfit_date.isoformat(),
                )
                return self.hydrate(existing)

            log_event(
                LOGGER,
                logging.INFO,
                "daily_outfit_created",
                outfit_id=record.outfit_id,
                outfit_date=outfit_date.isoformat(),
                item_count=len(record.item_ids),
                excluded_outfits=len(recent),
            )
            return self.hydrate(record)

    def regenerate_outfit(self, user_id: str, today: Optional[date] = None) -> HydratedOutfit:
        """Always create a fresh outfit for today, steering away from today's earlier picks."""

        with operation_context("orchestrator.regenerate_outfit"):
            profile = self._require_profile(user_id)
            outfit_date = self._resolve_today(profile, today)
            recent = regeneration_exclusion_set(
                self.outfit_store, user_id, outfit_date, self.window_days
            )
            record = self._generate(
                user_id, outfit_date, profile.location_key, recent, GENERATION_REGENERATED
            )
            log_event(
                LOGGER,
                logging.INFO,
                "outfit_regenerated",
                outfit_id=record.outfit_id,
                outfit_date=outfit_date.isoformat(),
                excluded_outfits=len(recent),
            )
            return self.hydrate(record)

    def submit_feedback(
        self,
        user_id: str,
        outfit_id: Optional[str],
        feedback: Optional[str] = None,
        was_worn: Optional[bool] = None,
    ) -> HydratedOutfit:
        """Overwrite the feedback and worn flag on one of the user's outfits."""

        with operation_context("orchestrator.submit_feedback"):
            payload = validate_feedback(outfit_id, feedback, was_worn)
            record = self.outfit_store.update_feedback(
                user_id, payload.outfit_id, payload.feedback, payload.was_worn
            )
            if record is None:
                raise NotFoundError("Outfit not found")
            log_event(
                LOGGER,
                logging.INFO,
                "feedback_recorded",
                outfit_id=record.outfit_id,
                feedback=record.feedback,
                was_worn=record.was_worn,
            )
            return self.hydrate(record)

    def list_history(self, user_id: str, limit: int = 30, offset: int = 0) -> List[HydratedOutfit]:
        query = validate_history_query(limit, offset)
        records = self.outfit_store.list_history(user_id, limit=query.limit, offset=query.offset)
        return [self.hydrate(record) for record in records]


__all__ = ["MIN_WARDROBE_ITEMS", "OutfitOrchestrator"]
