"""Closet Concierge application bootstrap."""

from __future__ import annotations

import logging
from typing import List

from agents.garment_analyzer import GeminiGarmentAnalyzer
from agents.orchestrator import OutfitOrchestrator
from agents.outfit_recommender import (
    GeminiOutfitRecommender,
    OutfitRecommender,
    RuleBasedOutfitRecommender,
)
from closet_app.config import AppConfig
from closet_app.errors import ConfigurationError, ValidationError
from closet_app.logging_config import configure_logging, get_logger, log_event, operation_context
from memory.user_profile import UserProfileStore
from models.clothing_item import ClothingItem
from models.ingestion_mapping import map_analyses
from server.scheduler import DailyOutfitScheduler
from tools.notification import FCMNotificationDispatcher, NotificationDispatcher
from tools.outfit_store import SQLiteOutfitStore
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.weather_provider import (
    CachedWeatherProvider,
    OpenWeatherProvider,
    WeatherCache,
    WeatherProvider,
)

LOGGER = get_logger(__name__)


class ClosetApp:
    """Wires together stores, providers, the orchestrator and the scheduler."""

    def __init__(
        self,
        config: AppConfig | None = None,
        weather_provider: WeatherProvider | None = None,
        recommender: OutfitRecommender | None = None,
        dispatcher: NotificationDispatcher | None = None,
        garment_analyzer: GeminiGarmentAnalyzer | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()

        self.wardrobe_store = SQLiteWardrobeStore(self.config.database_path)
        self.outfit_store = SQLiteOutfitStore(self.config.database_path)
        self.profile_store = UserProfileStore(self.config.database_path)
        self.weather_provider = weather_provider or CachedWeatherProvider(
            OpenWeatherProvider(
                api_key=self.config.openweather_api_key,
                units=self.config.weather_units,
            ),
            WeatherCache(ttl_seconds=self.config.weather_cache_ttl_seconds),
        )
        self.recommender = recommender or self._build_recommender()
        self.garment_analyzer = garment_analyzer
        if self.garment_analyzer is None and self.config.gemini_api_key:
            self.garment_analyzer = GeminiGarmentAnalyzer(
                api_key=self.config.gemini_api_key, model_name=self.config.model
            )
        self.dispatcher = dispatcher or FCMNotificationDispatcher(
            project_id=self.config.fcm_project_id,
            access_token=self.config.fcm_access_token,
        )

        self.orchestrator = OutfitOrchestrator(
            wardrobe_store=self.wardrobe_store,
            outfit_store=self.outfit_store,
            profile_store=self.profile_store,
            weather_provider=self.weather_provider,
            recommender=self.recommender,
            window_days=self.config.exclusion_window_days,
            min_items=self.config.min_wardrobe_items,
        )
        self.scheduler = DailyOutfitScheduler(
            profile_store=self.profile_store,
            orchestrator=self.orchestrator,
            weather_provider=self.weather_provider,
            dispatcher=self.dispatcher,
        )

    def _build_recommender(self) -> OutfitRecommender:
        if self.config.gemini_api_key:
            return GeminiOutfitRecommender(
                api_key=self.config.gemini_api_key, model_name=self.config.model
            )
        log_event(LOGGER, logging.WARNING, "recommender_fallback", recommender="rule_based")
        return RuleBasedOutfitRecommender()

    def ingest_photo(
        self, user_id: str, image_url: str, image_bytes: bytes, mime_type: str = "image/jpeg"
    ) -> List[ClothingItem]:
        """Analyse a closet photo and store every garment found in it."""

        if self.garment_analyzer is None:
            raise ConfigurationError("Garment analysis requires a Gemini API key")
        with operation_context("app.ingest_photo"):
            analyses = self.garment_analyzer.analyze(image_bytes, mime_type)
            try:
                items = map_analyses(user_id, image_url, analyses)
            except ValueError as exc:
                raise ValidationError(str(exc), field="image_url") from exc
            stored = [self.wardrobe_store.create_item(item) for item in items]
            log_event(LOGGER, logging.INFO, "photo_ingested", item_count=len(stored))
            return stored


__all__ = ["ClosetApp"]
