"""Hourly scheduler that generates daily outfits and pushes notifications."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from agents.orchestrator import OutfitOrchestrator
from closet_app.errors import InsufficientWardrobeError
from closet_app.logging_config import get_logger, log_event, operation_context
from memory.user_profile import UserProfileStore
from tools.notification import NotificationDispatcher
from tools.weather_provider import WeatherProvider

LOGGER = get_logger(__name__)


@dataclass
class TickReport:
    """User ids handled by one scheduler tick."""

    notified: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def seconds_until_next_tick(now: datetime) -> float:
    """Seconds from ``now`` until the top of the next hour."""

    next_hour = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    return (next_hour - now).total_seconds()


class DailyOutfitScheduler:
    """Runs the daily outfit job for every user due a notification this hour."""

    def __init__(
        self,
        profile_store: UserProfileStore,
        orchestrator: OutfitOrchestrator,
        weather_provider: WeatherProvider,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.profile_store = profile_store
        self.orchestrator = orchestrator
        self.weather_provider = weather_provider
        self.dispatcher = dispatcher
        self.clock = clock

    def run_tick(self, now: Optional[datetime] = None) -> TickReport:
        now = now or self.clock()
        report = TickReport()
        with operation_context("scheduler.run_tick"):
            candidates = self.profile_store.list_notification_candidates(now)
            log_event(
                LOGGER, logging.INFO, "scheduler_tick_started", tick_at=now.isoformat(), candidates=len(candidates)
            )

            for profile in candidates:
                local_today = profile.local_time(now).date()
                try:
                    outfit = self.orchestrator.get_or_create_daily_outfit(profile.user_id, today=local_today)
                    weather = self.weather_provider.current(profile.location_key)
                except InsufficientWardrobeError:
                    log_event(LOGGER, logging.INFO, "scheduler_user_skipped", user_id=profile.user_id)
                    report.skipped.append(profile.user_id)
                    continue
                except Exception:  # noqa: BLE001
                    log_event(
                        LOGGER,
                        logging.ERROR,
                        "scheduler_user_failed",
                        user_id=profile.user_id,
                        exc_info=True,
                    )
                    report.failed.append(profile.user_id)
                    continue

                self.dispatcher.send(
                    profile.device_token,
                    outfit.outfit_id,
                    {"temperature": weather.temperature, "description": weather.description},
                )
                report.notified.append(profile.user_id)

            log_event(
                LOGGER,
                logging.INFO,
                "scheduler_tick_completed",
                notified=len(report.notified),
                skipped=len(report.skipped),
                failed=len(report.failed),
            )
        return report

    def run_forever(self, stop_event: threading.Event) -> None:
        """Tick at the top of every hour until ``stop_event`` is set."""

        log_event(LOGGER, logging.INFO, "scheduler_started")
        while not stop_event.is_set():
            if stop_event.wait(seconds_until_next_tick(self.clock())):
                break
            try:
                self.run_tick()
            except Exception:  # noqa: BLE001
                log_event(LOGGER, logging.ERROR, "scheduler_tick_failed", exc_info=True)
        log_event(LOGGER, logging.INFO, "scheduler_stopped")


__all__ = ["DailyOutfitScheduler", "TickReport", "seconds_until_next_tick"]
