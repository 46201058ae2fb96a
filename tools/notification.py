"""Push notification delivery for daily outfits."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

import requests

from closet_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"


def build_outfit_message(device_token: str, outfit_id: str, weather: Dict[str, Any]) -> Dict[str, Any]:
    """Build the FCM message body announcing a daily outfit."""

    temperature = weather.get("temperature")
    description = weather.get("description", "")
    return {
        "message": {
            "token": device_token,
            "notification": {
                "title": "Your outfit for today",
                "body": f"Perfect for {temperature}°F and {description}! Tap to see your look.",
            },
            "data": {
                "type": "daily_outfit",
                "outfit_id": str(outfit_id),
                "weather": str(description),
            },
        }
    }


class NotificationDispatcher(ABC):
    """Delivers outfit notifications. Implementations never raise."""

    @abstractmethod
    def send(self, device_token: str, outfit_id: str, weather: Dict[str, Any]) -> None:
        """Send a daily outfit notification, swallowing delivery failures."""


class FCMNotificationDispatcher(NotificationDispatcher):
    """Firebase Cloud Messaging HTTP v1 dispatcher."""

    def __init__(
        self,
        project_id: str | None,
        access_token: str | None,
        timeout_seconds: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.project_id = project_id
        self.access_token = access_token
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def send(self, device_token: str, outfit_id: str, weather: Dict[str, Any]) -> None:
        if not self.project_id or not self.access_token:
            log_event(LOGGER, logging.WARNING, "notification_skipped", reason="fcm_not_configured", outfit_id=outfit_id)
            return

        try:
            response = self.session.post(
                FCM_SEND_URL.format(project_id=self.project_id),
                json=build_outfit_message(device_token, outfit_id, weather),
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except Exception:  # noqa: BLE001
            log_event(
                LOGGER,
                logging.ERROR,
                "notification_failed",
                outfit_id=outfit_id,
                device_token=device_token,
                exc_info=True,
            )
            return
        log_event(LOGGER, logging.INFO, "notification_sent", outfit_id=outfit_id)


@dataclass
class RecordingNotificationDispatcher(NotificationDispatcher):
    """In-memory dispatcher that keeps every message it was asked to send."""

    sent: List[Dict[str, Any]] = field(default_factory=list)

    def send(self, device_token: str, outfit_id: str, weather: Dict[str, Any]) -> None:
        self.sent.append(build_outfit_message(device_token, outfit_id, weather)["message"])


__all__ = [
    "FCMNotificationDispatcher",
    "NotificationDispatcher",
    "RecordingNotificationDispatcher",
    "build_outfit_message",
]
