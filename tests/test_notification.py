"""Notification message building and FCM dispatch."""

from __future__ import annotations

from typing import Any, Dict, List

import requests

from tools.notification import (
    FCMNotificationDispatcher,
    RecordingNotificationDispatcher,
    build_outfit_message,
)


class _FakeResponse:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, status_code: int = 200, error: Exception | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.posts: List[Dict[str, Any]] = []

    def post(self, url: str, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> _FakeResponse:
        self.posts.append({"url": url, "json": json, "headers": headers})
        if self.error:
            raise self.error
        return _FakeResponse(self.status_code)


def test_message_mentions_temperature_and_conditions() -> None:
    message = build_outfit_message("device-1", "outfit-9", {"temperature": 45, "description": "light rain"})["message"]

    assert message["token"] == "device-1"
    assert message["notification"]["title"] == "Your outfit for today"
    assert message["notification"]["body"] == "Perfect for 45°F and light rain! Tap to see your look."
    assert message["data"] == {"type": "daily_outfit", "outfit_id": "outfit-9", "weather": "light rain"}


def test_fcm_dispatcher_posts_to_project_endpoint() -> None:
    session = _FakeSession()
    dispatcher = FCMNotificationDispatcher("closet-prod", "access-token", session=session)

    dispatcher.send("device-1", "outfit-9", {"temperature": 70, "description": "clear sky"})

    post = session.posts[0]
    assert post["url"] == "https://fcm.googleapis.com/v1/projects/closet-prod/messages:send"
    assert post["headers"]["Authorization"] == "Bearer access-token"
    assert post["json"]["message"]["data"]["outfit_id"] == "outfit-9"


def test_fcm_dispatcher_swallows_delivery_failures() -> None:
    for session in (_FakeSession(status_code=500), _FakeSession(error=requests.Timeout("slow"))):
        dispatcher = FCMNotificationDispatcher("closet-prod", "access-token", session=session)
        dispatcher.send("device-1", "outfit-9", {"temperature": 70, "description": "clear sky"})
        assert len(session.posts) == 1


def test_fcm_dispatcher_skips_without_credentials() -> None:
    session = _FakeSession()
    FCMNotificationDispatcher(None, None, session=session).send("device-1", "outfit-9", {})

    assert session.posts == []


def test_recording_dispatcher_keeps_messages() -> None:
    dispatcher = RecordingNotificationDispatcher()
    dispatcher.send("device-1", "outfit-9", {"temperature": 60, "description": "overcast clouds"})

    assert dispatcher.sent[0]["data"]["outfit_id"] == "outfit-9"
