"""HTTP surface exercised through FastAPI's TestClient."""

from __future__ import annotations

import base64
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from agents.garment_analyzer import GeminiGarmentAnalyzer
from closet_app.app import ClosetApp
from closet_app.config import AppConfig
from closet_app.errors import RecommendationError, WeatherProviderError
from conftest import StubRecommender, make_item, make_weather
from server.api import create_api
from tools.notification import RecordingNotificationDispatcher
from tools.weather_provider import MockWeatherProvider

USER = {"X-User-Id": "user-1"}


class _FakeVisionModel:
    def generate_content(self, contents, generation_config=None):
        garments = [
            {"item_type": "coat", "color_primary": "camel", "formality_level": 3,
             "weather_suitability": {"cold": True}},
            {"item_type": "boots", "color_primary": "black"},
        ]
        return SimpleNamespace(text=json.dumps(garments))


@pytest.fixture
def closet(tmp_path) -> ClosetApp:
    config = AppConfig(database_path=str(tmp_path / "api.db"), environment="test")
    return ClosetApp(
        config=config,
        weather_provider=MockWeatherProvider(make_weather(64, "few clouds", "Clouds")),
        recommender=StubRecommender(),
        dispatcher=RecordingNotificationDispatcher(),
        garment_analyzer=GeminiGarmentAnalyzer(model=_FakeVisionModel()),
    )


@pytest.fixture
def client(closet: ClosetApp) -> TestClient:
    return TestClient(create_api(closet))


def _seed(closet: ClosetApp, user_id: str = "user-1") -> None:
    closet.profile_store.upsert_profile(user_id, {"location_key": "10001"})
    for item_id, item_type in (("tee", "t-shirt"), ("jeans", "jeans"), ("sneakers", "sneakers")):
        closet.wardrobe_store.create_item(make_item(f"{user_id}-{item_id}", item_type, user_id=user_id))


def test_healthcheck(client) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json()["environment"] == "test"


def test_requests_without_user_header_are_rejected(client) -> None:
    assert client.get("/outfits/daily").status_code == 401


def test_daily_outfit_round_trip(client, closet) -> None:
    _seed(closet)

    first = client.get("/outfits/daily", headers=USER)
    second = client.get("/outfits/daily", headers=USER)

    assert first.status_code == 200
    body = first.json()
    assert body["id"] == second.json()["id"]
    assert body["weather"]["description"] == "few clouds"
    assert len(body["items"]) == 3
    assert body["generation"] == "daily"


def test_regenerate_then_history(client, closet) -> None:
    _seed(closet)
    daily = client.get("/outfits/daily", headers=USER).json()

    regenerated = client.post("/outfits/regenerate", headers=USER).json()
    history = client.get("/outfits/history", params={"limit": 10}, headers=USER).json()

    assert regenerated["id"] != daily["id"]
    assert regenerated["generation"] == "regenerated"
    assert [o["id"] for o in history["outfits"]] == [regenerated["id"], daily["id"]]


def test_error_mapping(client, closet) -> None:
    no_location = client.get("/outfits/daily", headers=USER)
    assert no_location.status_code == 400
    assert no_location.json()["error"] == "location not set"

    closet.profile_store.upsert_profile("user-1", {"location_key": "10001"})
    sparse = client.get("/outfits/daily", headers=USER)
    assert sparse.status_code == 400
    assert "upload more photos" in sparse.json()["error"]

    bad_paging = client.get("/outfits/history", params={"limit": 0}, headers=USER)
    assert bad_paging.status_code == 400
    assert bad_paging.json()["field"] == "limit"


def test_upstream_failures_map_to_bad_gateway(client, closet) -> None:
    _seed(closet)

    def _fail(*_args, **_kwargs):
        raise RecommendationError("model said no")

    closet.orchestrator.recommender.recommend = _fail
    response = client.post("/outfits/regenerate", headers=USER)
    assert response.status_code == 502
    assert response.json()["error"] == "Failed to generate outfit recommendation"

    def _no_weather(_location):
        raise WeatherProviderError("api down")

    closet.weather_provider.current = _no_weather
    assert client.get("/weather/current", headers=USER).status_code == 502


def test_feedback_endpoint(client, closet) -> None:
    _seed(closet)
    outfit_id = client.get("/outfits/daily", headers=USER).json()["id"]

    invalid = client.post("/outfits/feedback", json={"outfit_id": outfit_id, "feedback": "amazing"}, headers=USER)
    foreign = client.post(
        "/outfits/feedback", json={"outfit_id": outfit_id, "feedback": "loved"}, headers={"X-User-Id": "user-2"}
    )
    ok = client.post(
        "/outfits/feedback", json={"outfit_id": outfit_id, "feedback": "loved", "was_worn": True}, headers=USER
    )

    assert invalid.status_code == 400
    assert invalid.json()["field"] == "feedback"
    assert foreign.status_code == 404
    assert ok.status_code == 200
    assert ok.json()["feedback"] == "loved"
    assert ok.json()["was_worn"] is True


def test_closet_item_endpoints(client, closet) -> None:
    _seed(closet)

    listed = client.get("/closet/items", headers=USER).json()
    assert listed["count"] == 3

    updated = client.put("/closet/items/user-1-tee", json={"style": "sporty", "formality_level": 1}, headers=USER)
    assert updated.status_code == 200
    assert updated.json()["style"] == "sporty"

    invalid = client.put("/closet/items/user-1-tee", json={"formality_level": 8}, headers=USER)
    assert invalid.status_code == 400

    assert client.get("/closet/items/user-1-tee", headers={"X-User-Id": "user-2"}).status_code == 404
    assert client.delete("/closet/items/user-1-tee", headers=USER).json() == {"id": "user-1-tee", "is_active": False}
    assert client.get("/closet/items", headers=USER).json()["count"] == 2
    assert client.get("/closet/items/user-1-tee", headers=USER).json()["is_active"] is False


def test_photo_ingestion_endpoint(client) -> None:
    payload = {
        "image_url": "https://cdn.example.com/closet-1.jpg",
        "image_base64": base64.b64encode(b"jpeg-bytes").decode(),
    }

    created = client.post("/closet/photos", json=payload, headers=USER)
    invalid = client.post("/closet/photos", json={**payload, "image_base64": "%%%"}, headers=USER)

    assert created.status_code == 201
    assert sorted(item["item_type"] for item in created.json()["items"]) == ["boots", "coat"]
    assert client.get("/closet/items", headers=USER).json()["count"] == 2
    assert invalid.status_code == 400
    assert invalid.json()["field"] == "image_base64"


def test_profile_and_notification_endpoints(client) -> None:
    assert client.get("/users/profile", headers=USER).status_code == 404

    profile = client.put("/users/profile", json={"location_key": "Chicago", "timezone": "UTC"}, headers=USER)
    settings = client.put(
        "/users/notifications", json={"notification_time": "06:30", "device_token": "tok"}, headers=USER
    )
    invalid = client.put("/users/notifications", json={"notification_time": "6.30am"}, headers=USER)

    assert profile.json()["location_key"] == "Chicago"
    assert settings.json()["notification_time"] == "06:30"
    assert settings.json()["has_device_token"] is True
    assert invalid.status_code == 400
    assert invalid.json()["field"] == "notification_time"
    assert client.get("/weather/current", headers=USER).json()["temperature"] == 64
