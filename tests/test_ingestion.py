"""Garment photo analysis and mapping into the wardrobe."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from agents.garment_analyzer import GeminiGarmentAnalyzer
from closet_app.errors import AnalysisError
from logic.validation import GarmentAnalysis
from models.ingestion_mapping import map_analyses, map_analysis_to_item

ANALYSIS = [
    {
        "item_type": "Jacket",
        "color_primary": "Navy Blue",
        "color_secondary": None,
        "pattern": "Solid",
        "style": "Casual",
        "formality_level": 2,
        "weather_suitability": {"warm": False, "cool": True, "cold": True, "rainy": True},
        "description": "A water-resistant navy shell jacket.",
    },
    {
        "item_type": "jeans",
        "color_primary": "blue",
        "formality_level": 9,
    },
    {
        "item_type": "sneakers",
        "color_primary": "white",
    },
]


class _FakeVisionModel:
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.contents: list = []

    def generate_content(self, contents, generation_config=None):
        self.contents.append(contents)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def test_analyzer_returns_valid_entries_and_skips_bad_ones() -> None:
    model = _FakeVisionModel(text=json.dumps(ANALYSIS))

    analyses = GeminiGarmentAnalyzer(model=model).analyze(b"\xff\xd8jpeg", "image/jpeg")

    assert [a.item_type for a in analyses] == ["Jacket", "sneakers"]
    assert analyses[1].formality_level == 3
    assert model.contents[0][1] == {"mime_type": "image/jpeg", "data": b"\xff\xd8jpeg"}


@pytest.mark.parametrize(
    "model",
    [_FakeVisionModel(text="no garments here"), _FakeVisionModel(error=RuntimeError("503"))],
)
def test_analyzer_failures_raise_analysis_error(model) -> None:
    with pytest.raises(AnalysisError):
        GeminiGarmentAnalyzer(model=model).analyze(b"img")


def test_analyzer_rejects_empty_images() -> None:
    model = _FakeVisionModel(text="[]")
    with pytest.raises(AnalysisError):
        GeminiGarmentAnalyzer(model=model).analyze(b"")
    assert model.contents == []


def test_mapping_normalises_analysis_into_an_active_item() -> None:
    analysis = GarmentAnalysis.model_validate(ANALYSIS[0])

    item = map_analysis_to_item("user-1", "https://cdn.example.com/photo.jpg", analysis)

    assert item.user_id == "user-1"
    assert item.item_type == "jacket"
    assert item.slot == "outerwear"
    assert item.color_primary == "navy"
    assert item.pattern == "solid"
    assert item.style == "casual"
    assert item.is_active is True
    assert item.weather_suitability.rainy is True
    assert item.weather_suitability.warm is False


def test_mapping_requires_an_image_reference() -> None:
    analysis = GarmentAnalysis.model_validate(ANALYSIS[2])

    with pytest.raises(ValueError):
        map_analysis_to_item("user-1", " ", analysis)


def test_photo_with_several_garments_shares_the_image() -> None:
    analyses = [GarmentAnalysis.model_validate(raw) for raw in (ANALYSIS[0], ANALYSIS[2])]

    items = map_analyses("user-1", "https://cdn.example.com/photo.jpg", analyses)

    assert len({item.item_id for item in items}) == 2
    assert {item.image_url for item in items} == {"https://cdn.example.com/photo.jpg"}
