"""Error taxonomy shared by the orchestrator, stores and HTTP layer."""

from __future__ import annotations


class ClosetError(Exception):
    """Base class for errors surfaced to callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ClosetError):
    """The user is missing a required setting such as a location."""


class InsufficientWardrobeError(ClosetError):
    """Too few active clothing items to assemble an outfit."""

    def __init__(self, active_count: int, minimum: int) -> None:
        super().__init__(
            "Not enough clothing items. Please upload more photos of your closet."
        )
        self.active_count = active_count
        self.minimum = minimum


class ValidationError(ClosetError):
    """Malformed input; ``field`` names the offending attribute."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(ClosetError):
    """The referenced record does not exist or belongs to another user."""


class RecommendationError(ClosetError):
    """The outfit recommender failed or returned unusable output."""


class WeatherProviderError(ClosetError):
    """The weather provider could not produce current conditions."""


class AnalysisError(ClosetError):
    """Garment image analysis failed or returned unusable output."""


__all__ = [
    "AnalysisError",
    "ClosetError",
    "ConfigurationError",
    "InsufficientWardrobeError",
    "NotFoundError",
    "RecommendationError",
    "ValidationError",
    "WeatherProviderError",
]
