"""Weather provider abstractions, a TTL cache and implementations."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import requests
from pydantic import BaseModel, ValidationError

from closet_app.config import DEFAULT_WEATHER_CACHE_TTL_SECONDS
from closet_app.errors import WeatherProviderError
from closet_app.logging_config import get_logger, log_event
from models.weather import WeatherConditions
from tools.observability import instrument_tool


LOGGER = get_logger(__name__)
OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class _WeatherCondition(BaseModel):
    main: str = "unknown"
    description: str = "unknown"


class _Wind(BaseModel):
    speed: Optional[float] = None


class _Main(BaseModel):
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float


class _CurrentWeatherResponse(BaseModel):
    main: _Main
    weather: List[_WeatherCondition] = []
    wind: _Wind = _Wind()


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def current(self, location_key: str) -> WeatherConditions:
        """Return current conditions for a zip code or city name."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather current-conditions provider with schema validation."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        units: str = "imperial",
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.units = units
        self.session = session or requests.Session()

    def _params(self, location_key: str) -> Dict[str, str]:
        params = {"appid": str(self.api_key), "units": self.units}
        key = location_key.strip()
        if key.isdigit():
            params["zip"] = f"{key},US"
        else:
            params["q"] = key
        return params

    @instrument_tool("get_current_weather")
    def current(self, location_key: str) -> WeatherConditions:
        if not location_key or not location_key.strip():
            raise WeatherProviderError("location is required for weather lookups")
        if not self.api_key:
            raise WeatherProviderError("Weather API key is not configured")

        try:
            response = self.session.get(
                OPENWEATHER_URL, params=self._params(location_key), timeout=self.timeout_seconds
            )
            response.raise_for_status()
            parsed = _CurrentWeatherResponse.model_validate(response.json())
        except requests.RequestException as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            raise WeatherProviderError("Failed to fetch weather data") from exc
        except (ValidationError, ValueError) as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            raise WeatherProviderError("Failed to fetch weather data") from exc

        condition = parsed.weather[0] if parsed.weather else _WeatherCondition()
        return WeatherConditions(
            temperature=round(parsed.main.temp),
            feels_like=round(parsed.main.feels_like),
            temp_min=round(parsed.main.temp_min),
            temp_max=round(parsed.main.temp_max),
            humidity=parsed.main.humidity,
            description=condition.description,
            main=condition.main,
            wind_speed=parsed.wind.speed,
        )


@dataclass
class _CacheEntry:
    conditions: WeatherConditions
    stored_at: float


class WeatherCache:
    """Per-location cache with an explicit TTL and an injectable clock."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_WEATHER_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, _CacheEntry] = {}

    @staticmethod
    def _key(location_key: str) -> str:
        return location_key.strip().lower()

    def get(self, location_key: str) -> Optional[WeatherConditions]:
        entry = self._entries.get(self._key(location_key))
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= self.ttl_seconds:
            return None
        return entry.conditions

    def put(self, location_key: str, conditions: WeatherConditions) -> None:
        self._entries[self._key(location_key)] = _CacheEntry(conditions=conditions, stored_at=self.clock())


class CachedWeatherProvider(WeatherProvider):
    """Read-through cache in front of another provider."""

    def __init__(self, provider: WeatherProvider, cache: WeatherCache | None = None) -> None:
        self.provider = provider
        self.cache = cache or WeatherCache()

    def current(self, location_key: str) -> WeatherConditions:
        cached = self.cache.get(location_key)
        if cached is not None:
            log_event(LOGGER, logging.DEBUG, "weather_cache_hit", location_key=location_key)
            return cached
        conditions = self.provider.current(location_key)
        self.cache.put(location_key, conditions)
        return conditions


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests and local runs."""

    def __init__(self, conditions: WeatherConditions | None = None) -> None:
        self.conditions = conditions or WeatherConditions(
            temperature=62,
            feels_like=60,
            temp_min=55,
            temp_max=68,
            humidity=50,
            description="clear sky",
            main="Clear",
        )
        self.calls: List[str] = []

    def current(self, location_key: str) -> WeatherConditions:
        self.calls.append(location_key)
        return self.conditions


__all__ = [
    "CachedWeatherProvider",
    "MockWeatherProvider",
    "OpenWeatherProvider",
    "WeatherCache",
    "WeatherProvider",
]
