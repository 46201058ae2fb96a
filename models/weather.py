"""Weather snapshot model shared by providers, records and recommenders."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

WARM_ABOVE_F = 75.0
COLD_BELOW_F = 50.0
_RAINY_MAIN = {"rain", "drizzle", "thunderstorm", "snow"}


@dataclass(frozen=True)
class WeatherConditions:
    """Current conditions in imperial units, frozen into each outfit record."""

    temperature: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float
    description: str
    main: str
    precipitation_probability: Optional[float] = None
    wind_speed: Optional[float] = None

    @property
    def temperature_band(self) -> str:
        if self.temperature > WARM_ABOVE_F:
            return "warm"
        if self.temperature < COLD_BELOW_F:
            return "cold"
        return "cool"

    @property
    def is_rainy(self) -> bool:
        if self.main.strip().lower() in _RAINY_MAIN:
            return True
        return "rain" in self.description.lower()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "WeatherConditions":
        return cls(
            temperature=float(raw["temperature"]),
            feels_like=float(raw.get("feels_like", raw["temperature"])),
            temp_min=float(raw.get("temp_min", raw["temperature"])),
            temp_max=float(raw.get("temp_max", raw["temperature"])),
            humidity=float(raw.get("humidity", 0)),
            description=str(raw.get("description", "unknown")),
            main=str(raw.get("main", "unknown")),
            precipitation_probability=raw.get("precipitation_probability"),
            wind_speed=raw.get("wind_speed"),
        )


__all__ = ["WeatherConditions", "WARM_ABOVE_F", "COLD_BELOW_F"]
