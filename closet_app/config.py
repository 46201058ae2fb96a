"""Configuration helpers for the Closet Concierge service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_WEATHER_CACHE_TTL_SECONDS = 6 * 60 * 60


@dataclass
class AppConfig:
    """Configuration values for the service.

    Secrets (API keys, FCM credentials) are expected to come from the runtime
    environment; everything else can live in an environment file.
    """

    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    openweather_api_key: Optional[str] = None
    weather_units: str = "imperial"
    weather_cache_ttl_seconds: int = DEFAULT_WEATHER_CACHE_TTL_SECONDS
    database_path: str = "data/closet.db"
    fcm_project_id: Optional[str] = None
    fcm_access_token: Optional[str] = None
    exclusion_window_days: int = 7
    min_wardrobe_items: int = 3
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables, which take precedence.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("CLOSET_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        return cls(
            gemini_api_key=get_value("gemini_api_key"),
            model=str(get_value("model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            openweather_api_key=get_value("openweather_api_key"),
            weather_units=str(get_value("weather_units", "imperial") or "imperial"),
            weather_cache_ttl_seconds=cls._as_int(
                get_value("weather_cache_ttl_seconds"), DEFAULT_WEATHER_CACHE_TTL_SECONDS
            ),
            database_path=str(get_value("database_path", "data/closet.db") or "data/closet.db"),
            fcm_project_id=get_value("fcm_project_id"),
            fcm_access_token=get_value("fcm_access_token"),
            exclusion_window_days=cls._as_int(get_value("exclusion_window_days"), 7),
            min_wardrobe_items=cls._as_int(get_value("min_wardrobe_items"), 3),
            environment=env_name,
        )

    @staticmethod
    def _as_int(raw: Optional[str], default: int) -> int:
        if raw is None or str(raw).strip() == "":
            return default
        try:
            return int(raw)
        except ValueError:
            return default

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal ``key: value`` config file without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
