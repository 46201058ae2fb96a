"""User profile and notification settings storage."""

from __future__ import annotations

import logging
import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from closet_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")
PROFILE_FIELDS = {"email", "name", "location_key", "timezone"}


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """IANA zone for ``name``. Empty, ``UTC`` and unknown names resolve to UTC."""

    tz_name = (name or "").strip()
    if not tz_name or tz_name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        log_event(LOGGER, logging.WARNING, "unknown_timezone", timezone=tz_name)
        return timezone.utc


@dataclass
class UserProfile:
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    location_key: Optional[str] = None
    timezone: str = "UTC"
    notification_time: str = "07:00"
    notification_enabled: bool = True
    device_token: Optional[str] = None

    @property
    def notification_hour(self) -> int:
        return parse_notification_hour(self.notification_time)

    def local_time(self, now: datetime) -> datetime:
        """``now`` in the user's timezone; naive values are taken as UTC."""

        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(resolve_timezone(self.timezone))

    def to_dict(self) -> Dict[str, object]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "location_key": self.location_key,
            "timezone": self.timezone,
            "notification_time": self.notification_time,
            "notification_enabled": self.notification_enabled,
            "has_device_token": bool(self.device_token),
        }


def parse_notification_hour(value: str) -> int:
    """Return the hour of an ``HH:MM`` (or ``HH:MM:SS``) notification time."""

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"notification_time must look like HH:MM, got '{value}'")
    return int(match.group(1))


class UserProfileStore:
    """SQLite-backed profile store used by the orchestrator and scheduler."""

    def __init__(self, database_path: str | Path = "data/closet.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    email TEXT,
                    name TEXT,
                    location_key TEXT,
                    timezone TEXT NOT NULL DEFAULT 'UTC',
                    notification_time TEXT NOT NULL DEFAULT '07:00',
                    notification_enabled INTEGER NOT NULL DEFAULT 1,
                    device_token TEXT
                );
                """
            )

    def _row_to_profile(self, row: sqlite3.Row) -> UserProfile:
        return UserProfile(
            user_id=row["user_id"],
            email=row["email"],
            name=row["name"],
            location_key=row["location_key"],
            timezone=row["timezone"],
            notification_time=row["notification_time"],
            notification_enabled=bool(row["notification_enabled"]),
            device_token=row["device_token"],
        )

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE user_id = ?", (user_id,)).fetchone()
        return self._row_to_profile(row) if row else None

    def save_profile(self, profile: UserProfile) -> UserProfile:
        parse_notification_hour(profile.notification_time)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO users (
                    user_id, email, name, location_key, timezone,
                    notification_time, notification_enabled, device_token
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    profile.user_id,
                    profile.email,
                    profile.name,
                    profile.location_key,
                    profile.timezone,
                    profile.notification_time,
                    1 if profile.notification_enabled else 0,
                    profile.device_token,
                ),
            )
        return profile

    def upsert_profile(self, user_id: str, updates: Dict[str, object]) -> UserProfile:
        profile = self.get_profile(user_id) or UserProfile(user_id=user_id)
        for key, value in updates.items():
            if key in PROFILE_FIELDS and value is not None:
                setattr(profile, key, str(value).strip() or None)
        if not profile.timezone:
            profile.timezone = "UTC"
        return self.save_profile(profile)

    def update_notification_settings(
        self,
        user_id: str,
        notification_time: Optional[str] = None,
        notification_enabled: Optional[bool] = None,
        device_token: Optional[str] = None,
    ) -> UserProfile:
        profile = self.get_profile(user_id) or UserProfile(user_id=user_id)
        if notification_time is not None:
            parse_notification_hour(notification_time)
            profile.notification_time = notification_time
        if notification_enabled is not None:
            profile.notification_enabled = notification_enabled
        if device_token is not None:
            profile.device_token = device_token
        return self.save_profile(profile)

    def list_notification_candidates(self, now: datetime) -> List[UserProfile]:
        """Users whose notification hour matches the hour of ``now`` in their own timezone.

        Minutes are not compared.
        """

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM users WHERE notification_enabled = 1 "
                "AND device_token IS NOT NULL AND device_token != '' "
                "AND location_key IS NOT NULL AND location_key != '' "
                "ORDER BY user_id"
            ).fetchall()
        profiles = [self._row_to_profile(row) for row in rows]
        return [profile for profile in profiles if profile.notification_hour == profile.local_time(now).hour]


__all__ = ["PROFILE_FIELDS", "UserProfile", "UserProfileStore", "parse_notification_hour", "resolve_timezone"]
