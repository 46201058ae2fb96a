"""Outfit history storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from models.outfit import GENERATION_DAILY, OutfitRecord
from models.weather import WeatherConditions


class DuplicateDailyOutfitError(Exception):
    """A daily outfit already exists for the (user, date) pair."""


class OutfitStore:
    """Persistence interface for outfit records.

    Records are keyed by ``(user_id, outfit_date)``. Several records may share
    a pair when outfits are regenerated, but at most one of them is ``daily``.
    """

    def create_outfit(self, record: OutfitRecord) -> OutfitRecord:
        raise NotImplementedError

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[OutfitRecord]:
        raise NotImplementedError

    def latest_for_date(self, user_id: str, outfit_date: date) -> Optional[OutfitRecord]:
        raise NotImplementedError

    def list_for_date(self, user_id: str, outfit_date: date) -> List[OutfitRecord]:
        raise NotImplementedError

    def list_between(self, user_id: str, start: date, end: date) -> List[OutfitRecord]:
        raise NotImplementedError

    def update_feedback(
        self, user_id: str, outfit_id: str, feedback: Optional[str], was_worn: Optional[bool]
    ) -> Optional[OutfitRecord]:
        raise NotImplementedError

    def list_history(self, user_id: str, limit: int = 30, offset: int = 0) -> List[OutfitRecord]:
        raise NotImplementedError


class SQLiteOutfitStore(OutfitStore):
    """SQLite-backed outfit history with a one-daily-per-day unique index."""

    _ORDER_NEWEST = "ORDER BY outfit_date DESC, created_at DESC, rowid DESC"

    def __init__(self, database_path: str | Path = "data/closet.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS outfit_history (
                    outfit_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    outfit_date TEXT NOT NULL,
                    clothing_items TEXT NOT NULL,
                    weather_conditions TEXT NOT NULL,
                    reasoning TEXT,
                    was_worn INTEGER,
                    user_feedback TEXT,
                    generation TEXT NOT NULL DEFAULT 'daily',
                    created_at TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_outfit_history_user_date
                    ON outfit_history (user_id, outfit_date);
                CREATE UNIQUE INDEX IF NOT EXISTS uq_outfit_history_daily
                    ON outfit_history (user_id, outfit_date) WHERE generation = 'daily';
                """
            )

    def _row_to_record(self, row: sqlite3.Row) -> OutfitRecord:
        was_worn = row["was_worn"]
        return OutfitRecord(
            outfit_id=row["outfit_id"],
            user_id=row["user_id"],
            outfit_date=date.fromisoformat(row["outfit_date"]),
            item_ids=[str(item_id) for item_id in json.loads(row["clothing_items"])],
            weather=WeatherConditions.from_dict(json.loads(row["weather_conditions"])),
            reasoning=row["reasoning"] or "",
            was_worn=None if was_worn is None else bool(was_worn),
            feedback=row["user_feedback"],
            generation=row["generation"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def create_outfit(self, record: OutfitRecord) -> OutfitRecord:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO outfit_history (
                        outfit_id, user_id, outfit_date, clothing_items, weather_conditions,
                        reasoning, was_worn, user_feedback, generation, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.outfit_id,
                        record.user_id,
                        record.outfit_date.isoformat(),
                        json.dumps(list(record.item_ids)),
                        json.dumps(record.weather.to_dict()),
                        record.reasoning,
                        None if record.was_worn is None else int(record.was_worn),
                        record.feedback,
                        record.generation,
                        record.created_at.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            if record.generation == GENERATION_DAILY:
                raise DuplicateDailyOutfitError(
                    f"daily outfit already exists for {record.outfit_date.isoformat()}"
                ) from exc
            raise
        return record

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[OutfitRecord]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM outfit_history WHERE outfit_id = ? AND user_id = ?",
                (outfit_id, user_id),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def latest_for_date(self, user_id: str, outfit_date: date) -> Optional[OutfitRecord]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM outfit_history WHERE user_id = ? AND outfit_date = ? "
                "ORDER BY created_at DESC, rowid DESC LIMIT 1",
                (user_id, outfit_date.isoformat()),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def list_for_date(self, user_id: str, outfit_date: date) -> List[OutfitRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM outfit_history WHERE user_id = ? AND outfit_date = ? "
                "ORDER BY created_at DESC, rowid DESC",
                (user_id, outfit_date.isoformat()),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def list_between(self, user_id: str, start: date, end: date) -> List[OutfitRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM outfit_history WHERE user_id = ? AND outfit_date BETWEEN ? AND ? "
                + self._ORDER_NEWEST,
                (user_id, start.isoformat(), end.isoformat()),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def update_feedback(
        self, user_id: str, outfit_id: str, feedback: Optional[str], was_worn: Optional[bool]
    ) -> Optional[OutfitRecord]:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE outfit_history SET user_feedback = ?, was_worn = ? "
                "WHERE outfit_id = ? AND user_id = ?",
                (feedback, None if was_worn is None else int(was_worn), outfit_id, user_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_outfit(user_id, outfit_id)

    def list_history(self, user_id: str, limit: int = 30, offset: int = 0) -> List[OutfitRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM outfit_history WHERE user_id = ? " + self._ORDER_NEWEST + " LIMIT ? OFFSET ?",
                (user_id, limit, offset),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]


__all__ = ["DuplicateDailyOutfitError", "OutfitStore", "SQLiteOutfitStore"]
