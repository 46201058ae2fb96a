"""Wardrobe storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from models.clothing_item import ClothingItem, WeatherSuitability

EDITABLE_FIELDS = {
    "item_type",
    "color_primary",
    "color_secondary",
    "pattern",
    "style",
    "formality_level",
    "weather_suitability",
    "description",
    "is_active",
}


class WardrobeStore:
    """Persistence interface for clothing items."""

    def create_item(self, item: ClothingItem) -> ClothingItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        raise NotImplementedError

    def list_active(self, user_id: str) -> List[ClothingItem]:
        raise NotImplementedError

    def get_by_ids(self, ids: Iterable[str]) -> List[ClothingItem]:
        """Return items for ``ids`` in the given order; unknown ids are omitted."""
        raise NotImplementedError

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[ClothingItem]:
        raise NotImplementedError

    def deactivate_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for clothing items."""

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
                CREATE TABLE IF NOT EXISTS clothing_items (
                    item_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    image_url TEXT NOT NULL,
                    item_type TEXT NOT NULL,
                    color_primary TEXT,
                    color_secondary TEXT,
                    pattern TEXT,
                    style TEXT,
                    formality_level INTEGER,
                    weather_suitability TEXT,
                    description TEXT,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_clothing_items_user_active
                    ON clothing_items (user_id, is_active);
                """
            )

    def create_item(self, item: ClothingItem) -> ClothingItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO clothing_items (
                    item_id, user_id, image_url, item_type, color_primary, color_secondary,
                    pattern, style, formality_level, weather_suitability, description,
                    is_active, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.item_id,
                    item.user_id,
                    item.image_url,
                    item.item_type,
                    item.color_primary,
                    item.color_secondary,
                    item.pattern,
                    item.style,
                    item.formality_level,
                    json.dumps(asdict(item.weather_suitability)),
                    item.description,
                    1 if item.is_active else 0,
                    item.created_at.isoformat(),
                ),
            )
        return item

    def _row_to_item(self, row: sqlite3.Row) -> ClothingItem:
        suitability = json.loads(row["weather_suitability"]) if row["weather_suitability"] else {}
        return ClothingItem(
            item_id=row["item_id"],
            user_id=row["user_id"],
            image_url=row["image_url"],
            item_type=row["item_type"],
            color_primary=row["color_primary"],
            color_secondary=row["color_secondary"],
            pattern=row["pattern"],
            style=row["style"],
            formality_level=row["formality_level"],
            weather_suitability=WeatherSuitability.from_dict(suitability),
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM clothing_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            ).fetchone()
            return self._row_to_item(row) if row else None

    def list_active(self, user_id: str) -> List[ClothingItem]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM clothing_items WHERE user_id = ? AND is_active = 1 "
                "ORDER BY created_at DESC, item_id",
                (user_id,),
            ).fetchall()
            return [self._row_to_item(row) for row in rows]

    def get_by_ids(self, ids: Iterable[str]) -> List[ClothingItem]:
        wanted = list(dict.fromkeys(str(item_id) for item_id in ids))
        if not wanted:
            return []
        placeholders = ", ".join("?" for _ in wanted)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM clothing_items WHERE item_id IN ({placeholders})",
                wanted,
            ).fetchall()
        by_id = {row["item_id"]: self._row_to_item(row) for row in rows}
        return [by_id[item_id] for item_id in wanted if item_id in by_id]

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[ClothingItem]:
        current = self.get_item(user_id, item_id)
        if not current:
            return None

        changes = {key: value for key, value in updated_fields.items() if key in EDITABLE_FIELDS}
        if "weather_suitability" in changes and isinstance(changes["weather_suitability"], dict):
            merged = {**asdict(current.weather_suitability), **changes["weather_suitability"]}
            changes["weather_suitability"] = WeatherSuitability.from_dict(merged)
        validated = replace(current, **changes)
        return self.create_item(validated)

    def deactivate_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE clothing_items SET is_active = 0 WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0


__all__ = ["EDITABLE_FIELDS", "WardrobeStore", "SQLiteWardrobeStore"]
