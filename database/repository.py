"""
Database repository classes

Both repositories expose the same two calls, load(key) and save(key, data),
and treat data as an opaque JSON document.
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


class StateRepository:
    # SQLite-backed document store (one JSON blob per state key)

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    def load(self, key: str) -> Optional[Any]:
        # Returns None when nothing has been saved under the key yet
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT data FROM AppState WHERE state_key = ?", (key,))
            row = cursor.fetchone()
            if not row:
                return None
            return json.loads(row[0])

    def save(self, key: str, data: Any) -> None:
        # Upsert; last write wins
        payload = json.dumps(data, ensure_ascii=False)
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
            INSERT INTO AppState (state_key, data, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(state_key) DO UPDATE SET
                data = excluded.data,
                updated_at = excluded.updated_at
            """, (key, payload))
            conn.commit()
        logger.debug("Saved state '%s' (%d bytes)", key, len(payload))


class JsonFileStateRepository:
    # Local fallback: one <key>.json file per state key

    def __init__(self, state_dir: str = "data/state"):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.state_dir / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def save(self, key: str, data: Any) -> None:
        path = self._path(key)
        serialized = json.dumps(data, ensure_ascii=False, indent=2)
        # Skip the write when nothing changed
        if path.exists() and path.read_text(encoding="utf-8") == serialized:
            return
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(serialized, encoding="utf-8")
        tmp_path.replace(path)
