"""
Database connection management
"""
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator


class DatabaseConnection:
    # Owns the SQLite file that backs the document store

    def __init__(self, db_path: str = "data/shopfast.db"):
        self.db_path = db_path
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
        self.init_database()

    def init_database(self):
        # One row per state key; the whole collection lives in the data column as JSON
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
            CREATE TABLE IF NOT EXISTS AppState (
                state_key TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            ''')

            conn.commit()

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        # Fresh connection per call so request threads and the sweeper never share one
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()
