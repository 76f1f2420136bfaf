"""
Settings Database Module

Domain data (key requests, proofreading requests) is held in memory by the
request store. The only thing persisted is the application configuration,
stored as key/value rows in the ``app_config`` table.

For schema management and migrations, see core/schema.py
"""

import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict

DB_FILE = Path(os.environ.get(
    "TRANSLATION_DESK_DB",
    str(Path(__file__).parent.parent / "settings.db"),
))


def get_connection():
    """Get a database connection."""
    return sqlite3.connect(DB_FILE)


def _ensure_app_config_table(cursor) -> None:
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS app_config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)


# ============================================================
# App Config CRUD Operations
# ============================================================

def get_app_config(key: str) -> Optional[str]:
    """Get a configuration value by key."""
    with get_connection() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT value FROM app_config WHERE key = ?", (key,))
        except sqlite3.OperationalError:
            # Table not created yet
            return None
        row = cursor.fetchone()
        return row[0] if row else None


def set_app_config(key: str, value: str):
    """Set a configuration value."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_app_config_table(cursor)
        cursor.execute("""
            INSERT OR REPLACE INTO app_config (key, value, updated_at)
            VALUES (?, ?, ?)
        """, (key, value, datetime.now().isoformat()))
        conn.commit()


def delete_app_config(key: str) -> bool:
    """Delete a configuration value. Returns True if a row was removed."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_app_config_table(cursor)
        cursor.execute("DELETE FROM app_config WHERE key = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0


def get_all_app_config() -> Dict[str, str]:
    """Get all configuration values."""
    with get_connection() as conn:
        cursor = conn.cursor()
        _ensure_app_config_table(cursor)
        cursor.execute("SELECT key, value FROM app_config")
        return {row[0]: row[1] for row in cursor.fetchall()}
