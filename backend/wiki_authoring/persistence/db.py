"""SQLite connection + schema initialisation."""
from __future__ import annotations
import logging
import os
import sqlite3
from typing import Optional

from wiki_authoring.core import config

logger = logging.getLogger(__name__)

# Seconds a writer waits on a locked database before giving up.
_BUSY_TIMEOUT = 30.0


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path or config.DATABASE_PATH, timeout=_BUSY_TIMEOUT, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(db_path: Optional[str] = None) -> None:
    """Run all migration SQL files against the database."""
    path = db_path or config.DATABASE_PATH
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    migration_files = sorted(f for f in os.listdir(config.MIGRATIONS_DIR) if f.endswith(".sql"))
    conn = get_connection(path)
    try:
        for name in migration_files:
            with open(os.path.join(config.MIGRATIONS_DIR, name), "r", encoding="utf-8") as f:
                conn.executescript(f.read())
        conn.commit()
    finally:
        conn.close()
    logger.info("Database schema ready at %s (%d migration file(s))", path, len(migration_files))
