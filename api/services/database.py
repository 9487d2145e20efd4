"""
SQLite database helpers for Relationship OS.

All stores share one local database file so deleting a person cascades to
their interactions, notes, commitments and voice notes.
"""
import logging
import sqlite3
from pathlib import Path
from typing import Optional

from config.settings import settings

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS people (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    context TEXT,
    importance INTEGER DEFAULT 3,
    ideal_contact_frequency_days INTEGER,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS interactions (
    id TEXT PRIMARY KEY,
    person_id TEXT NOT NULL,
    date TEXT NOT NULL,
    type TEXT,
    notes TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY(person_id) REFERENCES people(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_interactions_person_date
ON interactions(person_id, date DESC);

CREATE TABLE IF NOT EXISTS person_notes (
    id TEXT PRIMARY KEY,
    person_id TEXT NOT NULL,
    body TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT,
    FOREIGN KEY(person_id) REFERENCES people(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS commitments (
    id TEXT PRIMARY KEY,
    person_id TEXT NOT NULL,
    description TEXT NOT NULL,
    due_date TEXT,
    status TEXT DEFAULT 'open',
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    completed_at TEXT,
    FOREIGN KEY(person_id) REFERENCES people(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_commitments_person_status
ON commitments(person_id, status);

CREATE TABLE IF NOT EXISTS voice_notes (
    id TEXT PRIMARY KEY,
    person_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    mime_type TEXT,
    size_bytes INTEGER,
    duration_seconds INTEGER,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY(person_id) REFERENCES people(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_voice_notes_person_created
ON voice_notes(person_id, created_at DESC);
"""


def get_db_path() -> str:
    """Get the path to the relationship database."""
    db_path = Path(settings.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return str(db_path)


def connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection with foreign key enforcement (needed for cascades)."""
    conn = sqlite3.connect(db_path or get_db_path())
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: Optional[str] = None) -> str:
    """
    Create tables and indexes if they don't exist.

    Args:
        db_path: Path to SQLite database (default from settings)

    Returns:
        The database path that was initialized
    """
    db_path = db_path or get_db_path()
    conn = connect(db_path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
        logger.info(f"Initialized relationship database at {db_path}")
    finally:
        conn.close()
    return db_path
