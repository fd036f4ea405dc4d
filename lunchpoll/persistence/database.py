"""SQLite database layer for poll persistence.

Manages the SQLite database connection and schema creation. Uses
aiosqlite for async access with WAL mode for concurrent reads.
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

# SQL schema for the polls database
_SCHEMA = """
CREATE TABLE IF NOT EXISTS polls (
    poll_id       TEXT PRIMARY KEY,
    title         TEXT NOT NULL DEFAULT '',
    manager       TEXT NOT NULL,
    phase         TEXT NOT NULL,
    is_shut_down  INTEGER NOT NULL DEFAULT 0,
    deadline      REAL,
    winner_id     INTEGER,
    winner_name   TEXT,
    saved_at      TEXT NOT NULL,
    snapshot_json TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS candidates (
    poll_id      TEXT NOT NULL REFERENCES polls(poll_id) ON DELETE CASCADE,
    candidate_id INTEGER NOT NULL,
    name         TEXT NOT NULL,
    votes        INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (poll_id, candidate_id)
);

CREATE TABLE IF NOT EXISTS ballots (
    poll_id      TEXT NOT NULL REFERENCES polls(poll_id) ON DELETE CASCADE,
    ballot_id    INTEGER NOT NULL,
    principal_id TEXT NOT NULL,
    candidate_id INTEGER NOT NULL,
    PRIMARY KEY (poll_id, ballot_id)
);

CREATE INDEX IF NOT EXISTS idx_candidates_poll ON candidates(poll_id);
CREATE INDEX IF NOT EXISTS idx_ballots_poll ON ballots(poll_id);
CREATE INDEX IF NOT EXISTS idx_polls_saved ON polls(saved_at);
"""


async def init_db(db_path: str) -> aiosqlite.Connection:
    """Initialize the database connection and create tables if needed.

    Creates parent directories if they don't exist, enables WAL mode
    and foreign keys, then runs the schema DDL.

    Args:
        db_path: Path to the SQLite database file. Supports ~ expansion
            and the special ``:memory:`` path.

    Returns:
        An open aiosqlite connection ready for use.
    """
    if db_path == ":memory:":
        target = db_path
    else:
        resolved = Path(db_path).expanduser()
        resolved.parent.mkdir(parents=True, exist_ok=True)
        target = str(resolved)

    db = await aiosqlite.connect(target)
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    await db.executescript(_SCHEMA)
    await db.commit()

    logger.info("Poll database initialized at %s", target)
    return db


async def close_db(db: aiosqlite.Connection) -> None:
    """Close the database connection."""
    await db.close()
