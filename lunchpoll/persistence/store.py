"""Poll store for saving, retrieving, listing, and deleting polls.

Wraps low-level database operations with PollSnapshot serialization.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import aiosqlite
from pydantic import BaseModel, Field

from lunchpoll.schemas.poll import Phase, PollSnapshot

logger = logging.getLogger(__name__)


class PollSummary(BaseModel):
    """Lightweight poll summary for listing."""

    poll_id: str = Field(description="Unique poll identifier")
    title: str = Field(default="")
    phase: Phase = Field(default=Phase.SETUP)
    is_shut_down: bool = Field(default=False)
    winner_name: str | None = Field(default=None)
    ballot_count: int = Field(default=0, ge=0)
    saved_at: datetime = Field(description="When the snapshot was saved")


class PollStore:
    """Persistent poll store backed by SQLite.

    All methods are async and operate on an aiosqlite connection
    initialized by database.init_db().
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def save_poll(self, snapshot: PollSnapshot) -> None:
        """Save (or replace) a poll snapshot, its candidates and ballot log."""
        await self._db.execute(
            """
            INSERT OR REPLACE INTO polls
                (poll_id, title, manager, phase, is_shut_down, deadline,
                 winner_id, winner_name, saved_at, snapshot_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                snapshot.poll_id,
                snapshot.title,
                snapshot.manager,
                snapshot.phase.value,
                int(snapshot.is_shut_down),
                snapshot.deadline,
                snapshot.winner_id,
                snapshot.winner_name,
                datetime.now(UTC).isoformat(),
                snapshot.model_dump_json(),
            ),
        )

        # Clear existing candidate and ballot rows (for upsert)
        await self._db.execute(
            "DELETE FROM candidates WHERE poll_id = ?", (snapshot.poll_id,),
        )
        await self._db.execute(
            "DELETE FROM ballots WHERE poll_id = ?", (snapshot.poll_id,),
        )
        votes = {t.candidate_id: t.votes for t in snapshot.tally}
        await self._db.executemany(
            """
            INSERT INTO candidates (poll_id, candidate_id, name, votes)
            VALUES (?, ?, ?, ?)
            """,
            [
                (snapshot.poll_id, c.candidate_id, c.name, votes.get(c.candidate_id, 0))
                for c in snapshot.candidates
            ],
        )
        await self._db.executemany(
            """
            INSERT INTO ballots (poll_id, ballot_id, principal_id, candidate_id)
            VALUES (?, ?, ?, ?)
            """,
            [
                (snapshot.poll_id, b.ballot_id, b.principal_id, b.candidate_id)
                for b in snapshot.ballots
            ],
        )

        await self._db.commit()
        logger.info("Saved poll %s", snapshot.poll_id)

    async def get_poll(self, poll_id: str) -> PollSnapshot | None:
        """Retrieve a poll snapshot by ID or unique ID prefix.

        Tries an exact match first. If that fails and the input is at
        least 4 characters, falls back to a prefix match. Returns None
        when no match is found or the prefix is ambiguous.
        """
        self._db.row_factory = aiosqlite.Row
        async with self._db.execute(
            "SELECT snapshot_json FROM polls WHERE poll_id = ?", (poll_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if not row and len(poll_id) >= 4:
            async with self._db.execute(
                "SELECT snapshot_json FROM polls WHERE poll_id LIKE ? LIMIT 2",
                (poll_id + "%",),
            ) as cursor:
                rows = await cursor.fetchall()
            if len(rows) == 1:
                row = rows[0]

        if not row:
            return None
        return PollSnapshot.model_validate_json(row["snapshot_json"])

    async def list_polls(self, limit: int = 20, offset: int = 0) -> list[PollSummary]:
        """List saved polls, most recently saved first."""
        self._db.row_factory = aiosqlite.Row
        summaries: list[PollSummary] = []
        async with self._db.execute(
            """
            SELECT p.poll_id, p.title, p.phase, p.is_shut_down, p.winner_name,
                   p.saved_at,
                   (SELECT COUNT(*) FROM ballots b WHERE b.poll_id = p.poll_id)
                       AS ballot_count
            FROM polls p
            ORDER BY p.saved_at DESC
            LIMIT ? OFFSET ?
            """,
            (limit, offset),
        ) as cursor:
            async for row in cursor:
                summaries.append(PollSummary(
                    poll_id=row["poll_id"],
                    title=row["title"],
                    phase=Phase(row["phase"]),
                    is_shut_down=bool(row["is_shut_down"]),
                    winner_name=row["winner_name"],
                    ballot_count=row["ballot_count"],
                    saved_at=datetime.fromisoformat(row["saved_at"]),
                ))
        return summaries

    async def delete_poll(self, poll_id: str) -> bool:
        """Delete a poll with its candidates and ballots. Returns True if a row was removed."""
        cursor = await self._db.execute(
            "DELETE FROM polls WHERE poll_id = ?", (poll_id,),
        )
        await self._db.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted poll %s", poll_id)
        return deleted
