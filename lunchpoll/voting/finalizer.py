"""Ballot tallying and winner selection.

The winner is the candidate whose running count first climbs strictly
above the best count seen so far, scanning the ballot log in cast
order. Ties on final totals therefore go to whichever candidate reached
that total first. The result depends on ballot order by design of the
protocol, so it is not a plain plurality count.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from lunchpoll.schemas.poll import Ballot, Candidate, TallyEntry

logger = logging.getLogger(__name__)


class Outcome(BaseModel):
    """Result of tallying a ballot log."""

    counts: dict[int, int] = Field(
        default_factory=dict,
        description="Candidate id → accumulated votes",
    )
    winner_id: int | None = Field(
        default=None,
        description="Winning candidate id, or None when no ballots were cast",
    )
    winning_count: int = Field(default=0, ge=0)


def tally_ballots(ballots: Iterable[Ballot]) -> Outcome:
    """Count ballots in cast order and pick the first-to-lead winner.

    Each ballot raises its candidate's running count by one. The leader
    only changes when a running count is strictly greater than the
    current best, so a candidate that merely ties the leader never
    takes the lead.

    Args:
        ballots: The ballot log, ordered by ballot_id ascending.

    Returns:
        Outcome with per-candidate counts and the winner (if any).
    """
    counts: dict[int, int] = {}
    best_id: int | None = None
    best_count = 0

    for ballot in sorted(ballots, key=lambda b: b.ballot_id):
        running = counts.get(ballot.candidate_id, 0) + 1
        counts[ballot.candidate_id] = running
        if running > best_count:
            best_count = running
            best_id = ballot.candidate_id

    return Outcome(counts=counts, winner_id=best_id, winning_count=best_count)


def build_tally(outcome: Outcome, candidates: Iterable[Candidate]) -> list[TallyEntry]:
    """Expand an Outcome into one TallyEntry per registered candidate.

    Candidates that received no ballots are included with zero votes.
    """
    return [
        TallyEntry(
            candidate_id=c.candidate_id,
            name=c.name,
            votes=outcome.counts.get(c.candidate_id, 0),
        )
        for c in candidates
    ]
