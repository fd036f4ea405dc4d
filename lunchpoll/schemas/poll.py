"""Lunch poll schemas.

Defines the poll phase, the registered entities (Candidate,
Participant), the append-only Ballot log entries, the derived
TallyEntry, and the PollSnapshot used for persistence and export.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Phase(StrEnum):
    """Poll lifecycle phase. Progresses Setup → Voting → Ended only."""

    SETUP = "setup"
    VOTING = "voting"
    ENDED = "ended"


class Candidate(BaseModel):
    """A restaurant on the ballot. Immutable once registered."""

    model_config = ConfigDict(frozen=True)

    candidate_id: int = Field(ge=1, description="Dense 1-based registration number")
    name: str = Field(min_length=1, description="Display name, unique across candidates")


class Participant(BaseModel):
    """A registered voter, keyed by the caller's principal id."""

    principal_id: str = Field(description="External authenticated principal id")
    name: str = Field(min_length=1, description="Display name, unique across participants")
    has_voted: bool = Field(default=False, description="Set once by a successful vote")


class Ballot(BaseModel):
    """A single accepted vote. Entries are appended in cast order."""

    model_config = ConfigDict(frozen=True)

    ballot_id: int = Field(ge=1, description="Dense 1-based sequence number")
    principal_id: str = Field(description="Principal id of the casting participant")
    candidate_id: int = Field(ge=1, description="Chosen candidate")


class TallyEntry(BaseModel):
    """Accumulated vote count for one candidate, computed at finalization."""

    candidate_id: int = Field(ge=1)
    name: str = Field(default="")
    votes: int = Field(default=0, ge=0)


class PollSnapshot(BaseModel):
    """Full observable state of a poll at a point in time.

    Used by the persistence layer and the export formatters. The
    ``voting_open`` flag is derived and stored here only for readers.
    """

    poll_id: str = Field(description="Unique poll identifier")
    title: str = Field(default="", description="Free-form poll title")
    manager: str = Field(description="Principal id of the poll manager")
    phase: Phase = Field(default=Phase.SETUP)
    voting_open: bool = Field(default=False)
    is_shut_down: bool = Field(default=False)
    deadline: float | None = Field(
        default=None, description="Absolute logical deadline, set when voting starts",
    )
    candidates: list[Candidate] = Field(default_factory=list)
    participants: list[Participant] = Field(default_factory=list)
    ballots: list[Ballot] = Field(default_factory=list)
    tally: list[TallyEntry] = Field(default_factory=list)
    winner_id: int | None = Field(default=None)
    winner_name: str | None = Field(
        default=None, description="Winning candidate name, None until finalized",
    )
