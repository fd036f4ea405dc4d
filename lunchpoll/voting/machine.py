"""Phase-gated lunch poll state machine.

A manager registers restaurants and participants during Setup, opens
Voting with a deadline, and the poll ends either when a majority quorum
of ballots is reached, when a vote arrives after the deadline, or when
the manager closes it. A separate shutdown switch halts the poll from
any phase without computing a winner.

Every mutating operation checks all of its guards before touching
state, so a rejected call leaves the poll exactly as it was. Callers
are serialized by the host; the poll does no locking of its own.
"""

from __future__ import annotations

import logging
import uuid

from lunchpoll.errors import (
    AuthorizationError,
    PhaseError,
    Rejection,
    SetupError,
    ShutdownError,
    StateError,
    ValidationError,
)
from lunchpoll.events import EventType, PollEventEmitter
from lunchpoll.schemas.poll import (
    Ballot,
    Candidate,
    Participant,
    Phase,
    PollSnapshot,
    TallyEntry,
)
from lunchpoll.settings import PollConfig
from lunchpoll.voting.clock import Clock, SystemClock
from lunchpoll.voting.finalizer import build_tally, tally_ballots
from lunchpoll.voting.registry import Registry

logger = logging.getLogger(__name__)


def quorum_for(participant_count: int) -> int:
    """Ballots needed to end voting early: a strict majority."""
    return participant_count // 2 + 1


class LunchPoll:
    """A single manager-controlled restaurant poll.

    The phase is the only stored lifecycle state; ``voting_open`` is
    derived from it together with the shutdown flag. The deadline is
    checked lazily when a vote is attempted, never by a timer, so an
    expired poll stays in Voting until someone votes or the manager
    ends it.
    """

    def __init__(
        self,
        manager: str,
        *,
        config: PollConfig | None = None,
        clock: Clock | None = None,
        emitter: PollEventEmitter | None = None,
        poll_id: str | None = None,
        title: str = "",
    ) -> None:
        self.manager = manager
        self.poll_id = poll_id or str(uuid.uuid4())
        self.title = title
        self._config = config or PollConfig()
        self._clock = clock or SystemClock()
        self._emitter = emitter
        self._registry = Registry()
        self._ballots: list[Ballot] = []
        self._phase = Phase.SETUP
        self._shut_down = False
        self._deadline: float | None = None
        self._tally: list[TallyEntry] = []
        self._winner_id: int | None = None

    # ── Views ─────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    @property
    def voting_open(self) -> bool:
        return self._phase is Phase.VOTING and not self._shut_down

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def candidate_count(self) -> int:
        return self._registry.candidate_count

    @property
    def participant_count(self) -> int:
        return self._registry.participant_count

    @property
    def candidates(self) -> list[Candidate]:
        return self._registry.candidates

    @property
    def participants(self) -> list[Participant]:
        """Copies of the registered participants; edits do not reach the poll."""
        return self._registry.participants

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        return self._registry.get_candidate(candidate_id)

    def has_voted(self, principal_id: str) -> bool:
        participant = self._registry.get_participant(principal_id)
        return participant is not None and participant.has_voted

    @property
    def ballots(self) -> list[Ballot]:
        return list(self._ballots)

    @property
    def quorum(self) -> int:
        return quorum_for(self._registry.participant_count)

    @property
    def winner_id(self) -> int | None:
        return self._winner_id

    @property
    def winner_name(self) -> str | None:
        """Name of the winning restaurant, or None until one is finalized."""
        if self._winner_id is None:
            return None
        candidate = self._registry.get_candidate(self._winner_id)
        return candidate.name if candidate else None

    def accepting_votes(self, now: float | None = None) -> bool:
        """Whether a vote submitted at ``now`` would be considered."""
        if not self.voting_open or self._deadline is None:
            return False
        now = self._clock.now() if now is None else now
        return now <= self._deadline

    def tally(self, candidate_id: int) -> int:
        """Accumulated votes for a candidate as of the last finalization."""
        for entry in self._tally:
            if entry.candidate_id == candidate_id:
                return entry.votes
        return 0

    def tally_entries(self) -> list[TallyEntry]:
        return list(self._tally)

    def snapshot(self) -> PollSnapshot:
        """Capture the full observable state for persistence or export."""
        return PollSnapshot(
            poll_id=self.poll_id,
            title=self.title,
            manager=self.manager,
            phase=self._phase,
            voting_open=self.voting_open,
            is_shut_down=self._shut_down,
            deadline=self._deadline,
            candidates=self._registry.candidates,
            participants=self._registry.participants,
            ballots=list(self._ballots),
            tally=list(self._tally),
            winner_id=self._winner_id,
            winner_name=self.winner_name,
        )

    # ── Guards ────────────────────────────────────────────────────

    def _require_manager(self, caller: str) -> None:
        if caller != self.manager:
            raise AuthorizationError(
                Rejection.NOT_MANAGER, f"{caller!r} is not the poll manager",
            )

    def _require_running(self) -> None:
        if self._shut_down:
            raise ShutdownError(Rejection.SHUT_DOWN, "Poll has been shut down")

    def _require_phase(self, phase: Phase) -> None:
        if self._phase is not phase:
            reason = Rejection.NOT_SETUP if phase is Phase.SETUP else Rejection.NOT_VOTING
            raise PhaseError(
                reason, f"Requires phase {phase.value}, poll is {self._phase.value}",
            )

    def _emit(self, event_type: EventType, **data) -> None:
        if self._emitter is not None:
            self._emitter.emit(event_type, poll_id=self.poll_id, **data)

    # ── Registry ──────────────────────────────────────────────────

    def register_candidate(self, caller: str, name: str) -> int:
        """Register a restaurant and return its candidate id."""
        self._require_manager(caller)
        self._require_running()
        self._require_phase(Phase.SETUP)

        candidate_id = self._registry.register_candidate(name)
        self._emit(EventType.CANDIDATE_REGISTERED, candidate_id=candidate_id, name=name)
        return candidate_id

    def register_participant(self, caller: str, principal_id: str, name: str) -> int:
        """Register a voter and return the new participant count."""
        self._require_manager(caller)
        self._require_running()
        self._require_phase(Phase.SETUP)

        count = self._registry.register_participant(principal_id, name)
        self._emit(
            EventType.PARTICIPANT_REGISTERED, principal_id=principal_id, name=name,
        )
        return count

    # ── Phase control ─────────────────────────────────────────────

    def start_voting(self, caller: str, deadline_offset: float | None = None) -> float:
        """Open voting and return the absolute deadline.

        Args:
            caller: Principal invoking the operation (must be the manager).
            deadline_offset: Seconds from now until the deadline.
                Defaults to the configured deadline_offset.

        Raises:
            SetupError: If fewer than the configured minimum candidates
                or participants are registered.
        """
        self._require_manager(caller)
        self._require_running()
        self._require_phase(Phase.SETUP)

        registry = self._registry
        if (
            registry.candidate_count < self._config.min_candidates
            or registry.participant_count < self._config.min_participants
        ):
            raise SetupError(
                Rejection.INSUFFICIENT_SETUP,
                f"Need at least {self._config.min_candidates} candidates and "
                f"{self._config.min_participants} participants, have "
                f"{registry.candidate_count} and {registry.participant_count}",
            )

        offset = self._config.deadline_offset if deadline_offset is None else deadline_offset
        if offset < 0:
            raise ValueError(f"deadline_offset must be non-negative, got {offset}")

        self._deadline = self._clock.now() + offset
        self._phase = Phase.VOTING
        logger.info(
            "Poll %s: voting started, deadline %.0f, quorum %d",
            self.poll_id, self._deadline, self.quorum,
        )
        self._emit(EventType.VOTING_STARTED, deadline=self._deadline, quorum=self.quorum)
        return self._deadline

    def end_voting(self, caller: str) -> None:
        """Close voting on the manager's request and finalize the result."""
        self._require_manager(caller)
        self._require_running()
        self._require_phase(Phase.VOTING)
        self._close_voting(trigger="manager")

    def shutdown(self, caller: str) -> None:
        """Halt the poll from any phase without computing a winner.

        A repeated call is a no-op and emits nothing.
        """
        self._require_manager(caller)
        if self._shut_down:
            return
        previous = self._phase
        self._shut_down = True
        self._phase = Phase.ENDED
        logger.info("Poll %s: shut down from phase %s", self.poll_id, previous.value)
        self._emit(EventType.POLL_SHUTDOWN, previous_phase=previous.value)

    # ── Ballot engine ─────────────────────────────────────────────

    def cast_vote(self, caller: str, candidate_id: int) -> bool:
        """Record the caller's vote for a candidate.

        Returns:
            True when the ballot was recorded. False when the deadline
            had already passed; in that case the poll is finalized with
            the ballots cast so far and this vote is discarded.

        Raises:
            ShutdownError: The poll was shut down.
            PhaseError: The poll is not in the Voting phase.
            ValidationError: No candidate has this id.
            StateError: The caller is not a participant or already voted.
        """
        self._require_running()
        self._require_phase(Phase.VOTING)

        if self._registry.get_candidate(candidate_id) is None:
            raise ValidationError(
                Rejection.UNKNOWN_CANDIDATE, f"No candidate with id {candidate_id}",
            )

        if not self.accepting_votes():
            logger.info(
                "Poll %s: vote from %s arrived after the deadline", self.poll_id, caller,
            )
            self._emit(
                EventType.VOTE_REJECTED,
                principal_id=caller,
                reason=Rejection.DEADLINE_PASSED.value,
            )
            self._close_voting(trigger="deadline")
            return False

        participant = self._registry.get_participant(caller)
        if participant is None:
            raise StateError(
                Rejection.NOT_A_PARTICIPANT, f"{caller!r} is not a registered participant",
            )
        if participant.has_voted:
            raise StateError(Rejection.ALREADY_VOTED, f"{caller!r} has already voted")

        participant.has_voted = True
        ballot = Ballot(
            ballot_id=len(self._ballots) + 1,
            principal_id=caller,
            candidate_id=candidate_id,
        )
        self._ballots.append(ballot)
        logger.debug(
            "Poll %s: ballot %d from %s for candidate %d",
            self.poll_id, ballot.ballot_id, caller, candidate_id,
        )
        self._emit(
            EventType.VOTE_CAST,
            ballot_id=ballot.ballot_id,
            principal_id=caller,
            candidate_id=candidate_id,
        )

        if len(self._ballots) >= self.quorum:
            self._close_voting(trigger="quorum")
        return True

    # ── Finalizer ─────────────────────────────────────────────────

    def _close_voting(self, trigger: str) -> None:
        """Finalize the poll. Only reachable while in the Voting phase.

        With no ballots the poll simply ends and the winner stays unset.
        """
        if self._ballots:
            outcome = tally_ballots(self._ballots)
            self._tally = build_tally(outcome, self._registry.candidates)
            self._winner_id = outcome.winner_id
        self._phase = Phase.ENDED

        logger.info(
            "Poll %s: voting closed by %s after %d ballot(s), winner: %s",
            self.poll_id, trigger, len(self._ballots), self.winner_name or "none",
        )
        self._emit(
            EventType.VOTING_CLOSED,
            trigger=trigger,
            ballots=len(self._ballots),
            winner_id=self._winner_id,
            winner_name=self.winner_name,
        )
