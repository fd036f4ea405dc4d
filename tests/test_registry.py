"""Tests for the candidate and participant registry.

Covers sequence numbering, uniqueness rules, empty names, and the
poll-level manager and phase guards around registration.
"""

from __future__ import annotations

import pytest

from lunchpoll.errors import (
    AuthorizationError,
    DuplicateError,
    PhaseError,
    Rejection,
    ShutdownError,
    ValidationError,
)
from lunchpoll.schemas.poll import Phase
from lunchpoll.voting.clock import ManualClock
from lunchpoll.voting.machine import LunchPoll
from lunchpoll.voting.registry import Registry

MANAGER = "manager"


# ── Factories ──────────────────────────────────────────────────────


def _make_poll() -> LunchPoll:
    return LunchPoll(MANAGER, clock=ManualClock(), poll_id="poll-test")


# ── Registry ─────────────────────────────────────────────────────


class TestRegisterCandidate:
    def test_ids_are_dense_and_one_based(self):
        registry = Registry()
        assert registry.register_candidate("Courtyard Cafe") == 1
        assert registry.register_candidate("Uni Cafe") == 2
        assert [c.candidate_id for c in registry.candidates] == [1, 2]

    def test_duplicate_name_rejected(self):
        registry = Registry()
        registry.register_candidate("Uni Cafe")
        with pytest.raises(DuplicateError) as exc:
            registry.register_candidate("Uni Cafe")
        assert exc.value.reason == Rejection.DUPLICATE_CANDIDATE
        assert registry.candidate_count == 1

    def test_empty_name_rejected(self):
        registry = Registry()
        with pytest.raises(ValidationError) as exc:
            registry.register_candidate("")
        assert exc.value.reason == Rejection.EMPTY_NAME
        assert registry.candidate_count == 0

    def test_next_id_after_rejection_is_unchanged(self):
        registry = Registry()
        registry.register_candidate("A")
        with pytest.raises(DuplicateError):
            registry.register_candidate("A")
        assert registry.register_candidate("B") == 2


class TestRegisterParticipant:
    def test_returns_participant_count(self):
        registry = Registry()
        assert registry.register_participant("alice", "Alice") == 1
        assert registry.register_participant("bob", "Bob") == 2

    def test_new_participant_has_not_voted(self):
        registry = Registry()
        registry.register_participant("alice", "Alice")
        assert registry.get_participant("alice").has_voted is False

    def test_duplicate_principal_rejected(self):
        registry = Registry()
        registry.register_participant("alice", "Alice")
        with pytest.raises(DuplicateError) as exc:
            registry.register_participant("alice", "Alice Again")
        assert exc.value.reason == Rejection.DUPLICATE_PARTICIPANT
        assert registry.participant_count == 1

    def test_duplicate_display_name_rejected(self):
        registry = Registry()
        registry.register_participant("alice", "Alice")
        with pytest.raises(DuplicateError) as exc:
            registry.register_participant("alice-2", "Alice")
        assert exc.value.reason == Rejection.DUPLICATE_PARTICIPANT
        assert registry.participant_count == 1

    def test_empty_name_rejected(self):
        registry = Registry()
        with pytest.raises(ValidationError) as exc:
            registry.register_participant("alice", "")
        assert exc.value.reason == Rejection.EMPTY_NAME

    def test_duplicate_principal_checked_before_empty_name(self):
        registry = Registry()
        registry.register_participant("alice", "Alice")
        with pytest.raises(DuplicateError):
            registry.register_participant("alice", "")

    def test_unknown_lookup_returns_none(self):
        registry = Registry()
        assert registry.get_participant("nobody") is None
        assert registry.get_candidate(1) is None


# ── Poll-level guards ────────────────────────────────────────────


class TestRegistrationGuards:
    def test_counts_match_successful_registrations(self):
        poll = _make_poll()
        for name in ("A", "B", "A", "C", "B"):
            try:
                poll.register_candidate(MANAGER, name)
            except DuplicateError:
                pass
        assert poll.candidate_count == 3

    def test_non_manager_cannot_register_candidate(self):
        poll = _make_poll()
        with pytest.raises(AuthorizationError) as exc:
            poll.register_candidate("alice", "Uni Cafe")
        assert exc.value.reason == Rejection.NOT_MANAGER
        assert poll.candidate_count == 0

    def test_non_manager_cannot_register_participant(self):
        poll = _make_poll()
        with pytest.raises(AuthorizationError):
            poll.register_participant("alice", "alice", "Alice")

    def test_registration_closed_after_voting_starts(self):
        poll = _make_poll()
        poll.register_candidate(MANAGER, "A")
        poll.register_candidate(MANAGER, "B")
        poll.register_participant(MANAGER, "alice", "Alice")
        poll.register_participant(MANAGER, "bob", "Bob")
        poll.start_voting(MANAGER, 60)

        with pytest.raises(PhaseError) as exc:
            poll.register_candidate(MANAGER, "C")
        assert exc.value.reason == Rejection.NOT_SETUP

        with pytest.raises(PhaseError):
            poll.register_participant(MANAGER, "carol", "Carol")
        assert poll.candidate_count == 2
        assert poll.participant_count == 2

    def test_registration_rejected_after_shutdown(self):
        poll = _make_poll()
        poll.shutdown(MANAGER)
        with pytest.raises(ShutdownError) as exc:
            poll.register_candidate(MANAGER, "A")
        assert exc.value.reason == Rejection.SHUT_DOWN
        assert poll.phase == Phase.ENDED

    def test_manager_check_runs_before_shutdown_check(self):
        poll = _make_poll()
        poll.shutdown(MANAGER)
        with pytest.raises(AuthorizationError):
            poll.register_candidate("alice", "A")

    def test_poll_exposes_no_live_registry(self):
        poll = _make_poll()
        assert not hasattr(poll, "registry")

    def test_candidate_and_participant_views_are_copies(self):
        poll = _make_poll()
        poll.register_candidate(MANAGER, "A")
        poll.register_participant(MANAGER, "alice", "Alice")

        poll.candidates.clear()
        view = poll.participants
        view[0].has_voted = True
        view.clear()

        assert poll.candidate_count == 1
        assert poll.participant_count == 1
        assert poll.has_voted("alice") is False
