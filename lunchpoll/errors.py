"""Rejection taxonomy for the lunch poll state machine.

Every failed operation raises a subclass of PollError carrying a
machine-readable Rejection reason, so callers can branch on why an
operation failed and not only that it failed. Nothing is mutated before
a rejection is raised.
"""

from __future__ import annotations

from enum import StrEnum


class Rejection(StrEnum):
    """Machine-readable reason attached to every PollError."""

    NOT_MANAGER = "not_manager"
    SHUT_DOWN = "shut_down"
    NOT_SETUP = "not_setup"
    NOT_VOTING = "not_voting"
    INSUFFICIENT_SETUP = "insufficient_setup"
    DUPLICATE_CANDIDATE = "duplicate_candidate"
    DUPLICATE_PARTICIPANT = "duplicate_participant"
    EMPTY_NAME = "empty_name"
    UNKNOWN_CANDIDATE = "unknown_candidate"
    NOT_A_PARTICIPANT = "not_a_participant"
    ALREADY_VOTED = "already_voted"
    DEADLINE_PASSED = "deadline_passed"


class PollError(Exception):
    """Base exception for all lunch poll rejections."""

    def __init__(self, reason: Rejection, message: str = "") -> None:
        self.reason = reason
        super().__init__(message or reason.value)


class AuthorizationError(PollError):
    """Caller is not the manager for a manager-only operation."""


class PhaseError(PollError):
    """Operation attempted outside its required phase."""


class SetupError(PollError):
    """Not enough candidates or participants to start voting."""


class DuplicateError(PollError):
    """Candidate name or participant id/name collision."""


class ValidationError(PollError):
    """Empty name or unknown candidate id."""


class StateError(PollError):
    """Vote by a non-participant, or by a participant who already voted."""


class ShutdownError(PollError):
    """Mutating operation attempted after shutdown."""


# ── Loan agreements ──────────────────────────────────────────────


class LoanRejection(StrEnum):
    """Machine-readable reason attached to every LoanError."""

    NOT_LENDER = "not_lender"
    NOT_BORROWER = "not_borrower"
    NOT_ACTIVE = "not_active"
    NOT_DUE = "not_due"
    UNTRUSTED_CALLER = "untrusted_caller"
    INVALID_TERMS = "invalid_terms"


class LoanError(Exception):
    """Base exception for loan agreement and factory rejections."""

    def __init__(self, reason: LoanRejection, message: str = "") -> None:
        self.reason = reason
        super().__init__(message or reason.value)
