"""Candidate and participant registry.

Holds the candidate set and the participant set for a single poll.
Phase and authorization guards are enforced by the owning LunchPoll;
the registry only enforces name/id uniqueness and non-empty names.
"""

from __future__ import annotations

import logging

from lunchpoll.errors import DuplicateError, Rejection, ValidationError
from lunchpoll.schemas.poll import Candidate, Participant

logger = logging.getLogger(__name__)


class Registry:
    """Registered candidates and participants for one poll.

    Candidate ids are dense and 1-based, assigned from a counter owned
    by this instance. Participants are keyed by principal id.
    """

    def __init__(self) -> None:
        self._candidates: dict[int, Candidate] = {}
        self._candidate_names: set[str] = set()
        self._participants: dict[str, Participant] = {}
        self._participant_names: set[str] = set()

    @property
    def candidate_count(self) -> int:
        return len(self._candidates)

    @property
    def participant_count(self) -> int:
        return len(self._participants)

    @property
    def candidates(self) -> list[Candidate]:
        """Candidates in registration order."""
        return [self._candidates[i] for i in sorted(self._candidates)]

    @property
    def participants(self) -> list[Participant]:
        """Copies of the participants in registration order."""
        return [p.model_copy() for p in self._participants.values()]

    def register_candidate(self, name: str) -> int:
        """Add a candidate and return its sequence number.

        Raises:
            ValidationError: If the name is empty.
            DuplicateError: If a candidate with the same name exists.
        """
        if not name:
            raise ValidationError(Rejection.EMPTY_NAME, "Candidate name must not be empty")
        if name in self._candidate_names:
            raise DuplicateError(
                Rejection.DUPLICATE_CANDIDATE, f"Candidate already registered: {name!r}",
            )

        candidate_id = len(self._candidates) + 1
        self._candidates[candidate_id] = Candidate(candidate_id=candidate_id, name=name)
        self._candidate_names.add(name)
        logger.debug("Registered candidate %d: %s", candidate_id, name)
        return candidate_id

    def register_participant(self, principal_id: str, name: str) -> int:
        """Add a participant and return the new participant count.

        Raises:
            DuplicateError: If the principal, or another principal with
                the same display name, is already registered.
            ValidationError: If the name is empty.
        """
        if principal_id in self._participants:
            raise DuplicateError(
                Rejection.DUPLICATE_PARTICIPANT,
                f"Participant already registered: {principal_id!r}",
            )
        if not name:
            raise ValidationError(Rejection.EMPTY_NAME, "Participant name must not be empty")
        if name in self._participant_names:
            raise DuplicateError(
                Rejection.DUPLICATE_PARTICIPANT,
                f"Participant name already taken: {name!r}",
            )

        self._participants[principal_id] = Participant(principal_id=principal_id, name=name)
        self._participant_names.add(name)
        logger.debug("Registered participant %s (%s)", principal_id, name)
        return len(self._participants)

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        return self._candidates.get(candidate_id)

    def get_participant(self, principal_id: str) -> Participant | None:
        """Live participant record; only the owning poll may mutate it."""
        return self._participants.get(principal_id)
