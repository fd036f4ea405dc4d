"""Poll event emitter for notifying external collaborators.

Emits structured events after each applied state change: registrations,
phase transitions, accepted and rejected votes, and shutdown. Listeners
are notification sinks only; they never influence the poll.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventType(StrEnum):
    """Types of poll events."""

    CANDIDATE_REGISTERED = "candidate_registered"
    PARTICIPANT_REGISTERED = "participant_registered"
    VOTING_STARTED = "voting_started"
    VOTE_CAST = "vote_cast"
    VOTE_REJECTED = "vote_rejected"
    VOTING_CLOSED = "voting_closed"
    POLL_SHUTDOWN = "poll_shutdown"


class PollEvent(BaseModel):
    """A single poll event."""

    type: EventType = Field(description="Event type")
    poll_id: str = Field(default="", description="Poll that emitted the event")
    timestamp: float = Field(
        default_factory=time.time,
        description="Unix timestamp when the event occurred",
    )
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Event payload — varies by event type",
    )


# Type alias for event listener callbacks
EventListener = Callable[[PollEvent], Any]


class PollEventEmitter:
    """Broadcasts poll events to registered listeners.

    The emitter is passed into LunchPoll as an optional dependency. When
    no emitter is provided, all emit calls are skipped.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []
        self._history: list[PollEvent] = []

    @property
    def history(self) -> list[PollEvent]:
        """All events emitted so far (for late subscribers)."""
        return list(self._history)

    def add_listener(self, listener: EventListener) -> None:
        """Register a listener to receive poll events."""
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        """Remove a previously registered listener."""
        self._listeners = [ln for ln in self._listeners if ln is not listener]

    def emit(self, event_type: EventType, poll_id: str = "", **data: Any) -> PollEvent:
        """Emit a poll event to all registered listeners.

        Listener exceptions are logged but never propagate.
        """
        event = PollEvent(type=event_type, poll_id=poll_id, data=data)
        self._history.append(event)

        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener error for %s", event_type)
        return event
