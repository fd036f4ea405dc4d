"""Quorum voting engine.

Provides the candidate/participant registry, the ballot tally with
first-to-lead tie-break, and the phase-gated LunchPoll state machine.
"""

from lunchpoll.voting.clock import Clock, ManualClock, SystemClock
from lunchpoll.voting.finalizer import Outcome, build_tally, tally_ballots
from lunchpoll.voting.machine import LunchPoll, quorum_for
from lunchpoll.voting.registry import Registry

__all__ = [
    "Clock",
    "LunchPoll",
    "ManualClock",
    "Outcome",
    "Registry",
    "SystemClock",
    "build_tally",
    "quorum_for",
    "tally_ballots",
]
