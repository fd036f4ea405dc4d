"""Scenario files for driving a poll from the CLI.

A scenario is a TOML document naming the manager, the restaurants, the
participants, and an ordered list of steps (votes, clock advances,
manager close, shutdown). Running it replays the steps against a fresh
LunchPoll on a manual clock and records what happened at each step.
"""

from __future__ import annotations

import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field

from lunchpoll.errors import PollError
from lunchpoll.events import PollEventEmitter
from lunchpoll.settings import PollConfig
from lunchpoll.voting.clock import ManualClock
from lunchpoll.voting.machine import LunchPoll


class StepAction(StrEnum):
    """Kinds of scenario steps."""

    VOTE = "vote"
    ADVANCE = "advance"
    END = "end"
    SHUTDOWN = "shutdown"


class ScenarioParticipant(BaseModel):
    id: str = Field(description="Principal id")
    name: str = Field(description="Display name")


class ScenarioStep(BaseModel):
    """One step of a scenario. Fields not used by the action are ignored."""

    action: StepAction = Field(default=StepAction.VOTE)
    caller: str = Field(default="", description="Principal performing the step")
    candidate: int = Field(default=0, description="Candidate id for votes")
    seconds: float = Field(default=0, ge=0, description="Clock advance for advance steps")


class Scenario(BaseModel):
    """A complete poll scenario."""

    title: str = Field(default="")
    manager: str = Field(description="Principal id of the poll manager")
    deadline_offset: float | None = Field(default=None, ge=0)
    candidates: list[str] = Field(default_factory=list)
    participants: list[ScenarioParticipant] = Field(default_factory=list)
    steps: list[ScenarioStep] = Field(default_factory=list)


class StepResult(BaseModel):
    """Outcome of a single replayed step."""

    index: int
    action: StepAction
    caller: str = ""
    accepted: bool = False
    detail: str = ""


def load_scenario(path: Path) -> Scenario:
    """Load a scenario from a TOML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a valid scenario.
    """
    if not path.exists():
        raise FileNotFoundError(f"Scenario not found: {path}")
    with open(path, "rb") as f:
        raw = tomllib.load(f)
    return Scenario(**raw)


def run_scenario(
    scenario: Scenario,
    config: PollConfig | None = None,
    emitter: PollEventEmitter | None = None,
) -> tuple[LunchPoll, list[StepResult]]:
    """Build a poll from the scenario setup and replay its steps.

    Setup errors (duplicate names, too few entries) propagate as
    PollError. Errors raised by individual steps are recorded in the
    returned StepResult list so the replay continues.
    """
    clock = ManualClock()
    poll = LunchPoll(
        scenario.manager,
        config=config,
        clock=clock,
        emitter=emitter,
        title=scenario.title,
    )
    for name in scenario.candidates:
        poll.register_candidate(scenario.manager, name)
    for p in scenario.participants:
        poll.register_participant(scenario.manager, p.id, p.name)
    poll.start_voting(scenario.manager, scenario.deadline_offset)

    results: list[StepResult] = []
    for index, step in enumerate(scenario.steps, start=1):
        result = StepResult(index=index, action=step.action, caller=step.caller)
        try:
            if step.action is StepAction.ADVANCE:
                result.accepted = True
                result.detail = f"clock at {clock.advance(step.seconds):.0f}"
            elif step.action is StepAction.VOTE:
                result.accepted = poll.cast_vote(step.caller, step.candidate)
                result.detail = (
                    f"voted for {step.candidate}" if result.accepted
                    else "deadline passed, poll finalized"
                )
            elif step.action is StepAction.END:
                poll.end_voting(step.caller or scenario.manager)
                result.accepted = True
                result.detail = "voting closed"
            else:
                poll.shutdown(step.caller or scenario.manager)
                result.accepted = True
                result.detail = "poll shut down"
        except PollError as e:
            result.detail = f"{e.reason.value}: {e}"
        results.append(result)

    return poll, results
