"""Tests for scenario loading and replay."""

from __future__ import annotations

from pathlib import Path

import pytest

from lunchpoll.errors import SetupError
from lunchpoll.schemas.poll import Phase
from lunchpoll.scenario import (
    Scenario,
    ScenarioParticipant,
    ScenarioStep,
    StepAction,
    load_scenario,
    run_scenario,
)

SCENARIO_TOML = """
title = "Friday lunch"
manager = "manager"
deadline_offset = 600
candidates = ["Courtyard Cafe", "Uni Cafe"]

[[participants]]
id = "alice"
name = "Alice"

[[participants]]
id = "bob"
name = "Bob"

[[participants]]
id = "charlie"
name = "Charlie"

[[participants]]
id = "eve"
name = "Eve"

[[steps]]
caller = "alice"
candidate = 1

[[steps]]
caller = "bob"
candidate = 2

[[steps]]
caller = "charlie"
candidate = 2
"""


# ── Factories ──────────────────────────────────────────────────────


def _make_scenario(steps: list[ScenarioStep], **overrides) -> Scenario:
    defaults = {
        "manager": "manager",
        "deadline_offset": 60,
        "candidates": ["A", "B"],
        "participants": [
            ScenarioParticipant(id=f"v{i}", name=f"Voter {i}") for i in range(5)
        ],
        "steps": steps,
    }
    defaults.update(overrides)
    return Scenario(**defaults)


# ── Loading ──────────────────────────────────────────────────────


class TestLoadScenario:
    def test_load_from_toml(self, tmp_path: Path):
        path = tmp_path / "lunch.toml"
        path.write_text(SCENARIO_TOML)
        scenario = load_scenario(path)

        assert scenario.title == "Friday lunch"
        assert scenario.candidates == ["Courtyard Cafe", "Uni Cafe"]
        assert [p.id for p in scenario.participants] == ["alice", "bob", "charlie", "eve"]
        assert all(s.action is StepAction.VOTE for s in scenario.steps)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_scenario(tmp_path / "missing.toml")

    def test_manager_required(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text('candidates = ["A"]\n')
        with pytest.raises(ValueError):
            load_scenario(path)


# ── Replay ───────────────────────────────────────────────────────


class TestRunScenario:
    def test_quorum_example(self, tmp_path: Path):
        path = tmp_path / "lunch.toml"
        path.write_text(SCENARIO_TOML)
        poll, results = run_scenario(load_scenario(path))

        assert [r.accepted for r in results] == [True, True, True]
        assert poll.phase == Phase.ENDED
        assert poll.winner_name == "Uni Cafe"
        assert poll.title == "Friday lunch"

    def test_step_errors_are_recorded(self):
        scenario = _make_scenario([
            ScenarioStep(caller="v0", candidate=1),
            ScenarioStep(caller="v0", candidate=2),
            ScenarioStep(caller="mallory", candidate=1),
        ])
        poll, results = run_scenario(scenario)

        assert [r.accepted for r in results] == [True, False, False]
        assert results[1].detail.startswith("already_voted")
        assert results[2].detail.startswith("not_a_participant")
        assert poll.phase == Phase.VOTING

    def test_advance_past_deadline(self):
        scenario = _make_scenario([
            ScenarioStep(caller="v0", candidate=2),
            ScenarioStep(action=StepAction.ADVANCE, seconds=61),
            ScenarioStep(caller="v1", candidate=1),
        ])
        poll, results = run_scenario(scenario)

        assert results[1].detail == "clock at 61"
        assert results[2].accepted is False
        assert poll.phase == Phase.ENDED
        assert poll.winner_name == "B"

    def test_end_and_shutdown_steps(self):
        ended, _ = run_scenario(_make_scenario([ScenarioStep(action=StepAction.END)]))
        assert ended.phase == Phase.ENDED
        assert ended.winner_name is None

        halted, results = run_scenario(_make_scenario([
            ScenarioStep(caller="v0", candidate=1),
            ScenarioStep(action=StepAction.SHUTDOWN),
            ScenarioStep(caller="v1", candidate=1),
        ]))
        assert halted.is_shut_down is True
        assert halted.winner_name is None
        assert results[2].detail.startswith("shut_down")

    def test_setup_errors_propagate(self):
        scenario = _make_scenario([], candidates=["Only"])
        with pytest.raises(SetupError):
            run_scenario(scenario)
