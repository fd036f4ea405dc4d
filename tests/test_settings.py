"""Tests for poll configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from lunchpoll.settings import PollConfig, load_config


class TestLoadConfig:
    def test_bundled_defaults(self):
        config = load_config()
        assert config.deadline_offset == 3600
        assert config.min_candidates == 2
        assert config.min_participants == 2
        assert config.db_path == "~/.lunchpoll/polls.db"
        assert config.persist_results is True

    def test_custom_file(self, tmp_path: Path):
        path = tmp_path / "poll.toml"
        path.write_text('[poll]\ndeadline_offset = 90\ndb_path = "polls.db"\n')
        config = load_config(path)
        assert config.deadline_offset == 90
        assert config.db_path == "polls.db"
        assert config.min_participants == 2

    def test_missing_table_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.toml"
        path.write_text("")
        assert load_config(path) == PollConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_minimum(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[poll]\nmin_candidates = 1\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_poll_must_be_a_table(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text('poll = "yes"\n')
        with pytest.raises(ValueError, match="must be a table"):
            load_config(path)
