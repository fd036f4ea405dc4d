"""Poll configuration and TOML loader.

Loads poll defaults from defaults.toml. Values not present in the file
fall back to the PollConfig field defaults.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

# Default config directory relative to the lunchpoll package
_CONFIG_DIR = Path(__file__).parent / "config"


class PollConfig(BaseModel):
    """Configuration shared by every poll created from the CLI or service."""

    deadline_offset: float = Field(
        default=3600, ge=0, description="Seconds between start_voting and the deadline",
    )
    min_candidates: int = Field(
        default=2, ge=2, description="Candidates required before voting can start",
    )
    min_participants: int = Field(
        default=2, ge=2, description="Participants required before voting can start",
    )
    db_path: str = Field(
        default="~/.lunchpoll/polls.db", description="SQLite database for saved polls",
    )
    persist_results: bool = Field(
        default=True, description="Save a snapshot of every finished poll",
    )


def load_config(config_path: Path | None = None) -> PollConfig:
    """Load poll defaults from a TOML file.

    Args:
        config_path: Path to defaults.toml. Defaults to lunchpoll/config/defaults.toml.

    Returns:
        PollConfig with values from the [poll] table.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the [poll] table is not a table or holds invalid values.
    """
    path = config_path or _CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Poll config not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    poll_section = raw.get("poll", {})
    if not isinstance(poll_section, dict):
        raise ValueError(f"[poll] must be a table in {path}")

    # pydantic.ValidationError is a ValueError subclass
    return PollConfig(**poll_section)
