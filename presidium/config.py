"""
Balance configuration persistence.

Stores game-balance constants for the committee simulation in a JSON file.
"""

import json
from pathlib import Path
from typing import TypedDict


class BalanceConfig(TypedDict, total=False):
    """Committee balance configuration."""
    max_seats: int  # Full + candidate members
    full_seats: int  # Seats with binding votes after an election
    election_interval: int  # Turns between Party Congress elections
    election_variance: float  # +/- band added to election scores
    vote_variance: int  # +/- band added to vote scores
    competence_abstain_chance: float  # Chance a competent member skips a routine item
    chair_position_index: int  # Position index that claims the chair after an election


DEFAULT_CONFIG: BalanceConfig = {
    "max_seats": 7,
    "full_seats": 5,
    "election_interval": 20,
    "election_variance": 5.0,
    "vote_variance": 15,
    "competence_abstain_chance": 0.2,
    "chair_position_index": 8,
}


def get_config_path(data_dir: Path | str = "saves") -> Path:
    """Get path to config file."""
    return Path(data_dir) / ".presidium_config.json"


def resolve_config(overrides: dict | None = None) -> BalanceConfig:
    """Merge overrides over the defaults."""
    config = DEFAULT_CONFIG.copy()
    if overrides:
        config.update(overrides)
    return config


def load_config(data_dir: Path | str = "saves") -> BalanceConfig:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(data_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        if not isinstance(saved, dict):
            return DEFAULT_CONFIG.copy()
        # Merge with defaults to handle missing keys
        return resolve_config(saved)
    except (json.JSONDecodeError, IOError):
        return DEFAULT_CONFIG.copy()


def save_config(config: BalanceConfig, data_dir: Path | str = "saves") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(data_dir)

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except IOError:
        return False
