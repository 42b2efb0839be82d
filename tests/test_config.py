"""
Tests for balance configuration persistence.
"""

from presidium.config import (
    DEFAULT_CONFIG,
    get_config_path,
    load_config,
    resolve_config,
    save_config,
)
from presidium.systems import ElectionService, VotingEngine


class TestLoadConfig:
    """Test loading config from disk."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_round_trip(self, tmp_path):
        config = resolve_config({"vote_variance": 0, "election_interval": 10})

        assert save_config(config, tmp_path)
        loaded = load_config(tmp_path)

        assert loaded["vote_variance"] == 0
        assert loaded["election_interval"] == 10
        assert loaded["max_seats"] == 7

    def test_partial_file_merged_with_defaults(self, tmp_path):
        get_config_path(tmp_path).write_text('{"full_seats": 4}')

        loaded = load_config(tmp_path)

        assert loaded["full_seats"] == 4
        assert loaded["election_variance"] == DEFAULT_CONFIG["election_variance"]

    def test_corrupt_file_gives_defaults(self, tmp_path):
        get_config_path(tmp_path).write_text("{oops")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_non_object_gives_defaults(self, tmp_path):
        get_config_path(tmp_path).write_text("[1, 2]")
        assert load_config(tmp_path) == DEFAULT_CONFIG


class TestResolveConfig:
    """Test override merging."""

    def test_defaults_not_mutated(self):
        resolve_config({"max_seats": 3})
        assert DEFAULT_CONFIG["max_seats"] == 7

    def test_services_take_overrides(self):
        assert VotingEngine(config={"vote_variance": 0}).config["vote_variance"] == 0
        assert ElectionService().config["full_seats"] == 5
