"""
Tests for configuration loading and validation.
"""

import os
from dataclasses import FrozenInstanceError

import pytest
import yaml

from recipe_slice.core.config_loader import load_config
from recipe_slice.core.errors import ConfigurationError

CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "recipe_slice",
    "game_config.yaml"
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    with open(CONFIG_PATH, "r") as f:
        return yaml.safe_load(f)


def _write(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestDefaultConfig:
    """Test the shipped game_config.yaml."""

    def test_loads(self, config):
        """Default config should load and contain the tutorial fruit."""
        for name in ("Apple", "Banana", "Strawberry"):
            assert name in config.kind_names

    def test_tutorial_composition(self, config):
        """Tutorial is Apple x1, Banana x2, Strawberry x1 in that order."""
        tutorial = config.progression.tutorial
        assert dict(tutorial.counts) == {"Apple": 1, "Banana": 2, "Strawberry": 1}
        assert tutorial.sequence == ("Apple", "Banana", "Banana", "Strawberry")

    def test_spawner_section(self, config):
        """Spawner ranges should be ordered pairs."""
        spawner = config.spawner
        assert len(spawner.spawn_points) > 0
        assert spawner.interval_range[0] <= spawner.interval_range[1]
        assert spawner.min_per_burst <= spawner.max_per_burst

    def test_frozen(self, config):
        """Config sections are immutable."""
        with pytest.raises(FrozenInstanceError):
            config.director.boosted_weight = 99.0

    def test_get_kind(self, config):
        """get_kind looks up by name and rejects unknown names."""
        assert config.get_kind("Apple").name == "Apple"
        with pytest.raises(ValueError):
            config.get_kind("Durian")


class TestValidation:
    """Test that inconsistent configs are rejected."""

    def test_missing_file(self, tmp_path):
        """Nonexistent path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_tutorial_sequence_mismatch(self, tmp_path, raw_config):
        """Tutorial sequence must match its counts."""
        raw_config["progression"]["tutorial"]["sequence"] = ["Apple", "Banana", "Strawberry"]
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_tutorial_unknown_kind(self, tmp_path, raw_config):
        """Tutorial may only use catalog kinds."""
        raw_config["progression"]["tutorial"]["counts"]["Durian"] = 1
        raw_config["progression"]["tutorial"]["sequence"].append("Durian")
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_negative_weight(self, tmp_path, raw_config):
        """Kind weights must be non-negative."""
        raw_config["catalog"]["kinds"][0]["weight"] = -1
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_reversed_range(self, tmp_path, raw_config):
        """Ranges must be [min, max]."""
        raw_config["spawner"]["interval_range"] = [2.0, 1.0]
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_boost_below_baseline(self, tmp_path, raw_config):
        """Boosted weight may not be below the baseline."""
        raw_config["director"]["baseline_weight"] = 5.0
        raw_config["director"]["boosted_weight"] = 1.0
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_empty_spawn_points_allowed(self, tmp_path, raw_config):
        """Missing spawn points is a runtime degradation, not a load error."""
        raw_config["spawner"]["spawn_points"] = []
        config = load_config(_write(tmp_path, raw_config))
        assert config.spawner.spawn_points == ()

    def test_empty_catalog(self, tmp_path, raw_config):
        """At least one kind must be defined."""
        raw_config["catalog"]["kinds"] = []
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_empty_tutorial(self, tmp_path, raw_config):
        """An empty tutorial could never be won."""
        raw_config["progression"]["tutorial"]["counts"] = {}
        raw_config["progression"]["tutorial"]["sequence"] = []
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, raw_config))

    def test_progression_outgrows_catalog(self, tmp_path, raw_config):
        """Expansion levels must not run out of fresh kinds before the final level."""
        raw_config["progression"]["final_level"] = 5
        with pytest.raises(ConfigurationError, match="distinct kinds"):
            load_config(_write(tmp_path, raw_config))

    def test_progression_fits_catalog_exactly(self, tmp_path, raw_config):
        """A progression that uses every kind by the final level is accepted."""
        raw_config["progression"]["new_kinds_range"] = [1, 1]
        raw_config["progression"]["final_level"] = 5
        config = load_config(_write(tmp_path, raw_config))
        assert config.progression.final_level == 5
