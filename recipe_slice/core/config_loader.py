"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from recipe_slice.core.errors import ConfigurationError


@dataclass(frozen=True)
class KindConfig:
    """Configuration for a single spawnable fruit kind."""
    name: str
    weight: float     # Design weight used when weights are reset to defaults
    radius: float     # Collision radius of the spawned body
    mass: float


@dataclass(frozen=True)
class PhysicsConfig:
    """Physics parameters for the play area."""
    gravity_x: float
    gravity_y: float
    damping: float
    dt: float
    substeps: int

    @property
    def gravity(self) -> Tuple[float, float]:
        return (self.gravity_x, self.gravity_y)


@dataclass(frozen=True)
class SpawnerConfig:
    """Burst timing, launch impulse and cleanup parameters."""
    spawn_points: Tuple[Tuple[float, float], ...]
    randomize_spawn_point: bool
    center_x: float                       # Horizontal center used for inward bias
    interval_range: Tuple[float, float]   # Seconds between bursts
    min_per_burst: int
    max_per_burst: int
    x_force_range: Tuple[float, float]
    y_force_range: Tuple[float, float]
    torque_range: Tuple[float, float]
    bias_x_by_spawn_position: bool
    max_active: int                       # Live population cap
    cleanup_below_y: float
    cleanup_interval: float


@dataclass(frozen=True)
class TutorialConfig:
    """Fixed composition of the level 0 tutorial goal."""
    counts: Tuple[Tuple[str, int], ...]
    sequence: Tuple[str, ...]


@dataclass(frozen=True)
class ProgressionConfig:
    """Goal construction parameters."""
    tutorial: TutorialConfig
    memory_levels: int                    # Levels 1..memory_levels build memory goals
    memory_kinds: int                     # Distinct kinds in a memory goal
    count_range: Tuple[int, int]          # Per-kind required count
    new_kinds_range: Tuple[int, int]      # Kinds appended by an expansion goal
    final_level: int                      # Last playable level index


@dataclass(frozen=True)
class DirectorConfig:
    """Reveal timing and adaptive weighting parameters."""
    reveal_seconds_tutorial: float
    reveal_seconds: float
    baseline_weight: float
    boosted_weight: float
    tutorial_always_advances: bool


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    kinds: Tuple[KindConfig, ...]
    physics: PhysicsConfig
    spawner: SpawnerConfig
    progression: ProgressionConfig
    director: DirectorConfig

    @property
    def kind_names(self) -> Tuple[str, ...]:
        """Names of all kinds in catalog order."""
        return tuple(k.name for k in self.kinds)

    def get_kind(self, name: str) -> KindConfig:
        """Get kind config by name."""
        for kind in self.kinds:
            if kind.name == name:
                return kind
        raise ValueError(f"Unknown kind: {name}")


def _parse_range(data: List, label: str, cast=float) -> Tuple:
    """Parse a [min, max] pair from YAML."""
    if len(data) != 2:
        raise ConfigurationError(f"{label} must have 2 values [min, max], got {data}")
    low, high = cast(data[0]), cast(data[1])
    if low > high:
        raise ConfigurationError(f"{label} min ({low}) exceeds max ({high})")
    return (low, high)


def _parse_point(point: List) -> Tuple[float, float]:
    """Parse an [x, y] spawn point from YAML."""
    if len(point) != 2:
        raise ConfigurationError(f"Spawn point must have 2 values [x, y], got {point}")
    return (float(point[0]), float(point[1]))


def _parse_kind(kind_data: dict) -> KindConfig:
    """Parse a single kind configuration from YAML."""
    return KindConfig(
        name=str(kind_data["name"]),
        weight=float(kind_data.get("weight", 1.0)),
        radius=float(kind_data.get("radius", 0.5)),
        mass=float(kind_data.get("mass", 1.0))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    names = config.kind_names
    if not names:
        raise ConfigurationError("Catalog must define at least one kind")
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate kind names: {list(names)}")

    for kind in config.kinds:
        if kind.weight < 0:
            raise ConfigurationError(f"Weight of {kind.name} must be >= 0, got {kind.weight}")
        if kind.radius <= 0 or kind.mass <= 0:
            raise ConfigurationError(f"Radius and mass of {kind.name} must be positive")

    spawner = config.spawner
    if spawner.min_per_burst < 0 or spawner.min_per_burst > spawner.max_per_burst:
        raise ConfigurationError(
            f"Burst size range invalid: [{spawner.min_per_burst}, {spawner.max_per_burst}]"
        )
    if spawner.interval_range[0] <= 0:
        raise ConfigurationError("interval_range must be positive")
    if spawner.cleanup_interval <= 0:
        raise ConfigurationError("cleanup_interval must be positive")

    # Tutorial composition must reference known kinds and match its counts
    tutorial = config.progression.tutorial
    counts = dict(tutorial.counts)
    if not counts or not tutorial.sequence:
        raise ConfigurationError("Tutorial counts and sequence must not be empty")
    for name in list(counts) + list(tutorial.sequence):
        if name not in names:
            raise ConfigurationError(f"Tutorial references unknown kind: {name}")
    for name, count in counts.items():
        if tutorial.sequence.count(name) != count:
            raise ConfigurationError(
                f"Tutorial sequence has {tutorial.sequence.count(name)} x {name}, "
                f"counts require {count}"
            )
    if len(tutorial.sequence) != sum(counts.values()):
        raise ConfigurationError("Tutorial sequence length does not match its counts")

    progression = config.progression
    if progression.count_range[0] < 1:
        raise ConfigurationError("count_range min must be at least 1")
    if progression.new_kinds_range[0] < 1:
        raise ConfigurationError("new_kinds_range min must be at least 1")
    if progression.memory_kinds < 1:
        raise ConfigurationError("memory_kinds must be at least 1")

    # Every expansion level must be able to add fresh kinds
    expansion_levels = max(0, progression.final_level - progression.memory_levels)
    kinds_needed = progression.memory_kinds + progression.new_kinds_range[1] * expansion_levels
    if kinds_needed > len(names):
        raise ConfigurationError(
            f"Progression may need {kinds_needed} distinct kinds by level "
            f"{progression.final_level}, catalog has {len(names)}"
        )

    director = config.director
    if not 0 <= director.baseline_weight <= director.boosted_weight:
        raise ConfigurationError(
            f"Weights must satisfy 0 <= baseline ({director.baseline_weight}) "
            f"<= boosted ({director.boosted_weight})"
        )
    if director.reveal_seconds < 0 or director.reveal_seconds_tutorial < 0:
        raise ConfigurationError("Reveal durations must be non-negative")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    kinds = tuple(_parse_kind(k) for k in raw["catalog"]["kinds"])

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity_x=float(physics_data.get("gravity_x", 0.0)),
        gravity_y=float(physics_data["gravity_y"]),
        damping=float(physics_data.get("damping", 1.0)),
        dt=float(physics_data["dt"]),
        substeps=int(physics_data.get("substeps", 1))
    )

    spawner_data = raw["spawner"]
    spawner = SpawnerConfig(
        spawn_points=tuple(_parse_point(p) for p in spawner_data.get("spawn_points") or []),
        randomize_spawn_point=bool(spawner_data.get("randomize_spawn_point", True)),
        center_x=float(spawner_data.get("center_x", 0.0)),
        interval_range=_parse_range(spawner_data["interval_range"], "interval_range"),
        min_per_burst=int(spawner_data.get("min_per_burst", 1)),
        max_per_burst=int(spawner_data.get("max_per_burst", 3)),
        x_force_range=_parse_range(spawner_data["x_force_range"], "x_force_range"),
        y_force_range=_parse_range(spawner_data["y_force_range"], "y_force_range"),
        torque_range=_parse_range(spawner_data["torque_range"], "torque_range"),
        bias_x_by_spawn_position=bool(spawner_data.get("bias_x_by_spawn_position", True)),
        max_active=int(spawner_data.get("max_active", 25)),
        cleanup_below_y=float(spawner_data.get("cleanup_below_y", -10.0)),
        cleanup_interval=float(spawner_data.get("cleanup_interval", 1.0))
    )

    progression_data = raw["progression"]
    tutorial_data = progression_data["tutorial"]
    progression = ProgressionConfig(
        tutorial=TutorialConfig(
            counts=tuple((str(k), int(v)) for k, v in tutorial_data["counts"].items()),
            sequence=tuple(str(k) for k in tutorial_data["sequence"])
        ),
        memory_levels=int(progression_data.get("memory_levels", 1)),
        memory_kinds=int(progression_data.get("memory_kinds", 2)),
        count_range=_parse_range(progression_data["count_range"], "count_range", int),
        new_kinds_range=_parse_range(
            progression_data.get("new_kinds_range", [1, 2]), "new_kinds_range", int
        ),
        final_level=int(progression_data["final_level"])
    )

    director_data = raw["director"]
    director = DirectorConfig(
        reveal_seconds_tutorial=float(director_data.get("reveal_seconds_tutorial", 3.0)),
        reveal_seconds=float(director_data.get("reveal_seconds", 5.0)),
        baseline_weight=float(director_data.get("baseline_weight", 1.0)),
        boosted_weight=float(director_data.get("boosted_weight", 6.0)),
        tutorial_always_advances=bool(director_data.get("tutorial_always_advances", True))
    )

    config = GameConfig(
        kinds=kinds,
        physics=physics,
        spawner=spawner,
        progression=progression,
        director=director
    )

    _validate_config(config)
    return config


def config_from_overrides(base: GameConfig, **sections) -> GameConfig:
    """
    Return a copy of base with whole sections replaced, re-validated.

    Example:
        config_from_overrides(cfg, spawner=replace(cfg.spawner, spawn_points=()))
    """
    values: Dict[str, object] = {
        "kinds": base.kinds,
        "physics": base.physics,
        "spawner": base.spawner,
        "progression": base.progression,
        "director": base.director,
    }
    values.update(sections)
    config = GameConfig(**values)
    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
