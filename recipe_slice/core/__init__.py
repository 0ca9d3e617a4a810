"""
Recipe Slice Core - the rule engine.

Main exports:
- GameSession: Orchestrator driven by tick(dt) and slice_entity(uid)
- LevelDirector: Attempt state machine (reveal, play, win/lose, retry)
- AdaptiveSpawner: Weighted burst spawner with cap and cleanup
- EntityCatalog: Fruit kinds and their runtime weights
- ProgressionPolicy / LevelGoal: Recipe construction per level
- GameConfig: Configuration loaded from game_config.yaml
"""

from recipe_slice.core.config_loader import GameConfig, load_config
from recipe_slice.core.errors import ConfigurationError, InvariantViolation
from recipe_slice.core.entity_catalog import EntityCatalog, WeightedEntry
from recipe_slice.core.scheduler import Scheduler, TimerHandle
from recipe_slice.core.play_area import PlayArea, EntityBody
from recipe_slice.core.spawner import AdaptiveSpawner
from recipe_slice.core.level_goal import GoalMode, LevelGoal
from recipe_slice.core.progression import ProgressionPolicy
from recipe_slice.core.rules import RuleViolation, SliceRules, SliceVerdict, ViolationKind
from recipe_slice.core.context import GameContext, RetryMemory
from recipe_slice.core.state_snapshot import AttemptSnapshot
from recipe_slice.core.director import LevelDirector, Phase
from recipe_slice.core.session import GameSession

__all__ = [
    "GameConfig",
    "load_config",
    "ConfigurationError",
    "InvariantViolation",
    "EntityCatalog",
    "WeightedEntry",
    "Scheduler",
    "TimerHandle",
    "PlayArea",
    "EntityBody",
    "AdaptiveSpawner",
    "GoalMode",
    "LevelGoal",
    "ProgressionPolicy",
    "RuleViolation",
    "SliceRules",
    "SliceVerdict",
    "ViolationKind",
    "GameContext",
    "RetryMemory",
    "AttemptSnapshot",
    "LevelDirector",
    "Phase",
    "GameSession",
]
