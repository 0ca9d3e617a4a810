"""
Game Context
============

Explicitly constructed state shared by the core components. Holds what
outlives a single attempt: the level index, the recipe kept for retry, and
the most recent won recipe. Everything is process-lifetime only.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from recipe_slice.core.config_loader import GameConfig, get_config
from recipe_slice.core.entity_catalog import EntityCatalog
from recipe_slice.core.level_goal import GoalMode, LevelGoal
from recipe_slice.core.scheduler import Scheduler


@dataclass(frozen=True)
class RetryEntry:
    recipe: LevelGoal
    mode: GoalMode


class RetryMemory:
    """The recipe of the last lost attempt, replayed unchanged on retry."""

    def __init__(self):
        self._entry: Optional[RetryEntry] = None

    def set(self, recipe: LevelGoal) -> None:
        self._entry = RetryEntry(recipe=recipe, mode=recipe.mode)

    def clear(self) -> None:
        self._entry = None

    def get(self) -> Optional[RetryEntry]:
        return self._entry

    @property
    def recipe(self) -> Optional[LevelGoal]:
        return self._entry.recipe if self._entry is not None else None

    def __bool__(self) -> bool:
        return self._entry is not None


@dataclass
class GameContext:
    """Collaborators and cross-attempt progress passed to every component."""
    config: GameConfig
    rng: random.Random
    scheduler: Scheduler
    catalog: EntityCatalog
    level_index: int = 0
    retry_memory: RetryMemory = field(default_factory=RetryMemory)
    last_won: Optional[LevelGoal] = None

    @classmethod
    def create(
        cls,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ) -> "GameContext":
        """
        Build a context with fresh collaborators.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()
        return cls(
            config=config,
            rng=random.Random(seed),
            scheduler=Scheduler(),
            catalog=EntityCatalog(config)
        )

    def reset_progress(self) -> None:
        """Back to the tutorial with no carried recipes."""
        self.level_index = 0
        self.retry_memory.clear()
        self.last_won = None
