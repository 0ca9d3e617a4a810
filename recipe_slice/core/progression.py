"""
Progression Policy
==================

Builds the goal for each level: the fixed tutorial, randomized memory goals,
and expansion goals that grow the last won recipe.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

from recipe_slice.core.config_loader import GameConfig, get_config
from recipe_slice.core.level_goal import GoalMode, LevelGoal

logger = logging.getLogger(__name__)


class ProgressionPolicy:
    """
    Goal construction keyed by level index.

    - Level 0: tutorial goal from config.
    - Levels 1..memory_levels: memory goals (distinct random kinds).
    - Later levels: expansion of the previous won goal.
    - Past final_level: cleared (build_goal returns None).

    All randomness comes from the injected rng, so a seeded rng reproduces
    the same goals.
    """

    def __init__(
        self,
        kinds: Sequence[str],
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize policy.

        Args:
            kinds: Every kind goals may draw from.
            config: Game configuration. Uses default if None.
            rng: Random source. A fresh unseeded one if None.
        """
        if config is None:
            config = get_config()

        self._kinds: Tuple[str, ...] = tuple(kinds)
        self._config = config.progression
        self._rng = rng if rng is not None else random.Random()

    @property
    def final_level(self) -> int:
        return self._config.final_level

    def is_cleared(self, level_index: int) -> bool:
        """True once the level index is past the last playable level."""
        return level_index > self._config.final_level

    def is_final(self, level_index: int) -> bool:
        return level_index == self._config.final_level

    def tutorial_goal(self) -> LevelGoal:
        tutorial = self._config.tutorial
        return LevelGoal(
            required_counts=tutorial.counts,
            sequence=tutorial.sequence,
            order_enforced=True,
            mode=GoalMode.TUTORIAL,
            level_index=0
        )

    def _random_count(self) -> int:
        low, high = self._config.count_range
        return self._rng.randint(low, high)

    def _pick_new_kinds(self, exclude: Sequence[str], count: int) -> List[str]:
        """Pick up to count distinct kinds not in exclude."""
        pool = [k for k in self._kinds if k not in exclude]
        count = min(count, len(pool))
        return self._rng.sample(pool, count)

    def memory_goal(self, level_index: int) -> LevelGoal:
        """
        Pick distinct kinds without replacement, each with a random count.

        The sequence groups each kind's repetitions in the order they were
        picked; order is always enforced.
        """
        chosen = self._pick_new_kinds((), self._config.memory_kinds)
        sequence: List[str] = []
        for kind in chosen:
            sequence.extend([kind] * self._random_count())
        return LevelGoal.from_sequence(
            sequence,
            order_enforced=True,
            mode=GoalMode.MEMORY,
            level_index=level_index
        )

    def expansion_goal(self, previous: LevelGoal, level_index: int) -> Optional[LevelGoal]:
        """
        Grow a won goal by appending 1-2 new kinds with their own counts.

        Previous counts and sequence are kept as a prefix.

        Returns:
            The expanded goal, or None when every kind is already in the
            recipe and nothing new can be added.
        """
        low, high = self._config.new_kinds_range
        wanted = self._rng.randint(low, high)

        chosen = self._pick_new_kinds(previous.kinds, wanted)
        if not chosen:
            logger.info("No unused kinds left to expand level %d; treating as cleared", level_index)
            return None

        additions = [(kind, self._random_count()) for kind in chosen]
        return previous.extended(additions, mode=GoalMode.EXPANSION, level_index=level_index)

    def build_goal(
        self,
        level_index: int,
        last_won: Optional[LevelGoal] = None
    ) -> Optional[LevelGoal]:
        """
        Build a fresh goal for a level.

        Args:
            level_index: Level to build for.
            last_won: Goal of the most recent win, used by expansion levels.

        Returns:
            New goal, or None when the level index is past the final level
            or the recipe can no longer grow.
        """
        if self.is_cleared(level_index):
            return None
        if level_index == 0:
            return self.tutorial_goal()
        if level_index <= self._config.memory_levels or last_won is None or last_won.is_tutorial:
            return self.memory_goal(level_index)
        return self.expansion_goal(last_won, level_index)

    def next_goal(
        self,
        level_index: int,
        retry_recipe: Optional[LevelGoal] = None,
        last_won: Optional[LevelGoal] = None
    ) -> Optional[LevelGoal]:
        """
        Goal for the next attempt.

        A recipe held for retry is returned unchanged so the player faces the
        identical composition again.
        """
        if retry_recipe is not None:
            return retry_recipe
        return self.build_goal(level_index, last_won)
