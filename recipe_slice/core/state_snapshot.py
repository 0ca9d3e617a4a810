"""
State Snapshot
==============

Plain-data view of the current attempt for the presentation layer. The core
never formats display text; renderers build it from these fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from recipe_slice.core.level_goal import GoalMode, LevelGoal
from recipe_slice.core.rules import RuleViolation


@dataclass(frozen=True)
class AttemptSnapshot:
    """Everything a HUD or recipe panel needs about the current attempt."""
    phase: str
    level_index: int
    goal: Optional[LevelGoal]
    sliced_counts: Dict[str, int]
    cursor: int
    violation: Optional[RuleViolation]
    next_expected: Optional[str]
    remaining: Dict[str, int]
    has_retry: bool
    weights: Dict[str, float]

    @property
    def mode(self) -> Optional[GoalMode]:
        return self.goal.mode if self.goal is not None else None

    @property
    def is_tutorial(self) -> bool:
        return self.goal is not None and self.goal.is_tutorial

    @property
    def sequence(self) -> Tuple[str, ...]:
        return self.goal.sequence if self.goal is not None else ()

    @property
    def progress(self) -> float:
        """Fraction of required slices done, in [0, 1]."""
        if self.goal is None or self.goal.total_slices == 0:
            return 0.0
        done = sum(min(self.sliced_counts.get(k, 0), n) for k, n in self.goal.required_counts)
        return done / self.goal.total_slices
