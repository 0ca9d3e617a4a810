"""
Level Goal
==========

The recipe a player must slice to win one attempt.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple


class GoalMode(Enum):
    """Which policy produced a goal."""
    TUTORIAL = "tutorial"
    MEMORY = "memory"
    EXPANSION = "expansion"


@dataclass(frozen=True)
class LevelGoal:
    """
    Immutable recipe for one attempt.

    `sequence` is always a concrete ordering whose multiset equals
    `required_counts`. When `order_enforced` is False it is still recorded,
    but slices may arrive in any order.
    """
    required_counts: Tuple[Tuple[str, int], ...]
    sequence: Tuple[str, ...]
    order_enforced: bool = True
    mode: GoalMode = GoalMode.MEMORY
    level_index: int = 0
    _counts: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        counts = dict(self.required_counts)
        if len(counts) != len(self.required_counts):
            raise ValueError(f"Duplicate kinds in required counts: {self.required_counts}")
        for kind, count in counts.items():
            if count < 1:
                raise ValueError(f"Required count for {kind} must be positive, got {count}")
        if Counter(self.sequence) != Counter(counts):
            raise ValueError(
                f"Sequence {list(self.sequence)} does not match counts {counts}"
            )
        object.__setattr__(self, "_counts", counts)

    @classmethod
    def from_sequence(
        cls,
        sequence: Iterable[str],
        order_enforced: bool = True,
        mode: GoalMode = GoalMode.MEMORY,
        level_index: int = 0
    ) -> "LevelGoal":
        """Build a goal whose counts are derived from a sequence."""
        sequence = tuple(sequence)
        counts: Dict[str, int] = {}
        for kind in sequence:
            counts[kind] = counts.get(kind, 0) + 1
        return cls(
            required_counts=tuple(counts.items()),
            sequence=sequence,
            order_enforced=order_enforced,
            mode=mode,
            level_index=level_index
        )

    @property
    def counts(self) -> Mapping[str, int]:
        """Required count per kind."""
        return dict(self._counts)

    @property
    def kinds(self) -> Tuple[str, ...]:
        """Required kinds in first-appearance order."""
        return tuple(kind for kind, _ in self.required_counts)

    @property
    def total_slices(self) -> int:
        return len(self.sequence)

    @property
    def is_tutorial(self) -> bool:
        return self.mode is GoalMode.TUTORIAL

    def required(self, kind: str) -> int:
        """Required count for a kind (0 if not part of the recipe)."""
        return self._counts.get(kind, 0)

    def remaining(self, sliced_counts: Mapping[str, int]) -> Dict[str, int]:
        """Kinds still needed and how many, given what has been sliced."""
        result = {}
        for kind, need in self.required_counts:
            left = need - sliced_counts.get(kind, 0)
            if left > 0:
                result[kind] = left
        return result

    def is_satisfied(self, sliced_counts: Mapping[str, int]) -> bool:
        return all(sliced_counts.get(k, 0) >= n for k, n in self.required_counts)

    def extended(
        self,
        additions: Sequence[Tuple[str, int]],
        mode: GoalMode = GoalMode.EXPANSION,
        level_index: Optional[int] = None
    ) -> "LevelGoal":
        """
        Return a new goal with extra kinds appended.

        Each addition contributes `count` repetitions to the end of the
        sequence. A kind already present gets its count raised.
        """
        counts = dict(self.required_counts)
        sequence = list(self.sequence)
        for kind, count in additions:
            counts[kind] = counts.get(kind, 0) + count
            sequence.extend([kind] * count)
        return LevelGoal(
            required_counts=tuple(counts.items()),
            sequence=tuple(sequence),
            order_enforced=self.order_enforced,
            mode=mode,
            level_index=self.level_index if level_index is None else level_index
        )
