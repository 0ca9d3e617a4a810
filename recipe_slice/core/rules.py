"""
Slice Rules
===========

Validates a single slice against the active goal. Breaking a rule is an
expected game outcome, so violations are returned as data, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from recipe_slice.core.level_goal import LevelGoal


class ViolationKind(Enum):
    WRONG_KIND = "wrong_kind"
    WRONG_ORDER = "wrong_order"
    TOO_MANY = "too_many"
    EXTRA_SLICE = "extra_slice"


@dataclass(frozen=True)
class RuleViolation:
    """Why an attempt was lost."""
    kind: ViolationKind
    reason: str
    actual: str
    expected: Optional[str] = None
    position: Optional[int] = None


@dataclass
class SliceVerdict:
    """Result of validating one slice."""
    accepted: bool
    completed: bool
    violation: Optional[RuleViolation]

    @staticmethod
    def accept() -> "SliceVerdict":
        return SliceVerdict(True, False, None)

    @staticmethod
    def complete() -> "SliceVerdict":
        return SliceVerdict(True, True, None)

    @staticmethod
    def reject(violation: RuleViolation) -> "SliceVerdict":
        return SliceVerdict(False, False, violation)


class SliceRules:
    """
    Applies the slice validation steps to a goal and mutable progress.

    Order of checks:
    1. Ordered goal already fully consumed: extra slice.
    2. Ordered goal, kind differs from sequence[cursor]: wrong order.
    3. Unordered goal, kind not in the recipe: wrong kind.
    4. Count the slice (and advance the cursor when ordered).
    5. Count now above the requirement: too many.
    6. Every count met (and cursor exhausted when ordered): complete.
    """

    def __init__(self, goal: LevelGoal):
        self._goal = goal
        self._sliced: Dict[str, int] = {k: 0 for k in goal.kinds}
        self._cursor = 0

    @property
    def goal(self) -> LevelGoal:
        return self._goal

    @property
    def sliced_counts(self) -> Dict[str, int]:
        return dict(self._sliced)

    @property
    def cursor(self) -> int:
        return self._cursor

    def next_expected(self) -> Optional[str]:
        """Next kind in sequence, or None once the sequence is consumed."""
        if self._cursor < len(self._goal.sequence):
            return self._goal.sequence[self._cursor]
        return None

    def remaining(self) -> Dict[str, int]:
        return self._goal.remaining(self._sliced)

    def is_complete(self) -> bool:
        if self._goal.order_enforced and self._cursor < len(self._goal.sequence):
            return False
        return self._goal.is_satisfied(self._sliced)

    def apply(self, kind: str) -> SliceVerdict:
        """
        Validate and record one slice.

        Args:
            kind: Kind that was sliced.

        Returns:
            SliceVerdict; a rejected verdict carries the RuleViolation.
        """
        goal = self._goal
        sequence = goal.sequence

        if goal.order_enforced:
            if self._cursor >= len(sequence):
                return SliceVerdict.reject(RuleViolation(
                    ViolationKind.EXTRA_SLICE,
                    f"Extra slice: {kind}",
                    actual=kind,
                    position=self._cursor
                ))
            expected = sequence[self._cursor]
            if kind != expected:
                return SliceVerdict.reject(RuleViolation(
                    ViolationKind.WRONG_ORDER,
                    f"Wrong order! Expected {expected}, got {kind}",
                    actual=kind,
                    expected=expected,
                    position=self._cursor
                ))
        elif goal.required(kind) == 0:
            return SliceVerdict.reject(RuleViolation(
                ViolationKind.WRONG_KIND,
                f"Wrong fruit: {kind}",
                actual=kind
            ))

        self._sliced[kind] = self._sliced.get(kind, 0) + 1
        if goal.order_enforced:
            self._cursor += 1

        if self._sliced[kind] > goal.required(kind):
            return SliceVerdict.reject(RuleViolation(
                ViolationKind.TOO_MANY,
                f"Too many {kind}s!",
                actual=kind,
                position=self._cursor - 1 if goal.order_enforced else None
            ))

        if self.is_complete():
            return SliceVerdict.complete()
        return SliceVerdict.accept()
