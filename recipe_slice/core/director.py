"""
Level Director
==============

State machine driving one attempt at a time:

    IDLE -> REVEALING -> ACTIVE -> WON | LOST | CLEARED

CLEARED replaces WON when the final level is won, and is entered directly
from IDLE when the level index is already past the final level.

The director owns the attempt state and the retry memory, validates slices
through SliceRules, and steers the spawner by reshaping catalog weights
toward what the player needs next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from recipe_slice.core.context import GameContext
from recipe_slice.core.errors import InvariantViolation
from recipe_slice.core.level_goal import GoalMode, LevelGoal
from recipe_slice.core.progression import ProgressionPolicy
from recipe_slice.core.rules import RuleViolation, SliceRules, SliceVerdict
from recipe_slice.core.scheduler import TimerHandle
from recipe_slice.core.spawner import AdaptiveSpawner
from recipe_slice.core.state_snapshot import AttemptSnapshot

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    REVEALING = "revealing"
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"
    CLEARED = "cleared"


@dataclass
class AttemptState:
    """Mutable state of the current attempt."""
    phase: Phase = Phase.IDLE
    goal: Optional[LevelGoal] = None
    rules: Optional[SliceRules] = None
    violation: Optional[RuleViolation] = None

    @property
    def sliced_counts(self):
        return self.rules.sliced_counts if self.rules is not None else {}

    @property
    def cursor(self) -> int:
        return self.rules.cursor if self.rules is not None else 0


@dataclass(frozen=True)
class AttemptRecord:
    """One resolved attempt."""
    level_index: int
    mode: GoalMode
    outcome: Phase
    reason: Optional[str] = None


class LevelDirector:
    """
    Runs attempts: reveal, play, resolve, retry or advance.

    Retry memory is set to the exact active goal on a loss, so the next
    attempt replays the same recipe instead of a fresh random one. It is
    cleared when a win advances the level or the player returns to the menu.
    """

    def __init__(
        self,
        context: GameContext,
        spawner: AdaptiveSpawner,
        policy: Optional[ProgressionPolicy] = None,
        on_change: Optional[Callable[[AttemptSnapshot], None]] = None
    ):
        """
        Initialize director.

        Args:
            context: Shared context (config, scheduler, catalog, progress).
            spawner: Spawner started and stopped with each attempt.
            policy: Goal construction. Built from the context if None.
            on_change: Called with a fresh snapshot after every phase change
                and every accepted slice.
        """
        self._context = context
        self._config = context.config.director
        self._spawner = spawner
        self._policy = policy if policy is not None else ProgressionPolicy(
            context.catalog.all_kinds(), context.config, context.rng
        )
        self._on_change = on_change

        self._state = AttemptState()
        self._reveal_handle: Optional[TimerHandle] = None
        self._history: List[AttemptRecord] = []

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def goal(self) -> Optional[LevelGoal]:
        return self._state.goal

    @property
    def level_index(self) -> int:
        return self._context.level_index

    @property
    def policy(self) -> ProgressionPolicy:
        return self._policy

    @property
    def history(self) -> List[AttemptRecord]:
        return list(self._history)

    @property
    def shows_tutorial_summary(self) -> bool:
        """True while a resolved tutorial awaits acknowledgment."""
        return (
            self._config.tutorial_always_advances
            and self._state.phase in (Phase.WON, Phase.LOST)
            and self._state.goal is not None
            and self._state.goal.is_tutorial
        )

    # --- Presentation-facing operations ---

    def start_attempt(self) -> Optional[LevelGoal]:
        """
        Fix the next goal and begin revealing it.

        The goal comes from retry memory when a previous attempt was lost,
        otherwise from the progression policy. If the policy reports the game
        cleared, the director moves straight to CLEARED.

        Returns:
            The goal for this attempt, or None if cleared.
        """
        if self._state.phase is not Phase.IDLE:
            raise InvariantViolation(f"start_attempt called while {self._state.phase.value}")

        ctx = self._context
        goal = self._policy.next_goal(ctx.level_index, ctx.retry_memory.recipe, ctx.last_won)
        if goal is None:
            logger.info("No goal left for level %d; game cleared", ctx.level_index)
            self._state = AttemptState(phase=Phase.CLEARED)
            self._notify()
            return None

        self._state = AttemptState(phase=Phase.REVEALING, goal=goal, rules=SliceRules(goal))
        duration = (
            self._config.reveal_seconds_tutorial if goal.is_tutorial
            else self._config.reveal_seconds
        )
        self._reveal_handle = ctx.scheduler.call_later(duration, self._begin_play)

        logger.info(
            "Level %d (%s) revealing %s for %.1fs%s",
            ctx.level_index, goal.mode.value, list(goal.sequence), duration,
            " [retry]" if ctx.retry_memory else ""
        )
        self._notify()
        return goal

    def acknowledge_win(self) -> None:
        """Continue after a win: advance one level. After CLEARED, start over."""
        phase = self._state.phase
        if phase is Phase.CLEARED:
            self._context.reset_progress()
            self._state = AttemptState()
            logger.info("Progress reset after clearing the game")
            self._notify()
            return
        if phase is not Phase.WON:
            raise InvariantViolation(f"acknowledge_win called while {phase.value}")

        self._context.retry_memory.clear()
        self._context.level_index += 1
        self._state = AttemptState()
        logger.info("Advancing to level %d", self._context.level_index)
        self._notify()

    def acknowledge_loss(self) -> None:
        """
        Continue after a loss: the next attempt replays the same recipe.

        A lost tutorial still moves on to the first real level when
        tutorial_always_advances is set.
        """
        if self._state.phase is not Phase.LOST:
            raise InvariantViolation(f"acknowledge_loss called while {self._state.phase.value}")

        if self.shows_tutorial_summary:
            self._context.retry_memory.clear()
            self._context.level_index += 1
            logger.info("Tutorial finished; advancing to level %d", self._context.level_index)
        self._state = AttemptState()
        self._notify()

    def return_to_menu(self) -> None:
        """Abandon whatever is in progress and go back to IDLE."""
        if self._reveal_handle is not None:
            self._reveal_handle.cancel()
            self._reveal_handle = None
        self._spawner.stop()
        self._context.retry_memory.clear()
        self._state = AttemptState()
        logger.info("Returned to menu at level %d", self._context.level_index)
        self._notify()

    # --- Input-facing operations ---

    def on_sliced(self, kind: str) -> SliceVerdict:
        """
        Validate one slice reported by the input layer.

        Args:
            kind: Kind of the sliced fruit.

        Returns:
            The verdict; a violation resolves the attempt as LOST.

        Raises:
            InvariantViolation: If no attempt is ACTIVE.
        """
        state = self._state
        if state.phase is not Phase.ACTIVE:
            raise InvariantViolation(f"Slice of {kind} reported while {state.phase.value}")

        verdict = state.rules.apply(kind)
        if verdict.violation is not None:
            self._resolve(Phase.LOST, verdict.violation)
        elif verdict.completed:
            self._resolve(Phase.WON)
        else:
            self._push_weights()
            self._notify()
        return verdict

    def snapshot(self) -> AttemptSnapshot:
        """Plain-data view of the attempt."""
        state = self._state
        rules = state.rules
        return AttemptSnapshot(
            phase=state.phase.value,
            level_index=self._context.level_index,
            goal=state.goal,
            sliced_counts=state.sliced_counts,
            cursor=state.cursor,
            violation=state.violation,
            next_expected=rules.next_expected() if rules is not None else None,
            remaining=rules.remaining() if rules is not None else {},
            has_retry=bool(self._context.retry_memory),
            weights=self._context.catalog.weights
        )

    # --- Internals ---

    def _begin_play(self) -> None:
        self._reveal_handle = None
        if self._state.phase is not Phase.REVEALING:
            return
        self._state.phase = Phase.ACTIVE
        self._push_weights()
        self._spawner.start()
        logger.info("Level %d active", self._context.level_index)
        self._notify()

    def _push_weights(self) -> None:
        """
        Steer spawning toward progress: every kind drops to the baseline,
        then the next needed kind (ordered goals) or every still-needed kind
        (unordered goals) is boosted.
        """
        catalog = self._context.catalog
        rules = self._state.rules
        catalog.reset_weights(self._config.baseline_weight)

        if self._state.goal.order_enforced:
            needed = [rules.next_expected()] if rules.next_expected() is not None else []
        else:
            needed = list(rules.remaining())

        for kind in needed:
            if kind in catalog:
                catalog.set_weight(kind, self._config.boosted_weight)
        logger.debug("Boosted %s", needed)

    def _resolve(self, outcome: Phase, violation: Optional[RuleViolation] = None) -> None:
        self._spawner.stop()
        ctx = self._context
        goal = self._state.goal

        if outcome is Phase.WON:
            ctx.retry_memory.clear()
            ctx.last_won = goal
            if self._policy.is_final(ctx.level_index):
                outcome = Phase.CLEARED
        else:
            ctx.retry_memory.set(goal)

        self._state.phase = outcome
        self._state.violation = violation
        self._history.append(AttemptRecord(
            level_index=ctx.level_index,
            mode=goal.mode,
            outcome=outcome,
            reason=violation.reason if violation is not None else None
        ))

        if violation is not None:
            logger.info("Level %d lost: %s", ctx.level_index, violation.reason)
        else:
            logger.info("Level %d %s", ctx.level_index, outcome.value)
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot())
