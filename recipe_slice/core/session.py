"""
Game Session
============

Main orchestrator wiring the context, play area, spawner and director.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from recipe_slice.core.config_loader import GameConfig, get_config
from recipe_slice.core.context import GameContext
from recipe_slice.core.director import LevelDirector, Phase
from recipe_slice.core.play_area import PlayArea
from recipe_slice.core.rules import SliceVerdict
from recipe_slice.core.spawner import AdaptiveSpawner
from recipe_slice.core.state_snapshot import AttemptSnapshot

logger = logging.getLogger(__name__)


class GameSession:
    """
    One running game.

    Orchestrates:
    - Play area physics
    - Timers (reveal delay, burst loop, cleanup loop)
    - Spawner
    - Level director

    The host calls tick(dt) once per frame and slice_entity(uid) whenever
    the blade crosses a body.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        on_change: Optional[Callable[[AttemptSnapshot], None]] = None
    ):
        """
        Initialize session.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            on_change: Forwarded to the director.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._context = GameContext.create(config, seed)
        self._area = PlayArea(config)
        self._spawner = AdaptiveSpawner(
            catalog=self._context.catalog,
            area=self._area,
            scheduler=self._context.scheduler,
            config=config,
            rng=self._context.rng
        )
        self._director = LevelDirector(self._context, self._spawner, on_change=on_change)
        self._ignored_slices = 0

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def context(self) -> GameContext:
        return self._context

    @property
    def area(self) -> PlayArea:
        return self._area

    @property
    def spawner(self) -> AdaptiveSpawner:
        return self._spawner

    @property
    def director(self) -> LevelDirector:
        return self._director

    @property
    def time(self) -> float:
        return self._context.scheduler.now

    @property
    def ignored_slices(self) -> int:
        """Slices of stray bodies made outside an active attempt."""
        return self._ignored_slices

    def tick(self, dt: Optional[float] = None) -> None:
        """
        Advance the world by one frame: physics first, then timers.

        Args:
            dt: Frame duration. Uses config default if None.
        """
        if dt is None:
            dt = self._config.physics.dt
        self._area.step(dt)
        self._context.scheduler.advance(dt)

    def run_for(self, seconds: float, dt: Optional[float] = None) -> None:
        """Tick repeatedly until at least `seconds` of game time passed."""
        if dt is None:
            dt = self._config.physics.dt
        end = self.time + seconds
        while self.time < end:
            self.tick(dt)

    def slice_entity(self, uid: int) -> Optional[SliceVerdict]:
        """
        Slice a live body.

        The body is removed from the play area. Its kind is reported to the
        director only while an attempt is active; fruit still in flight after
        a win or loss can be cut without effect.

        Returns:
            The director's verdict, or None if the slice was ignored.
        """
        kind = self._spawner.consume(uid)
        if kind is None:
            return None
        if self._director.phase is not Phase.ACTIVE:
            self._ignored_slices += 1
            logger.debug("Ignored slice of %s while %s", kind, self._director.phase.value)
            return None
        return self._director.on_sliced(kind)

    def clear_area(self) -> None:
        """Remove every body, e.g. before showing a menu."""
        self._area.clear()

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with bodies and the attempt snapshot.
        """
        bodies = []
        for entity in self._area.entities.values():
            bodies.append({
                "uid": entity.uid,
                "kind": entity.kind,
                "x": entity.position[0],
                "y": entity.position[1],
                "angle": entity.body.angle,
                "radius": entity.radius,
            })
        return {
            "time": self.time,
            "bodies": bodies,
            "attempt": self._director.snapshot(),
        }
