"""
Adaptive Spawner
================

Launches fruit into the play area in random bursts, picking kinds by the
catalog's current weights, and reaps bodies that fall out of the play area.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Iterable, List, Optional, Set, Tuple

from recipe_slice.core.config_loader import GameConfig, get_config
from recipe_slice.core.entity_catalog import EntityCatalog, EntityKind
from recipe_slice.core.play_area import PlayArea
from recipe_slice.core.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class AdaptiveSpawner:
    """
    Periodic weighted spawner with a live population cap.

    Two independent loops run while started:
    - Burst loop: waits a random interval, then spawns a random number of
      fruit without exceeding the cap, and reschedules itself.
    - Cleanup loop: on a fixed interval, removes bodies below the cleanup
      line and forgets handles the play area no longer holds.
    """

    def __init__(
        self,
        catalog: EntityCatalog,
        area: PlayArea,
        scheduler: Scheduler,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        on_dispose: Optional[Callable[[int, EntityKind], None]] = None
    ):
        """
        Initialize spawner.

        Args:
            catalog: Kinds and weights to draw from.
            area: Play area bodies are created in.
            scheduler: Scheduler driving both loops.
            config: Game configuration. Uses default if None.
            rng: Random source. A fresh unseeded one if None.
            on_dispose: Called with (uid, kind) for each body the cleanup loop removes.
        """
        if config is None:
            config = get_config()

        self._config = config.spawner
        self._catalog = catalog
        self._area = area
        self._scheduler = scheduler
        self._rng = rng if rng is not None else random.Random()
        self._on_dispose = on_dispose

        self._active: Set[int] = set()
        self._burst_handle: Optional[TimerHandle] = None
        self._cleanup_handle: Optional[TimerHandle] = None

        self._total_spawned = 0
        self._total_disposed = 0

    @property
    def is_running(self) -> bool:
        return self._burst_handle is not None

    @property
    def active_count(self) -> int:
        """Live population as currently tracked."""
        return len(self._active)

    @property
    def active_uids(self) -> Set[int]:
        return set(self._active)

    @property
    def total_spawned(self) -> int:
        return self._total_spawned

    @property
    def total_disposed(self) -> int:
        return self._total_disposed

    @property
    def catalog(self) -> EntityCatalog:
        return self._catalog

    # --- Lifecycle ---

    def start(self) -> None:
        """Begin the burst and cleanup loops. No-op if already started."""
        if self.is_running:
            return

        if not self._config.spawn_points:
            logger.error("No spawn points configured; spawner will stay idle")

        self._burst_handle = self._scheduler.call_later(self._next_interval(), self._burst)
        self._cleanup_handle = self._scheduler.call_every(
            self._config.cleanup_interval, self._cleanup
        )
        logger.debug("Spawner started")

    def stop(self) -> None:
        """Halt both loops. Spawned bodies are left alone. Safe to call twice."""
        if self._burst_handle is not None:
            self._burst_handle.cancel()
            self._burst_handle = None
        if self._cleanup_handle is not None:
            self._cleanup_handle.cancel()
            self._cleanup_handle = None
        logger.debug("Spawner stopped")

    # --- Loops ---

    def _next_interval(self) -> float:
        low, high = self._config.interval_range
        return self._rng.uniform(low, high)

    def _burst(self) -> None:
        if not self.is_running:
            return

        if self._config.spawn_points:
            self._prune()
            if len(self._active) < self._config.max_active:
                count = self._rng.randint(self._config.min_per_burst, self._config.max_per_burst)
                for _ in range(count):
                    # stop() may be called from a spawn side effect
                    if not self.is_running or len(self._active) >= self._config.max_active:
                        break
                    self.spawn_one()

        if self.is_running:
            self._burst_handle = self._scheduler.call_later(self._next_interval(), self._burst)

    def _cleanup(self) -> None:
        self._prune()
        threshold = self._config.cleanup_below_y
        for entity in self._area.entities_below(threshold):
            if entity.uid not in self._active:
                continue
            self._area.remove_entity(entity.uid)
            self._active.discard(entity.uid)
            self._total_disposed += 1
            if self._on_dispose is not None:
                self._on_dispose(entity.uid, entity.kind)

    def _prune(self) -> None:
        """Forget handles whose bodies no longer exist."""
        stale = [uid for uid in self._active if self._area.get_entity(uid) is None]
        for uid in stale:
            self._active.discard(uid)

    # --- Spawning ---

    def pick_kind(self) -> Optional[EntityKind]:
        """
        Choose a kind by cumulative weight.

        Draws r uniform in [0, total] and returns the first positive-weight
        kind whose running sum reaches r. When the total weight is 0 the
        choice is uniform over the eligible kinds, which is every kind
        unless a hard filter is active.

        Returns:
            A kind, or None if the catalog has nothing to offer.
        """
        entries = self._catalog.eligible_entries()
        if not entries:
            # A hard filter that matched nothing still falls back to the full set
            kinds = self._catalog.all_kinds()
            if not kinds:
                return None
            return self._rng.choice(kinds)

        total = sum(max(0.0, e.weight) for e in entries)
        if total <= 0:
            return self._rng.choice(entries).kind

        r = self._rng.random() * total
        cumulative = 0.0
        last_positive = None
        for entry in entries:
            if entry.weight <= 0:
                continue
            cumulative += entry.weight
            last_positive = entry.kind
            if r <= cumulative:
                return entry.kind
        return last_positive

    def pick_spawn_point(self) -> Optional[Tuple[float, float]]:
        points = self._config.spawn_points
        if not points:
            return None
        if self._config.randomize_spawn_point:
            return points[self._rng.randrange(len(points))]
        return points[0]

    def launch_impulse(self, spawn_x: float) -> Tuple[float, float, float]:
        """
        Draw (x, y, angular) launch impulses for a body spawned at spawn_x.

        With bias enabled, off-center spawns always push toward the center
        so edge fruit arc inward.
        """
        cfg = self._config
        x = self._rng.uniform(*cfg.x_force_range)
        if cfg.bias_x_by_spawn_position and spawn_x != cfg.center_x:
            direction = -1.0 if spawn_x > cfg.center_x else 1.0
            x = abs(x) * direction
        y = self._rng.uniform(*cfg.y_force_range)
        torque = self._rng.uniform(*cfg.torque_range)
        return x, y, torque

    def spawn_one(self) -> Optional[int]:
        """
        Spawn and launch a single fruit.

        Returns:
            UID of the new body, or None if nothing could be spawned.
        """
        point = self.pick_spawn_point()
        if point is None:
            logger.error("Cannot spawn: no spawn points configured")
            return None

        kind = self.pick_kind()
        if kind is None:
            logger.warning("Cannot spawn: entity catalog is empty")
            return None

        entity = self._area.spawn_entity(self._catalog.get(kind), point[0], point[1])
        x, y, torque = self.launch_impulse(point[0])
        self._area.launch(entity.uid, (x, y), torque)

        self._active.add(entity.uid)
        self._total_spawned += 1
        logger.debug("Spawned %s (uid=%d) at %s", kind, entity.uid, point)
        return entity.uid

    def consume(self, uid: int) -> Optional[EntityKind]:
        """
        Remove a body that was sliced.

        Returns:
            Kind of the removed body, or None if it was already gone.
        """
        self._active.discard(uid)
        entity = self._area.remove_entity(uid)
        return entity.kind if entity is not None else None

    # --- Catalog pass-throughs ---

    def get_all_kind_names(self) -> List[EntityKind]:
        """Names of every kind in the master set."""
        return list(self._catalog.all_kinds())

    def set_allowed_kinds(self, kinds: Iterable[EntityKind]) -> None:
        """Hard-filter selection to a subset of kinds."""
        self._catalog.restrict_to(kinds)

    def set_weight(self, kind: EntityKind, value: float) -> None:
        self._catalog.set_weight(kind, value)

    def reset_weights(self, baseline: Optional[float] = None) -> None:
        self._catalog.reset_weights(baseline)
