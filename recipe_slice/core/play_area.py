"""
Play Area
=========

Manages the pymunk Space the spawned fruit fly through. There are no walls:
bodies are launched upward, arc under gravity, and leave through the bottom.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pymunk

from recipe_slice.core.config_loader import GameConfig, KindConfig, get_config

COLLISION_TYPE_FRUIT = 1


@dataclass
class EntityBody:
    """A spawned fruit instance: the pymunk body plus its kind."""
    uid: int
    kind: str
    body: pymunk.Body
    shape: pymunk.Circle

    @property
    def position(self) -> Tuple[float, float]:
        return self.body.position.x, self.body.position.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.body.velocity.x, self.body.velocity.y

    @property
    def angular_velocity(self) -> float:
        return self.body.angular_velocity

    @property
    def radius(self) -> float:
        return self.shape.radius


class PlayArea:
    """
    Owns the physics space and every live body in it.

    Handles:
    - Body creation and removal
    - Launch impulses
    - Physics stepping
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize the play area.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._space = pymunk.Space()
        self._space.gravity = config.physics.gravity
        self._space.damping = config.physics.damping

        self._entities: Dict[int, EntityBody] = {}
        self._next_uid = 0

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def entities(self) -> Dict[int, EntityBody]:
        """Dictionary of all live bodies by UID."""
        return self._entities

    @property
    def entity_count(self) -> int:
        return len(self._entities)

    def spawn_entity(self, kind: KindConfig, x: float, y: float) -> EntityBody:
        """
        Create a body for a fruit kind at the given position.

        Args:
            kind: Kind configuration (name, radius, mass).
            x: X coordinate.
            y: Y coordinate.

        Returns:
            The created EntityBody.
        """
        moment = pymunk.moment_for_circle(kind.mass, 0, kind.radius)
        body = pymunk.Body(kind.mass, moment)
        body.position = (x, y)

        shape = pymunk.Circle(body, kind.radius)
        shape.collision_type = COLLISION_TYPE_FRUIT
        # Fruit pass through each other
        shape.filter = pymunk.ShapeFilter(group=COLLISION_TYPE_FRUIT)

        uid = self._next_uid
        self._next_uid += 1

        entity = EntityBody(uid=uid, kind=kind.name, body=body, shape=shape)
        self._space.add(body, shape)
        self._entities[uid] = entity
        return entity

    def launch(
        self,
        uid: int,
        impulse: Tuple[float, float],
        angular_impulse: float = 0.0
    ) -> None:
        """
        Apply a launch impulse and spin to a body.

        Args:
            uid: Entity UID.
            impulse: Linear impulse (px, py) applied at the center.
            angular_impulse: Angular impulse; angular velocity changes by
                angular_impulse / moment.
        """
        entity = self._entities.get(uid)
        if entity is None:
            return
        entity.body.apply_impulse_at_local_point(impulse, (0, 0))
        entity.body.angular_velocity += angular_impulse / entity.body.moment

    def remove_entity(self, uid: int) -> Optional[EntityBody]:
        """
        Remove a body from the area.

        Returns:
            The removed EntityBody, or None if not found.
        """
        entity = self._entities.pop(uid, None)
        if entity is not None:
            self._space.remove(entity.body, entity.shape)
        return entity

    def get_entity(self, uid: int) -> Optional[EntityBody]:
        return self._entities.get(uid)

    def step(self, dt: Optional[float] = None) -> None:
        """
        Advance physics simulation by one timestep.

        Args:
            dt: Timestep duration. Uses config default if None.
        """
        if dt is None:
            dt = self._config.physics.dt

        substeps = self._config.physics.substeps
        for _ in range(substeps):
            self._space.step(dt / substeps)

    def entities_below(self, y: float) -> List[EntityBody]:
        """Get all bodies whose center has fallen below the given Y."""
        return [e for e in self._entities.values() if e.position[1] < y]

    def clear(self) -> None:
        """Remove all bodies."""
        for uid in list(self._entities.keys()):
            self.remove_entity(uid)
