"""
Physics World
=============

Manages the pymunk Space holding thrown fruits and hazards, their creation,
per-frame advance and removal.

Units are per reference frame: velocities in pixels/frame, gravity in
pixels/frame^2, spin in degrees/frame. The y axis points down (screen
coordinates), so gravity is positive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import math

import pymunk

from fruit_slash.slash_core.config_loader import GameConfig, get_config
from fruit_slash.slash_core.fruit_catalog import EntityKind


@dataclass
class Entity:
    """
    A fruit or hazard in flight.

    Wraps a pymunk Body with game-specific state. Bodies have no shapes:
    entities never collide with each other, only with the slash trail.
    """
    uid: int
    kind: EntityKind
    body: pymunk.Body
    sliced: bool = False
    scale: float = 1.0

    @property
    def kind_id(self) -> int:
        return self.kind.id

    @property
    def is_hazard(self) -> bool:
        return self.kind.is_hazard

    @property
    def position(self) -> Tuple[float, float]:
        return self.body.position.x, self.body.position.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.body.velocity.x, self.body.velocity.y

    @property
    def rotation(self) -> float:
        """Rotation angle in degrees."""
        return math.degrees(self.body.angle)

    @property
    def spin(self) -> float:
        """Angular velocity in degrees per frame."""
        return math.degrees(self.body.angular_velocity)


class PhysicsWorld:
    """
    Point-mass kinematics for every live entity.

    Handles:
    - Space creation with constant downward gravity
    - Entity creation and removal (monotonic UIDs)
    - Advancing all entities by a frame delta
    - Shrink-and-fade of sliced entities
    - The removal predicate and pruning
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize physics world.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._space = pymunk.Space()
        self._space.gravity = (0.0, config.physics.gravity)
        self._space.damping = 1.0

        self._entities: Dict[int, Entity] = {}
        self._next_uid = 0

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def entities(self) -> Dict[int, Entity]:
        """All live entities by UID, in spawn order."""
        return self._entities

    @property
    def entity_count(self) -> int:
        """Number of entities currently in the world."""
        return len(self._entities)

    @property
    def board_width(self) -> int:
        return self._config.board.width

    @property
    def board_height(self) -> int:
        return self._config.board.height

    def live_entities(self) -> List[Entity]:
        """Entities that have not been sliced yet, in spawn order."""
        return [e for e in self._entities.values() if not e.sliced]

    def spawn_entity(
        self,
        kind: EntityKind,
        position: Tuple[float, float],
        velocity: Tuple[float, float] = (0.0, 0.0),
        rotation: float = 0.0,
        spin: float = 0.0
    ) -> Entity:
        """
        Spawn a new entity.

        Args:
            kind: Fruit or hazard kind.
            position: Initial (x, y) in play-surface pixels.
            velocity: Initial (vx, vy) in pixels/frame.
            rotation: Initial rotation in degrees.
            spin: Angular velocity in degrees/frame.

        Returns:
            The created Entity.
        """
        # Infinite moment: nothing applies torque, so spin stays constant
        body = pymunk.Body(1.0, float("inf"))
        body.position = position
        body.velocity = velocity
        body.angle = math.radians(rotation)
        body.angular_velocity = math.radians(spin)

        uid = self._next_uid
        self._next_uid += 1

        entity = Entity(uid=uid, kind=kind, body=body)
        self._space.add(body)
        self._entities[uid] = entity
        return entity

    def remove_entity(self, uid: int) -> Optional[Entity]:
        """
        Remove an entity from the world.

        Args:
            uid: Unique ID of the entity.

        Returns:
            The removed Entity, or None if not found.
        """
        entity = self._entities.pop(uid, None)
        if entity is not None:
            self._space.remove(entity.body)
        return entity

    def get_entity(self, uid: int) -> Optional[Entity]:
        """Get an entity by UID."""
        return self._entities.get(uid)

    def step(self, dt_frame: float = 1.0) -> None:
        """
        Advance every entity by dt_frame reference frames.

        Position moves by the velocity held at the start of the step, then
        velocity gains gravity * dt_frame. Rotation follows spin and sliced
        entities shrink by scale_decay ** dt_frame.

        Args:
            dt_frame: Frame delta. Non-positive deltas leave state unchanged.
        """
        if dt_frame <= 0:
            return

        self._space.step(dt_frame)

        decay = self._config.physics.scale_decay ** dt_frame
        for entity in self._entities.values():
            if entity.sliced:
                entity.scale *= decay

    def is_expired(self, entity: Entity) -> bool:
        """True if the entity fell below the surface or faded out."""
        board = self._config.board
        if entity.position[1] >= board.height + board.offscreen_margin:
            return True
        return entity.scale <= self._config.physics.min_visible_scale

    def prune(self) -> List[Entity]:
        """
        Remove all expired entities.

        Returns:
            The removed entities.
        """
        expired = [e for e in self._entities.values() if self.is_expired(e)]
        for entity in expired:
            self.remove_entity(entity.uid)
        return expired

    def clear(self) -> None:
        """Remove all entities. UIDs keep increasing."""
        for uid in list(self._entities.keys()):
            self.remove_entity(uid)
