"""
Spawner
=======

Time-gated creation of fruits and hazards with randomized launch
trajectories.
"""

from __future__ import annotations

import random
from typing import Optional

from fruit_slash.slash_core.config_loader import GameConfig, get_config
from fruit_slash.slash_core.fruit_catalog import EntityKind, FruitCatalog, get_catalog
from fruit_slash.slash_core.physics_world import Entity, PhysicsWorld


class Spawner:
    """
    Spawns at most one entity per interval.

    Entities start just below the visible surface inside a central band and
    are thrown upward hard enough to arc across the play area under gravity.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog: FruitCatalog = get_catalog(config)
        self._rng = random.Random(seed)
        self._last_spawn_ms: Optional[float] = None

    @property
    def last_spawn_ms(self) -> Optional[float]:
        """Timestamp of the most recent spawn, or None before the first."""
        return self._last_spawn_ms

    def is_due(self, now_ms: float) -> bool:
        """True if the spawn interval has elapsed since the last spawn."""
        if self._last_spawn_ms is None:
            return True
        return now_ms - self._last_spawn_ms > self._config.spawn.interval_ms

    def choose_kind(self) -> EntityKind:
        """Draw a kind: the hazard with fixed probability, else a uniform fruit."""
        if self._rng.random() < self._config.spawn.hazard_probability:
            return self._catalog.hazard
        return self._rng.choice(self._catalog.fruits)

    def maybe_spawn(self, now_ms: float, world: PhysicsWorld) -> Optional[Entity]:
        """
        Spawn one entity into the world if the interval has elapsed.

        Args:
            now_ms: Current frame timestamp in milliseconds.
            world: Physics world receiving the entity.

        Returns:
            The spawned Entity, or None if not due yet.
        """
        if not self.is_due(now_ms):
            return None
        self._last_spawn_ms = now_ms
        return self.spawn(world)

    def spawn(self, world: PhysicsWorld) -> Entity:
        """Spawn one randomized entity into the world unconditionally."""
        spawn = self._config.spawn
        board = self._config.board
        rng = self._rng

        kind = self.choose_kind()
        x = rng.uniform(spawn.band_min * board.width, spawn.band_max * board.width)
        y = board.height + spawn.start_offset_y
        vx = rng.uniform(-spawn.vx_range, spawn.vx_range)
        vy = -rng.uniform(spawn.vy_min, spawn.vy_max)
        rotation = rng.uniform(0.0, 360.0)
        spin = rng.uniform(-spawn.spin_range, spawn.spin_range)

        return world.spawn_entity(kind, (x, y), (vx, vy), rotation, spin)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Forget the last spawn time.

        Args:
            seed: New random seed. Keeps current RNG if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._last_spawn_ms = None
