"""
Collision Resolver
==================

Tests the newest swipe segment against live entities and applies the
slice policy through the score tracker.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

import numpy as np

from fruit_slash.slash_core.config_loader import GameConfig, get_config
from fruit_slash.slash_core.gesture import Segment
from fruit_slash.slash_core.physics_world import Entity
from fruit_slash.slash_core.scoring import ScoreEvent, ScoreTracker


class CollisionResolver:
    """
    Throttled swipe-vs-entity hit testing.

    An entity is hit when the segment's newest point lies within
    hit_radius * scale of its center and the segment is longer than
    min_slash_speed (a slow hover is not a slice). Every entity within
    range is hit, in spawn order.
    """

    def __init__(self, scorer: ScoreTracker, config: Optional[GameConfig] = None):
        """
        Initialize collision resolver.

        Args:
            scorer: Score tracker receiving slice effects.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scorer = scorer
        self._last_test_ms: Optional[float] = None

    @property
    def last_test_ms(self) -> Optional[float]:
        """Timestamp of the last test that was not throttled."""
        return self._last_test_ms

    def is_throttled(self, now_ms: float) -> bool:
        if self._last_test_ms is None:
            return False
        return now_ms - self._last_test_ms < self._config.collision.throttle_ms

    def find_hits(self, segment: Segment, entities: Iterable[Entity]) -> List[Entity]:
        """
        Select the entities a segment slices, without side effects.

        Args:
            segment: (previous point, newest point).
            entities: Candidate entities; sliced ones are skipped.

        Returns:
            Hit entities in the order given.
        """
        candidates = [e for e in entities if not e.sliced]
        if not candidates:
            return []

        (x0, y0), (x1, y1) = segment
        speed = math.hypot(x1 - x0, y1 - y0)
        if speed <= self._config.collision.min_slash_speed:
            return []

        positions = np.array([e.position for e in candidates], dtype=np.float64)
        scales = np.array([e.scale for e in candidates], dtype=np.float64)
        distances = np.hypot(positions[:, 0] - x1, positions[:, 1] - y1)
        within = distances < self._config.collision.hit_radius * scales

        return [e for e, hit in zip(candidates, within) if hit]

    def test(
        self,
        segment: Segment,
        entities: Iterable[Entity],
        now_ms: float
    ) -> List[ScoreEvent]:
        """
        Hit-test a segment and apply slice effects.

        Skipped entirely if the previous test ran less than throttle_ms ago.
        Hit entities are marked sliced. Once a hazard takes the last life,
        remaining hits are left untouched.

        Args:
            segment: Newest two trail points.
            entities: Entities to test.
            now_ms: Pointer sample timestamp.

        Returns:
            Score events for every applied hit.
        """
        if self.is_throttled(now_ms):
            return []
        self._last_test_ms = now_ms

        events: List[ScoreEvent] = []
        for entity in self.find_hits(segment, entities):
            entity.sliced = True
            if entity.is_hazard:
                events.append(self._scorer.apply_hazard_hit(entity.uid, entity.kind.name))
                if self._scorer.out_of_lives:
                    break
            else:
                events.append(self._scorer.apply_fruit_hit(entity.uid, entity.kind.name))
        return events

    def reset(self) -> None:
        """Clear the throttle so the next test always runs."""
        self._last_test_ms = None
