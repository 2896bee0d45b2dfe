"""
Gesture Tracking
================

Accumulates pointer samples of one continuous swipe into a bounded trail and
archives finished swipes as fading slash trails.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

from fruit_slash.slash_core.config_loader import GameConfig, get_config


class TrailPoint(NamedTuple):
    """Pointer sample relative to the play surface origin."""
    x: float
    y: float


# (previous point, newest point)
Segment = Tuple[TrailPoint, TrailPoint]


@dataclass(frozen=True)
class SlashTrail:
    """A finished swipe kept around while it fades out."""
    trail_id: int
    points: Tuple[TrailPoint, ...]
    created_at_ms: float

    def age(self, now_ms: float) -> float:
        return now_ms - self.created_at_ms


class GestureTracker:
    """
    Tracks at most one active gesture.

    begin() starts a trail, extend() appends samples (keeping the newest
    max_trail_points), end() finalizes it. extend()/end() without an active
    gesture are ignored.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._max_points = config.gesture.max_trail_points
        self._trail: List[TrailPoint] = []
        self._active = False
        self._next_trail_id = 0

    @property
    def active(self) -> bool:
        """True while a gesture is in progress."""
        return self._active

    @property
    def trail(self) -> Tuple[TrailPoint, ...]:
        """Current trail, oldest sample first."""
        return tuple(self._trail)

    def begin(self, point: TrailPoint) -> None:
        """Start a new gesture, discarding any partial one."""
        self._trail = [TrailPoint(*point)]
        self._active = True

    def extend(self, point: TrailPoint) -> Optional[Segment]:
        """
        Append a sample to the active gesture.

        Args:
            point: New pointer sample.

        Returns:
            The newest two-point segment, or None if there is no active
            gesture or only one sample so far.
        """
        if not self._active:
            return None

        self._trail.append(TrailPoint(*point))
        if len(self._trail) > self._max_points:
            del self._trail[:-self._max_points]

        if len(self._trail) < 2:
            return None
        return self._trail[-2], self._trail[-1]

    def end(self, now_ms: float) -> Optional[SlashTrail]:
        """
        Finalize the active gesture.

        Args:
            now_ms: Release timestamp, stamped on the archived record.

        Returns:
            A SlashTrail if the gesture had at least two samples, else None.
        """
        if not self._active:
            return None

        record = None
        if len(self._trail) >= 2:
            record = SlashTrail(
                trail_id=self._next_trail_id,
                points=tuple(self._trail),
                created_at_ms=now_ms
            )
            self._next_trail_id += 1

        self.reset()
        return record

    def reset(self) -> None:
        """Drop the active gesture, if any."""
        self._trail = []
        self._active = False
