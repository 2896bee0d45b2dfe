"""
Scoring System
==============

Tracks score, combo streak and lives for one session and applies the
slice policy for fruits and hazards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fruit_slash.slash_core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of a single slice."""
    uid: int
    kind_name: str
    is_hazard: bool
    points: int
    combo: int
    lives: int

    def __repr__(self) -> str:
        if self.is_hazard:
            return f"ScoreEvent(hazard {self.kind_name}#{self.uid}, lives={self.lives})"
        return f"ScoreEvent({self.kind_name}#{self.uid}={self.points}, combo={self.combo})"


class ScoreTracker:
    """
    Score-affecting counters of a session.

    Each fruit slice extends the combo and earns
    points_per_fruit * min(combo, combo_cap):
    - 1st fruit: 10
    - 2nd fruit: 20
    - 10th fruit and beyond: 100 each

    A hazard slice costs one life and breaks the combo.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._score: int = 0
        self._combo: int = 0
        self._max_combo: int = 0
        self._fruits_sliced: int = 0
        self._lives: int = config.session.starting_lives

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def combo(self) -> int:
        """Current combo streak."""
        return self._combo

    @property
    def max_combo(self) -> int:
        """Highest combo streak reached this session."""
        return self._max_combo

    @property
    def fruits_sliced(self) -> int:
        """Number of fruits sliced this session."""
        return self._fruits_sliced

    @property
    def lives(self) -> int:
        """Remaining lives."""
        return self._lives

    @property
    def out_of_lives(self) -> bool:
        return self._lives <= 0

    def points_for_combo(self, combo: int) -> int:
        """Points earned by the fruit that brings the streak to `combo`."""
        return self._config.scoring.points_per_fruit * min(combo, self._config.scoring.combo_cap)

    def apply_fruit_hit(self, uid: int, kind_name: str) -> ScoreEvent:
        """
        Apply a fruit slice and return the event.

        Args:
            uid: Sliced entity UID.
            kind_name: Fruit kind name.

        Returns:
            ScoreEvent describing the points awarded.
        """
        self._combo += 1
        self._max_combo = max(self._max_combo, self._combo)
        self._fruits_sliced += 1
        points = self.points_for_combo(self._combo)
        self._score += points
        return ScoreEvent(
            uid=uid,
            kind_name=kind_name,
            is_hazard=False,
            points=points,
            combo=self._combo,
            lives=self._lives
        )

    def apply_hazard_hit(self, uid: int, kind_name: str) -> ScoreEvent:
        """
        Apply a hazard slice: one life lost, combo broken, no points.

        Args:
            uid: Sliced entity UID.
            kind_name: Hazard kind name.

        Returns:
            ScoreEvent with zero points.
        """
        self._lives = max(0, self._lives - 1)
        self._combo = 0
        return ScoreEvent(
            uid=uid,
            kind_name=kind_name,
            is_hazard=True,
            points=0,
            combo=0,
            lives=self._lives
        )

    def reset_combo(self) -> None:
        """Break the combo streak (combo-decay timeout)."""
        self._combo = 0

    def reset(self) -> None:
        """Reset all counters for a new session."""
        self._score = 0
        self._combo = 0
        self._max_combo = 0
        self._fruits_sliced = 0
        self._lives = self._config.session.starting_lives
