"""
Score Reporting
===============

The contract between a finished session and whatever records its result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Protocol


@dataclass(frozen=True)
class SessionResult:
    """Terminal report of one session."""
    score: int
    fruits_sliced: int
    max_combo: int

    def __post_init__(self) -> None:
        for name in ("score", "fruits_sliced", "max_combo"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def as_dict(self) -> Dict[str, int]:
        """Wire representation (camelCase keys)."""
        return {
            "score": self.score,
            "fruitsSliced": self.fruits_sliced,
            "maxCombo": self.max_combo,
        }


class ScoreReporter(Protocol):
    """
    Receives one SessionResult per finished session with a positive score.

    Implementations raise NotAuthenticatedError when no principal is
    signed in; any other failure is logged by the session and dropped.
    """

    def submit_result(self, result: SessionResult) -> None:
        ...
