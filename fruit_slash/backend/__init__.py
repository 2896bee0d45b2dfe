"""
Backend Package
===============

Score reporting contract and the in-memory score board used by the
local shell and the tests.
"""

from fruit_slash.backend.reporting import ScoreReporter, SessionResult
from fruit_slash.backend.scoreboard import (
    LeaderboardEntry,
    Principal,
    ScoreBoard,
    ScoreBoardReporter,
    ScoreRecord,
    UserStats,
)

__all__ = [
    "ScoreReporter",
    "SessionResult",
    "LeaderboardEntry",
    "Principal",
    "ScoreBoard",
    "ScoreBoardReporter",
    "ScoreRecord",
    "UserStats",
]
