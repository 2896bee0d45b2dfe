"""
Score Board
===========

In-memory reference backend: immutable score records, per-user aggregate
stats, the global leaderboard and per-user history.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from fruit_slash.backend.reporting import SessionResult
from fruit_slash.slash_core.errors import NotAuthenticatedError, ScoreSubmissionError


logger = logging.getLogger(__name__)

ANONYMOUS_NAME = "Anonymous Ninja"
TOP_SCORES_LIMIT = 10
USER_SCORES_LIMIT = 5


@dataclass(frozen=True)
class Principal:
    """An authenticated player."""
    user_id: str
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Local part of the email address, or a fallback label."""
        if self.email:
            name = self.email.split("@")[0]
            if name:
                return name
        return ANONYMOUS_NAME


@dataclass(frozen=True)
class ScoreRecord:
    """One finished session, tagged with its player and server time."""
    record_id: int
    user_id: str
    score: int
    fruits_sliced: int
    max_combo: int
    created_at: float


@dataclass(frozen=True)
class UserStats:
    """Aggregate stats of one player across all sessions."""
    user_id: str
    total_games_played: int
    total_fruits_sliced: int
    highest_score: int
    highest_combo: int


@dataclass(frozen=True)
class LeaderboardEntry:
    """A score record with the player's display name resolved."""
    record: ScoreRecord
    user_name: str

    @property
    def score(self) -> int:
        return self.record.score


class ScoreBoard:
    """
    Stores score records and stats.

    Records are append-only; stats are upserted on every save.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize score board.

        Args:
            clock: Server time source in milliseconds. Wall clock if None.
        """
        self._clock = clock or (lambda: time.time() * 1000.0)
        self._records: List[ScoreRecord] = []
        self._stats: Dict[str, UserStats] = {}
        self._users: Dict[str, Principal] = {}
        self._record_ids = itertools.count(1)

    @property
    def record_count(self) -> int:
        return len(self._records)

    def register(self, principal: Principal) -> None:
        """Remember a principal's identity for name resolution."""
        self._users[principal.user_id] = principal

    def save_score(self, principal: Optional[Principal], result: SessionResult) -> ScoreRecord:
        """
        Append a score record and update the player's stats.

        Args:
            principal: Signed-in player.
            result: Terminal session report.

        Returns:
            The stored record.

        Raises:
            NotAuthenticatedError: If principal is None.
        """
        if principal is None:
            raise NotAuthenticatedError("Not authenticated")

        self.register(principal)
        record = ScoreRecord(
            record_id=next(self._record_ids),
            user_id=principal.user_id,
            score=result.score,
            fruits_sliced=result.fruits_sliced,
            max_combo=result.max_combo,
            created_at=self._clock(),
        )
        self._records.append(record)

        existing = self._stats.get(principal.user_id)
        if existing is None:
            stats = UserStats(
                user_id=principal.user_id,
                total_games_played=1,
                total_fruits_sliced=result.fruits_sliced,
                highest_score=result.score,
                highest_combo=result.max_combo,
            )
        else:
            stats = replace(
                existing,
                total_games_played=existing.total_games_played + 1,
                total_fruits_sliced=existing.total_fruits_sliced + result.fruits_sliced,
                highest_score=max(existing.highest_score, result.score),
                highest_combo=max(existing.highest_combo, result.max_combo),
            )
        self._stats[principal.user_id] = stats

        logger.debug(
            "Saved score %d for %s (games played: %d)",
            record.score, principal.user_id, stats.total_games_played
        )
        return record

    def top_scores(self, limit: int = TOP_SCORES_LIMIT) -> List[LeaderboardEntry]:
        """Highest scores first; equal scores keep submission order."""
        ranked = sorted(self._records, key=lambda r: -r.score)[:limit]
        return [
            LeaderboardEntry(record=r, user_name=self._resolve_name(r.user_id))
            for r in ranked
        ]

    def user_scores(
        self,
        principal: Optional[Principal],
        limit: int = USER_SCORES_LIMIT
    ) -> List[ScoreRecord]:
        """The player's most recent records first; empty if not signed in."""
        if principal is None:
            return []
        own = [r for r in self._records if r.user_id == principal.user_id]
        own.sort(key=lambda r: (r.created_at, r.record_id), reverse=True)
        return own[:limit]

    def user_stats(self, principal: Optional[Principal]) -> Optional[UserStats]:
        """The player's aggregate stats, or None if not signed in or new."""
        if principal is None:
            return None
        return self._stats.get(principal.user_id)

    def _resolve_name(self, user_id: str) -> str:
        principal = self._users.get(user_id)
        if principal is None:
            return ANONYMOUS_NAME
        return principal.display_name


class ScoreBoardReporter:
    """ScoreReporter that saves results for one principal."""

    def __init__(self, board: ScoreBoard, principal: Optional[Principal]):
        self._board = board
        self._principal = principal

    @property
    def principal(self) -> Optional[Principal]:
        return self._principal

    def submit_result(self, result: SessionResult) -> None:
        """
        Save a result for the principal.

        Raises:
            NotAuthenticatedError: If no principal is signed in.
            ScoreSubmissionError: If the board fails to store the result.
        """
        try:
            self._board.save_score(self._principal, result)
        except NotAuthenticatedError:
            raise
        except Exception as e:
            raise ScoreSubmissionError(f"Could not save result {result.as_dict()}") from e
