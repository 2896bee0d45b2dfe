"""
Game Session
============

Session state machine orchestrating physics, spawning, gestures, collisions,
scoring, timers and the terminal score report.

Phases: idle -> playing -> gameOver, with restart() re-entering playing
from any phase.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from fruit_slash.backend.reporting import ScoreReporter, SessionResult
from fruit_slash.slash_core.collision import CollisionResolver
from fruit_slash.slash_core.config_loader import GameConfig, get_config
from fruit_slash.slash_core.errors import NotAuthenticatedError
from fruit_slash.slash_core.fruit_catalog import FruitCatalog, get_catalog
from fruit_slash.slash_core.gesture import GestureTracker, SlashTrail, TrailPoint
from fruit_slash.slash_core.physics_world import PhysicsWorld
from fruit_slash.slash_core.scheduler import (
    DeferredAction,
    FrameScheduler,
    ManualFrameScheduler,
    TimerQueue,
)
from fruit_slash.slash_core.scoring import ScoreEvent, ScoreTracker
from fruit_slash.slash_core.spawner import Spawner
from fruit_slash.slash_core.state_snapshot import GameSnapshot, SnapshotBuilder


logger = logging.getLogger(__name__)

PHASE_IDLE = "idle"
PHASE_PLAYING = "playing"
PHASE_GAME_OVER = "gameOver"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class GameSession:
    """
    One play-through at a time, restartable.

    Inputs are driven by the host:
    - frames through the FrameScheduler (tick)
    - pointer samples (begin_gesture / extend_gesture / end_gesture)
    - time (advance_time), for hosts that pump timers between events

    Deferred actions (countdown, combo decay, combo popup) are owned by the
    session and fired at the start of every input. Every input returns a
    fresh snapshot.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        reporter: Optional[ScoreReporter] = None,
        frame_scheduler: Optional[FrameScheduler] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize session in the idle phase.

        Args:
            config: Game configuration. Uses default if None.
            reporter: Receives the terminal result. Results are not reported if None.
            frame_scheduler: Host frame source. A ManualFrameScheduler if None.
            seed: Random seed for spawning.
            clock: Time source in milliseconds for inputs without a timestamp.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._reporter = reporter
        self._frames: FrameScheduler = frame_scheduler or ManualFrameScheduler()
        self._clock = clock or _monotonic_ms

        # Subsystems
        self._catalog = get_catalog(config)
        self._physics = PhysicsWorld(config)
        self._spawner = Spawner(config, seed)
        self._gesture = GestureTracker(config)
        self._scorer = ScoreTracker(config)
        self._collision = CollisionResolver(self._scorer, config)
        self._snapshot_builder = SnapshotBuilder(config)

        # Session state
        self._phase = PHASE_IDLE
        self._time_left: int = config.session.duration_seconds
        self._slash_trails: List[SlashTrail] = []
        self._combo_popup = False
        self._end_reason = ""
        self._reported = False

        # Handles owned by the running session
        self._now_ms: float = 0.0
        self._timers = TimerQueue()
        self._frame_handle: Optional[int] = None
        self._last_frame_ms: Optional[float] = None
        self._countdown: Optional[DeferredAction] = None
        self._combo_timer: Optional[DeferredAction] = None
        self._popup_timer: Optional[DeferredAction] = None

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def catalog(self) -> FruitCatalog:
        """Fruit and hazard kinds."""
        return self._catalog

    @property
    def physics(self) -> PhysicsWorld:
        """Physics world holding the live entities."""
        return self._physics

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def is_playing(self) -> bool:
        return self._phase == PHASE_PLAYING

    @property
    def is_over(self) -> bool:
        return self._phase == PHASE_GAME_OVER

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def combo(self) -> int:
        return self._scorer.combo

    @property
    def max_combo(self) -> int:
        return self._scorer.max_combo

    @property
    def fruits_sliced(self) -> int:
        return self._scorer.fruits_sliced

    @property
    def lives(self) -> int:
        return self._scorer.lives

    @property
    def time_left(self) -> int:
        """Remaining whole seconds."""
        return self._time_left

    @property
    def end_reason(self) -> str:
        """Why the last session ended ("time" or "lives"), or empty string."""
        return self._end_reason

    @property
    def frame_registered(self) -> bool:
        """True while a frame callback is pending with the host."""
        return self._frame_handle is not None

    @property
    def pending_timers(self) -> int:
        """Number of scheduled deferred actions."""
        return self._timers.pending_count

    # --- Lifecycle ---

    def restart(self, now_ms: Optional[float] = None) -> GameSnapshot:
        """
        Start a new session in the playing phase.

        Tears down any running session first, then resets score, combo,
        max combo, fruits sliced, lives and the countdown, clears entities
        and trails, and registers the frame callback and countdown.

        Args:
            now_ms: Start time. Uses the clock if None.

        Returns:
            Initial snapshot.
        """
        now = self._resolve_now(now_ms)
        self._teardown()

        self._physics.clear()
        self._spawner.reset()
        self._gesture.reset()
        self._scorer.reset()
        self._collision.reset()

        self._slash_trails = []
        self._combo_popup = False
        self._time_left = self._config.session.duration_seconds
        self._end_reason = ""
        self._reported = False
        self._last_frame_ms = None

        self._now_ms = now
        self._timers = TimerQueue(now)
        self._phase = PHASE_PLAYING
        self._countdown = self._timers.call_every(
            self._config.session.countdown_interval_ms, self._on_countdown
        )
        self._frame_handle = self._frames.request_frame(self._on_frame)

        logger.info(
            "Session started: %ds, %d lives",
            self._time_left, self._scorer.lives
        )
        return self.snapshot()

    start = restart

    def stop(self) -> GameSnapshot:
        """Tear down without reporting and return to idle (host unmount)."""
        if self._phase == PHASE_PLAYING:
            logger.info("Session stopped at score %d", self._scorer.score)
        self._teardown()
        self._gesture.reset()
        self._phase = PHASE_IDLE
        return self.snapshot()

    # --- Frame tick ---

    def tick(self, timestamp_ms: float) -> GameSnapshot:
        """
        Advance the session by one frame.

        Order: due timers, spawn check, physics step, entity pruning,
        faded trail pruning. Ignored unless playing.

        Args:
            timestamp_ms: Frame timestamp in milliseconds.

        Returns:
            Snapshot after the frame.
        """
        if self._phase != PHASE_PLAYING:
            return self.snapshot()

        self._pump(timestamp_ms)
        if self._phase != PHASE_PLAYING:
            return self.snapshot()

        dt_frame = self._frame_delta(timestamp_ms)
        self._last_frame_ms = timestamp_ms

        self._spawner.maybe_spawn(timestamp_ms, self._physics)
        self._physics.step(dt_frame)
        self._physics.prune()
        self._prune_trails(timestamp_ms)

        return self.snapshot()

    def _on_frame(self, timestamp_ms: float) -> None:
        self._frame_handle = None
        self.tick(timestamp_ms)
        if self._phase == PHASE_PLAYING and self._frame_handle is None:
            self._frame_handle = self._frames.request_frame(self._on_frame)

    def _frame_delta(self, timestamp_ms: float) -> float:
        """Frame delta in reference frames."""
        physics = self._config.physics
        if not physics.time_scaled or self._last_frame_ms is None:
            return 1.0
        elapsed = timestamp_ms - self._last_frame_ms
        if elapsed <= 0:
            return 0.0
        return min(elapsed / physics.frame_ms, physics.max_frame_step)

    # --- Pointer input ---

    def begin_gesture(self, x: float, y: float, now_ms: Optional[float] = None) -> GameSnapshot:
        """Pointer down: start a new trail (ignored unless playing)."""
        now = self._resolve_now(now_ms)
        if self._accepts_input(now):
            self._gesture.begin(TrailPoint(x, y))
        return self.snapshot()

    def extend_gesture(self, x: float, y: float, now_ms: Optional[float] = None) -> GameSnapshot:
        """
        Pointer move: extend the trail and slice whatever the newest
        segment crosses.

        Ignored unless playing with an active gesture.
        """
        now = self._resolve_now(now_ms)
        if not self._accepts_input(now):
            return self.snapshot()

        segment = self._gesture.extend(TrailPoint(x, y))
        if segment is not None:
            events = self._collision.test(segment, self._physics.entities.values(), now)
            if events:
                self._apply_hits(events)
        return self.snapshot()

    def end_gesture(self, now_ms: Optional[float] = None) -> GameSnapshot:
        """
        Pointer up or leave: archive the trail as a fading slash.

        Outside the playing phase the pointer is released without a record.
        """
        now = self._resolve_now(now_ms)
        if self._accepts_input(now):
            record = self._gesture.end(now)
            if record is not None:
                self._slash_trails.append(record)
        else:
            self._gesture.reset()
        return self.snapshot()

    def advance_time(self, now_ms: Optional[float] = None) -> GameSnapshot:
        """Fire deferred actions due by `now_ms` without a frame."""
        now = self._resolve_now(now_ms)
        if self._phase == PHASE_PLAYING:
            self._pump(now)
        return self.snapshot()

    def _accepts_input(self, now_ms: float) -> bool:
        if self._phase != PHASE_PLAYING:
            return False
        self._pump(now_ms)
        return self._phase == PHASE_PLAYING

    def _apply_hits(self, events: List[ScoreEvent]) -> None:
        scoring = self._config.scoring
        fruit_events = [e for e in events if not e.is_hazard]
        for event in events:
            logger.debug("Slice: %r", event)

        if fruit_events:
            if self._combo_timer is not None:
                self._combo_timer.cancel()
            self._combo_timer = self._timers.call_later(
                scoring.combo_timeout_ms, self._on_combo_timeout
            )
            if any(e.combo >= scoring.combo_popup_threshold for e in fruit_events):
                self._show_combo_popup()

        if self._scorer.out_of_lives:
            self._enter_game_over("lives")

    # --- Deferred actions ---

    def _pump(self, now_ms: float) -> None:
        if now_ms > self._now_ms:
            self._now_ms = now_ms
        self._timers.advance(now_ms)

    def _on_countdown(self) -> None:
        self._time_left -= 1
        if self._time_left <= 0:
            self._time_left = 0
            self._enter_game_over("time")

    def _on_combo_timeout(self) -> None:
        self._combo_timer = None
        self._scorer.reset_combo()

    def _show_combo_popup(self) -> None:
        if self._popup_timer is not None:
            self._popup_timer.cancel()
        self._combo_popup = True
        self._popup_timer = self._timers.call_later(
            self._config.scoring.combo_popup_ms, self._hide_combo_popup
        )

    def _hide_combo_popup(self) -> None:
        self._popup_timer = None
        self._combo_popup = False

    def _prune_trails(self, now_ms: float) -> None:
        fade_ms = self._config.gesture.trail_fade_ms
        self._slash_trails = [t for t in self._slash_trails if t.age(now_ms) < fade_ms]

    # --- Termination ---

    def _enter_game_over(self, reason: str) -> None:
        if self._phase != PHASE_PLAYING:
            return

        self._teardown()
        self._gesture.reset()
        self._phase = PHASE_GAME_OVER
        self._end_reason = reason
        logger.info(
            "Game over (%s): score=%d fruits=%d max_combo=%d lives=%d time_left=%d",
            reason, self._scorer.score, self._scorer.fruits_sliced,
            self._scorer.max_combo, self._scorer.lives, self._time_left
        )
        self._report_result()

    def _teardown(self) -> None:
        """Cancel the frame registration and every deferred action."""
        if self._frame_handle is not None:
            self._frames.cancel_frame(self._frame_handle)
            self._frame_handle = None
        self._timers.cancel_all()
        self._countdown = None
        self._combo_timer = None
        self._popup_timer = None
        self._combo_popup = False

    def _report_result(self) -> None:
        """Submit the terminal result once. Failures are logged, not retried."""
        if self._reported or self._scorer.score <= 0:
            return
        self._reported = True

        result = SessionResult(
            score=self._scorer.score,
            fruits_sliced=self._scorer.fruits_sliced,
            max_combo=self._scorer.max_combo,
        )
        if self._reporter is None:
            logger.debug("No reporter configured, dropping result %s", result.as_dict())
            return

        try:
            self._reporter.submit_result(result)
        except NotAuthenticatedError:
            raise
        except Exception:
            logger.exception("Failed to submit session result %s", result.as_dict())

    # --- Snapshots ---

    def _resolve_now(self, now_ms: Optional[float]) -> float:
        return self._clock() if now_ms is None else now_ms

    def snapshot(self) -> GameSnapshot:
        """Build a read-only snapshot of the current state."""
        return self._snapshot_builder.build(
            phase=self._phase,
            score=self._scorer.score,
            combo=self._scorer.combo,
            max_combo=self._scorer.max_combo,
            fruits_sliced=self._scorer.fruits_sliced,
            lives=self._scorer.lives,
            time_left=self._time_left,
            combo_popup=self._combo_popup,
            timestamp_ms=self._now_ms,
            entities=self._physics.entities.values(),
            active_trail=self._gesture.trail,
            slash_trails=tuple(self._slash_trails),
        )

    def get_info(self) -> Dict[str, Any]:
        """Summary dict for logs and the shell's HUD."""
        return {
            "phase": self._phase,
            "score": self._scorer.score,
            "combo": self._scorer.combo,
            "max_combo": self._scorer.max_combo,
            "fruits_sliced": self._scorer.fruits_sliced,
            "lives": self._scorer.lives,
            "time_left": self._time_left,
            "entity_count": self._physics.entity_count,
            "end_reason": self._end_reason,
        }
