"""
Slash Core - the game simulation.

This module provides the session state machine and all supporting systems
(physics, spawning, gesture tracking, collisions, scoring, scheduling).

Main exports:
- GameSession: Session state machine driven by frames, pointer samples and time
- GameSnapshot: Read-only state handed to presentation layers
- ManualFrameScheduler: Frame source for tests and custom main loops
- GameConfig: Configuration loaded from game_config.yaml
"""

from fruit_slash.slash_core.config_loader import GameConfig, load_config
from fruit_slash.slash_core.errors import (
    NotAuthenticatedError,
    ScoreSubmissionError,
    SliceError,
)
from fruit_slash.slash_core.fruit_catalog import EntityKind, FruitCatalog
from fruit_slash.slash_core.scheduler import (
    FrameScheduler,
    ManualFrameScheduler,
    TimerQueue,
)
from fruit_slash.slash_core.session import (
    GameSession,
    PHASE_GAME_OVER,
    PHASE_IDLE,
    PHASE_PLAYING,
)
from fruit_slash.slash_core.state_snapshot import EntityView, GameSnapshot

__all__ = [
    "GameConfig",
    "load_config",
    "NotAuthenticatedError",
    "ScoreSubmissionError",
    "SliceError",
    "EntityKind",
    "FruitCatalog",
    "FrameScheduler",
    "ManualFrameScheduler",
    "TimerQueue",
    "GameSession",
    "PHASE_GAME_OVER",
    "PHASE_IDLE",
    "PHASE_PLAYING",
    "EntityView",
    "GameSnapshot",
]
