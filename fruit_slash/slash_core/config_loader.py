"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardConfig:
    """Play surface geometry."""
    width: int                 # Play surface width in pixels
    height: int                # Play surface height in pixels
    offscreen_margin: float    # Removal distance below the bottom edge


@dataclass(frozen=True)
class PhysicsConfig:
    """Point-mass kinematics parameters (per reference frame)."""
    gravity: float
    scale_decay: float
    min_visible_scale: float
    time_scaled: bool
    frame_ms: float
    max_frame_step: float


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn timing and launch trajectory ranges."""
    interval_ms: float
    hazard_probability: float
    band_min: float
    band_max: float
    start_offset_y: float
    vx_range: float
    vy_min: float
    vy_max: float
    spin_range: float


@dataclass(frozen=True)
class GestureConfig:
    """Pointer trail parameters."""
    max_trail_points: int
    trail_fade_ms: float


@dataclass(frozen=True)
class CollisionConfig:
    """Slash hit-test parameters."""
    hit_radius: float
    min_slash_speed: float
    throttle_ms: float


@dataclass(frozen=True)
class ScoringConfig:
    """Score and combo parameters."""
    points_per_fruit: int
    combo_cap: int
    combo_timeout_ms: float
    combo_popup_threshold: int
    combo_popup_ms: float


@dataclass(frozen=True)
class SessionConfig:
    """Session length and lives."""
    duration_seconds: int
    starting_lives: int
    countdown_interval_ms: float


@dataclass(frozen=True)
class SnapshotConfig:
    """Render snapshot parameters."""
    max_objects: int


@dataclass(frozen=True)
class KindConfig:
    """Configuration for a single entity kind (a fruit or the hazard)."""
    id: int
    name: str
    symbol: str
    color: Tuple[int, int, int]
    is_hazard: bool = False


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    Use dataclasses.replace() to derive variants.
    """
    board: BoardConfig
    physics: PhysicsConfig
    spawn: SpawnConfig
    gesture: GestureConfig
    collision: CollisionConfig
    scoring: ScoringConfig
    session: SessionConfig
    snapshot: SnapshotConfig
    fruits: Tuple[KindConfig, ...]
    hazard: KindConfig

    @property
    def num_fruit_kinds(self) -> int:
        """Number of fruit kinds (hazard excluded)."""
        return len(self.fruits)

    def get_kind(self, kind_id: int) -> KindConfig:
        """Get kind config by ID (the hazard has the ID after the last fruit)."""
        if 0 <= kind_id < len(self.fruits):
            return self.fruits[kind_id]
        if kind_id == self.hazard.id:
            return self.hazard
        raise ValueError(f"Invalid kind ID: {kind_id}")


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_fruit(fruit_data: dict) -> KindConfig:
    """Parse a single fruit configuration from YAML."""
    return KindConfig(
        id=int(fruit_data["id"]),
        name=str(fruit_data["name"]),
        symbol=str(fruit_data.get("symbol", fruit_data["name"])),
        color=_parse_color(fruit_data["color"]),
    )


def _parse_hazard(hazard_data: dict, kind_id: int) -> KindConfig:
    """Parse the hazard kind; its ID follows the fruit IDs."""
    return KindConfig(
        id=kind_id,
        name=str(hazard_data.get("name", "bomb")),
        symbol=str(hazard_data.get("symbol", hazard_data.get("name", "bomb"))),
        color=_parse_color(hazard_data.get("color", [40, 40, 40])),
        is_hazard=True
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if not config.fruits:
        raise ValueError("At least one fruit kind is required")

    # Validate fruit IDs are sequential
    for i, fruit in enumerate(config.fruits):
        if fruit.id != i:
            raise ValueError(f"Fruit ID mismatch: expected {i}, got {fruit.id}")

    names = [kind.name for kind in config.fruits] + [config.hazard.name]
    if len(set(names)) != len(names):
        raise ValueError(f"Kind names must be unique, got {names}")

    if config.board.width <= 0 or config.board.height <= 0:
        raise ValueError(
            f"Board size must be positive, got {config.board.width}x{config.board.height}"
        )

    physics = config.physics
    if not 0.0 < physics.scale_decay < 1.0:
        raise ValueError(f"scale_decay must be in (0, 1), got {physics.scale_decay}")
    if not 0.0 < physics.min_visible_scale < 1.0:
        raise ValueError(
            f"min_visible_scale must be in (0, 1), got {physics.min_visible_scale}"
        )
    if physics.frame_ms <= 0 or physics.max_frame_step <= 0:
        raise ValueError("frame_ms and max_frame_step must be positive")

    spawn = config.spawn
    if not 0.0 <= spawn.hazard_probability <= 1.0:
        raise ValueError(
            f"hazard_probability must be in [0, 1], got {spawn.hazard_probability}"
        )
    if not 0.0 <= spawn.band_min <= spawn.band_max <= 1.0:
        raise ValueError(
            f"Spawn band must satisfy 0 <= band_min <= band_max <= 1, "
            f"got [{spawn.band_min}, {spawn.band_max}]"
        )
    if spawn.vy_min > spawn.vy_max:
        raise ValueError(f"vy_min ({spawn.vy_min}) exceeds vy_max ({spawn.vy_max})")

    if config.gesture.max_trail_points < 2:
        raise ValueError(
            f"max_trail_points must be at least 2, got {config.gesture.max_trail_points}"
        )

    if config.scoring.combo_cap < 1:
        raise ValueError(f"combo_cap must be at least 1, got {config.scoring.combo_cap}")

    if config.session.duration_seconds <= 0 or config.session.starting_lives <= 0:
        raise ValueError("duration_seconds and starting_lives must be positive")

    if config.snapshot.max_objects <= 0:
        raise ValueError(f"max_objects must be positive, got {config.snapshot.max_objects}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        width=int(board_data["width"]),
        height=int(board_data["height"]),
        offscreen_margin=float(board_data.get("offscreen_margin", 100.0))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        scale_decay=float(physics_data["scale_decay"]),
        min_visible_scale=float(physics_data["min_visible_scale"]),
        time_scaled=bool(physics_data.get("time_scaled", False)),
        frame_ms=float(physics_data.get("frame_ms", 1000.0 / 60.0)),
        max_frame_step=float(physics_data.get("max_frame_step", 3.0))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        interval_ms=float(spawn_data["interval_ms"]),
        hazard_probability=float(spawn_data["hazard_probability"]),
        band_min=float(spawn_data.get("band_min", 0.2)),
        band_max=float(spawn_data.get("band_max", 0.8)),
        start_offset_y=float(spawn_data.get("start_offset_y", 50.0)),
        vx_range=float(spawn_data["vx_range"]),
        vy_min=float(spawn_data["vy_min"]),
        vy_max=float(spawn_data["vy_max"]),
        spin_range=float(spawn_data.get("spin_range", 7.5))
    )

    gesture_data = raw.get("gesture", {})
    gesture = GestureConfig(
        max_trail_points=int(gesture_data.get("max_trail_points", 20)),
        trail_fade_ms=float(gesture_data.get("trail_fade_ms", 200.0))
    )

    collision_data = raw["collision"]
    collision = CollisionConfig(
        hit_radius=float(collision_data["hit_radius"]),
        min_slash_speed=float(collision_data["min_slash_speed"]),
        throttle_ms=float(collision_data.get("throttle_ms", 50.0))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        points_per_fruit=int(scoring_data["points_per_fruit"]),
        combo_cap=int(scoring_data["combo_cap"]),
        combo_timeout_ms=float(scoring_data["combo_timeout_ms"]),
        combo_popup_threshold=int(scoring_data.get("combo_popup_threshold", 3)),
        combo_popup_ms=float(scoring_data.get("combo_popup_ms", 500.0))
    )

    session_data = raw["session"]
    session = SessionConfig(
        duration_seconds=int(session_data["duration_seconds"]),
        starting_lives=int(session_data["starting_lives"]),
        countdown_interval_ms=float(session_data.get("countdown_interval_ms", 1000.0))
    )

    snapshot_data = raw.get("snapshot", {})
    snapshot = SnapshotConfig(
        max_objects=int(snapshot_data.get("max_objects", 64))
    )

    fruits = tuple(_parse_fruit(f) for f in raw["fruits"])
    hazard = _parse_hazard(raw.get("hazard", {}), kind_id=len(fruits))

    config = GameConfig(
        board=board,
        physics=physics,
        spawn=spawn,
        gesture=gesture,
        collision=collision,
        scoring=scoring,
        session=session,
        snapshot=snapshot,
        fruits=fruits,
        hazard=hazard
    )

    _validate_config(config)
    logger.debug("Loaded game config from %s", config_path)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
