"""
State Snapshot
==============

Read-only views of a session for presentation layers: session counters,
entity views, trails, and the entity table packed into fixed-size numpy
arrays.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

from fruit_slash.slash_core.config_loader import GameConfig, get_config
from fruit_slash.slash_core.gesture import SlashTrail, TrailPoint
from fruit_slash.slash_core.physics_world import Entity


@dataclass(frozen=True)
class EntityView:
    """Immutable copy of an entity's render state."""
    uid: int
    kind_id: int
    kind: str
    symbol: str
    is_hazard: bool
    x: float
    y: float
    vx: float
    vy: float
    rotation: float
    spin: float
    scale: float
    sliced: bool

    @classmethod
    def from_entity(cls, entity: Entity) -> "EntityView":
        x, y = entity.position
        vx, vy = entity.velocity
        return cls(
            uid=entity.uid,
            kind_id=entity.kind_id,
            kind=entity.kind.name,
            symbol=entity.kind.symbol,
            is_hazard=entity.is_hazard,
            x=x,
            y=y,
            vx=vx,
            vy=vy,
            rotation=entity.rotation,
            spin=entity.spin,
            scale=entity.scale,
            sliced=entity.sliced,
        )


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete session state at one instant.

    Object arrays are fixed-size (max_objects) with a mask for the
    variable entity count; entities beyond max_objects are only present
    in `entities`.
    """
    # Session state
    phase: str
    score: int
    combo: int
    max_combo: int
    fruits_sliced: int
    lives: int
    time_left: int
    combo_popup: bool
    timestamp_ms: float

    # Board info
    board_width: int
    board_height: int

    # Entities and trails
    entities: Tuple[EntityView, ...]
    active_trail: Tuple[TrailPoint, ...]
    slash_trails: Tuple[SlashTrail, ...]

    # Packed entity arrays (fixed size, padded)
    obj_uid: np.ndarray           # (MAX_OBJ,) int64, -1 when empty
    obj_kind_id: np.ndarray       # (MAX_OBJ,) int16, -1 when empty
    obj_x: np.ndarray             # (MAX_OBJ,) float32
    obj_y: np.ndarray             # (MAX_OBJ,) float32
    obj_rotation: np.ndarray      # (MAX_OBJ,) float32
    obj_scale: np.ndarray         # (MAX_OBJ,) float32
    obj_sliced: np.ndarray        # (MAX_OBJ,) bool
    obj_mask: np.ndarray          # (MAX_OBJ,) bool

    @property
    def is_playing(self) -> bool:
        return self.phase == "playing"

    @property
    def is_over(self) -> bool:
        return self.phase == "gameOver"

    @property
    def entity_count(self) -> int:
        return len(self.entities)

    def get_entity(self, uid: int) -> Optional[EntityView]:
        """Find an entity view by UID."""
        for view in self.entities:
            if view.uid == uid:
                return view
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Plain-Python representation for renderers and logs."""
        return {
            "phase": self.phase,
            "score": self.score,
            "combo": self.combo,
            "maxCombo": self.max_combo,
            "fruitsSliced": self.fruits_sliced,
            "lives": self.lives,
            "timeLeft": self.time_left,
            "comboPopup": self.combo_popup,
            "timestamp": self.timestamp_ms,
            "board": {"width": self.board_width, "height": self.board_height},
            "entities": [
                {
                    "uid": v.uid,
                    "kind": v.kind,
                    "symbol": v.symbol,
                    "isHazard": v.is_hazard,
                    "x": v.x,
                    "y": v.y,
                    "rotation": v.rotation,
                    "scale": v.scale,
                    "sliced": v.sliced,
                }
                for v in self.entities
            ],
            "activeTrail": [[p.x, p.y] for p in self.active_trail],
            "slashTrails": [
                {
                    "id": t.trail_id,
                    "points": [[p.x, p.y] for p in t.points],
                    "timestamp": t.created_at_ms,
                }
                for t in self.slash_trails
            ],
        }


class SnapshotBuilder:
    """Builds snapshots, packing entities into pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_objects = config.snapshot.max_objects

        self._obj_uid = np.zeros(self._max_objects, dtype=np.int64)
        self._obj_kind_id = np.zeros(self._max_objects, dtype=np.int16)
        self._obj_x = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_y = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_rotation = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_scale = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_sliced = np.zeros(self._max_objects, dtype=bool)
        self._obj_mask = np.zeros(self._max_objects, dtype=bool)

    @property
    def max_objects(self) -> int:
        return self._max_objects

    def build(
        self,
        phase: str,
        score: int,
        combo: int,
        max_combo: int,
        fruits_sliced: int,
        lives: int,
        time_left: int,
        combo_popup: bool,
        timestamp_ms: float,
        entities: Iterable[Entity],
        active_trail: Tuple[TrailPoint, ...],
        slash_trails: Tuple[SlashTrail, ...]
    ) -> GameSnapshot:
        """Build a snapshot from current session state."""
        views = tuple(EntityView.from_entity(e) for e in entities)

        self._obj_uid.fill(-1)
        self._obj_kind_id.fill(-1)
        self._obj_x.fill(0)
        self._obj_y.fill(0)
        self._obj_rotation.fill(0)
        self._obj_scale.fill(0)
        self._obj_sliced.fill(False)
        self._obj_mask.fill(False)

        count = min(len(views), self._max_objects)
        for i, view in enumerate(views[:count]):
            self._obj_uid[i] = view.uid
            self._obj_kind_id[i] = view.kind_id
            self._obj_x[i] = view.x
            self._obj_y[i] = view.y
            self._obj_rotation[i] = view.rotation
            self._obj_scale[i] = view.scale
            self._obj_sliced[i] = view.sliced
        self._obj_mask[:count] = True

        return GameSnapshot(
            phase=phase,
            score=score,
            combo=combo,
            max_combo=max_combo,
            fruits_sliced=fruits_sliced,
            lives=lives,
            time_left=time_left,
            combo_popup=combo_popup,
            timestamp_ms=timestamp_ms,
            board_width=self._config.board.width,
            board_height=self._config.board.height,
            entities=views,
            active_trail=tuple(active_trail),
            slash_trails=tuple(slash_trails),
            # Copies: the builder's buffers are reused for the next snapshot
            obj_uid=self._obj_uid.copy(),
            obj_kind_id=self._obj_kind_id.copy(),
            obj_x=self._obj_x.copy(),
            obj_y=self._obj_y.copy(),
            obj_rotation=self._obj_rotation.copy(),
            obj_scale=self._obj_scale.copy(),
            obj_sliced=self._obj_sliced.copy(),
            obj_mask=self._obj_mask.copy(),
        )
