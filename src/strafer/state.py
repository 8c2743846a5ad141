from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SelfState:
    """Our own kinematics as read from the engine at the start of a tick."""

    x: float
    y: float
    heading: float
    gun_heading: float
    radar_heading: float
    velocity: float
    elapsed_ticks: int
    gun_turn_remaining: float
    gun_heat: float


@dataclass(frozen=True)
class EnemySnapshot:
    """A single detection. Valid for the tick it arrived in only."""

    bearing: float
    distance: float
    heading: float
    velocity: float

    def absolute_bearing(self, me: SelfState) -> float:
        return me.heading + self.bearing

    def position(self, me: SelfState) -> Tuple[float, float]:
        angle = math.radians(self.absolute_bearing(me))
        return (
            me.x + self.distance * math.sin(angle),
            me.y + self.distance * math.cos(angle),
        )


@dataclass
class DirectionState:
    """Strafe and sweep directions carried across the ticks of one round."""

    move_direction: int = 1
    scan_direction: int = 1

    def flip_move(self) -> int:
        self.move_direction = -self.move_direction
        return self.move_direction

    def flip_scan(self) -> int:
        self.scan_direction = -self.scan_direction
        return self.scan_direction


class TrackingMode(enum.Enum):
    SEARCHING = "searching"
    TRACKING = "tracking"


@dataclass
class CommandBatch:
    """Commands queued for one tick. ``None`` means the setter is not called."""

    radar_turn: Optional[float] = None
    body_turn: Optional[float] = None
    move: Optional[float] = None
    gun_turn: Optional[float] = None
    fire_power: Optional[float] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.radar_turn, self.body_turn, self.move, self.gun_turn, self.fire_power)
        )
