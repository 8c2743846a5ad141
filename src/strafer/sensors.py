"""Read Tank Royale bot state and scan events into compass-frame snapshots.

Only duck-typed attribute access happens here so the conversions can be
exercised without a running server.
"""

from __future__ import annotations

import math
from typing import Any

from .angles import absolute_bearing_to, compass_from_direction, normalize_bearing
from .state import EnemySnapshot, SelfState

MIN_DISTANCE = 1.0


def read_self_state(bot: Any) -> SelfState:
    return SelfState(
        x=bot.get_x(),
        y=bot.get_y(),
        heading=compass_from_direction(bot.get_direction()),
        gun_heading=compass_from_direction(bot.get_gun_direction()),
        radar_heading=compass_from_direction(bot.get_radar_direction()),
        velocity=bot.get_speed(),
        elapsed_ticks=bot.get_turn_number(),
        gun_turn_remaining=bot.gun_turn_remaining,
        gun_heat=bot.get_gun_heat(),
    )


def snapshot_from_scan(me: SelfState, event: Any) -> EnemySnapshot:
    """Build an EnemySnapshot from a ScannedBotEvent-like object (x, y, direction, speed)."""
    distance = max(MIN_DISTANCE, math.hypot(event.x - me.x, event.y - me.y))
    absolute = absolute_bearing_to(me.x, me.y, event.x, event.y)
    return EnemySnapshot(
        bearing=normalize_bearing(absolute - me.heading),
        distance=distance,
        heading=compass_from_direction(event.direction),
        velocity=event.speed,
    )
