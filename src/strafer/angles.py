"""Angle helpers shared by every policy.

All angles are degrees in the compass frame: 0 points north (+y) and angles
grow clockwise. Tank Royale reports directions counter-clockwise from east,
so readings pass through ``compass_from_direction`` before use.
"""

from __future__ import annotations

import math


def normalize_bearing(angle: float) -> float:
    """Map any angle onto the signed range (-180, 180]."""
    angle = math.fmod(angle, 360.0)
    while angle > 180.0:
        angle -= 360.0
    while angle <= -180.0:
        angle += 360.0
    return angle


def normalize_absolute(angle: float) -> float:
    """Map any angle onto [0, 360)."""
    angle = math.fmod(angle, 360.0)
    if angle < 0.0:
        angle += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    if angle >= 360.0:
        angle -= 360.0
    return angle


def compass_from_direction(direction: float) -> float:
    return normalize_absolute(90.0 - direction)


def direction_from_compass(heading: float) -> float:
    return normalize_absolute(90.0 - heading)


def absolute_bearing_to(x: float, y: float, target_x: float, target_y: float) -> float:
    """Compass heading from (x, y) towards (target_x, target_y)."""
    return normalize_absolute(math.degrees(math.atan2(target_x - x, target_y - y)))
