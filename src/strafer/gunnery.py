"""Linear-intercept aiming.

The enemy is assumed to keep its current heading and speed. Bullet travel
time depends on the bullet speed, which is estimated from how much the gun
still has to turn: a gun that is far from settled is treated as if its shot
were slower, pushing the aim point further ahead. That estimate is a tuned
heuristic carried over for behavioral parity, not the engine's ballistics
(Tank Royale's real bullet speed is ``20 - 3 * power``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .angles import absolute_bearing_to, normalize_bearing
from .config import GunnerySettings
from .state import EnemySnapshot, SelfState

logger = logging.getLogger("strafer.gunnery")


@dataclass(frozen=True)
class FiringSolution:
    gun_turn: float
    power: float
    fire: bool
    bullet_speed: float
    time_to_impact: float
    predicted_x: float
    predicted_y: float


class FiringSolutionSolver:
    def __init__(self, settings: GunnerySettings | None = None) -> None:
        self.settings = settings or GunnerySettings()

    def bullet_speed(self, me: SelfState) -> float:
        s = self.settings
        pending = min(s.derate_turn_cap_degrees, abs(me.gun_turn_remaining))
        return s.base_bullet_speed - s.bullet_speed_derate * pending

    def power(self, distance: float) -> float:
        return min(self.settings.power_numerator / distance, self.settings.max_power)

    def ready_to_fire(self, me: SelfState) -> bool:
        """Loaded and nearly on target."""
        return me.gun_heat == 0 and abs(me.gun_turn_remaining) < self.settings.fire_alignment_degrees

    def predict(self, me: SelfState, enemy: EnemySnapshot, bullet_speed: float) -> tuple[float, float, float]:
        """Return ``(x, y, time_to_impact)`` for the enemy's position when the bullet arrives."""
        enemy_x, enemy_y = enemy.position(me)
        time_to_impact = enemy.distance / bullet_speed
        travel = enemy.velocity * time_to_impact
        heading = math.radians(enemy.heading)
        return (
            enemy_x + travel * math.sin(heading),
            enemy_y + travel * math.cos(heading),
            time_to_impact,
        )

    def solve(self, me: SelfState, enemy: EnemySnapshot) -> FiringSolution:
        speed = self.bullet_speed(me)
        predicted_x, predicted_y, time_to_impact = self.predict(me, enemy, speed)
        aim = absolute_bearing_to(me.x, me.y, predicted_x, predicted_y)
        gun_turn = normalize_bearing(aim - me.gun_heading)
        power = self.power(enemy.distance)
        fire = self.ready_to_fire(me)
        if fire:
            logger.debug(
                "Firing %.2f at (%.1f, %.1f), impact in %.1f ticks",
                power,
                predicted_x,
                predicted_y,
                time_to_impact,
            )
        return FiringSolution(
            gun_turn=gun_turn,
            power=power,
            fire=fire,
            bullet_speed=speed,
            time_to_impact=time_to_impact,
            predicted_x=predicted_x,
            predicted_y=predicted_y,
        )
