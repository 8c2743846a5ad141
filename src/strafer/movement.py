from __future__ import annotations

import logging
from typing import Optional, Tuple

from .angles import normalize_bearing
from .config import MovementSettings
from .state import DirectionState, EnemySnapshot, SelfState

logger = logging.getLogger("strafer.movement")


class MovementPolicy:
    """Orbit the enemy slightly inward and reverse the strafe periodically."""

    def __init__(self, settings: MovementSettings | None = None) -> None:
        self.settings = settings or MovementSettings()

    def should_reverse(self, me: SelfState) -> bool:
        # A zero velocity means the engine stopped us against a wall or a bot.
        return me.elapsed_ticks % self.settings.reversal_period_ticks == 0 or me.velocity == 0

    def decide(
        self, me: SelfState, enemy: EnemySnapshot, directions: DirectionState
    ) -> Tuple[float, Optional[float]]:
        """Return ``(body_turn, move)``; ``move`` is ``None`` unless this tick reverses."""
        s = self.settings
        body_turn = normalize_bearing(
            enemy.bearing + s.orbit_offset_degrees - s.strafe_bias_degrees * directions.move_direction
        )
        move: Optional[float] = None
        if self.should_reverse(me):
            direction = directions.flip_move()
            move = s.move_distance * direction
            logger.debug(
                "Strafe reversed at tick %s (velocity=%.1f), moving %.0f",
                me.elapsed_ticks,
                me.velocity,
                move,
            )
        return body_turn, move
