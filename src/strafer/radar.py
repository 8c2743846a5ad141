from __future__ import annotations

from .angles import normalize_bearing
from .config import RadarSettings
from .state import DirectionState, EnemySnapshot, SelfState


class RadarScanPolicy:
    """Oscillate the radar across the enemy's last bearing.

    Each detection swings the radar onto the enemy and past it by the
    overshoot, alternating sides, so the beam crosses the enemy again on the
    way back and keeps producing scan events.
    """

    def __init__(self, settings: RadarSettings | None = None) -> None:
        self.settings = settings or RadarSettings()

    def decide(self, me: SelfState, enemy: EnemySnapshot, directions: DirectionState) -> float:
        turn = me.heading - me.radar_heading + enemy.bearing
        turn += self.settings.overshoot_degrees * directions.scan_direction
        directions.flip_scan()
        return normalize_bearing(turn)

    def search(self) -> float:
        return self.settings.search_sweep_degrees
