from __future__ import annotations

import logging
from typing import Optional

from .config import StraferConfig
from .gunnery import FiringSolutionSolver
from .movement import MovementPolicy
from .radar import RadarScanPolicy
from .state import CommandBatch, DirectionState, EnemySnapshot, SelfState, TrackingMode

logger = logging.getLogger("strafer.controller")


class TickController:
    """Turn sensor readings into one CommandBatch per tick.

    The controller owns the round's DirectionState and the SEARCHING/TRACKING
    mode. A scan always switches to TRACKING; the idle loop falls back to
    SEARCHING once scans stop arriving for longer than ``lost_target_ticks``.
    """

    def __init__(self, config: Optional[StraferConfig] = None) -> None:
        self.config = config or StraferConfig()
        self.radar = RadarScanPolicy(self.config.radar)
        self.movement = MovementPolicy(self.config.movement)
        self.gunnery = FiringSolutionSolver(self.config.gunnery)
        self.reset()

    def reset(self) -> None:
        self.directions = DirectionState()
        self.mode = TrackingMode.SEARCHING
        self.last_scan_tick: Optional[int] = None

    def _set_mode(self, mode: TrackingMode, tick: int) -> None:
        if mode is not self.mode:
            logger.info("Tick %s: %s -> %s", tick, self.mode.value, mode.value)
            self.mode = mode

    def on_scan(self, me: SelfState, enemy: EnemySnapshot) -> CommandBatch:
        self._set_mode(TrackingMode.TRACKING, me.elapsed_ticks)
        self.last_scan_tick = me.elapsed_ticks

        radar_turn = self.radar.decide(me, enemy, self.directions)
        body_turn, move = self.movement.decide(me, enemy, self.directions)
        solution = self.gunnery.solve(me, enemy)
        return CommandBatch(
            radar_turn=radar_turn,
            body_turn=body_turn,
            move=move,
            gun_turn=solution.gun_turn,
            fire_power=solution.power if solution.fire else None,
        )

    def idle_tick(self, me: SelfState) -> CommandBatch:
        if self.mode is TrackingMode.TRACKING and self.last_scan_tick is not None:
            if me.elapsed_ticks - self.last_scan_tick > self.config.tracking.lost_target_ticks:
                self._set_mode(TrackingMode.SEARCHING, me.elapsed_ticks)
        if self.mode is TrackingMode.SEARCHING:
            return CommandBatch(radar_turn=self.radar.search())
        return CommandBatch()
