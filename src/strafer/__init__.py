"""Strafer: a Tank Royale duelist with an oscillating radar, strafing movement and lead targeting."""

from .angles import normalize_absolute, normalize_bearing
from .controller import TickController
from .gunnery import FiringSolution, FiringSolutionSolver
from .movement import MovementPolicy
from .radar import RadarScanPolicy
from .state import CommandBatch, DirectionState, EnemySnapshot, SelfState, TrackingMode

__version__ = "0.1.0"

__all__ = [
    "CommandBatch",
    "DirectionState",
    "EnemySnapshot",
    "FiringSolution",
    "FiringSolutionSolver",
    "MovementPolicy",
    "RadarScanPolicy",
    "SelfState",
    "TickController",
    "TrackingMode",
    "normalize_absolute",
    "normalize_bearing",
]
