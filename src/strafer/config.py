from __future__ import annotations

import os
import pathlib
from typing import Optional

import yaml
from pydantic import BaseModel, Field, root_validator, validator

CONFIG_ENV_VAR = "STRAFER_CONFIG"


class RadarSettings(BaseModel):
    overshoot_degrees: float = Field(30.0, ge=0.0, le=180.0, description="Sweep past the enemy by this much")
    search_sweep_degrees: float = Field(360.0, gt=0.0, description="Radar turn issued while searching")


class MovementSettings(BaseModel):
    orbit_offset_degrees: float = 90.0
    strafe_bias_degrees: float = 15.0
    reversal_period_ticks: int = Field(20, ge=1)
    move_distance: float = Field(150.0, gt=0.0)


class GunnerySettings(BaseModel):
    # The derated bullet speed is a readiness heuristic, not the engine's ballistics.
    base_bullet_speed: float = Field(20.0, gt=0.0)
    bullet_speed_derate: float = Field(3.0, ge=0.0)
    derate_turn_cap_degrees: float = Field(3.0, ge=0.0)
    power_numerator: float = Field(400.0, gt=0.0)
    max_power: float = Field(3.0, gt=0.0, le=3.0)
    fire_alignment_degrees: float = Field(10.0, gt=0.0)

    @root_validator(skip_on_failure=True)
    def _bullet_speed_stays_positive(cls, values: dict) -> dict:  # noqa: N805
        slowest = values["base_bullet_speed"] - values["bullet_speed_derate"] * values["derate_turn_cap_degrees"]
        if slowest <= 0:
            raise ValueError("derated bullet speed must stay above zero")
        return values


class TrackingSettings(BaseModel):
    lost_target_ticks: int = Field(2, ge=0, description="Ticks without a scan before searching again")


class TurnAssist(BaseModel):
    adjust_radar_for_gun_turn: bool = True
    adjust_gun_for_body_turn: bool = True


class TankRoyaleVersions(BaseModel):
    server: str = "0.34.1"
    recorder: str = "0.34.1"


class ArenaSettings(BaseModel):
    versions: TankRoyaleVersions = TankRoyaleVersions()
    width: int = Field(800, ge=400)
    height: int = Field(600, ge=400)
    rounds: int = Field(10, ge=1)
    gun_cooling_rate: float = Field(0.1, gt=0.0)
    max_inactivity_turns: int = 450
    turn_timeout: int = 40
    ready_timeout: int = 10000
    turns_per_second: int = Field(60, ge=1)
    match_timeout_seconds: int = Field(300, ge=1)
    tools_dir: pathlib.Path = pathlib.Path("tools/bin")

    @validator("tools_dir", pre=True)
    def _expand_path(cls, value: str | pathlib.Path) -> pathlib.Path:  # noqa: N805
        return pathlib.Path(value).expanduser()


class StraferConfig(BaseModel):
    radar: RadarSettings = RadarSettings()
    movement: MovementSettings = MovementSettings()
    gunnery: GunnerySettings = GunnerySettings()
    tracking: TrackingSettings = TrackingSettings()
    assist: TurnAssist = TurnAssist()
    arena: ArenaSettings = ArenaSettings()

    @classmethod
    def load(cls, path: str | pathlib.Path) -> "StraferConfig":
        cfg_path = pathlib.Path(path)
        with cfg_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {cfg_path}")
        arena = data.get("arena")
        if isinstance(arena, dict) and "tools_dir" in arena:
            tools = pathlib.Path(arena["tools_dir"]).expanduser()
            if not tools.is_absolute():
                arena["tools_dir"] = cfg_path.parent / tools
        return cls(**data)

    @classmethod
    def from_env(cls, default: Optional[pathlib.Path] = None) -> "StraferConfig":
        """Load from ``$STRAFER_CONFIG``, then ``default``, falling back to built-in values."""
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return cls.load(env_path)
        if default is not None and default.exists():
            return cls.load(default)
        return cls()
