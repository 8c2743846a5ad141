from __future__ import annotations

from typing import Any

from .config import TurnAssist
from .state import CommandBatch


def configure_turn_assist(bot: Any, assist: TurnAssist) -> None:
    """Let the engine keep the radar and gun steady while the parts below them turn."""
    bot.set_adjust_radar_for_gun_turn(assist.adjust_radar_for_gun_turn)
    bot.set_adjust_gun_for_body_turn(assist.adjust_gun_for_body_turn)


def apply_commands(bot: Any, batch: CommandBatch) -> None:
    """Queue a batch on the bot. Nothing is sent until the bot's next ``go()``."""
    if batch.radar_turn is not None:
        bot.set_turn_radar_right(batch.radar_turn)
    if batch.body_turn is not None:
        bot.set_turn_right(batch.body_turn)
    if batch.move is not None:
        bot.set_forward(batch.move)
    if batch.gun_turn is not None:
        bot.set_turn_gun_right(batch.gun_turn)
    if batch.fire_power is not None:
        bot.set_fire(batch.fire_power)
