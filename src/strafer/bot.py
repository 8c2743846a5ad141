from __future__ import annotations

import logging
from typing import Optional

from robocode_tank_royale.bot_api.bot import Bot
from robocode_tank_royale.bot_api.bot_info import BotInfo
from robocode_tank_royale.bot_api.events import ScannedBotEvent

from .commands import apply_commands, configure_turn_assist
from .config import StraferConfig
from .controller import TickController
from .sensors import read_self_state, snapshot_from_scan

logger = logging.getLogger("strafer.bot")


class StraferBot(Bot):
    """Duelist that strafes around its target and leads its shots."""

    def __init__(self, config: Optional[StraferConfig] = None, bot_config: str = "bot-config.json") -> None:
        info = BotInfo.from_file(bot_config)
        super().__init__(bot_info=info)
        self.config = config or StraferConfig()
        self.controller = TickController(self.config)
        configure_turn_assist(self, self.config.assist)

    async def run(self) -> None:
        # run() starts afresh every round.
        self.controller.reset()
        logger.info("Round started, searching")
        while self.is_running():
            apply_commands(self, self.controller.idle_tick(read_self_state(self)))
            await self.go()

    async def on_scanned_bot(self, e: ScannedBotEvent) -> None:
        me = read_self_state(self)
        enemy = snapshot_from_scan(me, e)
        apply_commands(self, self.controller.on_scan(me, enemy))
