import asyncio
import logging
import pathlib

from strafer.bot import StraferBot
from strafer.config import StraferConfig

DEFAULT_CONFIG = pathlib.Path(__file__).resolve().parents[2] / "strafer-config.yaml"


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = StraferConfig.from_env(default=DEFAULT_CONFIG)
    bot = StraferBot(config=config)
    await bot.start()


if __name__ == "__main__":
    asyncio.run(main())
