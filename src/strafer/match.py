"""Run a local 1v1 between the strafer bot and an opponent bot directory.

The harness starts a headless server, launches each bot as a Python
subprocess, then joins as a controller over WebSocket to start the game and
collect the final results.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import pathlib
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from . import tankroyale
from .config import CONFIG_ENV_VAR, ArenaSettings

logger = logging.getLogger("strafer.match")

SRC_ROOT = pathlib.Path(__file__).resolve().parents[1]


class MatchError(Exception):
    """Raised when a match cannot be started or finished."""


@dataclass
class BotResult:
    name: str
    rank: int
    total_score: float
    survival: float
    bullet_damage: float
    ram_damage: float
    first_places: int


def battle_setup(arena: ArenaSettings, game_type: str = "1v1", participants: int = 2) -> dict:
    return {
        "gameType": game_type,
        "arenaWidth": arena.width,
        "isArenaWidthLocked": True,
        "arenaHeight": arena.height,
        "isArenaHeightLocked": True,
        "minNumberOfParticipants": participants,
        "isMinNumberOfParticipantsLocked": True,
        "maxNumberOfParticipants": participants,
        "isMaxNumberOfParticipantsLocked": True,
        "numberOfRounds": arena.rounds,
        "isNumberOfRoundsLocked": True,
        "gunCoolingRate": arena.gun_cooling_rate,
        "isGunCoolingRateLocked": True,
        "maxInactivityTurns": arena.max_inactivity_turns,
        "isMaxInactivityTurnsLocked": True,
        "turnTimeout": arena.turn_timeout,
        "isTurnTimeoutLocked": True,
        "readyTimeout": arena.ready_timeout,
        "isReadyTimeoutLocked": True,
        "defaultTurnsPerSecond": arena.turns_per_second,
    }


def bot_name(bot_dir: pathlib.Path) -> str:
    cfg_path = bot_dir / "bot-config.json"
    if not cfg_path.exists():
        return bot_dir.name
    data = json.loads(cfg_path.read_text(encoding="utf-8"))
    return str(data.get("name", bot_dir.name))


def parse_results(results: Sequence[dict]) -> List[BotResult]:
    parsed = [
        BotResult(
            name=r.get("name", "?"),
            rank=int(r.get("rank", 0)),
            total_score=float(r.get("totalScore", 0.0)),
            survival=float(r.get("survival", 0.0)),
            bullet_damage=float(r.get("bulletDamage", 0.0)),
            ram_damage=float(r.get("ramDamage", 0.0)),
            first_places=int(r.get("firstPlaces", 0)),
        )
        for r in results
    ]
    return sorted(parsed, key=lambda r: r.total_score, reverse=True)


def launch_bot(
    bot_dir: pathlib.Path,
    port: int,
    log_path: pathlib.Path,
    config_path: Optional[pathlib.Path] = None,
) -> subprocess.Popen:
    """Start a bot's ``main.py`` with its stdout and stderr written to ``log_path``."""
    main_path = bot_dir / "main.py"
    if not main_path.exists():
        raise FileNotFoundError(f"Cannot find main.py under {bot_dir}")
    env = os.environ.copy()
    env.setdefault("SERVER_URL", f"ws://localhost:{port}")
    env["PYTHONPATH"] = os.pathsep.join(p for p in [str(SRC_ROOT), env.get("PYTHONPATH", "")] if p)
    if config_path is not None:
        env[CONFIG_ENV_VAR] = str(config_path.resolve())
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Launching bot %s (log: %s)", bot_dir, log_path)
    with log_path.open("w", encoding="utf-8") as fh:
        return subprocess.Popen(
            [sys.executable, main_path.name], cwd=bot_dir, env=env, stdout=fh, stderr=subprocess.STDOUT
        )


async def controller_run(expected_bots: Sequence[str], game_setup: dict, port: int) -> list[dict]:
    import websockets

    async with websockets.connect(f"ws://localhost:{port}") as ws:
        msg = json.loads(await ws.recv())
        if msg.get("type") != "ServerHandshake":
            raise MatchError(f"Unexpected message: {msg}")
        await ws.send(
            json.dumps(
                {
                    "type": "ControllerHandshake",
                    "sessionId": msg["sessionId"],
                    "name": "strafer-controller",
                    "version": "0.1",
                    "author": "strafer",
                }
            )
        )

        lobby: dict[str, dict] = {}
        while any(name not in lobby for name in expected_bots):
            payload = json.loads(await ws.recv())
            if payload.get("type") == "BotListUpdate":
                lobby = {bot["name"]: bot for bot in payload.get("bots", [])}
                logger.debug("Lobby: %s", sorted(lobby))
        addresses = [{"host": lobby[name]["host"], "port": lobby[name]["port"]} for name in expected_bots]
        await ws.send(json.dumps({"type": "StartGame", "botAddresses": addresses, "gameSetup": game_setup}))
        logger.info("Game started: %s", ", ".join(expected_bots))

        while True:
            try:
                payload = json.loads(await ws.recv())
            except websockets.ConnectionClosed:
                logger.warning("Server closed the connection before the game ended")
                return []
            if payload.get("type") == "GameEndedEventForObserver":
                return payload.get("results", [])


def run_match(
    server_jar: pathlib.Path,
    bot_dirs: Sequence[pathlib.Path],
    arena: ArenaSettings,
    logs_dir: pathlib.Path,
    recorder_jar: Optional[pathlib.Path] = None,
    config_path: Optional[pathlib.Path] = None,
    java_bin: Optional[pathlib.Path] = None,
    port: Optional[int] = None,
) -> List[BotResult]:
    """Start the server (and recorder), run one game between ``bot_dirs`` and return ranked results."""
    port = port or tankroyale.find_free_port(0)
    game_setup = battle_setup(arena, participants=len(bot_dirs))
    expected = [bot_name(d) for d in bot_dirs]
    server = tankroyale.start_server(
        server_jar,
        logs_dir / "server.log",
        game_types=[game_setup["gameType"]],
        port=port,
        tps=arena.turns_per_second,
        java_bin=java_bin,
    )
    recorder: Optional[tankroyale.TankRoyaleProcess] = None
    bots: list[subprocess.Popen] = []
    try:
        if not tankroyale.wait_for_port(port=port, timeout=10):
            raise MatchError("Server WebSocket not ready in time")
        if recorder_jar:
            recorder = tankroyale.start_recorder(
                recorder_jar,
                logs_dir / "recorder.log",
                server_url=f"ws://localhost:{port}",
                output_dir=logs_dir / "recordings",
                java_bin=java_bin,
            )
        bots = [launch_bot(d, port, logs_dir / f"{d.name}.log", config_path) for d in bot_dirs]
        raw = asyncio.run(
            asyncio.wait_for(controller_run(expected, game_setup, port), timeout=arena.match_timeout_seconds)
        )
        return parse_results(raw)
    finally:
        for proc in bots:
            try:
                proc.wait(timeout=10)
            except subprocess.TimeoutExpired:
                proc.send_signal(signal.SIGTERM)
        if recorder:
            recorder.stop()
        server.stop()
