import importlib.util
import json
import os
import pathlib
from unittest.mock import Mock

import pytest

from strafer import match
from strafer.config import CONFIG_ENV_VAR, ArenaSettings


def test_battle_setup_uses_arena_settings():
    setup = match.battle_setup(ArenaSettings(width=1000, height=1000, rounds=3, turns_per_second=240))

    assert setup["gameType"] == "1v1"
    assert setup["arenaWidth"] == 1000
    assert setup["numberOfRounds"] == 3
    assert setup["minNumberOfParticipants"] == setup["maxNumberOfParticipants"] == 2
    assert setup["defaultTurnsPerSecond"] == 240
    assert setup["gunCoolingRate"] == pytest.approx(0.1)


def test_bot_name_from_config_or_directory(tmp_path):
    named = tmp_path / "named"
    named.mkdir()
    (named / "bot-config.json").write_text(json.dumps({"name": "Sitting Duck"}))
    unnamed = tmp_path / "unnamed"
    unnamed.mkdir()

    assert match.bot_name(named) == "Sitting Duck"
    assert match.bot_name(unnamed) == "unnamed"


def test_parse_results_orders_by_score():
    results = match.parse_results(
        [
            {"name": "Duck", "rank": 2, "totalScore": 120.0, "survival": 50},
            {"name": "Strafer", "rank": 1, "totalScore": 940.5, "bulletDamage": 600, "firstPlaces": 9},
        ]
    )

    assert [r.name for r in results] == ["Strafer", "Duck"]
    assert results[0].first_places == 9
    assert results[1].bullet_damage == 0.0


def test_launch_bot_requires_main(tmp_path):
    with pytest.raises(FileNotFoundError):
        match.launch_bot(tmp_path, 7654, tmp_path / "bot.log")


def test_launch_bot_environment_and_log(tmp_path, monkeypatch):
    (tmp_path / "main.py").write_text("")
    config = tmp_path / "strafer.yaml"
    log_path = tmp_path / "logs" / "strafer.log"
    popen = Mock()
    monkeypatch.setattr(match.subprocess, "Popen", popen)
    monkeypatch.delenv("SERVER_URL", raising=False)

    match.launch_bot(tmp_path, 7001, log_path, config_path=config)

    args, kwargs = popen.call_args
    assert args[0][1] == "main.py"
    assert kwargs["cwd"] == tmp_path
    assert str(kwargs["stdout"].name) == str(log_path)
    assert kwargs["stderr"] == match.subprocess.STDOUT
    assert log_path.exists()
    env = kwargs["env"]
    assert env["SERVER_URL"] == "ws://localhost:7001"
    assert env[CONFIG_ENV_VAR] == str(config.resolve())
    assert env["PYTHONPATH"].split(os.pathsep)[0] == str(match.SRC_ROOT)


def test_run_match_writes_a_log_per_bot(tmp_path, monkeypatch):
    bots = []
    for name in ("strafer", "duck"):
        bot_dir = tmp_path / name
        bot_dir.mkdir()
        (bot_dir / "main.py").write_text("")
        bots.append(bot_dir)
    monkeypatch.setattr(match.tankroyale, "start_server", Mock())
    monkeypatch.setattr(match.tankroyale, "wait_for_port", Mock(return_value=True))
    monkeypatch.setattr(match.subprocess, "Popen", Mock())
    monkeypatch.setattr(match, "controller_run", Mock(return_value=None))
    monkeypatch.setattr(match.asyncio, "wait_for", Mock())
    monkeypatch.setattr(match.asyncio, "run", Mock(return_value=[{"name": "Strafer", "totalScore": 10}]))

    results = match.run_match(tmp_path / "server.jar", bots, ArenaSettings(), tmp_path / "logs", port=7002)

    assert [r.name for r in results] == ["Strafer"]
    assert (tmp_path / "logs" / "strafer.log").exists()
    assert (tmp_path / "logs" / "duck.log").exists()


def test_repo_bot_is_launchable():
    bot_dir = pathlib.Path(__file__).resolve().parents[1] / "bots" / "strafer"
    assert (bot_dir / "main.py").exists()
    assert match.bot_name(bot_dir) == "Strafer"


def test_repo_bot_defaults_to_shipped_config():
    main_path = pathlib.Path(__file__).resolve().parents[1] / "bots" / "strafer" / "main.py"
    spec = importlib.util.spec_from_file_location("strafer_bot_main", main_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    assert module.DEFAULT_CONFIG.exists()
    assert module.DEFAULT_CONFIG.name == "strafer-config.yaml"
