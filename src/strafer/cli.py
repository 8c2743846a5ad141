from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from typing import Dict, Optional

import typer
import yaml
from rich import print
from rich.logging import RichHandler
from rich.table import Table

from . import tankroyale
from .config import StraferConfig
from .gunnery import FiringSolutionSolver
from .match import MatchError, run_match
from .state import EnemySnapshot, SelfState

app = typer.Typer(add_completion=False, help="Strafer bot tooling")

DEFAULT_CONFIG = pathlib.Path("strafer-config.yaml")
DEFAULT_BOT_DIR = pathlib.Path("bots") / "strafer"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _load_config(path: pathlib.Path) -> StraferConfig:
    if path.exists():
        return StraferConfig.load(path)
    logging.getLogger("strafer.cli").debug("No config at %s, using defaults", path)
    return StraferConfig()


@app.command()
def solve(
    bearing: float = typer.Option(..., help="Enemy bearing relative to our body heading (degrees)"),
    distance: float = typer.Option(..., min=1.0, help="Distance to the enemy"),
    enemy_heading: float = typer.Option(0.0, help="Enemy compass heading (degrees)"),
    enemy_velocity: float = typer.Option(0.0, help="Enemy speed along its heading"),
    x: float = typer.Option(0.0, help="Our x position"),
    y: float = typer.Option(0.0, help="Our y position"),
    heading: float = typer.Option(0.0, help="Our body compass heading (degrees)"),
    gun_heading: float = typer.Option(0.0, help="Our gun compass heading (degrees)"),
    gun_turn_remaining: float = typer.Option(0.0, help="Gun turn still pending (degrees)"),
    gun_heat: float = typer.Option(0.0, min=0.0, help="Current gun heat"),
    config: pathlib.Path = typer.Option(DEFAULT_CONFIG, help="Strafer config"),
) -> None:
    """Print the firing solution for a single enemy snapshot."""
    cfg = _load_config(config)
    me = SelfState(
        x=x,
        y=y,
        heading=heading,
        gun_heading=gun_heading,
        radar_heading=gun_heading,
        velocity=0.0,
        elapsed_ticks=0,
        gun_turn_remaining=gun_turn_remaining,
        gun_heat=gun_heat,
    )
    enemy = EnemySnapshot(bearing=bearing, distance=distance, heading=enemy_heading, velocity=enemy_velocity)
    solution = FiringSolutionSolver(cfg.gunnery).solve(me, enemy)

    table = Table(title="Firing solution")
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("gun turn", f"{solution.gun_turn:.2f}")
    table.add_row("power", f"{solution.power:.2f}")
    table.add_row("fire", "[green]yes[/green]" if solution.fire else "[red]no[/red]")
    table.add_row("bullet speed", f"{solution.bullet_speed:.2f}")
    table.add_row("time to impact", f"{solution.time_to_impact:.2f}")
    table.add_row("predicted position", f"({solution.predicted_x:.1f}, {solution.predicted_y:.1f})")
    print(table)


@app.command()
def show_config(
    config: pathlib.Path = typer.Option(DEFAULT_CONFIG, help="Strafer config"),
) -> None:
    """Print the effective configuration as YAML."""
    cfg = _load_config(config)
    typer.echo(yaml.safe_dump(json.loads(cfg.json()), sort_keys=False))


@app.command()
def download_stack(
    config: pathlib.Path = typer.Option(DEFAULT_CONFIG, help="Strafer config"),
    dest: Optional[pathlib.Path] = typer.Option(None, help="Where to place the jars (defaults to arena.tools_dir)"),
    checksums: Optional[pathlib.Path] = typer.Option(None, help="YAML or JSON file with sha256 checksums keyed by artifact"),
) -> None:
    """Download the pinned server and recorder jars."""
    cfg = _load_config(config)
    checksum_map: Dict[str, str] = {}
    if checksums and checksums.exists():
        data = yaml.safe_load(checksums.read_text())
        if isinstance(data, dict):
            checksum_map = {k: str(v) for k, v in data.items()}
    try:
        artifacts = tankroyale.download_stack(cfg.arena.versions, dest or cfg.arena.tools_dir, checksum_map)
    except tankroyale.StackError as exc:
        print(f"[red]Download failed[/red]: {exc}")
        raise typer.Exit(1)
    for name, path in artifacts.items():
        print(f"[green]{name}[/green]: {path}")


@app.command()
def match(
    opponent: pathlib.Path = typer.Argument(..., help="Opponent bot directory (main.py + bot-config.json)"),
    config: pathlib.Path = typer.Option(DEFAULT_CONFIG, help="Strafer config"),
    bot_dir: pathlib.Path = typer.Option(DEFAULT_BOT_DIR, help="Strafer bot directory"),
    rounds: Optional[int] = typer.Option(None, min=1, help="Override the configured number of rounds"),
    server_jar: Optional[pathlib.Path] = typer.Option(None, help="Path to the server jar"),
    recorder_jar: Optional[pathlib.Path] = typer.Option(None, help="Path to the recorder jar"),
    java_bin: Optional[pathlib.Path] = typer.Option(None, help="Path to java (defaults to JAVA_BIN or java on PATH)"),
    logs: pathlib.Path = typer.Option(pathlib.Path("logs"), help="Directory for server, recorder and bot logs"),
) -> None:
    """Run a 1v1 against an opponent bot and print the results."""
    cfg = _load_config(config)
    arena = cfg.arena if rounds is None else cfg.arena.copy(update={"rounds": rounds})
    server_path = server_jar or tankroyale.jar_path(arena.tools_dir, tankroyale.SERVER_ARTIFACT, arena.versions.server)
    if not server_path.exists():
        print(f"[red]Server jar not found[/red]: {server_path} (run download-stack first)")
        raise typer.Exit(1)
    for directory in (bot_dir, opponent):
        if not (directory / "main.py").exists():
            print(f"[red]No main.py in[/red] {directory}")
            raise typer.Exit(1)

    try:
        results = run_match(
            server_jar=server_path.resolve(),
            bot_dirs=[bot_dir.resolve(), opponent.resolve()],
            arena=arena,
            logs_dir=logs.resolve(),
            recorder_jar=recorder_jar.resolve() if recorder_jar else None,
            config_path=config if config.exists() else None,
            java_bin=java_bin,
        )
    except (MatchError, asyncio.TimeoutError) as exc:
        print(f"[red]Match failed[/red]: {str(exc) or 'timed out'}")
        raise typer.Exit(1)

    if not results:
        print("[yellow]No results reported[/yellow]")
        raise typer.Exit(1)
    table = Table(title=f"{arena.rounds} rounds")
    for column in ("bot", "score", "survival", "bullet dmg", "ram dmg", "1sts"):
        table.add_column(column, justify="right")
    for r in results:
        table.add_row(
            r.name,
            f"{r.total_score:.0f}",
            f"{r.survival:.0f}",
            f"{r.bullet_damage:.0f}",
            f"{r.ram_damage:.0f}",
            str(r.first_places),
        )
    print(table)


if __name__ == "__main__":
    app()
