"""Fetch and run the headless Tank Royale server and recorder."""

from __future__ import annotations

import hashlib
import logging
import os
import pathlib
import socket
import subprocess
import time
import urllib.request
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .config import TankRoyaleVersions

DEFAULT_PORT = 7654
MAVEN_BASE = "https://repo1.maven.org/maven2/dev/robocode/tankroyale"
SERVER_ARTIFACT = "robocode-tankroyale-server"
RECORDER_ARTIFACT = "robocode-tankroyale-recorder"

logger = logging.getLogger("strafer.tankroyale")


class StackError(Exception):
    """Raised when a Tank Royale jar cannot be fetched or verified."""


@dataclass
class TankRoyaleProcess:
    name: str
    process: subprocess.Popen
    log_path: pathlib.Path

    def stop(self) -> None:
        if self.process.poll() is not None:
            return
        logger.debug("Stopping %s (pid %s)", self.name, self.process.pid)
        self.process.terminate()
        try:
            self.process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.warning("%s did not exit after SIGTERM, killing", self.name)
            self.process.kill()


def artifact_url(artifact: str, version: str) -> str:
    return f"{MAVEN_BASE}/{artifact}/{version}/{artifact}-{version}.jar"


def jar_path(tools_dir: pathlib.Path, artifact: str, version: str) -> pathlib.Path:
    return tools_dir / f"{artifact}-{version}.jar"


def sha256_file(path: pathlib.Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


def download_artifact(
    artifact: str,
    version: str,
    dest_dir: pathlib.Path,
    expected_sha256: Optional[str] = None,
) -> pathlib.Path:
    """Download a jar unless a verified copy is already present.

    The expected checksum comes from the argument or from a ``.sha256``
    sidecar next to the jar.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    target = jar_path(dest_dir, artifact, version)
    sidecar = target.with_suffix(".sha256")
    expected = expected_sha256 or (sidecar.read_text().split()[0] if sidecar.exists() else None)
    if target.exists():
        if expected and sha256_file(target) != expected:
            raise StackError(f"Checksum mismatch for existing {target}")
        logger.debug("Using cached %s", target)
        return target
    url = artifact_url(artifact, version)
    logger.info("Downloading %s", url)
    with urllib.request.urlopen(url) as resp, target.open("wb") as fh:  # type: ignore[arg-type]
        fh.write(resp.read())
    if expected:
        actual = sha256_file(target)
        if actual != expected:
            target.unlink(missing_ok=True)
            raise StackError(f"Checksum mismatch for {target} (expected {expected}, got {actual})")
    return target


def download_stack(
    versions: TankRoyaleVersions,
    dest_dir: pathlib.Path,
    checksums: Optional[Dict[str, str]] = None,
) -> Dict[str, pathlib.Path]:
    checksums = checksums or {}
    return {
        "server": download_artifact(SERVER_ARTIFACT, versions.server, dest_dir, checksums.get("server")),
        "recorder": download_artifact(RECORDER_ARTIFACT, versions.recorder, dest_dir, checksums.get("recorder")),
    }


def wait_for_port(host: str = "127.0.0.1", port: int = DEFAULT_PORT, timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((host, port), timeout=1):
                return True
        except OSError:
            time.sleep(0.1)
    return False


def find_free_port(preferred: int = DEFAULT_PORT) -> int:
    """Return ``preferred`` if it can be bound, otherwise an OS-assigned port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind(("", preferred))
        except OSError:
            s.bind(("", 0))
        return s.getsockname()[1]


def _java(java_bin: Optional[pathlib.Path]) -> str:
    return str(java_bin or os.environ.get("JAVA_BIN") or "java")


def _spawn(name: str, cmd: list[str], log_path: pathlib.Path) -> TankRoyaleProcess:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Starting %s: %s", name, " ".join(cmd))
    with log_path.open("w", encoding="utf-8") as fh:
        proc = subprocess.Popen(cmd, stdout=fh, stderr=subprocess.STDOUT)
    return TankRoyaleProcess(name=name, process=proc, log_path=log_path)


def start_server(
    jar: pathlib.Path,
    log_path: pathlib.Path,
    game_types: Iterable[str],
    port: int = DEFAULT_PORT,
    tps: int = 60,
    java_bin: Optional[pathlib.Path] = None,
) -> TankRoyaleProcess:
    cmd = [
        _java(java_bin),
        "-jar",
        str(jar),
        f"--games={','.join(game_types)}",
        f"--port={port}",
        f"--tps={tps}",
    ]
    return _spawn("server", cmd, log_path)


def start_recorder(
    jar: pathlib.Path,
    log_path: pathlib.Path,
    server_url: str,
    output_dir: Optional[pathlib.Path] = None,
    java_bin: Optional[pathlib.Path] = None,
) -> TankRoyaleProcess:
    cmd = [_java(java_bin), "-jar", str(jar), f"--url={server_url}"]
    if output_dir:
        output_dir.mkdir(parents=True, exist_ok=True)
        cmd.append(f"--dir={output_dir}")
    return _spawn("recorder", cmd, log_path)
