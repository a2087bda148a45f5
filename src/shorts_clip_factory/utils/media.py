from __future__ import annotations

import subprocess
from collections.abc import Callable

from shorts_clip_factory.domain.errors import ClipProcessingError
from shorts_clip_factory.utils.config import ToolPaths

CommandRunner = Callable[[list[str]], subprocess.CompletedProcess]


class CommandError(ClipProcessingError):
    pass


def run_command(cmd: list[str], timeout_sec: float | None = None) -> subprocess.CompletedProcess:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout_sec)
    except FileNotFoundError as exc:
        raise CommandError(f"Command not found: {cmd[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(f"Command timed out: {' '.join(cmd)}") from exc
    if proc.returncode != 0:
        raise CommandError(f"Command failed: {' '.join(cmd)}\n{_tail(proc.stderr)}")
    return proc


def check_encoder(tools: ToolPaths, runner: CommandRunner = run_command) -> bool:
    try:
        runner([tools.ffmpeg, "-version"])
    except CommandError:
        return False
    return True


def _tail(text: str | None, lines: int = 20) -> str:
    return "\n".join((text or "").strip().splitlines()[-lines:])
