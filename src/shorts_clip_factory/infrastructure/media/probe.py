from __future__ import annotations

import json
from pathlib import Path

from shorts_clip_factory.domain.errors import ProbeError
from shorts_clip_factory.domain.models import MediaInfo
from shorts_clip_factory.utils.config import ToolPaths
from shorts_clip_factory.utils.media import CommandError, CommandRunner, run_command


def parse_frame_rate(value: str | None) -> int:
    """``"30000/1001"`` -> 30. A missing denominator means the value is the rate."""
    if not value:
        raise ProbeError("stream has no frame rate")
    num, _, den = str(value).partition("/")
    try:
        numerator = float(num)
        denominator = float(den) if den else 0.0
    except ValueError as exc:
        raise ProbeError(f"unreadable frame rate: {value}") from exc
    fps = numerator / denominator if denominator else numerator
    return int(fps + 0.5)


class FFprobeMediaProbe:
    def __init__(self, tools: ToolPaths, runner: CommandRunner = run_command) -> None:
        self.tools = tools
        self.runner = runner

    def probe(self, path: Path) -> MediaInfo:
        payload = self._run(
            path,
            [
                "-select_streams",
                "v:0",
                "-show_entries",
                "stream=width,height,r_frame_rate,duration",
                "-show_entries",
                "format=duration",
            ],
        )
        streams = payload.get("streams") or []
        if not streams:
            raise ProbeError(f"no video stream in {path}")
        stream = streams[0]
        fmt = payload.get("format") or {}

        try:
            width = int(stream["width"])
            height = int(stream["height"])
            duration_sec = float(stream.get("duration") or fmt.get("duration") or 0.0)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProbeError(f"incomplete probe result for {path}: {exc}") from exc
        if width <= 0 or height <= 0:
            raise ProbeError(f"invalid dimensions {width}x{height} for {path}")

        return MediaInfo(
            width=width,
            height=height,
            duration_sec=duration_sec,
            fps=parse_frame_rate(stream.get("r_frame_rate")),
        )

    def probe_duration(self, path: Path) -> float:
        payload = self._run(path, ["-show_entries", "format=duration"])
        try:
            return float((payload.get("format") or {})["duration"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProbeError(f"no duration for {path}") from exc

    def _run(self, path: Path, entries: list[str]) -> dict:
        if not Path(path).is_file():
            raise ProbeError(f"media file not found: {path}")
        cmd = [self.tools.ffprobe, "-v", "error", *entries, "-of", "json", str(path)]
        try:
            proc = self.runner(cmd)
        except CommandError as exc:
            raise ProbeError(str(exc)) from exc
        try:
            payload = json.loads(proc.stdout or "")
        except json.JSONDecodeError as exc:
            raise ProbeError(f"ffprobe returned invalid JSON for {path}") from exc
        if not isinstance(payload, dict):
            raise ProbeError(f"ffprobe returned unexpected payload for {path}")
        return payload
