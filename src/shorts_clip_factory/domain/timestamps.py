from __future__ import annotations

import math
import re

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _lenient_int(part: str) -> int | None:
    match = _LEADING_INT.match(part)
    return int(match.group(1)) if match else None


def try_parse_timestamp(text: str) -> int | None:
    """Parse ``[HH:MM:SS]`` / ``[MM:SS]`` into seconds.

    Returns ``None`` when the text has the wrong shape or a part carries no
    digits, so callers can tell "zero" apart from "unparseable".
    """
    clean = re.sub(r"[\[\]`]", "", text or "").strip()
    parts = clean.split(":")
    if len(parts) not in (2, 3):
        return None

    values = [_lenient_int(p) for p in parts]
    if any(v is None for v in values):
        return None

    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds
    minutes, seconds = values
    return minutes * 60 + seconds


def parse_timestamp(text: str) -> int:
    parsed = try_parse_timestamp(text)
    return parsed if parsed is not None else 0


def format_seconds(seconds: float) -> str:
    total = max(0.0, float(seconds))
    hours = math.floor(total / 3600)
    minutes = math.floor((total % 3600) / 60)
    secs = math.floor(total % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_range(start: float, end: float) -> str:
    return f"[{format_seconds(start)}] - [{format_seconds(end)}]"


def format_ffmpeg_time(seconds: float) -> str:
    total_ms = int(round(max(0.0, float(seconds)) * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"
