from __future__ import annotations

import re
from pathlib import Path

MAX_TITLE_CHARS = 100


def sanitize_filename(name: str) -> str:
    sanitized = re.sub(r"[^0-9A-Za-z\s_\-]+", "", name or "")
    sanitized = re.sub(r"\s+", "_", sanitized)
    return sanitized[:MAX_TITLE_CHARS]


def clip_filename(title: str, clip_id: str) -> str:
    return f"{sanitize_filename(title)}_{clip_id[:8]}.mp4"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
