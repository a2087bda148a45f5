from __future__ import annotations

from pathlib import Path

from shorts_clip_factory.domain.models import CropGeometry
from shorts_clip_factory.utils.config import CaptionConfig

_GRAPH_SPECIAL = "[],;"


def escape_filter_path(path: str | Path) -> str:
    """Escape a path for use as an unquoted filter option value.

    ffmpeg unescapes twice: once when splitting the filtergraph and once
    when parsing the filter's ``key=value`` options.
    """
    value = str(path).replace("\\", "\\\\").replace("'", "\\'").replace(":", "\\:")
    value = value.replace("\\", "\\\\").replace("'", "\\'")
    for char in _GRAPH_SPECIAL:
        value = value.replace(char, "\\" + char)
    return value


def crop_scale_filter(geometry: CropGeometry, width: int, height: int) -> str:
    return (
        f"crop={geometry.crop_width}:{geometry.crop_height}:{geometry.crop_x}:{geometry.crop_y},"
        f"scale={width}:{height}"
    )


def subtitles_filter(caption_path: str | Path, style: CaptionConfig) -> str:
    safe_path = escape_filter_path(caption_path)
    if str(caption_path).lower().endswith(".ass"):
        return f"subtitles=filename={safe_path}"
    force_style = (
        f"FontName={style.font_name},FontSize={style.font_size},"
        f"PrimaryColour={style.primary_color},OutlineColour={style.outline_color},"
        f"Bold=1,Alignment=2,MarginV={style.bottom_margin},Outline=2,Shadow=1"
    )
    return f"subtitles=filename={safe_path}:force_style='{force_style}'"


def build_video_chain(
    geometry: CropGeometry,
    width: int,
    height: int,
    caption_path: str | Path | None,
    style: CaptionConfig,
) -> str:
    chain = crop_scale_filter(geometry, width, height)
    if caption_path:
        chain += "," + subtitles_filter(caption_path, style)
    return chain


def build_fade_to_black_graph(duration: float, offset: float) -> str:
    return (
        f"[0:v][1:v]xfade=transition=fadeblack:duration={duration:.3f}:offset={offset:.3f}[v];"
        f"[0:a][1:a]acrossfade=d={duration:.3f}[a]"
    )
