from __future__ import annotations

import os
import shutil
import tomllib
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class AppConfig:
    temp_dir: Path
    output_dir: Path
    projects_file: Path
    inter_clip_delay_sec: float = 1.0
    focus_x: float = 0.5
    log_level: str = "INFO"


@dataclass(slots=True)
class ToolPaths:
    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"


@dataclass(slots=True)
class RenderConfig:
    video_width: int = 1080
    video_height: int = 1920
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"
    crf: int = 23
    preset: str = "medium"
    fps: int = 30
    transition_sec: float = 0.5


@dataclass(slots=True)
class CaptionConfig:
    enable_captions: bool = True
    format: str = "srt"
    font_name: str = "Arial"
    font_size: int = 28
    primary_color: str = "&HFFFFFF"
    outline_color: str = "&H000000"
    highlight_color: str = "#FFFF00"
    bottom_margin: int = 60
    animation: str = "none"


@dataclass(slots=True)
class ExtractorConfig:
    min_sec: float = 15
    max_sec: float = 90


@dataclass(slots=True)
class LLMConfig:
    require_cloud: bool
    max_retries: int
    json_repair: bool
    gemini_model: str
    gemini_api_key: str
    min_sec: float = 15
    max_sec: float = 60
    timeout_sec: int = 90


@dataclass(slots=True)
class TranscribeConfig:
    faster_model: str = "small"
    device: str = "cpu"
    compute_type: str = "int8"


@dataclass(slots=True)
class YouTubeConfig:
    transcript_languages: list[str] = field(default_factory=lambda: ["en", "id"])
    download_format: str = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"


@dataclass(slots=True)
class Settings:
    app: AppConfig
    tools: ToolPaths
    render: RenderConfig
    captions: CaptionConfig
    extractor: ExtractorConfig
    llm: LLMConfig
    youtube: YouTubeConfig
    transcribe: TranscribeConfig
    root_dir: Path


def resolve_tool_paths(ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe") -> ToolPaths:
    """Resolve binary locations once; the result is injected where needed."""
    ffmpeg_cmd = os.getenv("FFMPEG_PATH") or ffmpeg
    ffprobe_cmd = os.getenv("FFPROBE_PATH") or ffprobe
    return ToolPaths(
        ffmpeg=shutil.which(ffmpeg_cmd) or ffmpeg_cmd,
        ffprobe=shutil.which(ffprobe_cmd) or ffprobe_cmd,
    )


def load_settings(root_dir: Path, config_path: Path | None = None) -> Settings:
    config_path = config_path or root_dir / "config" / "default.toml"
    with config_path.open("rb") as fh:
        raw = tomllib.load(fh)

    app = raw["app"]
    tools = raw.get("tools", {})
    render = raw["render"]
    captions = raw["captions"]
    extractor = raw.get("extractor", {})
    llm = raw["llm"]
    youtube = raw.get("youtube", {})
    transcribe = raw.get("transcribe", {})

    return Settings(
        app=AppConfig(
            temp_dir=root_dir / str(app.get("temp_dir", "temp")),
            output_dir=root_dir / str(app.get("output_dir", "output")),
            projects_file=root_dir / str(app.get("projects_file", "output/projects.json")),
            inter_clip_delay_sec=float(app.get("inter_clip_delay_sec", 1.0)),
            focus_x=float(app.get("focus_x", 0.5)),
            log_level=str(os.getenv("LOG_LEVEL") or app.get("log_level", "INFO")),
        ),
        tools=resolve_tool_paths(
            ffmpeg=str(tools.get("ffmpeg", "ffmpeg")),
            ffprobe=str(tools.get("ffprobe", "ffprobe")),
        ),
        render=RenderConfig(
            video_width=int(render["video_width"]),
            video_height=int(render["video_height"]),
            video_codec=str(render["video_codec"]),
            audio_codec=str(render["audio_codec"]),
            audio_bitrate=str(render["audio_bitrate"]),
            crf=int(render["crf"]),
            preset=str(render["preset"]),
            fps=int(render["fps"]),
            transition_sec=float(render.get("transition_sec", 0.5)),
        ),
        captions=CaptionConfig(
            enable_captions=bool(captions.get("enable_captions", True)),
            format=str(captions.get("format", "srt")),
            font_name=str(captions["font_name"]),
            font_size=int(captions["font_size"]),
            primary_color=str(captions["primary_color"]),
            outline_color=str(captions["outline_color"]),
            highlight_color=str(captions.get("highlight_color", "#FFFF00")),
            bottom_margin=int(captions["bottom_margin"]),
            animation=str(captions.get("animation", "none")),
        ),
        extractor=ExtractorConfig(
            min_sec=float(extractor.get("min_sec", 15)),
            max_sec=float(extractor.get("max_sec", 90)),
        ),
        llm=LLMConfig(
            require_cloud=bool(llm.get("require_cloud", False)),
            max_retries=int(llm["max_retries"]),
            json_repair=bool(llm["json_repair"]),
            gemini_model=os.getenv("GEMINI_MODEL", str(llm.get("gemini_model", "gemini-2.5-flash"))),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            min_sec=float(llm.get("min_sec", 15)),
            max_sec=float(llm.get("max_sec", 60)),
            timeout_sec=int(llm.get("timeout_sec", 90)),
        ),
        youtube=YouTubeConfig(
            transcript_languages=[str(x) for x in youtube.get("transcript_languages", ["en", "id"])],
            download_format=str(youtube.get("download_format", YouTubeConfig().download_format)),
        ),
        transcribe=TranscribeConfig(
            faster_model=str(transcribe.get("faster_model", "small")),
            device=str(transcribe.get("device", "cpu")),
            compute_type=str(transcribe.get("compute_type", "int8")),
        ),
        root_dir=root_dir,
    )
