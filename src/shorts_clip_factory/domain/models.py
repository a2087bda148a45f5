from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path


class RenderState(StrEnum):
    QUEUED = "queued"
    PROBING = "probing"
    CROPPING_ONLY = "cropping_only"
    CROPPING_WITH_CAPTIONS = "cropping_with_captions"
    HOOK_MAIN_ASSEMBLY = "hook_main_assembly"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class TranscriptSegment:
    text: str
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass(slots=True)
class Transcript:
    segments: list[TranscriptSegment]
    full_text: str = ""
    language: str = "auto"

    def __post_init__(self) -> None:
        if not self.full_text and self.segments:
            self.full_text = " ".join(s.text.strip() for s in self.segments if s.text.strip())

    @property
    def has_segments(self) -> bool:
        return bool(self.segments)

    @classmethod
    def empty(cls, language: str = "auto") -> Transcript:
        return cls(segments=[], full_text="", language=language)


@dataclass(frozen=True, slots=True)
class ClipSpecification:
    """One requested output clip. Never mutated once created."""

    clip_id: str
    title: str
    start_time: float
    end_time: float
    duration: float | None = None
    hook_start_time: float | None = None
    hook_end_time: float | None = None
    hook: str = ""
    content: str = ""
    reason: str = ""
    suggested_title: str = ""
    viral_score: float | None = None
    timestamp_label: str = ""
    hook_timestamp_label: str = ""

    def __post_init__(self) -> None:
        if self.start_time < 0 or self.start_time >= self.end_time:
            raise ValueError(f"invalid clip window: {self.start_time} -> {self.end_time}")
        if self.has_hook and self.hook_start_time >= self.hook_end_time:
            raise ValueError(f"invalid hook window: {self.hook_start_time} -> {self.hook_end_time}")

    @property
    def window_duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def effective_duration(self) -> float:
        return self.duration if self.duration is not None else self.window_duration

    @property
    def has_hook(self) -> bool:
        return self.hook_start_time is not None and self.hook_end_time is not None

    @property
    def hook_is_not_at_start(self) -> bool:
        return self.has_hook and self.hook_start_time != self.start_time


@dataclass(frozen=True, slots=True)
class CropGeometry:
    crop_width: int
    crop_height: int
    crop_x: int
    crop_y: int


@dataclass(slots=True)
class MediaInfo:
    width: int
    height: int
    duration_sec: float
    fps: int


@dataclass(slots=True)
class RenderResult:
    clip_id: str
    output_path: Path | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.output_path is None) == (self.error is None):
            raise ValueError("exactly one of output_path / error must be set")

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class VideoInfo:
    video_id: str
    title: str
    duration_sec: float
    description: str = ""
    thumbnail: str = ""
    channel_name: str = ""
    view_count: int = 0
    published_at: str = ""


@dataclass(slots=True)
class ClipMetadata:
    title: str
    timestamp: str
    duration: float
    hook: str = ""
    hook_timestamp: str | None = None
    content: str = ""


@dataclass(slots=True)
class ClipProject:
    project_id: str
    source_video_id: str
    source_url: str
    title: str
    thumbnail: str = ""
    channel_name: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    clips: list[str] = field(default_factory=list)
    clip_metadata: dict[str, ClipMetadata] = field(default_factory=dict)


@dataclass(slots=True)
class BatchReport:
    project_id: str | None
    results: list[RenderResult]

    @property
    def processed(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)


@dataclass(slots=True)
class AnalysisResult:
    clips: list[ClipSpecification]
    video_url: str | None

    @property
    def parsed_count(self) -> int:
        return len(self.clips)


@dataclass(slots=True)
class RecommendationResult:
    video: VideoInfo
    transcript: Transcript
    clips: list[ClipSpecification]
