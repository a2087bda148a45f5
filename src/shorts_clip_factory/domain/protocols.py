from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from .models import ClipMetadata, ClipProject, ClipSpecification, MediaInfo, RenderState, Transcript, VideoInfo


class VideoSource(Protocol):
    def get_info(self, url: str) -> VideoInfo:
        """Return metadata for a remote video."""

    def download(self, url: str) -> Path:
        """Return a local path to a complete media container."""


class TranscriptProvider(Protocol):
    def fetch(self, url: str) -> Transcript:
        """Return the transcript; an empty segment list means none available."""


class ClipRecommender(Protocol):
    def recommend(self, transcript: Transcript, video_duration: float, video_title: str) -> list[ClipSpecification]:
        """Return scored clip windows, best first."""


class Probe(Protocol):
    def probe(self, path: Path) -> MediaInfo:
        """Return stream geometry and timing of a media file."""

    def probe_duration(self, path: Path) -> float:
        """Return container duration in seconds."""


class ClipRenderer(Protocol):
    def render(
        self,
        source_path: Path,
        spec: ClipSpecification,
        output_path: Path,
        caption_path: Path | None = None,
        on_state: Callable[[str, RenderState], None] | None = None,
    ) -> Path:
        """Render one clip and return the written file."""


class ProjectStore(Protocol):
    def create_project(self, video_info: VideoInfo, source_url: str) -> ClipProject: ...

    def add_clip_to_project(self, project_id: str, filename: str, metadata: ClipMetadata | None = None) -> None: ...

    def get_projects(self) -> list[ClipProject]: ...

    def get_project(self, project_id: str) -> ClipProject: ...

    def get_project_by_video_id(self, video_id: str) -> ClipProject | None: ...

    def delete_project(self, project_id: str) -> None: ...
