from __future__ import annotations

from pathlib import Path

from shorts_clip_factory.domain.models import CropGeometry
from shorts_clip_factory.domain.timestamps import format_ffmpeg_time
from shorts_clip_factory.infrastructure.render.filtergraph import build_fade_to_black_graph, build_video_chain
from shorts_clip_factory.utils.config import CaptionConfig, RenderConfig, ToolPaths


class FFmpegCommandBuilder:
    def __init__(self, config: RenderConfig, caption_style: CaptionConfig, tools: ToolPaths) -> None:
        self.config = config
        self.caption_style = caption_style
        self.tools = tools

    def build_segment(
        self,
        input_video: Path,
        output_video: Path,
        start_sec: float,
        duration_sec: float,
        geometry: CropGeometry,
        caption_path: Path | None = None,
    ) -> list[str]:
        video_chain = build_video_chain(
            geometry=geometry,
            width=self.config.video_width,
            height=self.config.video_height,
            caption_path=caption_path,
            style=self.caption_style,
        )
        return [
            self.tools.ffmpeg,
            "-y",
            "-ss",
            format_ffmpeg_time(start_sec),
            "-i",
            str(input_video),
            "-t",
            f"{duration_sec:.3f}",
            "-vf",
            video_chain,
            *self._encode_args(),
            "-r",
            str(self.config.fps),
            str(output_video),
        ]

    def build_crossfade(
        self,
        first_video: Path,
        second_video: Path,
        output_video: Path,
        first_duration_sec: float,
    ) -> list[str]:
        fade = self.config.transition_sec
        offset = max(0.0, first_duration_sec - fade)
        return [
            self.tools.ffmpeg,
            "-y",
            "-i",
            str(first_video),
            "-i",
            str(second_video),
            "-filter_complex",
            build_fade_to_black_graph(fade, offset),
            "-map",
            "[v]",
            "-map",
            "[a]",
            *self._encode_args(),
            str(output_video),
        ]

    def _encode_args(self) -> list[str]:
        return [
            "-c:v",
            self.config.video_codec,
            "-crf",
            str(self.config.crf),
            "-preset",
            self.config.preset,
            "-c:a",
            self.config.audio_codec,
            "-b:a",
            self.config.audio_bitrate,
            "-pix_fmt",
            "yuv420p",
            "-movflags",
            "+faststart",
        ]
