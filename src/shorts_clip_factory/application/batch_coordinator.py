from __future__ import annotations

import contextlib
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from shorts_clip_factory.domain.errors import EncoderUnavailableError
from shorts_clip_factory.domain.models import ClipSpecification, RenderResult, RenderState, Transcript
from shorts_clip_factory.domain.protocols import ClipRenderer
from shorts_clip_factory.infrastructure.render.caption_builder import CaptionTrackBuilder
from shorts_clip_factory.utils.config import AppConfig, ToolPaths
from shorts_clip_factory.utils.media import CommandRunner, check_encoder, run_command
from shorts_clip_factory.utils.paths import clip_filename, ensure_dir

ResultCallback = Callable[[RenderResult], None]
StateCallback = Callable[[str, RenderState], None]


class ClipBatchCoordinator:
    """Renders a list of clips from one source, one at a time.

    A failing clip is recorded in its ``RenderResult`` and the batch moves on.
    Only a missing encoder aborts the whole batch, before any clip starts.
    """

    def __init__(
        self,
        app_config: AppConfig,
        tools: ToolPaths,
        renderer: ClipRenderer,
        caption_builder: CaptionTrackBuilder,
        logger,
        captions_enabled: bool = True,
        runner: CommandRunner = run_command,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.app_config = app_config
        self.tools = tools
        self.renderer = renderer
        self.caption_builder = caption_builder
        self.logger = logger
        self.captions_enabled = captions_enabled
        self.runner = runner
        self.sleep = sleep

    def process_all(
        self,
        source_path: Path,
        specs: Sequence[ClipSpecification],
        transcript: Transcript | None = None,
        on_result: ResultCallback | None = None,
        on_state: StateCallback | None = None,
        output_dir: Path | None = None,
    ) -> list[RenderResult]:
        if not check_encoder(self.tools, self.runner):
            raise EncoderUnavailableError(f"ffmpeg is not available at {self.tools.ffmpeg!r}")

        output_dir = ensure_dir(output_dir or self.app_config.output_dir)
        ensure_dir(self.app_config.temp_dir)
        total = len(specs)
        self.logger.info("batch.started", source=str(source_path), clips=total)

        results: list[RenderResult] = []
        for idx, spec in enumerate(specs, start=1):
            self.logger.info("clip.started", clip_id=spec.clip_id, index=idx, total=total, title=spec.title)
            result = self._process_one(source_path, spec, transcript, output_dir, on_state)
            results.append(result)
            if on_result:
                on_result(result)
            if idx < total:
                self.sleep(self.app_config.inter_clip_delay_sec)

        failed = sum(1 for r in results if not r.succeeded)
        self.logger.info("batch.completed", processed=total - failed, failed=failed)
        return results

    def _wants_captions(self, spec: ClipSpecification, transcript: Transcript | None) -> bool:
        if not self.captions_enabled or transcript is None or not transcript.has_segments:
            return False
        return bool(self.caption_builder.window(transcript.segments, spec.start_time, spec.end_time))

    def _process_one(
        self,
        source_path: Path,
        spec: ClipSpecification,
        transcript: Transcript | None,
        output_dir: Path,
        on_state: StateCallback | None,
    ) -> RenderResult:
        caption_path: Path | None = None
        try:
            if self._wants_captions(spec, transcript):
                caption_path = self.app_config.temp_dir / f"{spec.clip_id}{self.caption_builder.suffix()}"
                self.caption_builder.write(caption_path, transcript.segments, spec.start_time, spec.end_time)

            output_path = self.renderer.render(
                source_path,
                spec,
                output_dir / clip_filename(spec.title, spec.clip_id),
                caption_path,
                on_state=on_state,
            )
            self.logger.info("clip.completed", clip_id=spec.clip_id, output=str(output_path))
            return RenderResult(clip_id=spec.clip_id, output_path=output_path)
        except Exception as exc:
            self.logger.warning("clip.failed", clip_id=spec.clip_id, error=str(exc))
            return RenderResult(clip_id=spec.clip_id, error=str(exc) or type(exc).__name__)
        finally:
            if caption_path is not None:
                with contextlib.suppress(OSError):
                    caption_path.unlink(missing_ok=True)
