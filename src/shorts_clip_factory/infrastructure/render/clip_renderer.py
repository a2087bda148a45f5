from __future__ import annotations

import contextlib
from collections.abc import Callable
from pathlib import Path

from shorts_clip_factory.domain.errors import ClipProcessingError, EmptyOutputError
from shorts_clip_factory.domain.geometry import compute_crop
from shorts_clip_factory.domain.models import ClipSpecification, CropGeometry, RenderState
from shorts_clip_factory.domain.protocols import Probe
from shorts_clip_factory.infrastructure.render.ffmpeg_builder import FFmpegCommandBuilder
from shorts_clip_factory.utils.config import RenderConfig
from shorts_clip_factory.utils.media import CommandRunner, run_command

StateCallback = Callable[[str, RenderState], None]


class FFmpegClipRenderer:
    """Cuts, crops, captions and (optionally) hook-prefixes one clip.

    States: queued -> probing -> cropping_only | cropping_with_captions |
    hook_main_assembly -> finalizing -> done, or failed from any step.
    """

    def __init__(
        self,
        render_config: RenderConfig,
        command_builder: FFmpegCommandBuilder,
        probe: Probe,
        logger,
        runner: CommandRunner = run_command,
        focus_x: float = 0.5,
    ) -> None:
        self.render_config = render_config
        self.command_builder = command_builder
        self.probe = probe
        self.logger = logger
        self.runner = runner
        self.focus_x = focus_x

    def render(
        self,
        source_path: Path,
        spec: ClipSpecification,
        output_path: Path,
        caption_path: Path | None = None,
        on_state: StateCallback | None = None,
    ) -> Path:
        def enter(state: RenderState) -> None:
            self.logger.info("clip.state", clip_id=spec.clip_id, state=state.value)
            if on_state:
                on_state(spec.clip_id, state)

        enter(RenderState.QUEUED)
        try:
            enter(RenderState.PROBING)
            info = self.probe.probe(source_path)
            geometry = compute_crop(
                info.width,
                info.height,
                self.render_config.video_width,
                self.render_config.video_height,
                self.focus_x,
            )

            if spec.has_hook:
                enter(RenderState.HOOK_MAIN_ASSEMBLY)
                self._render_hook_main(source_path, spec, output_path, caption_path, geometry)
            else:
                enter(RenderState.CROPPING_WITH_CAPTIONS if caption_path else RenderState.CROPPING_ONLY)
                self._encode(source_path, output_path, spec.start_time, spec.window_duration, geometry, caption_path)

            enter(RenderState.FINALIZING)
            self._verify_output(output_path)
        except ClipProcessingError:
            enter(RenderState.FAILED)
            raise
        except (ValueError, OSError) as exc:
            enter(RenderState.FAILED)
            raise ClipProcessingError(f"clip {spec.clip_id} failed: {exc}") from exc

        enter(RenderState.DONE)
        return output_path

    def _render_hook_main(
        self,
        source_path: Path,
        spec: ClipSpecification,
        output_path: Path,
        caption_path: Path | None,
        geometry: CropGeometry,
    ) -> None:
        hook_path = output_path.with_name(f"{output_path.stem}_hook_temp.mp4")
        main_path = output_path.with_name(f"{output_path.stem}_main_temp.mp4")
        try:
            # Hook stays uncaptioned; the caption track only covers the main window.
            self._encode(
                source_path,
                hook_path,
                spec.hook_start_time,
                spec.hook_end_time - spec.hook_start_time,
                geometry,
                None,
            )
            self._verify_output(hook_path)
            self._encode(source_path, main_path, spec.start_time, spec.window_duration, geometry, caption_path)
            self._verify_output(main_path)

            hook_duration = self.probe.probe_duration(hook_path)
            cmd = self.command_builder.build_crossfade(hook_path, main_path, output_path, hook_duration)
            self.runner(cmd)
        finally:
            for temp in (hook_path, main_path):
                with contextlib.suppress(OSError):
                    temp.unlink(missing_ok=True)

    def _encode(
        self,
        source_path: Path,
        output_path: Path,
        start_sec: float,
        duration_sec: float,
        geometry: CropGeometry,
        caption_path: Path | None,
    ) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.command_builder.build_segment(
            input_video=source_path,
            output_video=output_path,
            start_sec=start_sec,
            duration_sec=duration_sec,
            geometry=geometry,
            caption_path=caption_path,
        )
        self.runner(cmd)

    def _verify_output(self, path: Path) -> None:
        if not path.is_file():
            raise EmptyOutputError(f"encoder produced no file: {path}")
        if path.stat().st_size == 0:
            raise EmptyOutputError(f"encoder produced an empty file: {path}")
