from pathlib import Path

import pytest

from shorts_clip_factory.application.batch_coordinator import ClipBatchCoordinator
from shorts_clip_factory.domain.errors import EncoderUnavailableError, ProbeError
from shorts_clip_factory.domain.models import ClipSpecification, Transcript, TranscriptSegment
from shorts_clip_factory.infrastructure.render.caption_builder import CaptionTrackBuilder
from shorts_clip_factory.utils.config import AppConfig, CaptionConfig, ToolPaths
from shorts_clip_factory.utils.media import CommandError


class DummyLogger:
    def info(self, event, **kwargs):
        pass

    def warning(self, event, **kwargs):
        pass


class DummyRenderer:
    def __init__(self, failing_ids=()):
        self.failing_ids = set(failing_ids)
        self.calls = []

    def render(self, source_path, spec, output_path, caption_path=None, on_state=None):
        captions = caption_path.read_text(encoding="utf-8") if caption_path else None
        self.calls.append((spec.clip_id, output_path, caption_path, captions))
        if spec.clip_id in self.failing_ids:
            raise ProbeError("no video stream")
        output_path.write_bytes(b"ok")
        return output_path


def _ok_runner(cmd):
    return None


def _coordinator(tmp_path, renderer, runner=_ok_runner, sleeps=None):
    app = AppConfig(temp_dir=tmp_path / "temp", output_dir=tmp_path / "output", projects_file=tmp_path / "p.json")
    return ClipBatchCoordinator(
        app_config=app,
        tools=ToolPaths(),
        renderer=renderer,
        caption_builder=CaptionTrackBuilder(CaptionConfig()),
        logger=DummyLogger(),
        runner=runner,
        sleep=(sleeps.append if sleeps is not None else lambda _sec: None),
    )


def _specs():
    return [
        ClipSpecification(clip_id="11111111-aaaa", title="First clip!", start_time=0, end_time=20),
        ClipSpecification(clip_id="22222222-bbbb", title="Second", start_time=30, end_time=50),
        ClipSpecification(clip_id="33333333-cccc", title="Third", start_time=60, end_time=80),
    ]


def _transcript():
    return Transcript(segments=[TranscriptSegment(text="halo", start=31.0, duration=2.0)])


def test_one_failure_does_not_stop_the_batch(tmp_path):
    renderer = DummyRenderer(failing_ids={"22222222-bbbb"})
    sleeps = []
    seen = []

    results = _coordinator(tmp_path, renderer, sleeps=sleeps).process_all(
        tmp_path / "src.mp4", _specs(), _transcript(), on_result=seen.append
    )

    assert [r.clip_id for r in results] == ["11111111-aaaa", "22222222-bbbb", "33333333-cccc"]
    assert [r.succeeded for r in results] == [True, False, True]
    assert results[1].error == "no video stream"
    assert results[1].output_path is None
    assert results[0].output_path == tmp_path / "output" / "First_clip_11111111.mp4"
    assert seen == results
    assert sleeps == [1.0, 1.0]


def test_caption_files_are_temporary_and_clip_scoped(tmp_path):
    renderer = DummyRenderer()
    _coordinator(tmp_path, renderer).process_all(tmp_path / "src.mp4", _specs(), _transcript())

    assert renderer.calls[0][2] is None
    _, _, caption_path, captions = renderer.calls[1]
    assert caption_path == tmp_path / "temp" / "22222222-bbbb.srt"
    assert "00:00:01,000 --> 00:00:03,000" in captions
    assert list((tmp_path / "temp").iterdir()) == []


def test_empty_transcript_suppresses_captions(tmp_path):
    renderer = DummyRenderer()
    _coordinator(tmp_path, renderer).process_all(tmp_path / "src.mp4", _specs(), Transcript.empty())
    assert all(call[2] is None for call in renderer.calls)


def test_missing_encoder_fails_whole_batch(tmp_path):
    def no_ffmpeg(cmd):
        raise CommandError("Command not found: ffmpeg")

    renderer = DummyRenderer()
    with pytest.raises(EncoderUnavailableError):
        _coordinator(tmp_path, renderer, runner=no_ffmpeg).process_all(tmp_path / "src.mp4", _specs(), None)
    assert renderer.calls == []


def test_single_clip_has_no_pause(tmp_path):
    sleeps = []
    _coordinator(tmp_path, DummyRenderer(), sleeps=sleeps).process_all(tmp_path / "s.mp4", _specs()[:1], None)
    assert sleeps == []


def test_output_dir_override(tmp_path):
    renderer = DummyRenderer()
    target = tmp_path / "elsewhere"
    results = _coordinator(tmp_path, renderer).process_all(
        tmp_path / "s.mp4", _specs()[:1], None, output_dir=target
    )
    assert results[0].output_path.parent == target
    assert isinstance(results[0].output_path, Path)
