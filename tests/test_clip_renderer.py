from pathlib import Path

import pytest

from shorts_clip_factory.domain.errors import ClipProcessingError, EmptyOutputError, ProbeError
from shorts_clip_factory.domain.models import ClipSpecification, MediaInfo, RenderState
from shorts_clip_factory.infrastructure.render.clip_renderer import FFmpegClipRenderer
from shorts_clip_factory.infrastructure.render.ffmpeg_builder import FFmpegCommandBuilder
from shorts_clip_factory.infrastructure.render.filtergraph import escape_filter_path
from shorts_clip_factory.utils.config import CaptionConfig, RenderConfig, ToolPaths
from shorts_clip_factory.utils.media import CommandError


class DummyLogger:
    def __init__(self):
        self.events = []

    def info(self, event, **kwargs):
        self.events.append((event, kwargs))


class DummyProbe:
    def __init__(self, info=None, hook_duration=15.0, error=None):
        self.info = info or MediaInfo(width=1920, height=1080, duration_sec=900.0, fps=30)
        self.hook_duration = hook_duration
        self.error = error
        self.duration_calls = []

    def probe(self, path):
        if self.error:
            raise self.error
        return self.info

    def probe_duration(self, path):
        self.duration_calls.append(Path(path))
        return self.hook_duration


class FakeRunner:
    """Writes a few bytes to the command's output path, like a successful encode."""

    def __init__(self, payload=b"mp4data", fail_on=None):
        self.payload = payload
        self.fail_on = fail_on
        self.commands = []

    def __call__(self, cmd):
        self.commands.append(cmd)
        if self.fail_on is not None and self.fail_on(cmd):
            raise CommandError("ffmpeg exited 1")
        Path(cmd[-1]).write_bytes(self.payload)


def _renderer(runner, probe=None, logger=None):
    tools = ToolPaths(ffmpeg="ffmpeg", ffprobe="ffprobe")
    render = RenderConfig()
    return FFmpegClipRenderer(
        render_config=render,
        command_builder=FFmpegCommandBuilder(render, CaptionConfig(), tools),
        probe=probe or DummyProbe(),
        logger=logger or DummyLogger(),
        runner=runner,
    )


def _source(tmp_path):
    source = tmp_path / "source.mp4"
    source.write_bytes(b"source")
    return source


def _spec(**kwargs):
    defaults = {"clip_id": "abcdef1234", "title": "Clip", "start_time": 688.0, "end_time": 720.0}
    defaults.update(kwargs)
    return ClipSpecification(**defaults)


def _recorder():
    states = []
    return states, lambda clip_id, state: states.append(state)


def test_simple_clip_single_encode(tmp_path):
    runner = FakeRunner()
    states, on_state = _recorder()
    out = tmp_path / "out" / "Clip_abcdef12.mp4"

    result = _renderer(runner).render(_source(tmp_path), _spec(), out, on_state=on_state)

    assert result == out
    assert out.read_bytes() == b"mp4data"
    assert len(runner.commands) == 1
    cmd = runner.commands[0]
    assert cmd[cmd.index("-vf") + 1] == "crop=608:1080:656:0,scale=1080:1920"
    assert states == [
        RenderState.QUEUED,
        RenderState.PROBING,
        RenderState.CROPPING_ONLY,
        RenderState.FINALIZING,
        RenderState.DONE,
    ]


def test_simple_clip_with_captions(tmp_path):
    runner = FakeRunner()
    states, on_state = _recorder()
    captions = tmp_path / "abcdef1234.srt"
    captions.write_text("1\n00:00:00,000 --> 00:00:01,000\nhi\n", encoding="utf-8")

    _renderer(runner).render(_source(tmp_path), _spec(), tmp_path / "out.mp4", captions, on_state=on_state)

    assert RenderState.CROPPING_WITH_CAPTIONS in states
    assert f"subtitles=filename={escape_filter_path(captions)}:" in runner.commands[0][runner.commands[0].index("-vf") + 1]


def test_hook_and_main_are_joined_with_fade(tmp_path):
    runner = FakeRunner()
    probe = DummyProbe(hook_duration=15.0)
    states, on_state = _recorder()
    captions = tmp_path / "abcdef1234.srt"
    captions.write_text("", encoding="utf-8")
    out = tmp_path / "Clip_abcdef12.mp4"
    spec = _spec(hook_start_time=650.0, hook_end_time=665.0)

    _renderer(runner, probe).render(_source(tmp_path), spec, out, captions, on_state=on_state)

    hook_cmd, main_cmd, join_cmd = runner.commands
    assert hook_cmd[hook_cmd.index("-ss") + 1] == "00:10:50.000"
    assert hook_cmd[hook_cmd.index("-t") + 1] == "15.000"
    assert "subtitles" not in hook_cmd[hook_cmd.index("-vf") + 1]
    assert hook_cmd[-1].endswith("Clip_abcdef12_hook_temp.mp4")

    assert main_cmd[main_cmd.index("-ss") + 1] == "00:11:28.000"
    assert "subtitles=" in main_cmd[main_cmd.index("-vf") + 1]
    assert main_cmd[-1].endswith("Clip_abcdef12_main_temp.mp4")

    # Both segments share one crop window.
    assert hook_cmd[hook_cmd.index("-vf") + 1].split(",")[0] == main_cmd[main_cmd.index("-vf") + 1].split(",")[0]

    assert "offset=14.500" in join_cmd[join_cmd.index("-filter_complex") + 1]
    assert probe.duration_calls == [tmp_path / "Clip_abcdef12_hook_temp.mp4"]
    assert RenderState.HOOK_MAIN_ASSEMBLY in states
    assert out.exists()
    assert not (tmp_path / "Clip_abcdef12_hook_temp.mp4").exists()
    assert not (tmp_path / "Clip_abcdef12_main_temp.mp4").exists()


def test_temp_files_removed_when_join_fails(tmp_path):
    runner = FakeRunner(fail_on=lambda cmd: "-filter_complex" in cmd)
    states, on_state = _recorder()
    spec = _spec(hook_start_time=650.0, hook_end_time=665.0)

    with pytest.raises(ClipProcessingError):
        _renderer(runner).render(_source(tmp_path), spec, tmp_path / "x.mp4", on_state=on_state)

    assert list(tmp_path.glob("*_temp.mp4")) == []
    assert states[-1] == RenderState.FAILED


def test_zero_byte_output_is_a_failure(tmp_path):
    states, on_state = _recorder()
    with pytest.raises(EmptyOutputError):
        _renderer(FakeRunner(payload=b"")).render(_source(tmp_path), _spec(), tmp_path / "o.mp4", on_state=on_state)
    assert states[-2:] == [RenderState.FINALIZING, RenderState.FAILED]


def test_probe_failure_stops_before_encoding(tmp_path):
    runner = FakeRunner()
    logger = DummyLogger()
    probe = DummyProbe(error=ProbeError("no video stream"))

    with pytest.raises(ProbeError):
        _renderer(runner, probe, logger).render(_source(tmp_path), _spec(), tmp_path / "o.mp4")

    assert runner.commands == []
    assert logger.events[-1] == ("clip.state", {"clip_id": "abcdef1234", "state": "failed"})


def test_invalid_source_geometry_is_wrapped(tmp_path):
    probe = DummyProbe(info=MediaInfo(width=0, height=0, duration_sec=1.0, fps=30))
    with pytest.raises(ClipProcessingError, match="invalid source size"):
        _renderer(FakeRunner(), probe).render(_source(tmp_path), _spec(), tmp_path / "o.mp4")
