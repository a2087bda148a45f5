import json
import subprocess

import pytest

from shorts_clip_factory.domain.errors import ProbeError
from shorts_clip_factory.infrastructure.media.probe import FFprobeMediaProbe, parse_frame_rate
from shorts_clip_factory.utils.config import ToolPaths
from shorts_clip_factory.utils.media import CommandError


def _runner(payload):
    calls = []

    def run(cmd):
        calls.append(cmd)
        stdout = payload if isinstance(payload, str) else json.dumps(payload)
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")

    run.calls = calls
    return run


def _video(tmp_path):
    path = tmp_path / "src.mp4"
    path.write_bytes(b"\x00" * 16)
    return path


def test_probe_reads_geometry_and_rounds_fps(tmp_path):
    runner = _runner(
        {
            "streams": [{"width": 1920, "height": 1080, "r_frame_rate": "30000/1001"}],
            "format": {"duration": "600.5"},
        }
    )
    info = FFprobeMediaProbe(ToolPaths(ffprobe="/bin/ffprobe"), runner).probe(_video(tmp_path))

    assert (info.width, info.height, info.fps) == (1920, 1080, 30)
    assert info.duration_sec == 600.5
    assert runner.calls[0][0] == "/bin/ffprobe"
    assert "json" in runner.calls[0]


@pytest.mark.parametrize(("value", "expected"), [("25/1", 25), ("24000/1001", 24), ("60", 60), ("59.94", 60)])
def test_parse_frame_rate(value, expected):
    assert parse_frame_rate(value) == expected


def test_parse_frame_rate_rejects_garbage():
    with pytest.raises(ProbeError):
        parse_frame_rate("abc/def")
    with pytest.raises(ProbeError):
        parse_frame_rate(None)


def test_missing_file_fails_before_running_tool(tmp_path):
    runner = _runner({})
    with pytest.raises(ProbeError):
        FFprobeMediaProbe(ToolPaths(), runner).probe(tmp_path / "nope.mp4")
    assert runner.calls == []


def test_invalid_json_and_missing_stream(tmp_path):
    video = _video(tmp_path)
    with pytest.raises(ProbeError):
        FFprobeMediaProbe(ToolPaths(), _runner("not json")).probe(video)
    with pytest.raises(ProbeError):
        FFprobeMediaProbe(ToolPaths(), _runner({"streams": []})).probe(video)


def test_tool_failure_becomes_probe_error(tmp_path):
    def failing(cmd):
        raise CommandError("ffprobe exited 1")

    with pytest.raises(ProbeError, match="ffprobe exited 1"):
        FFprobeMediaProbe(ToolPaths(), failing).probe(_video(tmp_path))


def test_probe_duration(tmp_path):
    probe = FFprobeMediaProbe(ToolPaths(), _runner({"format": {"duration": "15.02"}}))
    assert probe.probe_duration(_video(tmp_path)) == pytest.approx(15.02)
