import json
from pathlib import Path

import pytest

from shorts_clip_factory.cli import main
from shorts_clip_factory.domain.models import VideoInfo
from shorts_clip_factory.infrastructure.storage.project_store import JsonProjectStore

CONFIG = Path(__file__).resolve().parents[1] / "config" / "default.toml"

ANALYSIS = """Video: https://youtu.be/dQw4w9WgXcQ

## 1. Clip: Rahasia Pagi
* **Timeline Full Clip:** `[00:01:00]` - `[00:01:30]`
* **Isi Konten:** Rutinitas pagi.
"""


def _run(tmp_path, *argv):
    with pytest.raises(SystemExit) as exc_info:
        main(["--root", str(tmp_path), "--config", str(CONFIG), *argv])
    return exc_info.value.code


def test_parse_prints_clips_as_json(tmp_path, capsys):
    analysis = tmp_path / "analysis.md"
    analysis.write_text(ANALYSIS, encoding="utf-8")

    assert _run(tmp_path, "parse", str(analysis)) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["parsed_count"] == 1
    assert payload["video_url"] == "https://youtu.be/dQw4w9WgXcQ"
    assert payload["clips"][0]["title"] == "Rahasia Pagi"
    assert payload["clips"][0]["timestamp"] == "[00:01:00] - [00:01:30]"


def test_unparseable_analysis_exits_with_error(tmp_path, capsys):
    analysis = tmp_path / "analysis.md"
    analysis.write_text("nothing to see here", encoding="utf-8")

    assert _run(tmp_path, "parse", str(analysis)) == 2
    assert "could not parse any clips" in capsys.readouterr().err


def test_projects_and_delete(tmp_path, capsys):
    store = JsonProjectStore(tmp_path / "output" / "projects.json")
    project = store.create_project(VideoInfo(video_id="dQw4w9WgXcQ", title="Talk", duration_sec=60), "u")
    (tmp_path / "output" / "loose.mp4").write_bytes(b"x")

    assert _run(tmp_path, "projects") == 0
    listing = json.loads(capsys.readouterr().out)
    assert [p["id"] for p in listing["projects"]] == [project.project_id]
    assert listing["uncategorized_clips"] == ["loose.mp4"]

    assert _run(tmp_path, "delete-project", project.project_id) == 0
    assert store.get_projects() == []
    assert _run(tmp_path, "delete-project", project.project_id) == 2
