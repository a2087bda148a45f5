import json

import pytest

from shorts_clip_factory.domain.errors import InputValidationError
from shorts_clip_factory.domain.models import Transcript, TranscriptSegment
from shorts_clip_factory.infrastructure.storage.artifact_store import ArtifactStore


def test_transcript_cache(tmp_path):
    store = ArtifactStore(tmp_path / "work")
    assert store.cached_transcript("vid") is None

    transcript = Transcript(segments=[TranscriptSegment(text="halo dunia", start=1.0, duration=2.5)], language="id")
    store.save_transcript("vid", transcript)

    cached = store.cached_transcript("vid")
    assert cached.language == "id"
    assert cached.full_text == "halo dunia"
    assert cached.segments[0].end == 3.5


def test_bare_segment_list_is_accepted(tmp_path):
    path = tmp_path / "t.json"
    path.write_text(json.dumps([{"text": "a", "start": 0, "duration": 1}, {"text": "b", "start": 1}]), encoding="utf-8")
    transcript = ArtifactStore(tmp_path).load_transcript(path)
    assert [s.text for s in transcript.segments] == ["a", "b"]
    assert transcript.segments[1].duration == 0.0


def test_malformed_transcript_is_an_input_error(tmp_path):
    path = tmp_path / "t.json"
    path.write_text('{"segments": [{"start": 1}]}', encoding="utf-8")
    with pytest.raises(InputValidationError):
        ArtifactStore(tmp_path).load_transcript(path)
    with pytest.raises(InputValidationError):
        ArtifactStore(tmp_path).load_transcript(tmp_path / "missing.json")
