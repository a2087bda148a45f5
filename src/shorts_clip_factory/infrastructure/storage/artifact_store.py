from __future__ import annotations

import json
from pathlib import Path

from shorts_clip_factory.domain.errors import InputValidationError
from shorts_clip_factory.domain.models import ClipSpecification, Transcript, TranscriptSegment


class ArtifactStore:
    """Working files that outlive one command: cached transcripts and parse results."""

    def __init__(self, work_dir: Path) -> None:
        self.work_dir = work_dir
        self.work_dir.mkdir(parents=True, exist_ok=True)

    def transcript_path(self, video_id: str) -> Path:
        return self.work_dir / f"{video_id}.transcript.json"

    def write_json(self, path: Path, payload: dict | list) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def save_transcript(self, video_id: str, transcript: Transcript) -> Path:
        path = self.transcript_path(video_id)
        self.write_json(path, transcript_to_dict(transcript))
        return path

    def cached_transcript(self, video_id: str) -> Transcript | None:
        path = self.transcript_path(video_id)
        if not path.exists():
            return None
        return self.load_transcript(path)

    def load_transcript(self, path: Path) -> Transcript:
        """Accepts our own layout or a bare list of ``{text, start, duration}`` items."""
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise InputValidationError(f"cannot read transcript {path}: {exc}") from exc

        if isinstance(payload, list):
            payload = {"segments": payload}
        try:
            segments = [
                TranscriptSegment(
                    text=str(seg["text"]),
                    start=float(seg["start"]),
                    duration=float(seg.get("duration", 0.0)),
                )
                for seg in payload.get("segments", [])
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise InputValidationError(f"malformed transcript {path}: {exc}") from exc
        return Transcript(
            segments=segments,
            full_text=str(payload.get("full_text") or ""),
            language=str(payload.get("language") or "auto"),
        )


def transcript_to_dict(transcript: Transcript) -> dict:
    return {
        "language": transcript.language,
        "full_text": transcript.full_text,
        "segments": [{"text": s.text, "start": s.start, "duration": s.duration} for s in transcript.segments],
    }


def clip_to_dict(spec: ClipSpecification) -> dict:
    return {
        "id": spec.clip_id,
        "title": spec.title,
        "suggested_title": spec.suggested_title,
        "start_time": spec.start_time,
        "end_time": spec.end_time,
        "duration": spec.effective_duration,
        "timestamp": spec.timestamp_label,
        "hook": spec.hook,
        "hook_timestamp": spec.hook_timestamp_label or None,
        "hook_start_time": spec.hook_start_time,
        "hook_end_time": spec.hook_end_time,
        "hook_is_not_at_start": spec.hook_is_not_at_start,
        "content": spec.content,
        "reason": spec.reason,
        "viral_score": spec.viral_score,
    }
