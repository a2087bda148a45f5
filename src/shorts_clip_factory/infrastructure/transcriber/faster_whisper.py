from __future__ import annotations

from pathlib import Path

from shorts_clip_factory.domain.errors import ClipFactoryError
from shorts_clip_factory.domain.models import Transcript, TranscriptSegment


class FasterWhisperTranscriber:
    """Local speech-to-text for sources that have no published captions."""

    def __init__(self, model: str = "small", device: str = "cpu", compute_type: str = "int8") -> None:
        self.model_name = model
        self.device = device
        self.compute_type = compute_type
        self._model = None

    def _get_model(self):
        if self._model is None:
            try:
                from faster_whisper import WhisperModel
            except ImportError as exc:  # pragma: no cover
                raise ClipFactoryError("faster-whisper is not installed; install the 'whisper' extra") from exc
            self._model = WhisperModel(self.model_name, device=self.device, compute_type=self.compute_type)
        return self._model

    def transcribe(self, media_path: Path) -> Transcript:
        model = self._get_model()
        segments_iter, info = model.transcribe(str(media_path), vad_filter=True)

        segments: list[TranscriptSegment] = []
        for seg in segments_iter:
            text = seg.text.strip()
            if not text:
                continue
            start = float(seg.start)
            segments.append(TranscriptSegment(text=text, start=start, duration=max(0.0, float(seg.end) - start)))

        return Transcript(segments=segments, language=getattr(info, "language", "auto") or "auto")
