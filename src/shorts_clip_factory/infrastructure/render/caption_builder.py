from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from shorts_clip_factory.domain.models import TranscriptSegment
from shorts_clip_factory.utils.config import CaptionConfig

Cue = tuple[float, float, str]

FORMATS = ("srt", "ass", "word_srt")
ANIMATIONS = ("none", "fade", "pop")

_ANIMATION_TAGS = {
    "none": "",
    "fade": r"{\fad(200,200)}",
    "pop": r"{\t(0,100,\fscx110\fscy110)\t(100,200,\fscx100\fscy100)}",
}


class CaptionTrackBuilder:
    """Builds clip-relative subtitle tracks from a source transcript.

    A segment belongs to the window when its start lies in ``[start, end)``.
    Its full duration is kept even when it runs past ``end``.
    """

    def __init__(self, config: CaptionConfig) -> None:
        self.config = config

    def window(self, segments: Iterable[TranscriptSegment], start: float, end: float) -> list[Cue]:
        cues: list[Cue] = []
        for seg in segments:
            if not (start <= seg.start < end):
                continue
            rel_start = seg.start - start
            cues.append((rel_start, rel_start + max(0.0, seg.duration), seg.text.strip()))
        return cues

    def build(
        self,
        segments: Iterable[TranscriptSegment],
        start: float,
        end: float,
        fmt: str | None = None,
    ) -> str:
        fmt = fmt or self.config.format
        if fmt == "srt":
            return self.build_srt(segments, start, end)
        if fmt == "word_srt":
            return self.build_word_srt(segments, start, end)
        if fmt == "ass":
            return self.build_ass(segments, start, end)
        raise ValueError(f"unknown caption format: {fmt}")

    def write(
        self,
        path: Path,
        segments: Iterable[TranscriptSegment],
        start: float,
        end: float,
        fmt: str | None = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.build(segments, start, end, fmt), encoding="utf-8")
        return path

    def suffix(self, fmt: str | None = None) -> str:
        return ".ass" if (fmt or self.config.format) == "ass" else ".srt"

    def build_srt(self, segments: Iterable[TranscriptSegment], start: float, end: float) -> str:
        blocks = [
            f"{idx}\n{fmt_srt_time(cue_start)} --> {fmt_srt_time(cue_end)}\n{text}\n"
            for idx, (cue_start, cue_end, text) in enumerate(self.window(segments, start, end), start=1)
        ]
        return "\n".join(blocks) + ("\n" if blocks else "")

    def build_word_srt(self, segments: Iterable[TranscriptSegment], start: float, end: float) -> str:
        # Even split of the segment duration; not aligned to the audio.
        blocks: list[str] = []
        counter = 1
        for cue_start, cue_end, text in self.window(segments, start, end):
            words = text.split()
            if not words:
                continue
            step = (cue_end - cue_start) / len(words)
            for i in range(len(words)):
                word_start = cue_start + i * step
                highlighted = " ".join(
                    f'<font color="{self.config.highlight_color}">{w}</font>' if j == i else w
                    for j, w in enumerate(words)
                )
                blocks.append(
                    f"{counter}\n{fmt_srt_time(word_start)} --> {fmt_srt_time(word_start + step)}\n{highlighted}\n"
                )
                counter += 1
        return "\n".join(blocks) + ("\n" if blocks else "")

    def build_ass(
        self,
        segments: Iterable[TranscriptSegment],
        start: float,
        end: float,
        animation: str | None = None,
    ) -> str:
        animation = animation or self.config.animation
        if animation not in _ANIMATION_TAGS:
            raise ValueError(f"unknown caption animation: {animation}")
        tag = _ANIMATION_TAGS[animation]
        body = "\n".join(
            f"Dialogue: 0,{fmt_ass_time(cue_start)},{fmt_ass_time(cue_end)},Default,,0,0,0,,"
            f"{tag}{self._sanitize_ass(text)}"
            for cue_start, cue_end, text in self.window(segments, start, end)
        )
        return self._ass_header() + body + "\n"

    def _ass_header(self) -> str:
        cfg = self.config
        return f"""[Script Info]
Title: Auto-generated subtitles
ScriptType: v4.00+
WrapStyle: 0
ScaledBorderAndShadow: yes
PlayResX: 1080
PlayResY: 1920

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,{cfg.font_name},{cfg.font_size},{cfg.primary_color},&H000000FF,{cfg.outline_color},&H80000000,1,0,0,0,100,100,0,0,1,3,2,2,40,40,{cfg.bottom_margin},1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""

    def _sanitize_ass(self, text: str) -> str:
        return text.replace("{", "(").replace("}", ")").replace("\n", " ").strip()


def fmt_srt_time(sec: float) -> str:
    total_ms = int(round(max(0.0, sec) * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    mins, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return f"{hours:02d}:{mins:02d}:{secs:02d},{millis:03d}"


def fmt_ass_time(sec: float) -> str:
    total_cs = int(round(max(0.0, sec) * 100))
    hours, rem = divmod(total_cs, 360_000)
    mins, rem = divmod(rem, 6000)
    secs, centi = divmod(rem, 100)
    return f"{hours}:{mins:02d}:{secs:02d}.{centi:02d}"
