"""Ordered field matchers for free-text clip analyses.

Each field owns a tuple of ``FieldMatcher`` entries, tried in order; the first
hit wins. Add a template dialect by inserting a matcher at the precedence it
should have.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_I = re.IGNORECASE
_IM = re.IGNORECASE | re.MULTILINE

TS = r"(\d{1,2}:\d{2}(?::\d{2})?)"
DASH = r"[-–—]"
SEP = r"(?:s\.?\s?d\.?|[-–—])"
QUOTE = r"[\"“”]"
CARI = r"(?:Cari\s*di\s*area\s*)?"
LOOSE_RANGE = rf"`?\[?{TS}\]?`?\s*{SEP}\s*`?\[?{TS}\]?`?"
TICKED_RANGE = rf"`\[{TS}\]`\s*{DASH}\s*`\[{TS}\]`"
BLOCK_END = r"(?=\n#{1,4}\s|\n[ \t]*\*\s*\*\*\w|\n[ \t]*\*\*[^\n*]+:\*\*|\n\n#{1,4}|\Z)"
PLAIN_BLOCK_END = r"(?=\n#{1,4}\s|\n\n#{1,4}|\Z)"
PLAIN_LABELS = r"(?:\d+\.\s*Clip|Judul|Durasi|Timeline|Detail|Timestamp|Text\s*Hook|Kalimat|Hook|Mengapa|Alasan|Isi)\b"


@dataclass(frozen=True, slots=True)
class FieldMatcher:
    name: str
    pattern: re.Pattern[str]

    def search(self, text: str) -> re.Match[str] | None:
        return self.pattern.search(text)


def _m(name: str, regex: str, flags: int = _I) -> FieldMatcher:
    return FieldMatcher(name=name, pattern=re.compile(regex, flags))


def first_match(
    matchers: tuple[FieldMatcher, ...],
    text: str,
) -> tuple[FieldMatcher, re.Match[str]] | None:
    for matcher in matchers:
        match = matcher.search(text)
        if match:
            return matcher, match
    return None


SECTION_BOUNDARY = re.compile(
    r"^(?=[ \t]*(?:#{1,4}[ \t]*)?\*{0,2}[ \t]*\d+\.[ \t]*Clip[ \t]*:)",
    _IM,
)
LOOSE_TIME = re.compile(r"\d{1,2}:\d{2}")

SUGGESTED_TITLE: tuple[FieldMatcher, ...] = (
    _m("judul_clip.bullet_bold", r"\*\s*\*\*Judul\s*Clip\s*:\*\*[ \t]*([^\n]+)"),
    _m("judul_clip.bold", r"\*\*Judul\s*Clip\s*:\*\*[ \t]*([^\n]+)"),
    _m("judul_clip.plain", r"Judul[ \t_]*Clip[ \t_]*[:：][ \t]*([^\n]+)"),
    _m("judul_ide.bullet_bold", r"\*\s*\*\*Judul\s*Ide\s*:\*\*[ \t]*([^\n]+)"),
    _m("judul_ide.bold", r"\*\*Judul\s*Ide\s*:\*\*[ \t]*([^\n]+)"),
    _m("judul_ide.plain", r"Judul[ \t_]*Ide[ \t_]*[:：][ \t]*([^\n]+)"),
)

HEADER_TITLE: tuple[FieldMatcher, ...] = (
    _m(
        "header.markdown",
        r"^[ \t]*#{1,4}[ \t]*\*{0,2}[ \t]*\d+\.[ \t]*Clip[ \t]*:[ \t]*(.+?)(?:\*{0,2}[ \t]*$)",
        _IM,
    ),
    _m("header.plain", r"^[ \t]*\*{0,2}[ \t]*\d+\.[ \t]*Clip[ \t]*:[ \t]*(.+?)[ \t]*$", _IM),
)

TIMELINE: tuple[FieldMatcher, ...] = (
    _m(
        "timeline.bullet_bold_ticks",
        rf"\*\s*\*\*(?:Estimasi\s*)?Timeline\s*Full\s*Clip\s*:\*\*\s*{TICKED_RANGE}",
    ),
    _m("timeline.bold_ticks", rf"\*\*(?:Estimasi\s*)?Timeline\s*Full\s*Clip\s*:\*\*\s*{TICKED_RANGE}"),
    _m("timeline.general", rf"(?:Estimasi\s*)?Timeline\s*Full\s*Clip\s*:?\*?\*?\s*{LOOSE_RANGE}"),
    _m("timestamp.bold", rf"\*\*Timestamp\s*:\*\*\s*{LOOSE_RANGE}"),
    _m("timestamp.plain", rf"(?<!Hook )Timestamp\s*:\s*{LOOSE_RANGE}"),
    _m("range.bare", rf"`?\[{TS}\]`?\s*{SEP}\s*`?\[{TS}\]`?"),
)

DURATION: tuple[FieldMatcher, ...] = (
    _m("durasi.plain_line", r"^[ \t]*Durasi\s*:\s*[±~≈]?\s*(\d+)\s*(?:detik|seconds|sec|s)", _IM),
    _m(
        "durasi.bold",
        r"(?:\*\s*)?\*\*Durasi\s*(?:Total|Clip)?\s*:\*\*\s*[±~≈]?\s*(\d+)\s*(?:detik|seconds|sec|s)",
    ),
    _m("durasi.inline", r"Durasi\s*(?:Total|Clip)?\s*:\s*[±~≈]?\s*(\d+)\s*(?:detik|seconds|sec|s)"),
)

HOOK_TEXT: tuple[FieldMatcher, ...] = (
    _m("text_hook.bullet_bold_italic", rf"\*\s*\*\*Text\s*Hook\s*:\*\*\s*\*{QUOTE}(.+?){QUOTE}\*(?:\n|$)"),
    _m("text_hook.bullet_bold", rf"\*\s*\*\*Text\s*Hook\s*:\*\*\s*\*?{QUOTE}?(.+?){QUOTE}?\*?(?:\n|$)"),
    _m("text_hook.bold_italic", rf"\*\*Text\s*Hook\s*:\*\*\s*\*{QUOTE}(.+?){QUOTE}\*(?:\n|$)"),
    _m("text_hook.bold", rf"\*\*Text\s*Hook\s*:\*\*\s*\*?{QUOTE}?(.+?){QUOTE}?\*?(?:\n|$)"),
    _m("text_hook.plain_quoted", rf"^[ \t]*Text\s*Hook\s*:[ \t]*\*?{QUOTE}(.+?){QUOTE}?\*?(?:\n|$)", _IM),
    _m("text_hook.plain", rf"Text\s*Hook\s*:[ \t]*\*?{QUOTE}?(.+?){QUOTE}?\*?(?:\n|$)"),
    _m(
        "kalimat_hook.bullet_bold",
        rf"\*\s*\*\*(?:Kalimat\s*)?Hook\s*:\*\*[ \t]*\*?{QUOTE}?(.+?){QUOTE}?\*?(?:\n|$)",
    ),
    _m(
        "kalimat_hook.plain",
        rf"(?<!Timestamp )(?<!Detail )(?:Kalimat\s*)?\bHook[ \t]*:[ \t]*\*?{QUOTE}?(.+?){QUOTE}?\*?(?:\n|$)",
    ),
)

HOOK_TIMELINE: tuple[FieldMatcher, ...] = (
    _m("timestamp_hook.bullet_bold_ticks", rf"\*\s*\*\*Timestamp\s*Hook\s*:\*\*\s*{CARI}{TICKED_RANGE}"),
    _m("timestamp_hook.bold_ticks", rf"\*\*Timestamp\s*Hook\s*:\*\*\s*{CARI}{TICKED_RANGE}"),
    _m("timestamp_hook.general", rf"Timestamp\s*Hook\s*:?\*?\*?\s*{CARI}{LOOSE_RANGE}"),
    _m("hook_timestamp.general", rf"Hook\s*Timestamp\s*:?\*?\*?\s*{CARI}{LOOSE_RANGE}"),
)

CONTENT: tuple[FieldMatcher, ...] = (
    _m(
        "isi_konten.plain_block",
        rf"^[ \t]*Isi\s*Konten\s*:[ \t]*([^\n]+(?:\n(?![ \t]*{PLAIN_LABELS})[^\n]+)*)",
        _IM,
    ),
    _m("isi_konten.bullet_bold", rf"\*\s*\*\*Isi\s*Konten\s*:\*\*\s*([\s\S]+?){BLOCK_END}"),
    _m("isi_konten.bold", rf"\*\*Isi\s*Konten\s*:\*\*\s*([\s\S]+?){BLOCK_END}"),
    _m("isi_konten.inline", rf"Isi\s*Konten\s*:\s*([\s\S]+?){PLAIN_BLOCK_END}"),
    _m("isi_clip.bold", rf"(?:\*\s*)?\*\*Isi(?:\s*Clip)?\s*:\*\*\s*([\s\S]+?){BLOCK_END}"),
    _m("isi_clip.plain", rf"\bIsi(?:\s*Clip)?\s*:\s*([\s\S]+?){PLAIN_BLOCK_END}"),
)

REASON: tuple[FieldMatcher, ...] = (
    _m(
        "mengapa_bagus.plain_block",
        rf"^[ \t]*Mengapa\s*Bagus\s*:[ \t]*([^\n]+(?:\n(?![ \t]*{PLAIN_LABELS})[^\n]+)*)",
        _IM,
    ),
    _m("mengapa_bagus.bullet_bold", r"\*\s*\*\*Mengapa\s*Bagus\s*:\*\*[ \t]*([^\n]+)"),
    _m("mengapa_bagus.bold", r"\*\*Mengapa\s*Bagus\s*:\*\*[ \t]*([^\n]+)"),
    _m("mengapa_bagus.inline", r"Mengapa\s*Bagus\s*:[ \t]*([^\n]+)"),
    _m("alasan.bold", r"(?:\*\s*)?\*\*Alasan\s*:\*\*[ \t]*([^\n]+)"),
    _m("alasan.plain", r"\bAlasan\s*:[ \t]*([^\n]+)"),
    _m("why.plain", r"\b(?:Why|Reason|berpotensi\s+viral)\b\**[ \t]*:?\**[ \t]*([^\n]+)"),
)

YOUTUBE_URL = re.compile(r"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]+)")
