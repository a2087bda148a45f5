from __future__ import annotations

import re
from collections.abc import Callable
from uuid import uuid4

from . import analysis_patterns as p
from .clip_rules import ClipRuleEngine
from .models import ClipSpecification
from .timestamps import try_parse_timestamp

DEFAULT_TITLE = "Untitled Clip"

_TITLE_NOISE = re.compile(r"[\"“”*`]")
_HOOK_NOISE = re.compile(r"[\"“”*]")
_CATEGORY_SUFFIX = re.compile(r"^(.+?)\s*\([^)]+\)\s*$")


class ManualAnalysisExtractor:
    """Turn a human-written clip analysis into ordered clip specifications.

    Supported dialects: markdown with backticked timestamps, markdown bold
    labels, plain numbered text, and the bulleted "Detail Hook" sub-section.
    Sections that cannot be read are skipped; the result may be empty.
    """

    def __init__(
        self,
        rule_engine: ClipRuleEngine | None = None,
        logger=None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.rule_engine = rule_engine
        self.logger = logger
        self.id_factory = id_factory or (lambda: str(uuid4()))

    def extract(self, text: str) -> list[ClipSpecification]:
        clips: list[ClipSpecification] = []
        for index, section in enumerate(self.split_sections(text or "")):
            if not p.LOOSE_TIME.search(section):
                continue
            try:
                clip = self._extract_section(section)
            except Exception as exc:
                self._log("analysis.section_skipped", section_index=index, error=str(exc))
                continue
            if clip is not None:
                clips.append(clip)
        return clips

    def split_sections(self, text: str) -> list[str]:
        return [s for s in p.SECTION_BOUNDARY.split(text) if s.strip()]

    def _extract_section(self, section: str) -> ClipSpecification | None:
        timeline = p.first_match(p.TIMELINE, section)
        if timeline is None:
            self._log("analysis.section_without_timeline")
            return None
        _, ts_match = timeline
        start = try_parse_timestamp(ts_match.group(1))
        end = try_parse_timestamp(ts_match.group(2))
        if start is None or end is None or start >= end:
            self._log("analysis.invalid_timeline", start=ts_match.group(1), end=ts_match.group(2))
            return None
        if self.rule_engine is not None and not self.rule_engine.accepts_window(start, end):
            self._log("analysis.duration_rejected", start=start, end=end)
            return None

        suggested_title = self._suggested_title(section)
        title = suggested_title or self._header_title(section) or DEFAULT_TITLE

        hook_start, hook_end, hook_label = self._hook_window(section)

        return ClipSpecification(
            clip_id=self.id_factory(),
            title=title,
            suggested_title=suggested_title or title,
            start_time=start,
            end_time=end,
            duration=self._duration(section, start, end),
            hook_start_time=hook_start,
            hook_end_time=hook_end,
            hook=self._hook_text(section),
            content=self._block(p.CONTENT, section),
            reason=self._block(p.REASON, section),
            timestamp_label=f"[{ts_match.group(1)}] - [{ts_match.group(2)}]",
            hook_timestamp_label=hook_label,
        )

    def _suggested_title(self, section: str) -> str:
        found = p.first_match(p.SUGGESTED_TITLE, section)
        if found is None:
            return ""
        value = _TITLE_NOISE.sub("", found[1].group(1))
        return re.sub(r"\.\s*$", "", value).strip()

    def _header_title(self, section: str) -> str:
        found = p.first_match(p.HEADER_TITLE, section)
        if found is None:
            return ""
        title = _TITLE_NOISE.sub("", found[1].group(1)).strip()
        category = _CATEGORY_SUFFIX.match(title)
        if category:
            title = category.group(1).strip()
        return title

    def _duration(self, section: str, start: int, end: int) -> float:
        found = p.first_match(p.DURATION, section)
        if found is None:
            return float(end - start)
        return float(int(found[1].group(1)))

    def _hook_text(self, section: str) -> str:
        found = p.first_match(p.HOOK_TEXT, section)
        if found is None:
            return ""
        return _HOOK_NOISE.sub("", found[1].group(1)).strip()

    def _hook_window(self, section: str) -> tuple[int | None, int | None, str]:
        found = p.first_match(p.HOOK_TIMELINE, section)
        if found is None:
            return None, None, ""
        _, match = found
        hook_start = try_parse_timestamp(match.group(1))
        hook_end = try_parse_timestamp(match.group(2))
        if hook_start is None or hook_end is None or hook_start >= hook_end:
            self._log("analysis.invalid_hook_window", start=match.group(1), end=match.group(2))
            return None, None, ""
        return hook_start, hook_end, f"[{match.group(1)}] - [{match.group(2)}]"

    def _block(self, matchers: tuple[p.FieldMatcher, ...], section: str) -> str:
        found = p.first_match(matchers, section)
        if found is None:
            return ""
        return found[1].group(1).replace("*", "").strip()

    def _log(self, event: str, **kwargs) -> None:
        if self.logger is not None:
            self.logger.debug(event, **kwargs)


def extract_youtube_url(text: str) -> str | None:
    match = p.YOUTUBE_URL.search(text or "")
    return match.group(0) if match else None
