from __future__ import annotations

from dataclasses import dataclass, replace

from .models import ClipSpecification


@dataclass(slots=True)
class ClipRuleConfig:
    min_sec: float
    max_sec: float
    min_score: float = 1.0
    max_score: float = 10.0


class ClipRuleEngine:
    """Duration and score policy shared by the extractor and the recommender."""

    def __init__(self, config: ClipRuleConfig) -> None:
        self.config = config

    def accepts_window(self, start: float, end: float, total_duration: float | None = None) -> bool:
        if start < 0 or start >= end:
            return False
        if total_duration is not None and total_duration > 0 and end > total_duration:
            return False
        duration = end - start
        return self.config.min_sec <= duration <= self.config.max_sec

    def finalize(
        self,
        candidates: list[ClipSpecification],
        total_duration: float | None = None,
    ) -> list[ClipSpecification]:
        accepted = [
            self._clamp_score(c)
            for c in candidates
            if self.accepts_window(c.start_time, c.end_time, total_duration)
        ]
        accepted.sort(key=lambda c: c.viral_score or 0.0, reverse=True)
        return accepted

    def _clamp_score(self, candidate: ClipSpecification) -> ClipSpecification:
        if candidate.viral_score is None:
            return candidate
        score = min(self.config.max_score, max(self.config.min_score, candidate.viral_score))
        return replace(candidate, viral_score=score)
