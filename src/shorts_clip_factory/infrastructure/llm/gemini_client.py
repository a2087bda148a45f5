from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any

import certifi

from shorts_clip_factory.domain.clip_rules import ClipRuleEngine
from shorts_clip_factory.domain.errors import RecommendationError
from shorts_clip_factory.domain.models import ClipSpecification, Transcript, TranscriptSegment
from shorts_clip_factory.domain.timestamps import format_seconds

API_ROOT = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiClipRecommender:
    def __init__(
        self,
        api_key: str,
        model: str,
        prompt_path: Path,
        rule_engine: ClipRuleEngine,
        json_repair: bool = True,
        timeout_sec: int = 90,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.api_key = api_key.strip()
        self.model = model
        self.prompt_path = prompt_path
        self.rule_engine = rule_engine
        self.json_repair = json_repair
        self.timeout_sec = timeout_sec
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    def recommend(self, transcript: Transcript, video_duration: float, video_title: str) -> list[ClipSpecification]:
        if not self.api_key:
            raise RecommendationError("GEMINI_API_KEY is empty")
        if not transcript.has_segments:
            raise RecommendationError("cannot recommend clips without a transcript")

        payload = {
            "contents": [{"parts": [{"text": self._build_prompt(transcript, video_duration, video_title)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "temperature": 0.2,
            },
        }
        response_json = self._request_json(f"{API_ROOT}/{self.model}:generateContent?key={self.api_key}", payload)
        candidates = self._parse_recommendations(response_json, transcript.segments)
        return self.rule_engine.finalize(candidates, video_duration)

    def _build_prompt(self, transcript: Transcript, video_duration: float, video_title: str) -> str:
        instructions = (
            self.prompt_path.read_text(encoding="utf-8")
            .replace("{min_sec}", f"{self.rule_engine.config.min_sec:g}")
            .replace("{max_sec}", f"{self.rule_engine.config.max_sec:g}")
        )
        timeline = "\n".join(f"[{_mmss(seg.start)}] {seg.text}" for seg in transcript.segments)
        return (
            f"{instructions}\n"
            f"VIDEO TITLE: {video_title}\n"
            f"VIDEO DURATION: {video_duration:g} seconds ({format_seconds(video_duration)})\n\n"
            "TRANSCRIPT WITH TIMESTAMPS:\n"
            f"{timeline}"
        )

    def _request_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_sec, context=self.ssl_context) as res:
                body = res.read().decode("utf-8")
        except urllib.error.HTTPError as exc:  # pragma: no cover
            detail = exc.reason
            try:
                detail = json.loads(exc.read().decode("utf-8")).get("error", {}).get("message") or detail
            except (ValueError, AttributeError):
                pass
            raise RecommendationError(f"Gemini HTTP {exc.code}: {detail}") from exc
        except urllib.error.URLError as exc:  # pragma: no cover
            raise RecommendationError(f"Gemini request failed: {exc}") from exc

        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise RecommendationError("Gemini response was not valid JSON") from exc

    def _parse_recommendations(
        self,
        response_json: dict[str, Any],
        segments: list[TranscriptSegment],
    ) -> list[ClipSpecification]:
        text = self._extract_text(response_json)
        if not text:
            block_reason = response_json.get("promptFeedback", {}).get("blockReason")
            raise RecommendationError(f"Gemini response body was empty (blockReason={block_reason})")

        raw_items = self._loads_json(text)
        if isinstance(raw_items, dict):
            raw_items = raw_items.get("clips") or raw_items.get("recommendations") or []
        if not isinstance(raw_items, list):
            raise RecommendationError("Gemini response JSON must be an array of clips")

        specs: list[ClipSpecification] = []
        for idx, item in enumerate(raw_items, start=1):
            if not isinstance(item, dict):
                continue
            try:
                start = float(item["startTime"])
                end = float(item["endTime"])
                description = str(item.get("description") or "")
                specs.append(
                    ClipSpecification(
                        clip_id=self.id_factory(),
                        title=str(item.get("title") or f"Clip {idx}"),
                        start_time=start,
                        end_time=end,
                        duration=end - start,
                        hook=str(item.get("hookStatement") or ""),
                        content=description or segment_text(segments, start, end),
                        reason=description,
                        viral_score=float(item.get("viralScore", 1)),
                    )
                )
            except (KeyError, TypeError, ValueError):
                continue
        return specs

    def _extract_text(self, response_json: dict[str, Any]) -> str:
        candidates = response_json.get("candidates") or []
        if not candidates:
            return ""
        for part in candidates[0].get("content", {}).get("parts", []):
            text = part.get("text")
            if isinstance(text, str) and text.strip():
                return text.strip()
        return ""

    def _loads_json(self, text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            if not self.json_repair:
                raise RecommendationError("Gemini returned invalid JSON") from None
        try:
            return json.loads(repair_json_text(text))
        except json.JSONDecodeError as exc:
            raise RecommendationError("Gemini returned invalid JSON (repair failed)") from exc


def repair_json_text(text: str) -> str:
    """Strip a markdown fence and surrounding prose, keeping the outermost array or object."""
    body = text.strip()
    if body.startswith("```"):
        lines = body.splitlines()
        if len(lines) >= 3 and lines[-1].strip() == "```":
            body = "\n".join(lines[1:-1]).strip()
        if body.lower().startswith("json"):
            body = body[4:].strip()

    for opener, closer in (("[", "]"), ("{", "}")):
        start = body.find(opener)
        end = body.rfind(closer)
        if start != -1 and start < end:
            return body[start : end + 1]
    return body


def segment_text(segments: list[TranscriptSegment], start: float, end: float) -> str:
    return " ".join(seg.text for seg in segments if start <= seg.start < end)


def _mmss(seconds: float) -> str:
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"
