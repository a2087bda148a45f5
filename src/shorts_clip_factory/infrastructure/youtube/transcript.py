from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from youtube_transcript_api import CouldNotRetrieveTranscript, NoTranscriptFound, YouTubeTranscriptApi

from shorts_clip_factory.domain.errors import InputValidationError
from shorts_clip_factory.domain.models import Transcript, TranscriptSegment
from shorts_clip_factory.domain.video_urls import parse_video_id


class YouTubeTranscriptProvider:
    """Fetches published captions; a video without captions yields an empty transcript."""

    def __init__(
        self,
        logger,
        languages: Sequence[str] = ("en", "id"),
        api_factory: Callable[[], Any] = YouTubeTranscriptApi,
    ) -> None:
        self.logger = logger
        self.languages = list(languages)
        self.api_factory = api_factory

    def fetch(self, url: str) -> Transcript:
        video_id = parse_video_id(url)
        if not video_id:
            raise InputValidationError(f"Invalid YouTube URL: {url}")

        try:
            transcript_list = self.api_factory().list(video_id)
            try:
                source = transcript_list.find_transcript(self.languages)
            except NoTranscriptFound:
                source = next(iter(transcript_list), None)
            if source is None:
                self.logger.info("transcript.unavailable", video_id=video_id)
                return Transcript.empty(language="unknown")
            snippets = source.fetch()
        except CouldNotRetrieveTranscript as exc:
            self.logger.info("transcript.unavailable", video_id=video_id, reason=type(exc).__name__)
            return Transcript.empty(language="unknown")

        segments = [
            TranscriptSegment(text=snippet.text.strip(), start=float(snippet.start), duration=float(snippet.duration))
            for snippet in snippets
            if snippet.text.strip()
        ]
        self.logger.info(
            "transcript.fetched",
            video_id=video_id,
            language=source.language_code,
            segments=len(segments),
        )
        return Transcript(segments=segments, language=source.language_code)
