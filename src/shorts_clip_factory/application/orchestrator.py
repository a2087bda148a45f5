from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path

from shorts_clip_factory.application.batch_coordinator import ClipBatchCoordinator, ResultCallback, StateCallback
from shorts_clip_factory.application.retry_policy import retry
from shorts_clip_factory.domain.analysis_extractor import ManualAnalysisExtractor, extract_youtube_url
from shorts_clip_factory.domain.errors import (
    AnalysisParseError,
    InputValidationError,
    RecommendationError,
)
from shorts_clip_factory.domain.models import (
    AnalysisResult,
    BatchReport,
    ClipMetadata,
    ClipSpecification,
    RecommendationResult,
    RenderResult,
    Transcript,
)
from shorts_clip_factory.domain.protocols import ClipRecommender, ProjectStore, TranscriptProvider, VideoSource
from shorts_clip_factory.domain.timestamps import format_range
from shorts_clip_factory.domain.video_urls import parse_video_id
from shorts_clip_factory.infrastructure.storage.artifact_store import ArtifactStore
from shorts_clip_factory.utils.config import Settings
from shorts_clip_factory.utils.media import CommandError, CommandRunner, run_command


class ClipFactoryOrchestrator:
    def __init__(
        self,
        settings: Settings,
        extractor: ManualAnalysisExtractor,
        coordinator: ClipBatchCoordinator,
        video_source: VideoSource,
        transcript_provider: TranscriptProvider,
        recommender: ClipRecommender,
        project_store: ProjectStore,
        artifact_store: ArtifactStore,
        logger,
        transcriber=None,
        runner: CommandRunner = run_command,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.extractor = extractor
        self.coordinator = coordinator
        self.video_source = video_source
        self.transcript_provider = transcript_provider
        self.recommender = recommender
        self.project_store = project_store
        self.artifact_store = artifact_store
        self.logger = logger
        self.transcriber = transcriber
        self.runner = runner
        self.sleep = sleep

    def preflight(self) -> list[str]:
        errors: list[str] = []
        for name, binary in (("ffmpeg", self.settings.tools.ffmpeg), ("ffprobe", self.settings.tools.ffprobe)):
            try:
                self.runner([binary, "-version"])
            except CommandError:
                errors.append(f"{name} was not found or does not run: {binary}")
        if self.settings.llm.require_cloud and not self.settings.llm.gemini_api_key.strip():
            errors.append("GEMINI_API_KEY is not set. Add it to `.env`.")
        return errors

    def parse_analysis(self, text: str) -> AnalysisResult:
        if not text or not text.strip():
            raise InputValidationError("analysis text is required")
        clips = self.extractor.extract(text)
        if not clips:
            raise AnalysisParseError(
                "could not parse any clips; check that each clip has a numbered header and a timestamp range"
            )
        video_url = extract_youtube_url(text)
        self.logger.info("analysis.parsed", clips=len(clips), video_url=video_url)
        return AnalysisResult(clips=clips, video_url=video_url)

    def fetch_transcript(self, url: str) -> Transcript:
        """Published captions first, then the local transcriber if one is configured."""
        video_id = self._require_video_id(url)
        cached = self.artifact_store.cached_transcript(video_id)
        if cached is not None and cached.has_segments:
            return cached

        transcript = self.transcript_provider.fetch(url)
        if not transcript.has_segments and self.transcriber is not None:
            self.logger.info("transcript.local_fallback", video_id=video_id)
            transcript = self.transcriber.transcribe(self.video_source.download(url))
        if transcript.has_segments:
            self.artifact_store.save_transcript(video_id, transcript)
        return transcript

    def recommend(self, url: str) -> RecommendationResult:
        self._require_video_id(url)
        if not self.settings.llm.gemini_api_key.strip():
            raise RecommendationError("GEMINI_API_KEY is not set")

        info = self.video_source.get_info(url)
        transcript = self.fetch_transcript(url)
        if not transcript.has_segments:
            raise RecommendationError("no transcript is available for this video")

        clips = retry(
            lambda: self.recommender.recommend(transcript, info.duration_sec, info.title),
            retries=self.settings.llm.max_retries,
            delay_sec=1.5,
            retry_on=(RecommendationError,),
            logger=self.logger,
            sleep=self.sleep,
        )
        self.logger.info("recommend.completed", video_id=info.video_id, clips=len(clips))
        return RecommendationResult(video=info, transcript=transcript, clips=clips)

    def process(
        self,
        url: str,
        specs: Sequence[ClipSpecification],
        transcript: Transcript | None = None,
        project_id: str | None = None,
        on_result: ResultCallback | None = None,
        on_state: StateCallback | None = None,
    ) -> BatchReport:
        self._require_video_id(url)
        self._require_specs(specs)

        if project_id:
            project = self.project_store.get_project(project_id)
        else:
            project = self.project_store.create_project(self.video_source.get_info(url), url)

        source_path = self.video_source.download(url)
        if transcript is None:
            transcript = self.fetch_transcript(url)

        results = self.coordinator.process_all(
            source_path,
            specs,
            transcript,
            on_result=on_result,
            on_state=on_state,
        )
        self._record_successes(project.project_id, specs, results)
        report = BatchReport(project_id=project.project_id, results=results)
        self.logger.info(
            "process.completed",
            project_id=project.project_id,
            processed=report.processed,
            failed=report.failed,
        )
        return report

    def process_local(
        self,
        source_path: Path,
        specs: Sequence[ClipSpecification],
        transcript: Transcript | None = None,
        on_result: ResultCallback | None = None,
        on_state: StateCallback | None = None,
    ) -> BatchReport:
        if not source_path.is_file():
            raise InputValidationError(f"source video not found: {source_path}")
        self._require_specs(specs)
        results = self.coordinator.process_all(
            source_path,
            specs,
            transcript,
            on_result=on_result,
            on_state=on_state,
        )
        return BatchReport(project_id=None, results=results)

    def _record_successes(
        self,
        project_id: str,
        specs: Sequence[ClipSpecification],
        results: list[RenderResult],
    ) -> None:
        by_id = {spec.clip_id: spec for spec in specs}
        for result in results:
            if result.succeeded:
                self.project_store.add_clip_to_project(
                    project_id,
                    result.output_path.name,
                    clip_metadata(by_id[result.clip_id]),
                )

    def _require_video_id(self, url: str) -> str:
        video_id = parse_video_id(url)
        if not video_id:
            raise InputValidationError(f"Invalid YouTube URL: {url}")
        return video_id

    def _require_specs(self, specs: Sequence[ClipSpecification]) -> None:
        if not specs:
            raise InputValidationError("at least one clip is required")


def clip_metadata(spec: ClipSpecification) -> ClipMetadata:
    return ClipMetadata(
        title=spec.title,
        timestamp=format_range(spec.start_time, spec.end_time),
        duration=spec.effective_duration,
        hook=spec.hook,
        hook_timestamp=format_range(spec.hook_start_time, spec.hook_end_time) if spec.has_hook else None,
        content=spec.content,
    )
