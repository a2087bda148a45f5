from __future__ import annotations

import importlib.util
from pathlib import Path

from dotenv import load_dotenv

from shorts_clip_factory.application.batch_coordinator import ClipBatchCoordinator
from shorts_clip_factory.application.orchestrator import ClipFactoryOrchestrator
from shorts_clip_factory.domain.analysis_extractor import ManualAnalysisExtractor
from shorts_clip_factory.domain.clip_rules import ClipRuleConfig, ClipRuleEngine
from shorts_clip_factory.infrastructure.llm.gemini_client import GeminiClipRecommender
from shorts_clip_factory.infrastructure.media.probe import FFprobeMediaProbe
from shorts_clip_factory.infrastructure.render.caption_builder import CaptionTrackBuilder
from shorts_clip_factory.infrastructure.render.clip_renderer import FFmpegClipRenderer
from shorts_clip_factory.infrastructure.render.ffmpeg_builder import FFmpegCommandBuilder
from shorts_clip_factory.infrastructure.storage.artifact_store import ArtifactStore
from shorts_clip_factory.infrastructure.storage.project_store import JsonProjectStore
from shorts_clip_factory.infrastructure.transcriber.faster_whisper import FasterWhisperTranscriber
from shorts_clip_factory.infrastructure.youtube.downloader import YtDlpVideoSource
from shorts_clip_factory.infrastructure.youtube.transcript import YouTubeTranscriptProvider
from shorts_clip_factory.utils.config import load_settings
from shorts_clip_factory.utils.logger import configure_logger, get_logger


def default_root() -> Path:
    return Path(__file__).resolve().parents[2]


def build_orchestrator(root_dir: Path, config_path: Path | None = None) -> ClipFactoryOrchestrator:
    load_dotenv(root_dir / ".env")
    settings = load_settings(root_dir, config_path)
    configure_logger(settings.app.log_level)
    logger = get_logger()

    probe = FFprobeMediaProbe(settings.tools)
    caption_builder = CaptionTrackBuilder(settings.captions)
    renderer = FFmpegClipRenderer(
        render_config=settings.render,
        command_builder=FFmpegCommandBuilder(settings.render, settings.captions, settings.tools),
        probe=probe,
        logger=logger,
        focus_x=settings.app.focus_x,
    )
    coordinator = ClipBatchCoordinator(
        app_config=settings.app,
        tools=settings.tools,
        renderer=renderer,
        caption_builder=caption_builder,
        logger=logger,
        captions_enabled=settings.captions.enable_captions,
    )

    extractor = ManualAnalysisExtractor(
        rule_engine=ClipRuleEngine(ClipRuleConfig(min_sec=settings.extractor.min_sec, max_sec=settings.extractor.max_sec)),
        logger=logger,
    )
    recommender = GeminiClipRecommender(
        api_key=settings.llm.gemini_api_key,
        model=settings.llm.gemini_model,
        prompt_path=root_dir / "prompts" / "clip_recommender.md",
        rule_engine=ClipRuleEngine(ClipRuleConfig(min_sec=settings.llm.min_sec, max_sec=settings.llm.max_sec)),
        json_repair=settings.llm.json_repair,
        timeout_sec=settings.llm.timeout_sec,
    )

    transcriber = None
    if importlib.util.find_spec("faster_whisper") is not None:
        transcriber = FasterWhisperTranscriber(
            model=settings.transcribe.faster_model,
            device=settings.transcribe.device,
            compute_type=settings.transcribe.compute_type,
        )

    return ClipFactoryOrchestrator(
        settings=settings,
        extractor=extractor,
        coordinator=coordinator,
        video_source=YtDlpVideoSource(settings.app.temp_dir, settings.youtube.download_format, logger),
        transcript_provider=YouTubeTranscriptProvider(logger, settings.youtube.transcript_languages),
        recommender=recommender,
        project_store=JsonProjectStore(settings.app.projects_file, logger),
        artifact_store=ArtifactStore(settings.app.temp_dir),
        logger=logger,
        transcriber=transcriber,
    )
