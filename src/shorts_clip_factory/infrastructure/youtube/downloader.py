from __future__ import annotations

import contextlib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yt_dlp
from yt_dlp.utils import DownloadError

from shorts_clip_factory.domain.errors import InputValidationError, VideoSourceError
from shorts_clip_factory.domain.models import VideoInfo
from shorts_clip_factory.domain.video_urls import parse_video_id, watch_url

_KNOWN_FAILURES = (
    (("Video unavailable", "Private video"), "This video is unavailable or private"),
    (("Sign in to confirm your age",), "This video requires age verification"),
    (("This video is not available",), "This video is not available in your region"),
)


def explain_download_error(message: str) -> str:
    for needles, explanation in _KNOWN_FAILURES:
        if any(needle in message for needle in needles):
            return explanation
    return message


class YtDlpVideoSource:
    """Video metadata and downloads through the yt-dlp Python API.

    Downloads are cached as ``{video_id}.mp4`` under ``download_dir``; a
    non-empty cached file is reused, a zero-byte leftover is discarded.
    """

    def __init__(
        self,
        download_dir: Path,
        download_format: str,
        logger,
        ydl_factory: Callable[[dict[str, Any]], Any] = yt_dlp.YoutubeDL,
    ) -> None:
        self.download_dir = download_dir
        self.download_format = download_format
        self.logger = logger
        self.ydl_factory = ydl_factory

    def get_info(self, url: str) -> VideoInfo:
        video_id = self._video_id(url)
        opts = {"quiet": True, "no_warnings": True, "skip_download": True, "noplaylist": True}
        try:
            with self.ydl_factory(opts) as ydl:
                data = ydl.extract_info(watch_url(video_id), download=False) or {}
        except DownloadError as exc:
            raise VideoSourceError(f"Failed to get video info: {explain_download_error(str(exc))}") from exc

        return VideoInfo(
            video_id=video_id,
            title=str(data.get("title") or "Untitled"),
            duration_sec=float(data.get("duration") or 0.0),
            description=str(data.get("description") or ""),
            thumbnail=str(data.get("thumbnail") or f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"),
            channel_name=str(data.get("uploader") or data.get("channel") or "Unknown"),
            view_count=int(data.get("view_count") or 0),
            published_at=str(data.get("upload_date") or ""),
        )

    def download(self, url: str) -> Path:
        video_id = self._video_id(url)
        self.download_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.download_dir / f"{video_id}.mp4"

        if output_path.exists():
            if output_path.stat().st_size > 0:
                self.logger.info("download.cached", video_id=video_id, path=str(output_path))
                return output_path
            output_path.unlink()

        opts = {
            "format": self.download_format,
            "merge_output_format": "mp4",
            "noplaylist": True,
            "outtmpl": str(output_path),
            "quiet": True,
            "no_warnings": True,
        }
        self.logger.info("download.started", video_id=video_id)
        try:
            with self.ydl_factory(opts) as ydl:
                ydl.download([watch_url(video_id)])
            if not output_path.exists() or output_path.stat().st_size == 0:
                raise VideoSourceError("Downloaded file is empty")
        except DownloadError as exc:
            self._discard(output_path)
            raise VideoSourceError(f"Failed to download video: {explain_download_error(str(exc))}") from exc
        except VideoSourceError:
            self._discard(output_path)
            raise

        self.logger.info("download.completed", video_id=video_id, size_bytes=output_path.stat().st_size)
        return output_path

    def _video_id(self, url: str) -> str:
        video_id = parse_video_id(url)
        if not video_id:
            raise InputValidationError(f"Invalid YouTube URL: {url}")
        return video_id

    def _discard(self, path: Path) -> None:
        with contextlib.suppress(OSError):
            path.unlink(missing_ok=True)
