from __future__ import annotations

import json
import threading
import uuid
from pathlib import Path
from typing import Any

from shorts_clip_factory.domain.errors import ProjectNotFoundError
from shorts_clip_factory.domain.models import ClipMetadata, ClipProject, VideoInfo


class JsonProjectStore:
    """Project bookkeeping in a single ``projects.json`` file.

    Every mutation is a whole-file read-modify-write held under one lock, so
    concurrent writers in the same process cannot drop each other's updates.
    A missing or unreadable file is treated as an empty store.
    """

    def __init__(self, path: Path, logger=None) -> None:
        self.path = path
        self.logger = logger
        self._lock = threading.Lock()

    def create_project(self, video_info: VideoInfo, source_url: str) -> ClipProject:
        with self._lock:
            projects = self._read()
            for project in projects:
                if project.source_video_id == video_info.video_id:
                    return project

            project = ClipProject(
                project_id=str(uuid.uuid4()),
                source_video_id=video_info.video_id,
                source_url=source_url,
                title=video_info.title,
                thumbnail=video_info.thumbnail,
                channel_name=video_info.channel_name,
            )
            projects.append(project)
            self._write(projects)
        self._log("project.created", project_id=project.project_id, video_id=project.source_video_id)
        return project

    def add_clip_to_project(self, project_id: str, filename: str, metadata: ClipMetadata | None = None) -> None:
        with self._lock:
            projects = self._read()
            project = _find(projects, project_id)
            if filename not in project.clips:
                project.clips.append(filename)
            if metadata is not None:
                project.clip_metadata[filename] = metadata
            self._write(projects)
        self._log("project.clip_added", project_id=project_id, filename=filename)

    def get_projects(self) -> list[ClipProject]:
        with self._lock:
            projects = self._read()
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    def get_project(self, project_id: str) -> ClipProject:
        with self._lock:
            return _find(self._read(), project_id)

    def get_project_by_video_id(self, video_id: str) -> ClipProject | None:
        with self._lock:
            projects = self._read()
        return next((p for p in projects if p.source_video_id == video_id), None)

    def delete_project(self, project_id: str) -> None:
        """Forget the project; its clip files stay on disk as uncategorized."""
        with self._lock:
            projects = self._read()
            project = _find(projects, project_id)
            projects.remove(project)
            self._write(projects)
        self._log("project.deleted", project_id=project_id)

    def uncategorized_clips(self, clips_dir: Path) -> list[Path]:
        with self._lock:
            known = {name for p in self._read() for name in p.clips}
        if not clips_dir.is_dir():
            return []
        return sorted(
            (f for f in clips_dir.glob("*.mp4") if f.name not in known),
            key=lambda f: f.stat().st_mtime,
            reverse=True,
        )

    def _read(self) -> list[ClipProject]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return [_project_from_dict(item) for item in payload.get("projects", [])]
        except FileNotFoundError:
            return []
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            self._log("project.store_unreadable", path=str(self.path), error=str(exc))
            return []

    def _write(self, projects: list[ClipProject]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"projects": [_project_to_dict(p) for p in projects]}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def _log(self, event: str, **fields: Any) -> None:
        if self.logger is not None:
            self.logger.info(event, **fields)


def _find(projects: list[ClipProject], project_id: str) -> ClipProject:
    for project in projects:
        if project.project_id == project_id:
            return project
    raise ProjectNotFoundError(f"Project with ID {project_id} not found")


def _project_to_dict(project: ClipProject) -> dict[str, Any]:
    return {
        "id": project.project_id,
        "youtubeUrl": project.source_url,
        "videoId": project.source_video_id,
        "title": project.title,
        "thumbnail": project.thumbnail,
        "channelName": project.channel_name,
        "createdAt": project.created_at,
        "clips": list(project.clips),
        "clipMetadata": {
            name: {
                "title": meta.title,
                "hook": meta.hook,
                "hookTimestamp": meta.hook_timestamp,
                "content": meta.content,
                "timestamp": meta.timestamp,
                "duration": meta.duration,
            }
            for name, meta in project.clip_metadata.items()
        },
    }


def _project_from_dict(item: dict[str, Any]) -> ClipProject:
    return ClipProject(
        project_id=str(item["id"]),
        source_video_id=str(item["videoId"]),
        source_url=str(item.get("youtubeUrl") or ""),
        title=str(item.get("title") or ""),
        thumbnail=str(item.get("thumbnail") or ""),
        channel_name=str(item.get("channelName") or ""),
        created_at=str(item.get("createdAt") or ""),
        clips=[str(c) for c in item.get("clips", [])],
        clip_metadata={
            str(name): ClipMetadata(
                title=str(meta.get("title") or ""),
                timestamp=str(meta.get("timestamp") or ""),
                duration=float(meta.get("duration") or 0.0),
                hook=str(meta.get("hook") or ""),
                hook_timestamp=meta.get("hookTimestamp"),
                content=str(meta.get("content") or ""),
            )
            for name, meta in (item.get("clipMetadata") or {}).items()
        },
    )
