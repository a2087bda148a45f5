from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from shorts_clip_factory.app import build_orchestrator, default_root
from shorts_clip_factory.domain.errors import ClipFactoryError
from shorts_clip_factory.domain.models import BatchReport, RenderResult, RenderState
from shorts_clip_factory.infrastructure.storage.artifact_store import clip_to_dict


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shorts-clip-factory",
        description="Cut portrait shorts with captions and hooks from long videos",
    )
    parser.add_argument("--root", default="", help="project root holding config/ and prompts/")
    parser.add_argument("--config", default="", help="alternative TOML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("preflight", help="check ffmpeg, ffprobe and API key setup")

    parse_cmd = sub.add_parser("parse", help="parse a manual analysis and print the clips as JSON")
    parse_cmd.add_argument("analysis", help="analysis text file ('-' reads stdin)")

    render_cmd = sub.add_parser("render", help="render clips from a local video file")
    render_cmd.add_argument("source", help="local source video")
    render_cmd.add_argument("analysis", help="analysis text file ('-' reads stdin)")
    render_cmd.add_argument("--transcript", default="", help="transcript JSON used for captions")

    process_cmd = sub.add_parser("process", help="download a YouTube video and render clips into a project")
    process_cmd.add_argument("url", nargs="?", default="", help="YouTube URL (default: URL found in the analysis)")
    process_cmd.add_argument("--analysis", required=True, help="analysis text file ('-' reads stdin)")
    process_cmd.add_argument("--project-id", default="", help="append to an existing project")
    process_cmd.add_argument("--transcript", default="", help="transcript JSON instead of fetching captions")

    recommend_cmd = sub.add_parser("recommend", help="ask Gemini for clip suggestions")
    recommend_cmd.add_argument("url", help="YouTube URL")
    recommend_cmd.add_argument("--render", action="store_true", help="render the suggested clips right away")

    sub.add_parser("projects", help="list projects and uncategorized clips")

    delete_cmd = sub.add_parser("delete-project", help="forget a project (clip files are kept)")
    delete_cmd.add_argument("project_id")

    return parser


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _print_json(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _on_result(result: RenderResult) -> None:
    if result.succeeded:
        print(f"OK    {result.clip_id[:8]}  {result.output_path}")
    else:
        print(f"FAIL  {result.clip_id[:8]}  {result.error}")


def _on_state(clip_id: str, state: RenderState) -> None:
    print(f"      {clip_id[:8]}  {state.value}", file=sys.stderr)


def _summarize(report: BatchReport) -> int:
    print(f"processed {report.processed} / failed {report.failed}")
    if report.project_id:
        print(f"project: {report.project_id}")
    return 0 if report.failed == 0 else 1


def _cmd_preflight(orch, _args: argparse.Namespace) -> int:
    errors = orch.preflight()
    for line in errors:
        print(f"- {line}")
    if not errors:
        print("ready")
    return 0 if not errors else 1


def _cmd_parse(orch, args: argparse.Namespace) -> int:
    result = orch.parse_analysis(_read_text(args.analysis))
    _print_json(
        {
            "video_url": result.video_url,
            "parsed_count": result.parsed_count,
            "clips": [clip_to_dict(c) for c in result.clips],
        }
    )
    return 0


def _cmd_render(orch, args: argparse.Namespace) -> int:
    analysis = orch.parse_analysis(_read_text(args.analysis))
    transcript = orch.artifact_store.load_transcript(Path(args.transcript)) if args.transcript else None
    report = orch.process_local(
        Path(args.source),
        analysis.clips,
        transcript,
        on_result=_on_result,
        on_state=_on_state,
    )
    return _summarize(report)


def _cmd_process(orch, args: argparse.Namespace) -> int:
    analysis = orch.parse_analysis(_read_text(args.analysis))
    url = args.url.strip() or (analysis.video_url or "")
    if not url:
        raise ClipFactoryError("no YouTube URL given and none found in the analysis text")
    transcript = orch.artifact_store.load_transcript(Path(args.transcript)) if args.transcript else None
    report = orch.process(
        url,
        analysis.clips,
        transcript=transcript,
        project_id=args.project_id.strip() or None,
        on_result=_on_result,
        on_state=_on_state,
    )
    return _summarize(report)


def _cmd_recommend(orch, args: argparse.Namespace) -> int:
    result = orch.recommend(args.url)
    _print_json(
        {
            "video": {"id": result.video.video_id, "title": result.video.title, "duration": result.video.duration_sec},
            "clips": [clip_to_dict(c) for c in result.clips],
        }
    )
    if not args.render or not result.clips:
        return 0
    report = orch.process(
        args.url,
        result.clips,
        transcript=result.transcript,
        on_result=_on_result,
        on_state=_on_state,
    )
    return _summarize(report)


def _cmd_projects(orch, _args: argparse.Namespace) -> int:
    store = orch.project_store
    _print_json(
        {
            "projects": [
                {
                    "id": p.project_id,
                    "title": p.title,
                    "video_id": p.source_video_id,
                    "channel": p.channel_name,
                    "created_at": p.created_at,
                    "clips": p.clips,
                }
                for p in store.get_projects()
            ],
            "uncategorized_clips": [f.name for f in store.uncategorized_clips(orch.settings.app.output_dir)],
        }
    )
    return 0


def _cmd_delete_project(orch, args: argparse.Namespace) -> int:
    orch.project_store.delete_project(args.project_id)
    print(f"deleted project {args.project_id}; its clips are now uncategorized")
    return 0


COMMANDS = {
    "preflight": _cmd_preflight,
    "parse": _cmd_parse,
    "render": _cmd_render,
    "process": _cmd_process,
    "recommend": _cmd_recommend,
    "projects": _cmd_projects,
    "delete-project": _cmd_delete_project,
}


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    root_dir = Path(args.root).resolve() if args.root else default_root()
    orch = build_orchestrator(root_dir, Path(args.config) if args.config else None)
    try:
        code = COMMANDS[args.command](orch, args)
    except (ClipFactoryError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
