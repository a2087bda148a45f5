from pathlib import Path

from shorts_clip_factory.utils.config import load_settings, resolve_tool_paths

ROOT = Path(__file__).resolve().parents[1]


def test_default_config_loads(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    settings = load_settings(ROOT)

    assert settings.render.video_width == 1080
    assert settings.render.video_height == 1920
    assert settings.render.crf == 23
    assert settings.render.fps == 30
    assert settings.render.transition_sec == 0.5
    assert settings.render.audio_bitrate == "128k"
    assert (settings.extractor.min_sec, settings.extractor.max_sec) == (15, 90)
    assert (settings.llm.min_sec, settings.llm.max_sec) == (15, 60)
    assert settings.llm.gemini_api_key == ""
    assert settings.captions.format == "srt"
    assert settings.app.inter_clip_delay_sec == 1.0
    assert settings.app.temp_dir == ROOT / "temp"
    assert settings.youtube.transcript_languages == ["en", "id"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-pro")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = load_settings(ROOT)

    assert settings.llm.gemini_api_key == "secret"
    assert settings.llm.gemini_model == "gemini-pro"
    assert settings.app.log_level == "DEBUG"


def test_tool_paths_prefer_environment(monkeypatch):
    monkeypatch.setenv("FFMPEG_PATH", "/definitely/not/here/ffmpeg")
    monkeypatch.delenv("FFPROBE_PATH", raising=False)
    monkeypatch.setattr("shutil.which", lambda cmd: None)

    tools = resolve_tool_paths()

    assert tools.ffmpeg == "/definitely/not/here/ffmpeg"
    assert tools.ffprobe == "ffprobe"


def test_alternative_config_file(tmp_path):
    text = (ROOT / "config" / "default.toml").read_text(encoding="utf-8").replace('format = "srt"', 'format = "ass"')
    custom = tmp_path / "custom.toml"
    custom.write_text(text, encoding="utf-8")

    assert load_settings(tmp_path, custom).captions.format == "ass"
