import pytest

from shorts_clip_factory.domain.models import TranscriptSegment
from shorts_clip_factory.infrastructure.render.caption_builder import CaptionTrackBuilder, fmt_ass_time, fmt_srt_time
from shorts_clip_factory.utils.config import CaptionConfig


def _segments():
    return [
        TranscriptSegment(text="before", start=5.0, duration=3.0),
        TranscriptSegment(text="hello world", start=10.5, duration=2.0),
        TranscriptSegment(text="again", start=12.5, duration=4.0),
        TranscriptSegment(text="after", start=15.0, duration=1.0),
    ]


def test_window_rebases_and_keeps_full_last_segment():
    cues = CaptionTrackBuilder(CaptionConfig()).window(_segments(), 10.0, 15.0)
    assert cues == [(0.5, 2.5, "hello world"), (2.5, 6.5, "again")]


def test_srt_cues_are_clip_relative():
    srt = CaptionTrackBuilder(CaptionConfig()).build_srt(_segments(), 10.0, 15.0)
    assert srt == (
        "1\n00:00:00,500 --> 00:00:02,500\nhello world\n\n"
        "2\n00:00:02,500 --> 00:00:06,500\nagain\n"
    )


def test_empty_window_gives_empty_track():
    assert CaptionTrackBuilder(CaptionConfig()).build_srt(_segments(), 100.0, 130.0) == ""


def test_word_srt_highlights_one_word_per_cue():
    srt = CaptionTrackBuilder(CaptionConfig(highlight_color="#FFFF00")).build_word_srt(_segments(), 10.0, 12.0)
    blocks = srt.strip().split("\n\n")
    assert len(blocks) == 2
    assert blocks[0] == '1\n00:00:00,500 --> 00:00:01,500\n<font color="#FFFF00">hello</font> world'
    assert blocks[1] == '2\n00:00:01,500 --> 00:00:02,500\nhello <font color="#FFFF00">world</font>'


def test_ass_track_carries_style_and_animation():
    builder = CaptionTrackBuilder(CaptionConfig(font_name="Roboto", font_size=40, animation="fade"))
    ass = builder.build_ass(_segments(), 10.0, 15.0)
    assert "PlayResX: 1080" in ass
    assert "PlayResY: 1920" in ass
    assert "Style: Default,Roboto,40," in ass
    assert r"Dialogue: 0,0:00:00.50,0:00:02.50,Default,,0,0,0,,{\fad(200,200)}hello world" in ass


def test_ass_pop_animation_and_brace_sanitising():
    builder = CaptionTrackBuilder(CaptionConfig())
    segs = [TranscriptSegment(text="use {braces}", start=1.0, duration=1.0)]
    ass = builder.build_ass(segs, 0.0, 5.0, animation="pop")
    assert r"{\t(0,100,\fscx110\fscy110)\t(100,200,\fscx100\fscy100)}use (braces)" in ass


def test_unknown_format_and_animation_are_rejected():
    builder = CaptionTrackBuilder(CaptionConfig())
    with pytest.raises(ValueError):
        builder.build(_segments(), 0, 10, fmt="vtt")
    with pytest.raises(ValueError):
        builder.build_ass(_segments(), 0, 10, animation="spin")


def test_write_uses_configured_format(tmp_path):
    builder = CaptionTrackBuilder(CaptionConfig(format="ass"))
    path = builder.write(tmp_path / f"clip{builder.suffix()}", _segments(), 10.0, 15.0)
    assert path.suffix == ".ass"
    assert path.read_text(encoding="utf-8").startswith("[Script Info]")


def test_time_formatters_carry_into_next_unit():
    assert fmt_srt_time(0.9996) == "00:00:01,000"
    assert fmt_srt_time(3661.25) == "01:01:01,250"
    assert fmt_ass_time(59.999) == "0:01:00.00"
    assert fmt_ass_time(3723.456) == "1:02:03.46"
