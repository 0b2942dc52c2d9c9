import pytest

from app.models.internal import MediaFormat, Platform, Quality
from app.services.format import DEFAULT_QUALITY, VIDEO_FORMATS, FormatDecision


@pytest.mark.parametrize("platform", list(Platform))
@pytest.mark.parametrize("quality", [None, "720", 1080, "4320", "480p", "999", "best"])
def test_video_plan_is_deterministic(platform, quality):
    first = FormatDecision.build_plan(platform, MediaFormat.VIDEO, quality)
    second = FormatDecision.build_plan(platform, MediaFormat.VIDEO, quality)
    assert first == second
    assert first.format_selector in VIDEO_FORMATS[platform].values()
    assert first.output_ext == "mp4"
    assert first.merge_output_format == "mp4"
    assert not first.wants_audio_extraction


@pytest.mark.parametrize("quality", [None, "999", "abc", 0])
def test_unknown_quality_uses_default_tier(quality):
    plan = FormatDecision.build_plan(Platform.YOUTUBE, MediaFormat.VIDEO, quality)
    assert DEFAULT_QUALITY == Quality.P720
    assert plan.format_selector == "bestvideo[height<=720]+bestaudio/best[height<=720]/best"


def test_height_tiers():
    plan = FormatDecision.build_plan(Platform.YOUTUBE, MediaFormat.VIDEO, "2160")
    assert plan.format_selector == "bestvideo[height<=2160]+bestaudio/best[height<=2160]/best"
    plan = FormatDecision.build_plan(Platform.INSTAGRAM, MediaFormat.VIDEO, 480)
    assert plan.format_selector == "bestvideo[height<=480]+bestaudio/best[height<=480]/best"


def test_youtube_audio_plan():
    plan = FormatDecision.build_plan(Platform.YOUTUBE, MediaFormat.AUDIO, "160")
    assert plan.wants_audio_extraction
    assert plan.format_selector == "bestaudio[ext=m4a]/bestaudio/best"
    assert plan.audio_format == "mp3"
    assert plan.audio_quality == "160K"
    assert plan.output_ext == "mp3"
    assert plan.merge_output_format is None


def test_youtube_audio_default_bitrate():
    plan = FormatDecision.build_plan(Platform.YOUTUBE, MediaFormat.AUDIO, "1080")
    assert plan.audio_quality == "320K"


@pytest.mark.parametrize("platform", [Platform.FACEBOOK, Platform.INSTAGRAM])
def test_other_audio_plans(platform):
    plan = FormatDecision.build_plan(platform, MediaFormat.AUDIO, None)
    assert plan.format_selector == "bestaudio/best"
    assert plan.audio_quality is None
    assert plan.output_ext == "mp3"


@pytest.mark.parametrize("value, expected", [
    ("720", Quality.P720), (4320, Quality.P4320), ("1080p", Quality.P1080),
    (" 480 ", Quality.P480), ("360", None), (None, None), ("high", None),
])
def test_quality_parse(value, expected):
    assert Quality.parse(value) == expected
