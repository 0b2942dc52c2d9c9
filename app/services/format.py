from typing import Dict, Optional, Union

from app.models.internal import ExtractionPlan, MediaFormat, Platform, Quality

DEFAULT_QUALITY = Quality.P720

VIDEO_CONTAINER = "mp4"
AUDIO_CONTAINER = "mp3"


def _height_capped(height: int) -> str:
    # Best video not above the height + best audio, else best combined stream, else anything
    return f"bestvideo[height<={height}]+bestaudio/best[height<={height}]/best"


VIDEO_FORMATS: Dict[Platform, Dict[Quality, str]] = {
    platform: {quality: _height_capped(quality.value) for quality in Quality}
    for platform in Platform
}

AUDIO_FORMATS: Dict[Platform, str] = {
    Platform.YOUTUBE: "bestaudio[ext=m4a]/bestaudio/best",
    Platform.FACEBOOK: "bestaudio/best",
    Platform.INSTAGRAM: "bestaudio/best",
}

# yt-dlp --audio-quality per requested bitrate, YouTube only
AUDIO_BITRATES: Dict[str, str] = {"320": "320K", "240": "240K", "160": "160K"}
DEFAULT_AUDIO_BITRATE = "320K"


class FormatDecision:
    """Map (platform, format, quality) to an extraction plan. Pure table lookups."""

    @staticmethod
    def build_plan(
        platform: Platform,
        media_format: MediaFormat,
        quality: Optional[Union[str, int]] = None,
    ) -> ExtractionPlan:
        if media_format == MediaFormat.AUDIO:
            audio_quality = None
            if platform == Platform.YOUTUBE:
                key = str(quality).strip().lower().rstrip("k") if quality is not None else ""
                audio_quality = AUDIO_BITRATES.get(key, DEFAULT_AUDIO_BITRATE)

            return ExtractionPlan(
                format_selector=AUDIO_FORMATS[platform],
                wants_audio_extraction=True,
                output_ext=AUDIO_CONTAINER,
                audio_format=AUDIO_CONTAINER,
                audio_quality=audio_quality,
            )

        tier = Quality.parse(quality) or DEFAULT_QUALITY
        return ExtractionPlan(
            format_selector=VIDEO_FORMATS[platform][tier],
            wants_audio_extraction=False,
            output_ext=VIDEO_CONTAINER,
            merge_output_format=VIDEO_CONTAINER,
        )


build_plan = FormatDecision.build_plan
