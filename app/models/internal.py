from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

from pydantic import BaseModel


class Platform(str, Enum):
    YOUTUBE = "youtube"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"

    @classmethod
    def parse(cls, value) -> Optional["Platform"]:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class MediaFormat(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"

    @classmethod
    def parse(cls, value) -> Optional["MediaFormat"]:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Quality(IntEnum):
    """Maximum video height tiers"""
    P4320 = 4320
    P2160 = 2160
    P1080 = 1080
    P720 = 720
    P480 = 480

    @classmethod
    def parse(cls, value: Union[str, int, None]) -> Optional["Quality"]:
        """Lenient parse: '720', 720 and '720p' map to P720, anything else to None"""
        if value is None:
            return None
        text = str(value).strip().lower().rstrip("p")
        try:
            return cls(int(text))
        except ValueError:
            return None


class MediaRequest(BaseModel):
    """Internal download request (separated from HTTP concerns)"""
    raw_url: str
    platform: Platform
    format: MediaFormat
    quality: Optional[str] = None


@dataclass(frozen=True)
class ExtractionPlan:
    """How yt-dlp should select and post-process streams"""
    format_selector: str
    wants_audio_extraction: bool
    output_ext: str
    audio_format: Optional[str] = None
    audio_quality: Optional[str] = None
    merge_output_format: Optional[str] = None


@dataclass(frozen=True)
class ExtractionResult:
    media_url: str
    title: str


@dataclass(frozen=True)
class LinkEntry:
    """A registered proxy link"""
    handle: str
    media_url: str
    filename: str
    created_at: float
    expires_at: float
