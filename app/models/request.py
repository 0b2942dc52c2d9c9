from typing import Optional, Union

from pydantic import BaseModel, Field, validator

from app.models.internal import MediaFormat, MediaRequest, Platform
from app.utils.exceptions import ValidationError


class InfoRequest(BaseModel):
    url: Optional[str] = Field(None, description="Video URL")
    platform: Optional[str] = Field(None, description="youtube, facebook or instagram; detected when omitted")

    @validator('url')
    def strip_url(cls, v):
        return v.strip() if isinstance(v, str) else v


class DownloadRequest(BaseModel):
    """POST /download body. Fields are optional here so missing ones map to a 400, not a 422."""
    url: Optional[str] = Field(None, description="Video URL")
    platform: Optional[str] = Field(None, description="youtube, facebook or instagram")
    format: Optional[str] = Field(None, description="video or audio")
    quality: Optional[Union[int, str]] = Field(None, description="Max height (4320..480) or audio bitrate (320, 240, 160)")

    @validator('url')
    def strip_url(cls, v):
        return v.strip() if isinstance(v, str) else v

    def to_media_request(self) -> MediaRequest:
        """Check required fields and enum values"""
        if not self.url or not self.platform or not self.format:
            raise ValidationError("Missing required fields", message_key="error.missing_fields")

        platform = Platform.parse(self.platform)
        if platform is None:
            raise ValidationError(f"Unknown platform {self.platform!r}", message_key="error.invalid_platform")

        media_format = MediaFormat.parse(self.format)
        if media_format is None:
            raise ValidationError(f"Unknown format {self.format!r}", message_key="error.invalid_format")

        return MediaRequest(
            raw_url=self.url,
            platform=platform,
            format=media_format,
            quality=str(self.quality) if self.quality is not None else None,
        )
