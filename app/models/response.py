from typing import List, Optional

from pydantic import BaseModel, Field


class _CamelModel(BaseModel):
    """Serialized with camelCase keys, built with snake_case names"""

    class Config:
        populate_by_name = True


class DirectDownloadResponse(_CamelModel):
    success: bool = True
    direct_url: str = Field(..., alias="directUrl")
    filename: str
    title: str
    platform: str
    format: str


class LinkDownloadResponse(_CamelModel):
    success: bool = True
    download_url: str = Field(..., alias="downloadUrl")
    filename: str
    title: str
    platform: str
    format: str
    expires_in: int = Field(..., alias="expiresIn")


class FormatInfo(_CamelModel):
    format_id: Optional[str] = Field(None, alias="formatId")
    ext: Optional[str] = None
    resolution: Optional[str] = None
    filesize: Optional[int] = None


class VideoInfo(BaseModel):
    """Video information response"""
    success: bool = True
    title: str
    duration: Optional[float] = None
    thumbnail: Optional[str] = None
    formats: List[FormatInfo] = []
