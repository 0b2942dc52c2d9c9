from .internal import ExtractionPlan, ExtractionResult, LinkEntry, MediaFormat, MediaRequest, Platform, Quality
from .request import DownloadRequest, InfoRequest
from .response import DirectDownloadResponse, FormatInfo, LinkDownloadResponse, VideoInfo

__all__ = [
    "DirectDownloadResponse", "DownloadRequest", "ExtractionPlan", "ExtractionResult", "FormatInfo",
    "InfoRequest", "LinkDownloadResponse", "LinkEntry", "MediaFormat", "MediaRequest", "Platform",
    "Quality", "VideoInfo",
]
