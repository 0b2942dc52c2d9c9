from fastapi import APIRouter, Request

from app.core.logging import log_info
from app.i18n import i18n
from app.models.internal import Platform
from app.models.request import InfoRequest
from app.models.response import VideoInfo
from app.services.classifier import classify, detect_platform
from app.services.info import VideoInfoService
from app.utils.exceptions import ValidationError
from app.utils.locale import safe_url_for_log

router = APIRouter()


@router.post("/info", response_model=VideoInfo, response_model_by_alias=True)
async def get_video_info(request: Request, info_request: InfoRequest):
    """Title, duration, thumbnail and available formats"""
    if not info_request.url:
        raise ValidationError("Missing url", message_key="error.missing_url")

    if info_request.platform:
        platform = Platform.parse(info_request.platform)
        if platform is None:
            raise ValidationError(f"Unknown platform {info_request.platform!r}", message_key="error.invalid_platform")
        if not classify(info_request.url, platform):
            raise ValidationError(
                f"URL rejected for {platform.value}",
                message_key="error.invalid_url",
                platform=platform.value,
            )
    elif detect_platform(info_request.url) is None:
        raise ValidationError("URL matches no supported platform", message_key="error.unsupported_url")

    log_info(request, i18n.get("log.fetching_info", url=safe_url_for_log(info_request.url)))
    video_info = await VideoInfoService.fetch(info_request.url)
    log_info(request, f"Info retrieved: {video_info.title}")
    return video_info
