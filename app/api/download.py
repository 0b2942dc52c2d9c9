import functools

from fastapi import APIRouter, Depends, Request

from app.core.logging import log_info
from app.core.state import state
from app.i18n import i18n
from app.models.request import DownloadRequest
from app.services.download import DownloadService
from app.utils.locale import safe_url_for_log

router = APIRouter()


def get_link_registry():
    return state.link_registry


@router.post("/download")
async def download_video(
    request: Request,
    download_request: DownloadRequest,
    registry=Depends(get_link_registry),
):
    """Resolve a direct media URL, or a short-lived /file link in proxy mode"""
    _ = functools.partial(i18n.get, locale=i18n.default_locale)

    media_request = download_request.to_media_request()
    log_info(request, _(
        "log.processing",
        platform=media_request.platform.value,
        format=media_request.format.value,
        url=safe_url_for_log(media_request.raw_url),
    ))

    response = await DownloadService.prepare(media_request, registry, str(request.base_url))
    log_info(request, f"Resolved {response.filename}")
    return response
