from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from app.api.download import get_link_registry
from app.config.settings import config
from app.core.logging import log_info
from app.core.security import SecurityValidator, UrlValidationResult
from app.i18n import i18n
from app.services.proxy import ProxyStreamer, get_proxy_streamer
from app.utils.exceptions import ProxyForbidden, ValidationError
from app.utils.filename import sanitize_filename
from app.utils.locale import safe_url_for_log

router = APIRouter()


async def _stream(streamer: ProxyStreamer, media_url: str, filename: str, guard=None) -> StreamingResponse:
    body, headers, media_type = await streamer.open(media_url, filename, guard=guard)
    return StreamingResponse(body, media_type=media_type, headers=headers)


async def ensure_public_url(url: str) -> None:
    """Raise unless the URL is http(s) and resolves to public addresses"""
    validation_result = await SecurityValidator.validate_url(url)
    if validation_result == UrlValidationResult.BLOCKED:
        raise ProxyForbidden(f"Blocked proxy target {safe_url_for_log(url)}")
    if validation_result == UrlValidationResult.INVALID:
        raise ValidationError(f"Invalid proxy target {safe_url_for_log(url)}", message_key="error.unsupported_url")


@router.get("/file/{handle}")
async def download_file(
    request: Request,
    handle: str,
    registry=Depends(get_link_registry),
    streamer: ProxyStreamer = Depends(get_proxy_streamer),
):
    """Stream media for a link issued by POST /download"""
    entry = await registry.resolve(handle)
    log_info(request, i18n.get("log.streaming", filename=entry.filename))
    return await _stream(streamer, entry.media_url, entry.filename)


@router.get("/proxy")
async def proxy_url(
    request: Request,
    url: str = Query(...),
    filename: str = Query("download"),
    streamer: ProxyStreamer = Depends(get_proxy_streamer),
):
    """Stream an arbitrary public http(s) URL as a download"""
    if not config.proxy.allow_raw_urls:
        raise ProxyForbidden("Raw URL proxy disabled")

    await ensure_public_url(url)

    safe_name = sanitize_filename(filename, max_length=120) or "download"
    log_info(request, f"Proxying {safe_url_for_log(url)} as {safe_name}")
    return await _stream(streamer, url, safe_name, guard=ensure_public_url)
