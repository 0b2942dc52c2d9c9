from fastapi import APIRouter, Request
from redis.exceptions import RedisError

from app.core.state import state
from app.i18n import i18n
from app.utils.locale import get_locale

router = APIRouter()


@router.get("/")
async def root(request: Request):
    """Liveness"""
    locale = get_locale(request.headers.get("accept-language"))
    return {
        "status": "ok",
        "message": i18n.get("response.message", locale),
        "endpoints": {
            "download": "POST /download",
            "info": "POST /info",
            "file": "GET /file/{id}",
            "proxy": "GET /proxy?url=&filename=",
        },
    }


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    redis_status = i18n.get("response.redis_disabled")
    if state.redis:
        try:
            await state.redis.ping()
            redis_status = i18n.get("response.redis_connected")
        except (RedisError, OSError):
            redis_status = i18n.get("response.redis_disconnected")

    return {
        "status": "ok",
        "redis": redis_status,
        "ytdlp_version": state.ytdlp_version,
        "link_backend": type(state.link_registry).__name__,
    }
