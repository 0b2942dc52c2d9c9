import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import download, health, info, stream
from app.config.settings import config
from app.core.logging import log_error, log_warning, setup_logging
from app.core.state import state
from app.i18n import i18n
from app.infra.redis import close_redis, init_redis
from app.services.links import LinkRegistry, RedisLinkRegistry
from app.services.proxy import proxy_streamer
from app.services.ytdlp import detect_ytdlp_version
from app.utils.exceptions import AppError
from app.utils.locale import get_locale

logger = logging.getLogger("app")

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request.state.request_id = uuid.uuid4().hex[:8]
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Log the diagnostic, send only the localized message"""
    locale = get_locale(request.headers.get("accept-language"))
    message = i18n.get(exc.message_key, locale, **exc.params)
    log = log_error if exc.status_code >= 500 else log_warning
    log(request, f"{type(exc).__name__}: {exc.diagnostic or exc.message_key}")
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    locale = get_locale(request.headers.get("accept-language"))
    log_warning(request, f"Malformed request: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": i18n.get("error.invalid_request", locale)})


# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(download.router, tags=["Download"])
app.include_router(info.router, tags=["Info"])
app.include_router(stream.router, tags=["Stream"])


@app.on_event("startup")
async def startup_event():
    setup_logging()

    state.redis = await init_redis()
    if state.redis is not None:
        state.link_registry = RedisLinkRegistry(
            state.redis,
            ttl_seconds=config.links.ttl_seconds,
            single_use=config.links.single_use,
        )
    else:
        state.link_registry = LinkRegistry(
            ttl_seconds=config.links.ttl_seconds,
            single_use=config.links.single_use,
        )
    state.link_registry.start(config.links.cleanup_interval)

    state.ytdlp_version = await detect_ytdlp_version()
    logger.info(
        f"{config.api.title} ready (yt-dlp {state.ytdlp_version}, "
        f"{config.download.response_mode} mode, links via {type(state.link_registry).__name__})"
    )


@app.on_event("shutdown")
async def shutdown_event():
    await state.link_registry.stop()
    await proxy_streamer.aclose()
    await close_redis()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.api.host, port=config.api.port)
