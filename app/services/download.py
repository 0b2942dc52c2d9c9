import dataclasses
import logging
from typing import Tuple, Union

from app.config.settings import config
from app.models.internal import ExtractionResult, MediaRequest
from app.models.response import DirectDownloadResponse, LinkDownloadResponse
from app.services.classifier import classify
from app.services.format import FormatDecision
from app.services.interpreter import interpret, resolve_title
from app.services.links import LinkRegistry, RedisLinkRegistry
from app.services.ytdlp import ExtractorInvoker, ExtractorMode
from app.utils.exceptions import ExtractionError, ValidationError
from app.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


class DownloadService:
    """Validate a request, run yt-dlp and shape the /download response"""

    @staticmethod
    async def extract(media_request: MediaRequest) -> Tuple[ExtractionResult, str]:
        """
        Returns (result, filename). Raises ValidationError before any
        process is spawned when the URL does not belong to the platform.
        """
        platform = media_request.platform
        if not classify(media_request.raw_url, platform):
            raise ValidationError(
                f"URL {safe_url_for_log(media_request.raw_url)} rejected for {platform.value}",
                message_key="error.invalid_url",
                platform=platform.value,
            )

        plan = FormatDecision.build_plan(platform, media_request.format, media_request.quality)

        if config.extractor.combined_output:
            output = await ExtractorInvoker.invoke(media_request.raw_url, plan, ExtractorMode.URL_AND_TITLE)
            result = interpret(output, platform)
        else:
            output = await ExtractorInvoker.invoke(media_request.raw_url, plan, ExtractorMode.DIRECT_URL)
            result = interpret(output, platform)
            result = await DownloadService._with_title(media_request, result)

        return result, f"{result.title}.{plan.output_ext}"

    @staticmethod
    async def _with_title(media_request: MediaRequest, result: ExtractionResult) -> ExtractionResult:
        """Separate title lookup; a failure keeps the fallback name"""
        try:
            raw_title = await ExtractorInvoker.invoke(media_request.raw_url, None, ExtractorMode.TITLE)
        except ExtractionError as e:
            logger.info(f"Could not get title: {e.diagnostic}")
            return result
        title = resolve_title(raw_title.splitlines()[-1], media_request.platform.value)
        return dataclasses.replace(result, title=title)

    @staticmethod
    async def prepare(
        media_request: MediaRequest,
        registry: Union[LinkRegistry, RedisLinkRegistry],
        base_url: str,
    ) -> Union[DirectDownloadResponse, LinkDownloadResponse]:
        result, filename = await DownloadService.extract(media_request)

        if config.download.response_mode == "proxy":
            handle = await registry.register(result.media_url, filename)
            return LinkDownloadResponse(
                download_url=f"{base_url.rstrip('/')}/file/{handle}",
                filename=filename,
                title=result.title,
                platform=media_request.platform.value,
                format=media_request.format.value,
                expires_in=int(registry.ttl_seconds),
            )

        return DirectDownloadResponse(
            direct_url=result.media_url,
            filename=filename,
            title=result.title,
            platform=media_request.platform.value,
            format=media_request.format.value,
        )
