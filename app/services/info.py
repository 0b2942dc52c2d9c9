import json
import logging
from typing import Any, Dict, List

from redis.exceptions import RedisError

from app.infra.redis import get_redis
from app.models.response import FormatInfo, VideoInfo
from app.services.ytdlp import ExtractorInvoker, ExtractorMode
from app.utils.exceptions import ExtractionError
from app.utils.hash import hash_stable

logger = logging.getLogger(__name__)

INFO_CACHE_TTL = 300


def _filesize(fmt: Dict[str, Any]):
    size = fmt.get("filesize") or fmt.get("filesize_approx")
    return int(size) if isinstance(size, (int, float)) else None


def _formats(info: Dict[str, Any]) -> List[FormatInfo]:
    return [
        FormatInfo(
            format_id=f.get("format_id"),
            ext=f.get("ext"),
            resolution=f.get("resolution"),
            filesize=_filesize(f),
        )
        for f in info.get("formats") or []
    ]


class VideoInfoService:
    """Video metadata without a download artifact"""

    @staticmethod
    async def fetch(url: str) -> VideoInfo:
        """
        Fetch metadata via yt-dlp --dump-single-json, cached in Redis when
        available so repeated lookups of the same URL skip the extractor.
        """
        cache_key = f"info:{hash_stable(url)}"
        redis = get_redis()

        if redis:
            try:
                cached = await redis.get(cache_key)
                if cached:
                    return VideoInfo(**json.loads(cached))
            except (RedisError, ValueError) as e:
                logger.warning(f"Info cache read failed: {e}")

        try:
            output = await ExtractorInvoker.invoke(url, None, ExtractorMode.METADATA)
        except ExtractionError as e:
            # specific causes (private, timeout, ...) keep their own message
            if e.message_key == ExtractionError.default_message_key:
                e.message_key = "error.info_failed"
            raise

        try:
            info = json.loads(output)
        except ValueError:
            raise ExtractionError("yt-dlp metadata was not valid JSON", message_key="error.info_failed")
        if not isinstance(info, dict):
            raise ExtractionError("yt-dlp metadata was not an object", message_key="error.info_failed")

        video_info = VideoInfo(
            title=info.get("title") or "Unknown",
            duration=info.get("duration"),
            thumbnail=info.get("thumbnail"),
            formats=_formats(info),
        )

        if redis:
            try:
                await redis.setex(cache_key, INFO_CACHE_TTL, video_info.json(by_alias=True))
            except RedisError as e:
                logger.warning(f"Info cache write failed: {e}")

        return video_info
