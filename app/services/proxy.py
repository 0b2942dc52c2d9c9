import logging
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, Tuple
from urllib.parse import urljoin, urlparse

import httpx

from app.config.settings import config
from app.utils.exceptions import UpstreamError
from app.utils.filename import content_disposition
from app.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

UA_CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def browser_headers(url: str) -> Dict[str, str]:
    parsed = urlparse(url)
    return {
        "User-Agent": UA_CHROME,
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "identity",
        "Referer": f"{parsed.scheme}://{parsed.netloc}/",
    }


# Awaited with each redirect target; raises to refuse it
UrlGuard = Callable[[str], Awaitable[None]]


class ProxyStreamer:
    """
    Stream a media URL back to the client as a forced download.

    At most one redirect hop is followed. Failures before the first byte raise
    UpstreamError; later upstream errors propagate out of the body iterator so
    the server drops the connection instead of finishing a truncated 200.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=False,
                timeout=httpx.Timeout(config.proxy.timeout_seconds, connect=config.proxy.connect_timeout),
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, url: str) -> httpx.Response:
        request = self.client.build_request("GET", url, headers=browser_headers(url))
        try:
            return await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"GET {safe_url_for_log(url)} failed: {e!r}")

    async def _fetch(self, media_url: str, guard: Optional[UrlGuard]) -> httpx.Response:
        response = await self._send(media_url)
        if not response.is_redirect:
            return response

        location = response.headers.get("location")
        await response.aclose()
        if not location:
            raise UpstreamError(f"Redirect without Location from {safe_url_for_log(media_url)}")

        target = urljoin(media_url, location)
        if guard is not None:
            await guard(target)
        response = await self._send(target)
        if response.is_redirect:
            await response.aclose()
            raise UpstreamError(f"More than one redirect from {safe_url_for_log(media_url)}")
        return response

    async def open(
        self,
        media_url: str,
        filename: str,
        guard: Optional[UrlGuard] = None,
    ) -> Tuple[AsyncIterator[bytes], Dict[str, str], str]:
        """
        Returns (body iterator, response headers, media type). `guard` is
        awaited with the redirect target before it is fetched.
        """
        response = await self._fetch(media_url, guard)

        if response.status_code >= 400:
            await response.aclose()
            raise UpstreamError(
                f"Upstream {safe_url_for_log(media_url)} responded {response.status_code}"
            )

        headers = {
            "Content-Disposition": content_disposition(filename),
            "X-Content-Type-Options": "nosniff",
            "Cache-Control": "no-cache",
        }
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit():
            headers["Content-Length"] = content_length
        media_type = response.headers.get("content-type", "application/octet-stream")

        async def generate():
            try:
                async for chunk in response.aiter_bytes(config.proxy.chunk_size):
                    yield chunk
            except httpx.HTTPError as e:
                # headers are already out; dropping the connection is the only signal left
                logger.warning(f"Upstream stream for {filename} aborted: {e!r}")
                raise
            finally:
                await response.aclose()

        return generate(), headers, media_type


proxy_streamer = ProxyStreamer()


def get_proxy_streamer() -> ProxyStreamer:
    return proxy_streamer
