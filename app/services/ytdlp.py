import asyncio
import logging
from contextlib import suppress
from enum import Enum
from typing import List, NamedTuple, Optional

from app.config.settings import config
from app.models.internal import ExtractionPlan
from app.utils.exceptions import ExtractionError
from app.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes


class OutputTooLarge(Exception):
    """A subprocess wrote more than the allowed number of bytes"""


class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def _read_bounded(stream: asyncio.StreamReader, limit: int) -> bytes:
        buf = bytearray()
        while True:
            chunk = await stream.read(READ_CHUNK)
            if not chunk:
                return bytes(buf)
            buf.extend(chunk)
            if len(buf) > limit:
                raise OutputTooLarge(f"output exceeded {limit} bytes")

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: float,
        max_output: int,
    ) -> CompletedProcess:
        """
        Run an argument vector (never through a shell) with a timeout and a
        cap on captured output. The process is killed on timeout, overflow
        or cancellation. Raises asyncio.TimeoutError or OutputTooLarge.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL
        )

        readers = [
            asyncio.ensure_future(SubprocessExecutor._read_bounded(process.stdout, max_output)),
            asyncio.ensure_future(SubprocessExecutor._read_bounded(process.stderr, max_output)),
        ]

        async def collect():
            stdout, stderr = await asyncio.gather(*readers)
            await process.wait()
            return stdout, stderr

        try:
            stdout, stderr = await asyncio.wait_for(collect(), timeout=timeout)
        except BaseException:
            for reader in readers:
                reader.cancel()
            # retrieve the sibling's result or error so nothing is left dangling
            await asyncio.gather(*readers, return_exceptions=True)
            if process.returncode is None:
                with suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            raise

        return CompletedProcess(
            returncode=process.returncode,
            stdout=stdout,
            stderr=stderr
        )


class ExtractorMode(str, Enum):
    DIRECT_URL = "direct_url"
    TITLE = "title"
    URL_AND_TITLE = "url_and_title"
    METADATA = "metadata"


class YTDLPCommandBuilder:
    """Build yt-dlp argument vectors. The URL always follows '--'."""

    @staticmethod
    def _base() -> List[str]:
        cmd = [
            config.extractor.binary,
            '--no-warnings',
            '--no-playlist',
            '--socket-timeout', str(config.extractor.socket_timeout),
        ]
        if config.extractor.no_check_certificates:
            cmd.append('--no-check-certificates')
        return cmd

    @staticmethod
    def _plan_args(plan: ExtractionPlan) -> List[str]:
        args = ['-f', plan.format_selector]
        if plan.wants_audio_extraction:
            args.append('-x')
            if plan.audio_format:
                args.extend(['--audio-format', plan.audio_format])
            if plan.audio_quality:
                args.extend(['--audio-quality', plan.audio_quality])
        if plan.merge_output_format:
            args.extend(['--merge-output-format', plan.merge_output_format])
        return args

    @staticmethod
    def build(url: str, mode: ExtractorMode, plan: Optional[ExtractionPlan] = None) -> List[str]:
        cmd = YTDLPCommandBuilder._base()

        if mode == ExtractorMode.METADATA:
            cmd.extend(['--dump-single-json', '--prefer-free-formats'])
        elif mode == ExtractorMode.TITLE:
            cmd.extend(['--print', 'title'])
        else:
            if plan is None:
                raise ValueError(f"{mode.value} requires an extraction plan")
            cmd.extend(YTDLPCommandBuilder._plan_args(plan))
            if mode == ExtractorMode.DIRECT_URL:
                cmd.append('--get-url')
            else:
                # urls first, title on the last line
                cmd.extend(['--print', 'urls', '--print', 'title'])

        cmd.extend(['--', url])
        return cmd

    @staticmethod
    def build_version_command() -> List[str]:
        return [config.extractor.binary, '--version']


def _timeout_for(mode: ExtractorMode) -> float:
    if mode == ExtractorMode.TITLE:
        return config.extractor.title_timeout
    if mode == ExtractorMode.METADATA:
        return config.extractor.metadata_timeout
    return config.extractor.url_timeout


class ExtractorInvoker:
    """One yt-dlp execution per call; the only process boundary of the service"""

    @staticmethod
    async def invoke(raw_url: str, plan: Optional[ExtractionPlan], mode: ExtractorMode) -> str:
        cmd = YTDLPCommandBuilder.build(raw_url, mode, plan)
        timeout = _timeout_for(mode)
        safe_url = safe_url_for_log(raw_url)

        try:
            result = await SubprocessExecutor.run(
                cmd,
                timeout=timeout,
                max_output=config.extractor.max_output_bytes,
            )
        except asyncio.TimeoutError:
            raise ExtractionError(
                f"yt-dlp {mode.value} timed out after {timeout}s for {safe_url}",
                message_key="error.timeout",
            )
        except OutputTooLarge as e:
            raise ExtractionError(f"yt-dlp {mode.value} for {safe_url}: {e}")
        except OSError as e:
            # binary missing or not executable
            raise ExtractionError(f"Could not start {config.extractor.binary}: {e}")

        stderr = result.stderr.decode(errors="replace").strip()
        if result.returncode != 0:
            raise ExtractionError.from_diagnostic(
                stderr or f"yt-dlp exited with status {result.returncode}"
            )

        stdout = result.stdout.decode(errors="replace").strip()
        if not stdout:
            raise ExtractionError(f"yt-dlp {mode.value} produced no output for {safe_url}: {stderr[:200]}")

        logger.debug(f"yt-dlp {mode.value} ok for {safe_url}")
        return stdout


async def detect_ytdlp_version() -> str:
    """Installed yt-dlp version, or 'unknown'"""
    try:
        result = await SubprocessExecutor.run(
            YTDLPCommandBuilder.build_version_command(),
            timeout=10.0,
            max_output=4096,
        )
    except (OSError, asyncio.TimeoutError, OutputTooLarge) as e:
        logger.warning(f"yt-dlp not available: {e}")
        return "unknown"

    if result.returncode != 0:
        return "unknown"
    return result.stdout.decode(errors="replace").strip() or "unknown"
