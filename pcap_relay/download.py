"""Streaming attachment download with a hard size ceiling."""

from __future__ import annotations

import logging

import httpx

from pcap_relay.errors import DownloadFailed, PayloadTooLarge

logger = logging.getLogger(__name__)

MAX_ATTACHMENT_SIZE = 100 * 1024 * 1024  # 100 MiB


def _declared_length(resp: httpx.Response) -> int | None:
    raw = resp.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.debug("Ignoring malformed Content-Length: %r", raw)
        return None


class AttachmentDownloader:
    """Downloads attachment bytes from a pre-signed URL.

    The declared Content-Length is checked before the body is touched, and the
    running byte count is checked while streaming, so a missing or lying
    header cannot push more than max_size bytes into memory.
    """

    def __init__(
        self,
        max_size: int = MAX_ATTACHMENT_SIZE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.max_size = max_size
        self._timeout = timeout
        self._transport = transport

    async def download(self, url: str) -> bytes:
        logger.debug("Downloading attachment from: %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport, follow_redirects=True
            ) as client:
                async with client.stream("GET", url) as resp:
                    if not resp.is_success:
                        logger.error("Attachment download error: %d", resp.status_code)
                        raise DownloadFailed(f"HTTP {resp.status_code}")

                    declared = _declared_length(resp)
                    if declared is not None and declared > self.max_size:
                        logger.warning("Attachment too large: %d bytes", declared)
                        raise PayloadTooLarge(f"declared {declared} bytes")

                    return await self._read_capped(resp)
        except httpx.RequestError as e:
            logger.error("Failed to download attachment: %s", e)
            raise DownloadFailed(str(e)) from e

    async def _read_capped(self, resp: httpx.Response) -> bytes:
        buf = bytearray()
        async for chunk in resp.aiter_bytes():
            if len(buf) + len(chunk) > self.max_size:
                logger.warning("Attachment exceeded %d bytes while streaming", self.max_size)
                raise PayloadTooLarge(f"more than {self.max_size} bytes streamed")
            buf.extend(chunk)
        return bytes(buf)
