"""Attachment retrieval pipeline.

    fetch message -> select capture attachment -> download bytes

Each step raises a RelayError on failure; the first failure ends the request.
Identifier validation happens inside DiscordClient.fetch_message before any
network call. Nothing is retried or cached.
"""

from __future__ import annotations

import logging

from pcap_relay.discord import DiscordClient, select_attachment
from pcap_relay.download import AttachmentDownloader
from pcap_relay.models import Attachment

logger = logging.getLogger(__name__)


async def retrieve_capture(
    discord: DiscordClient,
    downloader: AttachmentDownloader,
    channel_id: str,
    message_id: str,
) -> tuple[Attachment, bytes]:
    """Return the first capture attachment of a message and its bytes."""
    message = await discord.fetch_message(channel_id, message_id)
    attachment = select_attachment(message)
    payload = await downloader.download(attachment.url)
    logger.info(
        "Fetched PCAP from Discord: %s (%d bytes)", attachment.filename, len(payload)
    )
    return attachment, payload
