"""Discord REST client for the attachment relay.

Validates snowflake ids, fetches a message with its attachment list and picks
the capture file to relay. Every failure is raised as a RelayError subclass
(see pcap_relay.errors) so the HTTP layer can map it to a response.

    client = DiscordClient(token=settings.discord_token)
    message = await client.fetch_message(channel_id, message_id)
    attachment = select_attachment(message)
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from pcap_relay.errors import (
    BadIdentifier,
    CredentialMissing,
    CredentialRejected,
    Forbidden,
    NoMatchingAttachment,
    NotFound,
    UpstreamBadResponse,
    UpstreamOther,
    UpstreamUnreachable,
)
from pcap_relay.models import Attachment, DiscordMessage

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v9"
TOKEN_PREFIX = "Bot "
CAPTURE_EXTENSIONS = (".pcap", ".pcapng")

SNOWFLAKE_MIN_LENGTH = 17
SNOWFLAKE_MAX_LENGTH = 19

_ASCII_DIGITS = frozenset("0123456789")

# Longest slice of an upstream error body written to the log
_LOGGED_BODY_LIMIT = 500


def is_valid_snowflake(value: str) -> bool:
    """True if value is 17-19 ASCII digits.

    str.isdigit() is not used: it accepts non-ASCII digits and superscripts.
    """
    return (
        SNOWFLAKE_MIN_LENGTH <= len(value) <= SNOWFLAKE_MAX_LENGTH
        and all(c in _ASCII_DIGITS for c in value)
    )


def is_capture_file(filename: str) -> bool:
    return filename.endswith(CAPTURE_EXTENSIONS)


def select_attachment(message: DiscordMessage) -> Attachment:
    """Return the first capture-file attachment, in upstream order."""
    for attachment in message.attachments:
        if is_capture_file(attachment.filename):
            return attachment
    logger.warning("Message %s has no PCAP attachments", message.id)
    raise NoMatchingAttachment()


class DiscordClient:
    """Fetches messages from the Discord REST API.

    Args:
        token:     Bot token. Empty or None means relaying is not configured;
                   fetches then fail with CredentialMissing.
        api_base:  REST base URL, e.g. "https://discord.com/api/v9".
        timeout:   HTTP timeout in seconds.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        token: str | None,
        api_base: str = DISCORD_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token or ""
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._token)

    def _message_url(self, channel_id: str, message_id: str) -> str:
        return f"{self._api_base}/channels/{channel_id}/messages/{message_id}"

    async def fetch_message(self, channel_id: str, message_id: str) -> DiscordMessage:
        if not is_valid_snowflake(channel_id):
            raise BadIdentifier("channel", channel_id)
        if not is_valid_snowflake(message_id):
            raise BadIdentifier("message", message_id)
        if not self._token:
            raise CredentialMissing()

        url = self._message_url(channel_id, message_id)
        logger.debug("Fetching Discord message from: %s", url)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(
                    url, headers={"Authorization": f"{TOKEN_PREFIX}{self._token}"}
                )
        except httpx.RequestError as e:
            logger.error("Failed to fetch Discord message: %s", e)
            raise UpstreamUnreachable(str(e)) from e

        if not resp.is_success:
            _raise_for_status(resp)

        try:
            message = DiscordMessage.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error("Failed to parse Discord message: %s", e)
            raise UpstreamBadResponse(str(e)) from e

        logger.debug(
            "Fetched message %s (%d attachments)", message.id, len(message.attachments)
        )
        return message


def _raise_for_status(resp: httpx.Response) -> None:
    status = resp.status_code
    logger.error("Discord API error: %d - %s", status, resp.text[:_LOGGED_BODY_LIMIT])
    if status == 401:
        raise CredentialRejected(f"HTTP {status}")
    if status == 403:
        raise Forbidden(f"HTTP {status}")
    if status == 404:
        raise NotFound(f"HTTP {status}")
    raise UpstreamOther(f"HTTP {status}")
