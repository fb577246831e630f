"""Capture-file relay endpoint."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from pcap_relay.errors import RelayError, to_response
from pcap_relay.relay import retrieve_capture

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/attachments/{channel_id}/{message_id}")
@router.get("/api/discord/channels/{channel_id}/messages/{message_id}/attachments")
async def pull_attachment(channel_id: str, message_id: str, request: Request):
    """Stream the first .pcap/.pcapng attachment of a Discord message."""
    logger.info("Discord pull request: channel=%s, msg=%s", channel_id, message_id)
    state = request.app.state
    try:
        _, payload = await retrieve_capture(
            state.discord, state.downloader, channel_id, message_id
        )
    except RelayError as e:
        status, message = to_response(e)
        logger.info("Pull failed for channel=%s msg=%s: %s", channel_id, message_id, e)
        return JSONResponse({"error": message}, status_code=status)
    return Response(payload, media_type="application/octet-stream")
