"""FastAPI endpoints.

Endpoint groups: health (under /api) and attachment relay. The relay is
served at /attachments/{channel_id}/{message_id} and, for links generated by
older builds, at /api/discord/channels/{channel_id}/messages/{message_id}/attachments.
"""

from fastapi import APIRouter

from .attachments import router as attachments_router
from .health import router as health_router

router = APIRouter()
router.include_router(health_router, prefix="/api")
router.include_router(attachments_router)
