"""Health check endpoint."""

import logging

from fastapi import APIRouter

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health():
    """Health check."""
    logger.debug("Health check endpoint called")
    return {"status": "ok"}
