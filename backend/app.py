"""FastAPI application factory.

Run standalone with `uvicorn backend.app:create_app --factory`, or through
main.py together with the Discord bot.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend.config import Settings, load_settings
from backend.routes import router
from pcap_relay.discord import DiscordClient
from pcap_relay.download import AttachmentDownloader

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    discord: DiscordClient | None = None,
    downloader: AttachmentDownloader | None = None,
) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="PCAP Relay")
    app.state.settings = settings
    app.state.discord = discord or DiscordClient(
        token=settings.discord_token,
        api_base=settings.discord_api_base,
        timeout=settings.http_timeout,
    )
    app.state.downloader = downloader or AttachmentDownloader(timeout=settings.http_timeout)
    if not app.state.discord.configured:
        logger.warning("DISCORD_OAUTH_TOKEN not set; attachment relay will answer 401")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %d %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response

    app.include_router(router)

    if settings.static_dir.is_dir():
        # Frontend build; mounted last so API routes take precedence
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app
