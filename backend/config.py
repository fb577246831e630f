"""Runtime settings, read from the environment (and .env at the repo root)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from pcap_relay.audit import DEFAULT_DATABASE_URL, database_path
from pcap_relay.discord import DISCORD_API_BASE
from pcap_relay.servers import SERVER_LIST_URL

ROOT = Path(__file__).parent.parent


@dataclass(frozen=True)
class Settings:
    discord_token: str | None
    host: str
    port: int
    web_url: str
    database_path: str
    server_list_url: str
    discord_api_base: str
    static_dir: Path
    http_timeout: float
    log_level: str


def load_settings(env_file: Path | None = ROOT / ".env") -> Settings:
    if env_file is not None:
        load_dotenv(env_file)

    port = int(os.getenv("PORT", "3000"))
    return Settings(
        discord_token=os.getenv("DISCORD_OAUTH_TOKEN") or None,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        web_url=os.getenv("WEB_URL", f"http://localhost:{port}"),
        database_path=database_path(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)),
        server_list_url=os.getenv("SERVER_LIST_URL", SERVER_LIST_URL),
        discord_api_base=os.getenv("DISCORD_API_BASE", DISCORD_API_BASE),
        static_dir=Path(os.getenv("STATIC_DIR", "dist")),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
