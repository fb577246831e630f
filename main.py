"""PCAP Relay launcher. Runs the web server and the Discord bot in one process."""

import argparse
import asyncio
import logging
from dataclasses import replace

import uvicorn

from backend.app import create_app
from backend.bot import RelayBot
from backend.config import Settings, load_settings
from pcap_relay.audit import AuditLog
from pcap_relay.servers import ServerList

logger = logging.getLogger("pcap_relay")


async def run(settings: Settings, with_bot: bool) -> None:
    app = create_app(settings)
    server = uvicorn.Server(uvicorn.Config(
        app, host=settings.host, port=settings.port, log_level=settings.log_level.lower(),
    ))
    tasks = {asyncio.create_task(server.serve(), name="web")}

    bot: RelayBot | None = None
    if with_bot and settings.discord_token:
        audit = AuditLog(settings.database_path)
        audit.init_db()
        logger.info("Audit log at %s", settings.database_path)
        servers = ServerList(settings.server_list_url, timeout=settings.http_timeout)
        bot = RelayBot(settings.web_url, audit, servers)
        logger.info("Starting bot with WEB_URL=%s", settings.web_url)
        tasks.add(asyncio.create_task(bot.start(settings.discord_token), name="bot"))
    elif with_bot:
        logger.warning("DISCORD_OAUTH_TOKEN not set; running web server only")

    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.error("%s task failed", task.get_name(), exc_info=task.exception())
    finally:
        # One side stopped (signal or crash): take the other down with it
        server.should_exit = True
        if bot is not None and not bot.is_closed():
            await bot.close()
        await asyncio.gather(*tasks, return_exceptions=True)


def main():
    parser = argparse.ArgumentParser(description="PCAP Relay web server and Discord bot")
    parser.add_argument("--host", default=None, help="Bind host (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: $PORT or 3000)")
    parser.add_argument("--no-bot", action="store_true", help="Serve the web relay only")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default: $LOG_LEVEL or INFO)")
    args = parser.parse_args()

    settings = load_settings()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = replace(settings, **overrides)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run(settings, with_bot=not args.no_bot))


if __name__ == "__main__":
    main()
