"""Discord bot: relay links for capture files, /server and /status commands.

Every handled event is written to the audit log. Audit-log failures are
logged and never interrupt the reply.
"""

from __future__ import annotations

import logging
import sqlite3

import discord
from discord import app_commands
from discord.ext import commands

from pcap_relay.audit import AuditLog, CommandLog
from pcap_relay.discord import is_capture_file
from pcap_relay.servers import ServerList, ServerListError, describe_server, find_server

logger = logging.getLogger(__name__)


def relay_link(web_url: str, channel_id: int | str, message_id: int | str) -> str:
    return f"{web_url}?channel={channel_id}&msg={message_id}"


class RelayCog(commands.Cog):
    def __init__(self, bot: commands.Bot, web_url: str, audit: AuditLog, servers: ServerList) -> None:
        self.bot = bot
        self.web_url = web_url
        self.audit = audit
        self.servers = servers

    def _record(self, log: CommandLog) -> None:
        try:
            self.audit.log_command(log)
        except sqlite3.Error as e:
            logger.error("Failed to log command to database: %s", e)

    def _record_interaction(
        self, interaction: discord.Interaction, command_name: str, success: bool, error: str | None = None
    ) -> None:
        self._record(CommandLog(
            command_name=command_name,
            user_id=str(interaction.user.id),
            user_name=interaction.user.name,
            channel_id=str(interaction.channel_id),
            guild_id=str(interaction.guild_id) if interaction.guild_id else None,
            message_id=str(interaction.id),
            success=success,
            error_message=error,
        ))

    async def server_reply(self, query: str) -> str:
        """Answer text for /server <query>."""
        try:
            servers = await self.servers.fetch()
        except ServerListError as e:
            logger.error("Failed to fetch servers: %s", e)
            return "Failed to fetch server list. Please try again later."

        server = find_server(servers, query)
        if server is None:
            return f"Server '{query}' not found. Please check the name and try again."
        return describe_server(server)

    @app_commands.command(name="status", description="Check bot status")
    async def status(self, interaction: discord.Interaction) -> None:
        await self._respond(interaction, "status", "Okay")

    @app_commands.command(name="server", description="Get connection info for an AC server")
    @app_commands.describe(name="Server name (supports fuzzy matching)")
    async def server(self, interaction: discord.Interaction, name: str) -> None:
        await self._respond(interaction, "server", await self.server_reply(name))

    async def _respond(self, interaction: discord.Interaction, command_name: str, content: str) -> None:
        logger.info("Received command %s from user %s", command_name, interaction.user.id)
        try:
            await interaction.response.send_message(content)
        except discord.HTTPException as e:
            logger.error("Failed to respond to command: %s", e)
            self._record_interaction(interaction, command_name, False, "Failed to send response")
            return
        self._record_interaction(interaction, command_name, True)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return

        logger.debug(
            "Message received in %s (%d attachments)",
            message.channel.id, len(message.attachments),
        )
        attachment = next(
            (a for a in message.attachments if is_capture_file(a.filename)), None
        )
        if attachment is None:
            return

        logger.info(
            "PCAP attachment detected: %s in channel %s message %s",
            attachment.filename, message.channel.id, message.id,
        )
        link = relay_link(self.web_url, message.channel.id, message.id)
        try:
            await message.reply(f"You can view your PCAP [here]({link})")
            success = True
        except discord.HTTPException as e:
            logger.error("Failed to send reply: %s", e)
            success = False

        self._record(CommandLog(
            command_name="pcap_detect",
            user_id=str(message.author.id),
            user_name=message.author.name,
            channel_id=str(message.channel.id),
            guild_id=str(message.guild.id) if message.guild else None,
            message_id=str(message.id),
            success=success,
            error_message=None if success else "Failed to send reply",
        ))


class RelayBot(commands.Bot):
    def __init__(self, web_url: str, audit: AuditLog, servers: ServerList) -> None:
        intents = discord.Intents.default()
        intents.guild_messages = True
        intents.dm_messages = True
        intents.message_content = True
        super().__init__(command_prefix=commands.when_mentioned, intents=intents)
        self.web_url = web_url
        self.audit = audit
        self.servers = servers

    async def setup_hook(self) -> None:
        await self.add_cog(RelayCog(self, self.web_url, self.audit, self.servers))
        synced = await self.tree.sync()
        logger.info("Synced %d application commands", len(synced))

    async def on_ready(self) -> None:
        logger.info("Bot connected as: %s", self.user)
