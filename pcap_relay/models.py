"""Core domain models.

Discord message payloads and server listing records. Pydantic validates the
upstream JSON at the boundary; unknown fields are ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class Attachment(BaseModel):
    """A file attached to a Discord message."""

    id: str | None = None
    filename: str
    url: str  # pre-signed CDN URL, no auth needed
    content_type: str | None = None
    size: int | None = None


class DiscordMessage(BaseModel):
    """The subset of a Discord message the relay needs."""

    id: str
    channel_id: str | None = None
    attachments: list[Attachment] = Field(default_factory=list)


class PlayerInfo(BaseModel):
    count: int
    age: str  # human label, e.g. "5 minutes ago"
    updated_at: str | None = None


class ServerRecord(BaseModel):
    """One entry of the public server listing."""

    name: str
    host: str
    port: str
    description: str = ""
    type: str = ""
    software: str = ""
    website_url: str | None = None
    discord_url: str | None = None
    players: PlayerInfo | None = None

    @field_validator("port", mode="before")
    @classmethod
    def _port_as_text(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value
