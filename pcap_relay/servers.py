"""Server listing client and fuzzy server-name lookup.

find_server() resolves whatever a user typed into one ServerRecord:

    1. exact name match, ASCII case-insensitive (first in list order)
    2. otherwise Jaro-Winkler similarity on lowercased names, considering
       only servers whose name is at most twice the query length, keeping
       scores >= SIMILARITY_THRESHOLD; highest score wins, ties go to the
       server listed first

A miss is None, never an error.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import httpx
from pydantic import TypeAdapter, ValidationError
from rapidfuzz.distance import JaroWinkler

from pcap_relay.models import ServerRecord

logger = logging.getLogger(__name__)

SERVER_LIST_URL = "https://treestats.net/servers.json"

SIMILARITY_THRESHOLD = 0.8
# A query shorter than half the server name is never fuzzy-matched against it
MIN_QUERY_LENGTH_RATIO = 0.5

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)

_server_list_adapter = TypeAdapter(list[ServerRecord])


class ServerListError(RuntimeError):
    """Raised when the server listing cannot be fetched or parsed."""


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

def similarity(a: str, b: str) -> float:
    """Jaro-Winkler similarity in [0, 1]; 1.0 means identical."""
    return JaroWinkler.similarity(a, b)


def _ascii_fold(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _long_enough(query: str, name: str) -> bool:
    min_length = math.ceil(len(name) * MIN_QUERY_LENGTH_RATIO)
    return len(query) >= min_length


def find_server(servers: Sequence[ServerRecord], query: str) -> ServerRecord | None:
    folded = _ascii_fold(query)
    for server in servers:
        if _ascii_fold(server.name) == folded:
            return server

    lowered = query.lower()
    best: ServerRecord | None = None
    best_score = 0.0
    for server in servers:
        if not _long_enough(query, server.name):
            continue
        score = similarity(server.name.lower(), lowered)
        if score < SIMILARITY_THRESHOLD:
            continue
        if best is None or score > best_score:
            best, best_score = server, score

    if best is not None:
        logger.debug("Fuzzy matched %r to %r (score=%.3f)", query, best.name, best_score)
    return best


# ---------------------------------------------------------------------------
# Reply text
# ---------------------------------------------------------------------------

def _players_sentence(count: int, age: str) -> str:
    if count == 1:
        return f"As of {age}, 1 character was in the game world."
    return f"As of {age}, {count} characters were in the game world."


def describe_server(server: ServerRecord) -> str:
    """Connection details plus Discord link and player count, when known."""
    reply = f"You can connect to {server.name} at `{server.host}:{server.port}`."
    players = server.players
    no_stats = "I don't seem to have any information on player counts. They must not use TreeStats :("

    if server.discord_url and players:
        return (
            f"{reply} {server.name}'s Discord is {server.discord_url}. "
            f"{_players_sentence(players.count, players.age)}"
        )
    if players:
        return (
            f"{reply} {server.name} doesn't have a Discord. "
            f"{_players_sentence(players.count, players.age)}"
        )
    if server.discord_url:
        return f"{reply} {server.name}'s Discord is {server.discord_url}. {no_stats}"
    return f"{reply} {server.name} doesn't have a Discord and {no_stats}"


# ---------------------------------------------------------------------------
# Listing client
# ---------------------------------------------------------------------------

class ServerList:
    """Fetches the public server listing. Nothing is cached between calls."""

    def __init__(
        self,
        url: str = SERVER_LIST_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def fetch(self) -> list[ServerRecord]:
        logger.debug("Fetching server list from: %s", self._url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(self._url)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ServerListError(
                f"Server list returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise ServerListError(f"Failed to fetch servers: {e}") from e

        try:
            return _server_list_adapter.validate_python(resp.json())
        except (ValueError, ValidationError) as e:
            raise ServerListError(f"Failed to parse servers: {e}") from e
