"""Tests for pcap_relay.models."""

import pytest
from pydantic import ValidationError

from pcap_relay.models import Attachment, DiscordMessage, ServerRecord


class TestDiscordMessage:
    def test_unknown_fields_ignored(self) -> None:
        m = DiscordMessage.model_validate({
            "id": "1", "content": "hi", "author": {"id": "2"},
            "attachments": [{"filename": "a.pcap", "url": "https://cdn.example/a", "width": None}],
        })
        assert m.attachments[0].filename == "a.pcap"

    def test_attachments_default_empty(self) -> None:
        assert DiscordMessage(id="1").attachments == []

    def test_attachment_optional_fields(self) -> None:
        a = Attachment(filename="a.pcap", url="https://cdn.example/a")
        assert a.content_type is None
        assert a.size is None

    def test_attachment_requires_url(self) -> None:
        with pytest.raises(ValidationError):
            Attachment(filename="a.pcap")


class TestServerRecord:
    def test_numeric_port_coerced(self) -> None:
        assert ServerRecord(name="A", host="a.example", port=9000).port == "9000"

    def test_optional_fields(self) -> None:
        s = ServerRecord(name="A", host="a.example", port="9000")
        assert s.discord_url is None
        assert s.players is None
        assert s.description == ""

    def test_players_parsed(self) -> None:
        s = ServerRecord.model_validate({
            "name": "A", "host": "a.example", "port": "9000",
            "players": {"count": 3, "age": "1 hour ago", "updated_at": "2026-10-19T09:00:00Z"},
        })
        assert s.players.count == 3
        assert s.players.age == "1 hour ago"
