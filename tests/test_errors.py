"""Tests for pcap_relay.errors — the failure-to-response mapping."""

import pytest

from pcap_relay.errors import (
    BadIdentifier,
    CredentialMissing,
    CredentialRejected,
    DownloadFailed,
    Forbidden,
    NoMatchingAttachment,
    NotFound,
    PayloadTooLarge,
    RelayError,
    UpstreamBadResponse,
    UpstreamOther,
    UpstreamUnreachable,
    to_response,
)


@pytest.mark.parametrize("error, status", [
    (BadIdentifier("channel"), 400),
    (CredentialMissing(), 401),
    (CredentialRejected(), 401),
    (Forbidden(), 403),
    (NotFound(), 404),
    (NoMatchingAttachment(), 400),
    (PayloadTooLarge(), 400),
    (UpstreamUnreachable(), 500),
    (UpstreamBadResponse(), 500),
    (UpstreamOther(), 500),
    (DownloadFailed(), 500),
])
def test_every_kind_has_one_status(error, status):
    code, message = to_response(error)
    assert code == status
    assert message


def test_messages_are_distinct_per_kind():
    kinds = [
        CredentialMissing, CredentialRejected, Forbidden, NotFound, NoMatchingAttachment,
        PayloadTooLarge, UpstreamUnreachable, UpstreamBadResponse, UpstreamOther, DownloadFailed,
    ]
    messages = {to_response(kind())[1] for kind in kinds}
    assert len(messages) == len(kinds)


def test_bad_identifier_names_the_field():
    assert to_response(BadIdentifier("channel", "abc")) == (400, "Invalid channel ID format")
    assert to_response(BadIdentifier("message", "abc")) == (400, "Invalid message ID format")


def test_detail_stays_out_of_public_message():
    err = UpstreamOther("HTTP 502 from gateway: <html>token=abc</html>")
    assert to_response(err) == (500, "Discord API error")
    assert "token=abc" in str(err)


def test_unknown_exception_maps_to_500():
    assert to_response(KeyError("boom")) == (500, "Internal server error")


def test_all_kinds_are_relay_errors():
    for kind in (CredentialMissing, NotFound, DownloadFailed, PayloadTooLarge):
        assert issubclass(kind, RelayError)
