"""Relay failure taxonomy and its mapping to HTTP responses.

Every failure in the retrieval pipeline is raised as a RelayError subclass.
Each subclass carries exactly one status code and a short public message;
to_response() turns any exception into the (status, message) pair the HTTP
layer sends. Upstream response bodies never end up in the public message.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every failure of the attachment retrieval pipeline."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        # detail is for logs only; the client sees `message`
        super().__init__(detail or self.message)
        self.detail = detail


class BadIdentifier(RelayError):
    status_code = 400

    def __init__(self, field: str, value: str = "") -> None:
        self.field = field
        self.message = f"Invalid {field} ID format"
        super().__init__(f"{self.message}: {value!r}")


class CredentialMissing(RelayError):
    status_code = 401
    message = "Discord OAuth token not configured"


class CredentialRejected(RelayError):
    status_code = 401
    message = "Discord authentication failed (invalid or missing token)"


class Forbidden(RelayError):
    status_code = 403
    message = "Access denied to Discord message"


class NotFound(RelayError):
    status_code = 404
    message = "Discord message not found"


class NoMatchingAttachment(RelayError):
    status_code = 400
    message = "Message has no PCAP attachments (.pcap or .pcapng)"


class PayloadTooLarge(RelayError):
    status_code = 400
    message = "Attachment exceeds maximum size limit (100 MB)"


class UpstreamUnreachable(RelayError):
    status_code = 500
    message = "Failed to connect to Discord API"


class UpstreamBadResponse(RelayError):
    status_code = 500
    message = "Failed to parse Discord response"


class UpstreamOther(RelayError):
    status_code = 500
    message = "Discord API error"


class DownloadFailed(RelayError):
    status_code = 500
    message = "Failed to download attachment"


INTERNAL_ERROR = (500, "Internal server error")


def to_response(error: BaseException) -> tuple[int, str]:
    """Map a failure to (status_code, public message). Never raises."""
    if isinstance(error, RelayError):
        return error.status_code, error.message
    return INTERNAL_ERROR
