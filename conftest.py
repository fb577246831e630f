import httpx
import pytest

from pcap_relay.audit import AuditLog


@pytest.fixture
def audit_log(tmp_path) -> AuditLog:
    """Fresh audit database per test."""
    log = AuditLog(tmp_path / "audit.db")
    log.init_db()
    return log


@pytest.fixture
def capture_requests():
    """Build an httpx.MockTransport that records every request it answers.

    Usage: transport, seen = capture_requests(handler)
    """
    def build(handler):
        seen: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        return httpx.MockTransport(record), seen

    return build
