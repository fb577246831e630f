"""Tests for pcap_relay.audit — SQLite command log."""

import time

from pcap_relay.audit import AuditLog, CommandLog, database_path


def _log(command: str = "server", user: str = "111", success: bool = True, **kwargs) -> CommandLog:
    return CommandLog(
        command_name=command,
        user_id=user,
        user_name=f"user{user}",
        channel_id="123456789012345678",
        message_id="234567890123456789",
        success=success,
        **kwargs,
    )


def test_database_path_strips_scheme():
    assert database_path("sqlite:./bot.db") == "./bot.db"
    assert database_path("sqlite:///data/bot.db") == "/data/bot.db"
    assert database_path("/var/lib/relay.db") == "/var/lib/relay.db"


def test_init_db_is_idempotent(tmp_path):
    log = AuditLog(tmp_path / "a.db")
    log.init_db()
    log.init_db()
    assert log.total_uses() == 0


def test_log_and_recent(audit_log):
    audit_log.log_command(_log("pcap_detect", guild_id="999"))
    audit_log.log_command(_log("status", success=False, error_message="Failed to send response"))

    recent = audit_log.recent_logs(10)
    assert [r.command_name for r in recent] == ["status", "pcap_detect"]
    assert recent[0].success is False
    assert recent[1].user_name == "user111"
    assert recent[1].timestamp > 0


def test_recent_respects_limit(audit_log):
    for _ in range(5):
        audit_log.log_command(_log())
    assert len(audit_log.recent_logs(3)) == 3


def test_command_stats_counts_successes_only(audit_log):
    audit_log.log_command(_log("server"))
    audit_log.log_command(_log("server"))
    audit_log.log_command(_log("status"))
    audit_log.log_command(_log("status", success=False))

    assert audit_log.command_stats() == [("server", 2), ("status", 1)]
    assert audit_log.total_uses() == 3


def test_user_stats(audit_log):
    audit_log.log_command(_log("server", user="1"))
    audit_log.log_command(_log("server", user="1"))
    audit_log.log_command(_log("pcap_detect", user="1"))
    audit_log.log_command(_log("status", user="1", success=False))
    audit_log.log_command(_log("server", user="2"))

    stats = audit_log.user_stats("1")
    assert stats.total_count == 3
    assert stats.command_breakdown == [("server", 2), ("pcap_detect", 1)]
    assert stats.first_use is not None
    assert stats.last_use >= stats.first_use
    assert audit_log.user_command_count("2") == 1


def test_user_stats_unknown_user(audit_log):
    stats = audit_log.user_stats("nobody")
    assert stats.total_count == 0
    assert stats.command_breakdown == []
    assert stats.first_use is None
    assert stats.last_use is None


def test_usage_over_time(audit_log):
    audit_log.log_command(_log())
    audit_log.log_command(_log())
    audit_log.log_command(_log(success=False))

    now = int(time.time())
    usage = audit_log.usage_over_time(7, now=now)
    assert len(usage) == 1
    assert usage[0].count == 2
    assert usage[0].date == time.strftime("%Y-%m-%d", time.gmtime(now))


def test_usage_over_time_window_excludes_old(audit_log):
    audit_log.log_command(_log())
    future = int(time.time()) + 30 * 86400
    assert audit_log.usage_over_time(7, now=future) == []
