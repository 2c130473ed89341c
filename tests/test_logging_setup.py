"""Tests for logging formatters and token redaction."""

import json
import logging

from common.logging_setup import (
    HumanFormatter,
    JSONFormatter,
    RedactFilter,
    get_logger,
    run_id_var,
)


def make_record(msg, *args, **extra):
    record = logging.LogRecord("delivery.test", logging.INFO, __file__, 1, msg, args, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_redacts_token_in_message_and_args(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", "sekrit-token")
    record = make_record("auth Bot sekrit-token for %s", "Bot sekrit-token")
    RedactFilter().filter(record)
    assert "sekrit-token" not in record.getMessage()
    assert "***REDACTED***" in record.getMessage()


def test_filter_injects_run_context():
    token = run_id_var.set("abc123")
    try:
        record = make_record("hello")
        RedactFilter().filter(record)
    finally:
        run_id_var.reset(token)
    assert record.run_id == "abc123"
    assert record.scope == "-"


def test_human_formatter_appends_extras():
    record = make_record("Channel %s finished", "c1", channel_id="c1", outcome="match", took_ms=12)
    RedactFilter().filter(record)
    line = HumanFormatter("%(message)s").format(record)
    assert "Channel c1 finished" in line
    assert line.endswith("| channel_id=c1 outcome=match took_ms=12")


def test_human_formatter_without_extras():
    record = make_record("hello")
    RedactFilter().filter(record)
    line = HumanFormatter("%(message)s").format(record)
    assert line.endswith("(run=-) hello")
    assert "created=" not in line


def test_json_formatter():
    record = make_record("Regenerated", channel_id="c1", took_ms=3)
    RedactFilter().filter(record)
    body = json.loads(JSONFormatter("%(message)s").format(record))
    assert body["msg"] == "Regenerated"
    assert body["lvl"] == "INFO"
    assert body["channel_id"] == "c1"
    assert body["took_ms"] == 3
    assert "created" not in body


def test_context_adapter_adds_extras(caplog):
    log = get_logger("tests.adapter", channel_id="c9")
    with caplog.at_level(logging.INFO, logger="tests.adapter"):
        log.info("hi")
    assert caplog.records[0].channel_id == "c9"
