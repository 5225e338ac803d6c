"""Tests for telemetry helpers."""

from unittest.mock import patch

from inkies.telemetry import Metrics, format_doc_log, preview_text


class TestFormatDocLog:
    def test_truncates_id(self):
        assert format_doc_log("Coordinator", "0123456789abcdef", "msg") == "[Coordinator:01234567] msg"

    def test_empty_id(self):
        assert format_doc_log("Export", "", "msg") == "[Export:unknown] msg"


class TestPreviewText:
    def test_newlines_flattened(self):
        assert preview_text("a\nb") == "a⏎b"

    def test_truncated(self):
        assert preview_text("x" * 10, limit=4) == "xxxx…"


class TestMetrics:
    def test_counters_with_labels(self):
        m = Metrics()
        m.inc("compile.failed", {"kind": "io_error"})
        m.inc("compile.failed", {"kind": "io_error"})
        m.inc("compile.failed", {"kind": "tool_missing"})

        assert m.get_counter("compile.failed", {"kind": "io_error"}) == 2
        assert m.get_counter("compile.failed") == 0
        assert "compile.failed{kind=tool_missing}" in m.snapshot()["counters"]

    def test_gauge(self):
        m = Metrics()
        m.gauge("coordinator.documents", 3)
        assert m.get_gauge("coordinator.documents") == 3

    def test_disabled(self):
        m = Metrics()
        with patch("inkies.config.METRICS_ENABLED", False):
            m.inc("render.reused")
        assert m.get_counter("render.reused") == 0

    def test_reset(self):
        m = Metrics()
        m.inc("a")
        m.reset()
        assert m.snapshot() == {"counters": {}, "gauges": {}}
