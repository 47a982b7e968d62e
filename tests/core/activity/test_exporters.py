"""Tests for routetrace.core.activity.exporters."""

from routetrace.core.activity.exporters import ConsoleExporter, InMemoryExporter, NoOpExporter
from routetrace.core.activity.models import ActivityOperation, ActivitySpan, FinishReason


def _finished_span(sampled: bool = True) -> ActivitySpan:
    span = ActivitySpan(
        operation=ActivityOperation.navigation,
        route_name="/orders",
        start_time=0.0,
        sampled=sampled,
    )
    span.finish(FinishReason.idle_timeout, 1000.0)
    return span


class TestInMemoryExporter:

    def test_collects_in_order(self):
        exporter = InMemoryExporter()
        first, second = _finished_span(), _finished_span()
        exporter.export(first)
        exporter.export(second)
        assert exporter.spans == [first, second]

    def test_drops_after_shutdown(self):
        exporter = InMemoryExporter()
        exporter.shutdown()
        exporter.export(_finished_span())
        assert exporter.spans == []

    def test_clear(self):
        exporter = InMemoryExporter()
        exporter.export(_finished_span())
        exporter.clear()
        assert exporter.spans == []


class TestConsoleExporter:

    def test_prints_sampled_span(self, capsys):
        ConsoleExporter().export(_finished_span())
        out = capsys.readouterr().out
        assert "navigation:/orders" in out
        assert "reason=idleTimeout" in out

    def test_skips_unsampled_span_by_default(self, capsys):
        ConsoleExporter().export(_finished_span(sampled=False))
        assert capsys.readouterr().out == ""

    def test_can_include_unsampled(self, capsys):
        ConsoleExporter(include_unsampled=True).export(_finished_span(sampled=False))
        assert "unsampled" in capsys.readouterr().out


def test_noop_exporter_accepts_spans():
    exporter = NoOpExporter()
    exporter.export(_finished_span())
    exporter.shutdown()
