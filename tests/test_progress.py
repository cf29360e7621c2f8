"""Tests for TransferReporter."""

from __future__ import annotations

from retroporter.core.progress import TransferReporter, silent_progress


class TestTransferReporter:
    def test_accumulates_increments(self) -> None:
        reporter = silent_progress(100, "Copying...")
        reporter.increment(30)
        reporter.increment(70)
        assert reporter.completed == 100
        assert reporter.total == 100
        assert reporter.message == "Copying..."

    def test_finish_is_idempotent(self) -> None:
        reporter = silent_progress(10)
        reporter.finish()
        reporter.finish()
        assert reporter.finished

    def test_context_manager_finishes(self) -> None:
        with TransferReporter(5, enabled=False) as reporter:
            reporter.increment(5)
        assert reporter.finished

    def test_rendered_bar_tracks_bytes(self) -> None:
        reporter = TransferReporter(2048, "Downloading...", enabled=True)
        reporter.increment(1024)
        reporter.increment(1024)
        reporter.finish()
        assert reporter.completed == 2048
        assert reporter.finished

    def test_unknown_total(self) -> None:
        reporter = TransferReporter(0, "Downloading...", enabled=True)
        reporter.increment(10)
        reporter.finish()
        assert reporter.completed == 10
