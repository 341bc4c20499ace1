"""Tests for logging setup and round progress."""

import io
import logging

import pytest

from barcode_tool.logging_config import (
    ColoredFormatter, LogTimer, RoundProgress, get_logger, setup_logging
)
from barcode_tool.models import SkippedItem


@pytest.fixture
def logger():
    return get_logger('tests')


class TestRoundProgress:
    """Test cases for per-stage progress reporting."""

    def test_skip_is_logged_with_stage_and_reason(self, logger, caplog):
        progress = RoundProgress(logger, "atpB", "fetch", 2)
        with caplog.at_level(logging.INFO, logger='barcode_tool'):
            progress.ok("Nymphaea_alba", "N1")
            progress.skip(SkippedItem("Hydrocleys_martii", "parse", "Record H1 has no sequence"))

        warning = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warning) == 1
        message = warning[0].getMessage()
        assert "Hydrocleys_martii" in message
        assert "[parse]" in message
        assert "Record H1 has no sequence" in message
        assert "[2/2]" in message

    def test_counts(self, logger):
        progress = RoundProgress(logger, "atpB", "fetch", 4)
        progress.ok("Nymphaea_alba")
        progress.skip(SkippedItem("Hydrocleys_martii", "fetch", "timed out"))
        progress.skip(SkippedItem("Nuphar_lutea", "parse", "no organism"))
        progress.skip(SkippedItem("Alisma_lanceolatum", "fetch", "timed out"))

        assert progress.done == 4
        assert progress.succeeded == 1
        assert [item.taxon for item in progress.skipped] == [
            "Hydrocleys_martii", "Nuphar_lutea", "Alisma_lanceolatum"
        ]
        assert progress.skip_counts() == {'fetch': 2, 'parse': 1}

    def test_complete_summarizes_skips(self, logger, caplog):
        progress = RoundProgress(logger, "rbcL", "search", 3)
        progress.ok("Nymphaea_alba", "N1")
        progress.skip(SkippedItem("Nuphar_lutea", "search", "fewer than 1 matches"))

        with caplog.at_level(logging.INFO, logger='barcode_tool'):
            progress.complete()

        summary = caplog.records[-1].getMessage()
        assert summary.startswith("rbcL search complete: 1/3 taxa")
        assert summary.endswith("skipped 1 at search")

    def test_complete_without_skips(self, logger, caplog):
        progress = RoundProgress(logger, "rbcL", "search", 1)
        progress.ok("Nymphaea_alba")
        with caplog.at_level(logging.INFO, logger='barcode_tool'):
            progress.complete()
        assert "skipped" not in caplog.records[-1].getMessage()


class TestLogTimer:
    """Test cases for the timing context manager."""

    def test_success(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger='barcode_tool'):
            with LogTimer("atpB acquisition round", logger) as timer:
                pass
        assert timer.elapsed >= 0
        assert "atpB acquisition round completed" in caplog.records[-1].getMessage()

    def test_failure_propagates(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger='barcode_tool'):
            with pytest.raises(RuntimeError):
                with LogTimer("atpB acquisition round", logger):
                    raise RuntimeError("no identifiers")
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "no identifiers" in record.getMessage()


class TestColoredFormatter:
    """Test cases for the console formatter."""

    def make_record(self):
        return logging.LogRecord("barcode_tool.tests", logging.WARNING, __file__, 1,
                                 "skipped Nuphar_lutea", None, None)

    def test_plain_when_not_a_terminal(self):
        formatter = ColoredFormatter('%(levelname)s - %(message)s', stream=io.StringIO())
        assert formatter.format(self.make_record()) == "WARNING - skipped Nuphar_lutea"

    def test_colors_on_terminal(self):
        class Terminal(io.StringIO):
            def isatty(self):
                return True

        formatter = ColoredFormatter('%(levelname)s - %(message)s', stream=Terminal())
        record = self.make_record()
        text = formatter.format(record)

        assert text == "\033[33mWARNING\033[0m - skipped Nuphar_lutea"
        assert record.levelname == "WARNING"


class TestSetupLogging:
    """Test cases for handler setup."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Drop the handlers added by setup_logging."""
        root = logging.getLogger()
        level = root.level
        yield
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)

    def test_file_and_console_handlers(self, tmp_path):
        log_file = setup_logging(level="DEBUG", log_dir=str(tmp_path / "logs"), colors=False)

        assert log_file.parent == tmp_path / "logs"
        handlers = logging.getLogger().handlers
        assert len(handlers) == 2
        assert {h.level for h in handlers} == {logging.DEBUG}

        get_logger('tests').info("fetched Nymphaea_alba")
        for handler in handlers:
            handler.flush()
        assert "fetched Nymphaea_alba" in log_file.read_text()

    def test_quiet_console(self, tmp_path):
        setup_logging(log_dir=str(tmp_path), quiet=True)
        console = [h for h in logging.getLogger().handlers
                   if not isinstance(h, logging.FileHandler)]
        assert [h.level for h in console] == [logging.ERROR]

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging(log_dir=str(tmp_path))
        first = logging.getLogger().handlers[:]
        setup_logging(log_dir=str(tmp_path))

        assert len(logging.getLogger().handlers) == 2
        assert not set(first) & set(logging.getLogger().handlers)
