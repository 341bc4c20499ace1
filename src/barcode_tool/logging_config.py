"""Logging configuration and round progress reporting."""

import logging
import logging.handlers
import sys
import time
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .models import SkippedItem


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name on a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None,
                 use_colors: bool = True, stream=None):
        super().__init__(fmt, datefmt)
        stream = stream if stream is not None else sys.stdout
        self.use_colors = use_colors and stream.isatty()

    def formatMessage(self, record: logging.LogRecord) -> str:
        text = super().formatMessage(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if self.use_colors and color:
            text = text.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)
        return text


class RoundProgress:
    """Progress of one stage (search or fetch) of an acquisition round.

    Each taxon is reported once, either as done or as a SkippedItem. Skips
    are logged at WARNING with the stage that dropped them and their reason,
    and ``complete`` summarizes them per stage.
    """

    def __init__(self, logger: logging.Logger, gene: str, stage: str, total: int):
        self.logger = logger
        self.gene = gene
        self.stage = stage
        self.total = total
        self.done = 0
        self.skipped: List[SkippedItem] = []
        self.start_time = time.monotonic()

    @property
    def succeeded(self) -> int:
        return self.done - len(self.skipped)

    def _position(self) -> str:
        return f"[{self.done}/{self.total}]"

    def ok(self, taxon: str, detail: str = "") -> None:
        self.done += 1
        detail = f" -> {detail}" if detail else ""
        self.logger.info(f"{self.gene} {self.stage}: {taxon}{detail} {self._position()}")

    def skip(self, item: SkippedItem) -> None:
        self.done += 1
        self.skipped.append(item)
        self.logger.warning(
            f"{self.gene} {self.stage}: skipped {item.taxon} "
            f"[{item.stage}] {item.reason} {self._position()}"
        )

    def skip_counts(self) -> Dict[str, int]:
        """Number of skipped taxa per failing stage."""
        return dict(Counter(item.stage for item in self.skipped))

    def complete(self) -> None:
        """Log the stage summary."""
        elapsed = time.monotonic() - self.start_time
        message = (f"{self.gene} {self.stage} complete: "
                   f"{self.succeeded}/{self.total} taxa in {elapsed:.1f}s")
        counts = self.skip_counts()
        if counts:
            message += ", skipped " + ", ".join(
                f"{n} at {stage}" for stage, n in sorted(counts.items())
            )
        self.logger.info(message)


def setup_logging(
    level: str = "INFO",
    log_dir: str = ".barcode_logs",
    quiet: bool = False,
    colors: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> Path:
    """
    Route the package's logs to a rotating file and the console.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files
        quiet: Only errors reach the console
        colors: Enable colored console output
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Path of the log file
    """
    numeric_level = getattr(logging, level.upper())

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"barcode_tool_{datetime.now().strftime('%Y%m%d')}.log"

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.DEBUG)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.ERROR if quiet else numeric_level)
    console_handler.setFormatter(ColoredFormatter('%(levelname)s - %(message)s', use_colors=colors))
    root_logger.addHandler(console_handler)

    get_logger('cli').debug(f"Logging initialized - Level: {level}, File: {log_file}")
    return log_file


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    return logging.getLogger(f"barcode_tool.{name}")


class LogTimer:
    """Context manager logging how long an operation took."""

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger('timing')
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self):
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.monotonic() - self.start_time
        if exc_type is None:
            self.logger.info(f"{self.operation} completed in {self.elapsed:.2f}s")
        else:
            self.logger.warning(f"{self.operation} stopped after {self.elapsed:.2f}s: {exc_val}")
