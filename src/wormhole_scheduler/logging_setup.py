# src/wormhole_scheduler/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "wormhole.log"

# Loggers that log once per wake-up or per arm; on the console only WARNING+.
_CHATTY_PREFIXES = ("wormhole_scheduler.core.timers",)


class _ConsoleNoiseFilter(logging.Filter):
    """Console: our logs (minus per-wake-up chatter), everything else only at ERROR+."""

    def __init__(self, chatty: tuple[str, ...] = _CHATTY_PREFIXES) -> None:
        super().__init__()
        self._chatty = chatty

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("wormhole_scheduler."):
            # Third-party loggers and 'py.warnings'.
            return record.levelno >= logging.ERROR
        if name.startswith(self._chatty):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/wormhole",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send filtered logs to stderr and everything (schedule rebuilds, wake-ups)
    to <log_dir>/wormhole.log. Replaces handlers already on the root logger.

    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s [%(threadName)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)

    root.addHandler(console)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
