"""Console logging setup with a level-colored formatter."""

from __future__ import annotations

import logging
import os
import sys
from typing import Final, TextIO

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless debugging.
NOISY_LOGGERS: Final[tuple[str, ...]] = ("discord", "discord.voice_state", "discord.player")


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color.

    Colors are off when ``NO_COLOR`` is set or the target stream is not a
    TTY (e.g. redirected to a file).
    """

    COLORS: Final[dict[int, str]] = {
        logging.DEBUG: "\033[36m",  # cyan
        logging.INFO: "\033[32m",  # green
        logging.WARNING: "\033[33m",  # yellow
        logging.ERROR: "\033[31m",  # red
        logging.CRITICAL: "\033[1;31m",  # bold red
    }
    RESET: Final[str] = "\033[0m"

    def __init__(
        self,
        fmt: str | None = DEFAULT_FORMAT,
        datefmt: str | None = DEFAULT_DATEFMT,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(fmt, datefmt)
        self._stream = stream

    def use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stderr
        isatty = getattr(stream, "isatty", None)
        return callable(isatty) and bool(isatty())

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color():
            return super().format(record)

        # Color a copy so other handlers see the plain level name.
        colored = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, "")
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> logging.Handler:
    """Install a single colored console handler on the root logger.

    Calling it again replaces the handler installed by a previous call.
    """
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)
    target = stream or sys.stderr

    handler = logging.StreamHandler(target)
    handler.setFormatter(ColoredFormatter(stream=target))
    handler.set_name("queuecord-console")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == handler.get_name():
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(resolved_level)

    noisy_level = logging.DEBUG if resolved_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return handler
