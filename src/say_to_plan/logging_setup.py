# src/say_to_plan/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "say_to_plan.log"

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Minimum console level per logger-name prefix; the longest matching prefix wins.
# The microphone worker logs every recording, which would interleave with the prompt.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    ("say_to_plan.voice.mic_source", logging.WARNING),
    ("say_to_plan.", logging.NOTSET),
)

# Libraries that talk to the transcription API; chatty at INFO even in the file log.
_QUIET_LIBRARIES = ("httpx", "httpcore", "openai")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keeps the console readable while a task is being typed or dictated.

    Package loggers pass at the handler level; anything else (openai/httpx,
    captured `py.warnings`) only shows up on the console at ERROR+.
    The file handler is unfiltered.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        floor = logging.ERROR
        matched = ""
        for prefix, level in _CONSOLE_FLOORS:
            if record.name.startswith(prefix) and len(prefix) > len(matched):
                matched, floor = prefix, level
        return record.levelno >= floor


def setup_logging(
    *,
    log_dir: str | Path = ".local/say_to_plan",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console + file handlers on the root logger.

    Replaces existing root handlers, so calling it twice does not duplicate output.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    to_file = logging.FileHandler(str(log_file), encoding="utf-8")
    to_file.setLevel(file_level)
    to_file.setFormatter(fmt)
    root.addHandler(to_file)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
