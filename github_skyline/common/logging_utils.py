"""Logging helpers shared by the skyline command line and pipeline."""

import logging
import sys
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger for a skyline run.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file that receives a copy of every record
        format_string: Custom format string

    Returns:
        The `github_skyline` logger
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(format_string))
        logging.getLogger().addHandler(file_handler)

    return logging.getLogger("github_skyline")


def format_elapsed_time(seconds: float) -> str:
    """Render an openscad wall-clock duration, e.g. `2:05` or `1:02:05` once past the hour."""
    total = int(max(seconds, 0))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@contextmanager
def heartbeat(label: str, interval_seconds: float = 15.0, logger: Optional[logging.Logger] = None) -> Iterator[Any]:
    """
    Keep the log alive while openscad renders; it prints nothing until the mesh is written.

    A daemon thread logs `label` with the elapsed time every `interval_seconds` and is stopped on
    exit. A non-positive interval turns the heartbeat off.

        with heartbeat("Rendering skyline.stl"):
            export_stl(text, path)
    """
    if interval_seconds <= 0:
        yield
        return

    log = logger or logging.getLogger("github_skyline")
    done = threading.Event()
    started = time.monotonic()

    def _beat() -> None:
        while not done.wait(interval_seconds):
            log.info("%s still running (%s)", label, format_elapsed_time(time.monotonic() - started))

    beater = threading.Thread(target=_beat, name=f"heartbeat:{label}", daemon=True)
    beater.start()
    try:
        yield
    finally:
        done.set()
        beater.join(timeout=0.5)
