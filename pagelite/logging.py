"""Logger hierarchy for build phases.

Every build module logs under ``pagelite.<phase>`` (``pagelite.catalog``,
``pagelite.bundler``, ``pagelite.reconciler`` ...). The CLI attaches a console
handler and, with ``--log-file``, a timestamped file handler to the
``pagelite`` root; library use leaves propagation to the host application.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

_LOGGER_NAME = "pagelite"

CONSOLE_FORMAT = "[pagelite] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(phase: str | None = None) -> logging.Logger:
    """Return the logger for one build phase, or the ``pagelite`` root."""
    return logging.getLogger(f"{_LOGGER_NAME}.{phase}" if phase else _LOGGER_NAME)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route build logs to the console, and to ``log_file`` when given.

    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(_LOGGER_NAME)
    root.setLevel(level)
    root.propagate = False
    for existing in list(root.handlers):
        root.removeHandler(existing)

    root.addHandler(_handler(logging.StreamHandler(), level, CONSOLE_FORMAT))
    if log_file is not None:
        root.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)
        )
    return root


class Timer:
    """Logs how long a labelled build phase took."""

    def __init__(self, label: str, logger: logging.Logger | None = None) -> None:
        self.label = label
        self.logger = logger or get_logger()
        self._start = time.perf_counter()
        self.logger.info("Starting %s...", label)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0

    def end(self) -> float:
        duration = self.elapsed_ms()
        self.logger.info("%s completed in %.2fms", self.label, duration)
        return duration


__all__ = ["Timer", "configure_logging", "get_logger"]
