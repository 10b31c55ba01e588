from __future__ import annotations

import logging
from pathlib import Path
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str, log_file: Path | None = None) -> None:
    """Log to stderr, and to ``log_file`` when given; stdout is kept for command output."""

    resolved_level = getattr(logging, level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        handlers.append(file_handler)

    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, handlers=handlers, force=True)
