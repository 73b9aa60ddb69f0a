"""Logging helpers."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

_QUIET_LOGGERS = ("httpx", "httpcore")
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str, log_dir: Optional[Path] = None) -> None:
    """Configure root logging for the API server and the search CLI.

    Records go to stderr and, when ``log_dir`` is given, to ``petotel.log`` inside it.
    Upstream HTTP client chatter is held at WARNING so request logs stay readable.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "petotel.log"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
