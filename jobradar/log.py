"""Logging setup and the progress-line channel shared by pipeline stages."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable

_LOG_DIR = Path(os.environ.get("JOBRADAR_LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _configure() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    root.addHandler(console)

    # JOBRADAR_LOG_FILE=0 disables the file handler.
    if os.environ.get("JOBRADAR_LOG_FILE", "1").lower() in ("0", "false", "no"):
        return
    try:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = _LOG_DIR / f"jobradar_{datetime.now().strftime('%Y-%m-%d')}.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
        root.addHandler(fh)
    except OSError:
        pass


ProgressSink = Callable[[str], None]


def emit(progress: ProgressSink | None, message: str, logger: logging.Logger) -> None:
    """Log a progress line and forward it to the caller's sink, if any.

    The sink is fire-and-forget: a failing sink is logged and ignored.
    """
    if message.startswith("[ERROR]"):
        logger.warning("%s", message)
    else:
        logger.info("%s", message)
    if progress is None:
        return
    try:
        progress(message)
    except Exception as exc:
        logger.warning("Progress sink raised %s: %s", type(exc).__name__, exc)
