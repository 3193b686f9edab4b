"""File logging for the editor."""

import logging
from pathlib import Path
from typing import Optional

from .settings import app_data_dir

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_log_path() -> Path:
    """Return the path to the editor log file."""
    log_dir = app_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "siteeditor.log"


def configure_logging(level: int = logging.INFO, path: Optional[Path] = None) -> logging.Logger:
    """Attach a single file handler to the ``siteeditor`` logger."""
    logger = logging.getLogger("siteeditor")
    logger.setLevel(level)
    if not any(getattr(h, "_siteeditor", False) for h in logger.handlers):
        handler = logging.FileHandler(path or get_log_path(), encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._siteeditor = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
