from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional


def default_log_path() -> str:
    """Per-run log file in the system temp directory."""
    return str(Path(tempfile.gettempdir()) / f"shellforge-install-{os.getpid()}.log")


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.DEBUG,
    also_console: bool = False,
) -> str:
    """Configure logging for an install run.

    All step outcomes are recorded with timestamps in the run log. The user
    sees colored messages through shellforge.console instead of a console
    handler, unless also_console is set (--verbose).

    If the requested file cannot be created we fall back to the current
    working directory and report the path actually used.

    Returns the actual file path being used.
    """

    log_path = log_path or default_log_path()

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_shellforge_configured", False):
        return getattr(logger, "_shellforge_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path.cwd() / "shellforge-install.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_shellforge_configured", True)
    setattr(logger, "_shellforge_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
