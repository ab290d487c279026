"""Logging setup for the command line tool."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from lingua.core.settings import Settings


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Route log records to the console via rich and optionally to a file.

    Args:
        settings: Supplies the log level and optional log file path
        verbose: Force DEBUG level regardless of settings
    """
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)

    handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True)]
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )
