"""Logger hierarchy and handler setup for tourgen runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, TextIO

ROOT_LOGGER = "tourgen"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the logger for ``component`` (e.g. ``"llm.client"``) under tourgen."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


class ComponentFormatter(logging.Formatter):
    """Console format tagging each record with its component: ``[tourgen:llm.client] INFO ...``."""

    def __init__(self) -> None:
        super().__init__("%(levelname)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        component = record.name[len(ROOT_LOGGER) + 1 :] if record.name.startswith(f"{ROOT_LOGGER}.") else ""
        tag = f"{ROOT_LOGGER}:{component}" if component else ROOT_LOGGER
        return f"[{tag}] {super().format(record)}"


def _console_handler(level: int, stream: Optional[TextIO]) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(ComponentFormatter())
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    # The file sink always records debug detail, whatever the console shows.
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Install console (and optional file) handlers on the tourgen logger.

    Calling it again replaces the previous handlers, so repeated CLI runs in
    one process never duplicate output.
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [_console_handler(console_level, stream)]
    if log_file is not None:
        handlers.append(_file_handler(Path(log_file)))

    logger = logging.getLogger(ROOT_LOGGER)
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(min(handler.level for handler in handlers))
    logger.propagate = False
    return logger


__all__ = ["ComponentFormatter", "configure_logging", "get_logger"]
