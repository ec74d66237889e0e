"""Logging setup for the guided breathing CLI.

Library modules only create module loggers; handlers are attached here,
once, by the entry point.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    logger_name: str = "guided_breathing",
) -> logging.Logger:
    """Configure the package logger.

    - level: DEBUG/INFO/WARNING/ERROR or a numeric level
    - log_file: optional path for a rotating file handler
    - logger_name: logger to configure (the package logger by default)

    Calling it again only adjusts levels; handlers are never duplicated.
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(resolved)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
