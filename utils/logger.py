#!/usr/bin/env python3
"""
Logging setup for tracker applications

Application loggers get a rich console handler and, optionally, a timestamped
log file. The same handlers are attached to the library package loggers so
messages from tracking and registration show up alongside the application's.
"""

import logging
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Iterable, List
from rich.logging import RichHandler
from rich.console import Console

console = Console()

LIBRARY_LOGGERS = ("tracking", "registration", "utils")

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _make_handlers(name: str, log_dir: str, level: int, save_to_file: bool) -> List[logging.Handler]:
    # diagnostic messages contain brackets, so rich markup stays off
    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_time=True,
        show_path=False
    )
    console_handler.setLevel(level)
    handlers: List[logging.Handler] = [console_handler]

    if save_to_file:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(log_dir_path / f"{name}_{timestamp}.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        handlers.append(file_handler)

    return handlers


def setup_logger(
    name: str = "MarkerTracker",
    log_dir: str = "logs",
    level: str = "INFO",
    save_to_file: bool = True,
    library_loggers: Iterable[str] = LIBRARY_LOGGERS
) -> logging.Logger:
    """
    Setup an application logger with rich console output and optional file output

    Args:
        name: Logger name (also the log file prefix)
        log_dir: Directory for log files
        level: Console level (DEBUG, INFO, WARNING, ERROR); files always get DEBUG
        save_to_file: Whether to write a timestamped log file
        library_loggers: Package loggers that share the same handlers

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper())
    handlers = _make_handlers(name, log_dir, numeric_level, save_to_file)
    file_level = logging.DEBUG if save_to_file else numeric_level

    logger = logging.getLogger(name)
    for target in [logger] + [logging.getLogger(package) for package in library_loggers]:
        target.handlers.clear()
        target.setLevel(file_level)
        target.propagate = False
        for handler in handlers:
            target.addHandler(handler)

    for handler in handlers:
        if isinstance(handler, logging.FileHandler):
            logger.info(f"Logging to file: {handler.baseFilename}")

    return logger


def log_section(logger: logging.Logger, title: str, width: int = 80):
    """Log a section header"""
    logger.info("=" * width)
    logger.info(f"  {title}")
    logger.info("=" * width)


def log_config(logger: logging.Logger, config: Dict[str, Any], indent: int = 1):
    """Log a (nested) configuration mapping, one key per line"""
    if indent == 1:
        logger.info("Configuration:")

    pad = "  " * indent
    for key, value in config.items():
        if isinstance(value, dict):
            logger.info(f"{pad}{key}:")
            log_config(logger, value, indent + 1)
        else:
            logger.info(f"{pad}{key}: {value}")
