"""Logging helpers with rich terminal output."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

console = Console()
console_err = Console(stderr=True, style="red")
log_console = Console(stderr=True)


def setup_logger(name: str, verbosity: int = 0, log_file: str | None = None) -> logging.Logger:
    """
    Configure the named logger once at startup.

    Args:
        name: Logger name (child loggers propagate into it)
        verbosity: 0=WARNING, 1=INFO, 2 or more=DEBUG
        log_file: Optional path for a rotating log file

    Returns:
        Configured logger instance
    """
    level_map = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
    }
    level = level_map.get(verbosity, logging.DEBUG)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=log_console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if log_file:
        from logging.handlers import RotatingFileHandler
        from pathlib import Path

        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; handlers are installed by setup_logger()."""
    return logging.getLogger(name)


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")
