"""
Logging for the flight schedule service.

Every module logs through the shared loguru ``logger``. On import only a
stdout sink is active; ``main.py`` calls ``setup_logger`` with the values
from ``settings.logging`` to add the rotating file sink.

    from src.utils import logger

    logger.info("Collecting CEB 2024-02")
"""

import sys
from pathlib import Path

from loguru import logger


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def _add_console_sink(level: str) -> None:
    # Locals are not rendered in tracebacks: they can hold provider keys and payloads
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True, backtrace=True, diagnose=False)


def _add_file_sink(level: str, path: Path, rotation: str, retention: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        path,
        format=FILE_FORMAT,
        level=level,
        rotation=rotation,
        retention=retention,
        compression="zip",
        backtrace=True,
        diagnose=False,
        enqueue=True,
    )


def setup_logger(
    log_level: str = "INFO",
    log_dir: str | Path = "logs",
    log_file: str = "flight-schedules.log",
    rotation: str = "10 MB",
    retention: str = "7 days",
    enable_stdout: bool = True,
    enable_file: bool = True,
) -> None:
    """
    Replace all sinks with a console sink and, optionally, a rotating file.

    Args:
        log_level: Minimum level for both sinks
        log_dir: Directory of the log file, created if missing
        log_file: Log file name
        rotation: Loguru rotation rule, e.g. "10 MB"
        retention: Loguru retention rule, e.g. "7 days"
        enable_stdout: Add the console sink
        enable_file: Add the file sink
    """
    logger.remove()

    if enable_stdout:
        _add_console_sink(log_level)
    if enable_file:
        _add_file_sink(log_level, Path(log_dir) / log_file, rotation, retention)

    logger.debug(f"Logging at {log_level}, file sink {'on' if enable_file else 'off'}")


setup_logger(enable_file=False)


__all__ = ["logger", "setup_logger"]
