"""
Loguru setup for the analysis pipeline and provider connectors

Each module logs through `get_logger(__name__)`, which tags records with
a short component name (`weather`, `imagery`, `insight`, ...). With file
logging on, warnings from the pipeline also go to a separate fallback
log so degraded analyses can be audited.
"""

import os
import sys
from pathlib import Path
from loguru import logger
from typing import Optional

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]}:{function}:{line} - {message}"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _is_fallback(record) -> bool:
    return record["level"].no >= logger.level("WARNING").no and record["extra"]["component"] != "app"


def setup_logging(
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    rotation: str = "10 MB",
    retention: str = "30 days"
):
    """
    Configure sinks from arguments or LOG_LEVEL / LOG_DIR / LOG_TO_FILE

    Args:
        log_level: Minimum level (defaults to LOG_LEVEL or INFO)
        log_dir: Directory for log files (defaults to LOG_DIR or ./logs)
        log_to_file: Enable rotating file sinks (defaults to LOG_TO_FILE, off)
        rotation: Rotation threshold passed to loguru
        retention: How long rotated files are kept
    """
    level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger.remove()
    logger.configure(extra={"component": "app"})
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_to_file is None:
        log_to_file = _env_flag("LOG_TO_FILE")
    if not log_to_file:
        return logger

    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    directory.mkdir(parents=True, exist_ok=True)

    logger.add(
        directory / "agrosat.log",
        format=FILE_FORMAT,
        level=level,
        rotation=rotation,
        retention=retention,
        compression="zip"
    )
    # Provider failures and fallbacks only
    logger.add(
        directory / "fallbacks.log",
        format=FILE_FORMAT,
        level="WARNING",
        filter=_is_fallback,
        rotation=rotation,
        retention=retention
    )

    logger.info(f"File logging enabled in {directory.resolve()}")
    return logger


def get_logger(name: Optional[str] = None):
    """
    Logger tagged with the last part of a module name

    `agrosat.analysis.weather` is tagged `weather`.
    """
    if not name:
        return logger
    return logger.bind(component=name.rsplit(".", 1)[-1])


setup_logging()
