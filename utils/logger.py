"""
Logging configuration for the application.
"""
import logging
import os
import sys


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def level_from_env(default: int = logging.INFO) -> int:
    """Level named by LOG_LEVEL, or the default when unset or unknown."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "").upper())
    return level if isinstance(level, int) else default


def setup_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Set up a logger.

    Args:
        name: Logger name
        level: Logging level, defaults to LOG_LEVEL from the environment

    Returns:
        Configured logger instance
    """
    if level is None:
        level = level_from_env()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = ColoredFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    return logger


app_logger = setup_logger("project_hub")
