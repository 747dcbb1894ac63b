import sys
from typing import Optional

import loguru


def setup_logger(log_level: str = "WARNING", log_file: Optional[str] = None):
    """
    Set up the console logger and, optionally, a rotating file logger.

    Args:
        log_level (str): The minimum level of logs to display on stderr.
        log_file (str): The file to which debug logs should be written. None disables it.
    """
    loguru.logger.remove()  # Remove default handler

    loguru.logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    if log_file:
        loguru.logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            enqueue=True,
            backtrace=True,
        )

    return loguru.logger


# Initialize a default logger instance
logger = setup_logger()
