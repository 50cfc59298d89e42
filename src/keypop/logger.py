"""
Logging setup.

Logs go to a file so they never draw over the popup in the terminal.
"""

import logging
from pathlib import Path
from typing import Optional

from keypop.runtime_config import LogLevel, get_data_dir

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: LogLevel = LogLevel.info, log_file: Optional[Path] = None
) -> Path:
    """Attach a file handler to the keypop logger and return the log path."""
    if log_file is None:
        log_dir = get_data_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "keypop.log"
    else:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("keypop")
    logger.setLevel(level.value)
    logger.propagate = False

    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level.value)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)
    return log_file
