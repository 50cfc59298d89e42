"""
Runtime configuration for keypop.

This module provides:
- load_envs(): load the KEYPOP_* settings from a .env file
  if they are not already present in the environment.
- RuntimeConfig: a dataclass holding runtime settings.
- get_config_dir() / get_data_dir(): XDG locations used for logs.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values

# Environment variable names
KEYPOP_WIDTH_ENV: str = "KEYPOP_WIDTH"
KEYPOP_LOG_LEVEL_ENV: str = "KEYPOP_LOG_LEVEL"
KEYPOP_LOG_FILE_ENV: str = "KEYPOP_LOG_FILE"
KEYPOP_SHOW_HINT_ENV: str = "KEYPOP_SHOW_HINT"


def load_envs(env_file: Optional[str] = None) -> None:
    """
    Load KEYPOP_WIDTH, KEYPOP_LOG_LEVEL, KEYPOP_LOG_FILE and KEYPOP_SHOW_HINT from
    a .env file into the process environment if they are not already set.
    """
    env_values = dotenv_values(env_file) if env_file else dotenv_values()
    for key in (
        KEYPOP_WIDTH_ENV,
        KEYPOP_LOG_LEVEL_ENV,
        KEYPOP_LOG_FILE_ENV,
        KEYPOP_SHOW_HINT_ENV,
    ):
        if not os.environ.get(key):
            val = env_values.get(key)
            if val:
                os.environ[key] = str(val)


class LogLevel(str, Enum):
    """Supported log levels."""

    debug = "DEBUG"
    info = "INFO"
    warning = "WARNING"
    error = "ERROR"


_LEVELS = {level.value for level in LogLevel}


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Holds runtime configuration for keypop.

    Attributes:
        width: Surface width used for column packing; None means the terminal width.
        log_level: Level of the file log.
        log_file: Log file path; defaults to keypop.log in the data dir.
        show_hint: Whether popups end with the usage hint line.
    """

    width: Optional[int] = None
    log_level: LogLevel = LogLevel.info
    log_file: Optional[Path] = None
    show_hint: bool = True

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Build a RuntimeConfig from KEYPOP_* environment variables."""
        width = os.environ.get(KEYPOP_WIDTH_ENV)
        level = os.environ.get(KEYPOP_LOG_LEVEL_ENV, "").upper()
        log_file = os.environ.get(KEYPOP_LOG_FILE_ENV)
        show_hint = os.environ.get(KEYPOP_SHOW_HINT_ENV, "").strip().lower()
        return cls(
            width=int(width) if width and width.isdigit() else None,
            log_level=LogLevel(level) if level in _LEVELS else LogLevel.info,
            log_file=Path(log_file) if log_file else None,
            show_hint=show_hint not in ("0", "false", "no", "off"),
        )


def get_config_dir() -> Path:
    """
    Return the keypop config directory under XDG_CONFIG_HOME or fallback to ~/.config.
    """
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "keypop"


def get_data_dir() -> Path:
    """
    Return the keypop data directory under XDG_DATA_HOME or fallback to ~/.local/share.
    """
    data_home = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return data_home / "keypop"
