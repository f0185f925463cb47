from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CBDSettings:
    reference_dir: Path
    log_dir: Path
    log_level: str

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def get_settings() -> CBDSettings:
    """
    Load validator settings from environment variables (``.env`` honoured).

    Reads:
      CBD_REFERENCE_DIR (default assets/data), CBD_LOG_DIR (default logs),
      CBD_LOG_LEVEL (default INFO)
    """
    return CBDSettings(
        reference_dir=_path_env("CBD_REFERENCE_DIR", "assets/data"),
        log_dir=_path_env("CBD_LOG_DIR", "logs"),
        log_level=_level_env("CBD_LOG_LEVEL", "INFO"),
    )


def _path_env(name: str, default: str) -> Path:
    value = os.getenv(name, "").strip() or default
    path = Path(value).expanduser()
    if path.exists() and not path.is_dir():
        raise ValueError(f"{name} must point to a directory: {path}")
    return path


def _level_env(name: str, default: str) -> str:
    value = (os.getenv(name, "").strip() or default).upper()
    if value not in _LEVELS:
        raise ValueError(f"{name} must be one of {', '.join(_LEVELS)}.")
    return value
