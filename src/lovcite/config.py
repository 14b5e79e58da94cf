"""Runtime configuration shared by the lovcite CLIs."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping


DEFAULT_DB_PATH = ".lovcite.db"
DEFAULT_SEED_DIR = "data/seed"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_WATCH_DEBOUNCE_SECONDS = 2.0

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    value = float(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class LovciteSettings:
    """Validated store, seed and logging settings."""

    db_path: Path
    seed_dir: Path
    log_level: str = DEFAULT_LOG_LEVEL
    watch_debounce_seconds: float = DEFAULT_WATCH_DEBOUNCE_SECONDS

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LovciteSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        db_path_raw = source.get("LOVCITE_DB_PATH", DEFAULT_DB_PATH).strip()
        if not db_path_raw:
            raise ValueError("LOVCITE_DB_PATH cannot be empty")

        seed_dir_raw = source.get("LOVCITE_SEED_DIR", DEFAULT_SEED_DIR).strip()
        if not seed_dir_raw:
            raise ValueError("LOVCITE_SEED_DIR cannot be empty")

        log_level = source.get("LOVCITE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if not log_level:
            raise ValueError("LOVCITE_LOG_LEVEL cannot be empty")
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"LOVCITE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")

        debounce_raw = source.get("LOVCITE_WATCH_DEBOUNCE_SECONDS", str(DEFAULT_WATCH_DEBOUNCE_SECONDS)).strip()
        if not debounce_raw:
            raise ValueError("LOVCITE_WATCH_DEBOUNCE_SECONDS cannot be empty")

        return cls(
            db_path=Path(db_path_raw),
            seed_dir=Path(seed_dir_raw),
            log_level=log_level,
            watch_debounce_seconds=_parse_positive_float(
                name="LOVCITE_WATCH_DEBOUNCE_SECONDS",
                raw_value=debounce_raw,
            ),
        )
