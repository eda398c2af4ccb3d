from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from roi_tracker.config.paths import default_positions_path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    app_env: str
    positions_path: Path
    seed_demo_positions: bool
    log_level: str


def get_settings() -> Settings:
    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        positions_path=default_positions_path(),
        seed_demo_positions=_env_bool("ROI_TRACKER_SEED_DEMO", True),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
