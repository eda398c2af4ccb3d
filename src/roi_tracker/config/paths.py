"""Path helpers for local-first storage."""

from __future__ import annotations

import os
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[3]
DEFAULT_DATA_DIR = ROOT_DIR / "data"
DEFAULT_DATA_FILE = "positions.json"


def data_dir() -> Path:
    override = os.getenv("ROI_TRACKER_DATA_DIR")
    directory = Path(override).expanduser() if override else DEFAULT_DATA_DIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def default_positions_path() -> Path:
    override = os.getenv("ROI_TRACKER_DATA_FILE")
    if override:
        return Path(override).expanduser()
    return data_dir() / DEFAULT_DATA_FILE
