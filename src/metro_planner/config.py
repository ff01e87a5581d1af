"""Configuration settings for the metro route planner."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()
load_dotenv(".env.local")

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_DATA_FILE = DATA_DIR / "metro_data.json"

# Dataset source
METRO_DATA_ENV = "METRO_DATA"  # raw JSON dataset in an environment variable

# Search bounds
DEFAULT_MAX_ROUTES = 20
DEFAULT_MAX_PATH_LENGTH = 50
DEFAULT_MAX_INTERCHANGES = 5
TOP_ROUTES = 3  # routes shown to the user
STATION_SEARCH_LIMIT = 10


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else default


@dataclass
class Settings:
    """Runtime settings, read from the environment."""
    data_env: str = METRO_DATA_ENV
    data_file: Optional[Path] = None
    data_url: Optional[str] = None
    data_timeout: float = 10.0
    max_routes: int = DEFAULT_MAX_ROUTES
    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    max_interchanges: int = DEFAULT_MAX_INTERCHANGES
    search_timeout: Optional[float] = 2.0  # wall-clock cutoff for one search, seconds
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        data_file = os.getenv("METRO_DATA_FILE")
        return cls(
            data_file=Path(data_file) if data_file else None,
            data_url=os.getenv("METRO_DATA_URL"),
            data_timeout=_env_float("METRO_DATA_TIMEOUT", 10.0),
            max_routes=_env_int("METRO_MAX_ROUTES", DEFAULT_MAX_ROUTES),
            max_path_length=_env_int("METRO_MAX_PATH_LENGTH", DEFAULT_MAX_PATH_LENGTH),
            max_interchanges=_env_int("METRO_MAX_INTERCHANGES", DEFAULT_MAX_INTERCHANGES),
            search_timeout=_env_float("METRO_SEARCH_TIMEOUT", 2.0),
            log_level=os.getenv("METRO_LOG_LEVEL", "INFO").upper(),
        )
