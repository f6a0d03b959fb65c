# trail_planner/config.py
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DEFAULT_DATA_DIR = ".trail_planner"
DEFAULT_STORAGE_KEY = "trail_planner_state"


def _split_origins(raw: str | None) -> List[str]:
    origins = [origin.strip() for origin in (raw or "*").split(",") if origin.strip()]
    return origins or ["*"]


@dataclass
class Settings:
    data_dir: str = DEFAULT_DATA_DIR
    storage_key: str = DEFAULT_STORAGE_KEY
    log_level: str = "INFO"
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
    """Read settings from the environment on every call so tests can monkeypatch."""
    return Settings(
        data_dir=os.getenv("TRAIL_PLANNER_DATA_DIR") or DEFAULT_DATA_DIR,
        storage_key=os.getenv("TRAIL_PLANNER_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
        log_level=(os.getenv("TRAIL_PLANNER_LOG_LEVEL") or "INFO").upper(),
        allowed_origins=_split_origins(os.getenv("TRAIL_PLANNER_ALLOWED_ORIGINS")),
    )
