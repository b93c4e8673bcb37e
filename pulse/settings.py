from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_ENV_PATH = Path(".env")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    admin_pin: str = "786"
    summary_model: str = "gpt-4.1-mini"
    summary_limit: int = 300
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])


def _as_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


def load_settings(env_path: Path = DEFAULT_ENV_PATH) -> Settings:
    """Load settings from the process env, optionally seeded by a .env file.

    Order of precedence: process env > .env file > defaults.
    """
    if env_path.exists():
        load_dotenv(env_path, override=False)
    defaults = Settings()
    origins = os.getenv("PULSE_CORS_ORIGINS", "")
    return Settings(
        data_dir=Path(os.getenv("PULSE_DATA_DIR", str(defaults.data_dir))),
        admin_pin=os.getenv("PULSE_ADMIN_PIN", defaults.admin_pin),
        summary_model=os.getenv("PULSE_SUMMARY_MODEL", defaults.summary_model),
        summary_limit=max(1, _as_int(os.getenv("PULSE_SUMMARY_LIMIT"), defaults.summary_limit)),
        log_level=os.getenv("PULSE_LOG_LEVEL", defaults.log_level).upper(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or list(defaults.cors_origins),
    )
