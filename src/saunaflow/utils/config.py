import os
from dataclasses import dataclass
from typing import Optional

import dotenv

from saunaflow.utils import BASE_DIR


@dataclass
class Settings:
    db_path: str
    ollama_model: str = "smollm2:latest"
    ollama_base_url: Optional[str] = None
    ollama_timeout: int = 10
    tick_interval: float = 1.0


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read settings from the environment, after loading a .env file if one exists."""
    dotenv.load_dotenv(env_file)
    return Settings(
        db_path=os.getenv("SAUNAFLOW_DB_PATH") or os.path.join(BASE_DIR, "data", "saunaflow.db"),
        ollama_model=os.getenv("SAUNAFLOW_OLLAMA_MODEL") or "smollm2:latest",
        ollama_base_url=os.getenv("SAUNAFLOW_OLLAMA_BASE_URL") or None,
        ollama_timeout=_env_int("SAUNAFLOW_OLLAMA_TIMEOUT", 10),
        tick_interval=_env_float("SAUNAFLOW_TICK_INTERVAL", 1.0),
    )
