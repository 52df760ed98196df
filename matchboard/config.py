import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_BACKEND_URL = "http://localhost:8080"


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass
class Settings:
    backend_url: str = DEFAULT_BACKEND_URL
    timeout: float = 15.0
    max_retries: int = 3
    base_delay: float = 1.0
    dwell_ms: int = 800
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @property
    def dwell(self) -> float:
        return self.dwell_ms / 1000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from MATCHBOARD_* variables, falling back to defaults."""
        log_dir = os.getenv("MATCHBOARD_LOG_DIR")
        return cls(
            backend_url=(os.getenv("MATCHBOARD_BACKEND_URL") or DEFAULT_BACKEND_URL).rstrip("/"),
            timeout=_env_number("MATCHBOARD_TIMEOUT", 15.0, float),
            max_retries=_env_number("MATCHBOARD_MAX_RETRIES", 3, int),
            base_delay=_env_number("MATCHBOARD_BASE_DELAY", 1.0, float),
            dwell_ms=_env_number("MATCHBOARD_DWELL_MS", 800, int),
            log_level=(os.getenv("MATCHBOARD_LOG_LEVEL") or "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
        )
