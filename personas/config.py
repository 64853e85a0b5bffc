"""Runtime configuration for the persons API client."""

import os
from dataclasses import dataclass, field

DEFAULT_API_URL = "https://examenesutn.vercel.app/api/PersonaCiudadanoExtranjero"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class ApiConfig:
    """Configuration for the persons REST endpoint.

    Values default to the PERSONAS_API_* environment variables.
    """

    base_url: str = field(default_factory=lambda: os.getenv("PERSONAS_API_URL", DEFAULT_API_URL))
    timeout: float = field(default_factory=lambda: _env_float("PERSONAS_API_TIMEOUT", 10.0))
    max_retries: int = field(default_factory=lambda: _env_int("PERSONAS_API_RETRIES", 3))
    retry_delay: float = 0.5

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
