"""Application settings and configuration helpers."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List
from dotenv import load_dotenv, find_dotenv


DEFAULT_CORS_ORIGINS = (
    "https://dreamlabssol.com,"
    "https://www.dreamlabssol.com,"
    "http://localhost:5500,"
    "http://127.0.0.1:5500"
)


class Settings:
    """Runtime configuration loaded from environment variables.

    Read once at process start and handed to the app factory and the
    Replicate service. Values are not mutated after construction.
    """

    APP_NAME: str = "Dream Relay"
    API_PREFIX: str = "/api"

    # Server
    HOST: str
    PORT: int

    # CORS
    CORS_ORIGINS: List[str]

    # Replicate
    REPLICATE_API_KEY: str
    REPLICATE_API_BASE: str
    UPSTREAM_TIMEOUT_SECONDS: float
    STUCK_AFTER_SECONDS: float

    # Prediction defaults
    DEFAULT_NUM_FRAMES: int
    DEFAULT_FPS: int

    # Logging
    LOG_LEVEL: str
    LOG_REQUEST_BODIES: bool

    def __init__(self) -> None:
        # Load .env once (supports parent directories)
        load_dotenv(find_dotenv(), override=False)
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "3000"))

        self.CORS_ORIGINS = self._get_list("CORS_ORIGINS", default=DEFAULT_CORS_ORIGINS)

        self.REPLICATE_API_KEY = os.getenv("REPLICATE_API_KEY", "").strip()
        self.REPLICATE_API_BASE = os.getenv("REPLICATE_API_BASE", "https://api.replicate.com/v1").rstrip("/")
        self.UPSTREAM_TIMEOUT_SECONDS = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30"))
        self.STUCK_AFTER_SECONDS = float(os.getenv("STUCK_AFTER_SECONDS", "30"))

        self.DEFAULT_NUM_FRAMES = int(os.getenv("DEFAULT_NUM_FRAMES", "24"))
        self.DEFAULT_FPS = int(os.getenv("DEFAULT_FPS", "8"))

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_REQUEST_BODIES = os.getenv("LOG_REQUEST_BODIES", "true").lower() == "true"

    @property
    def predictions_url(self) -> str:
        return f"{self.REPLICATE_API_BASE}/predictions"

    @staticmethod
    def _get_list(name: str, default: str = "") -> List[str]:
        raw = os.getenv(name) or default
        return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
