# app/settings.py
from __future__ import annotations

from pydantic import BaseModel
import os


class Settings(BaseModel):
    APP_NAME: str = "factfake-server"

    # Room store: "memory" (single process) or "redis"
    ROOM_STORE: str = "memory"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    ROOM_TTL_SEC: int = 1800

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # CORS origin policy (comma-separated)
    CORS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Long poll
    LONG_POLL_TIMEOUT_SEC: float = 20.0
    LONG_POLL_INTERVAL_SEC: float = 0.9


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "factfake-server"),
        ROOM_STORE=os.getenv("ROOM_STORE", "memory").strip().lower(),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        ROOM_TTL_SEC=int(os.getenv("ROOM_TTL_SEC", "1800")),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

        CORS_ALLOWED_ORIGINS=os.getenv(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ),
        LONG_POLL_TIMEOUT_SEC=float(os.getenv("LONG_POLL_TIMEOUT_SEC", "20")),
        LONG_POLL_INTERVAL_SEC=float(os.getenv("LONG_POLL_INTERVAL_SEC", "0.9")),
    )
