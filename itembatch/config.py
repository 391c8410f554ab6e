from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


class Settings(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls) -> "Settings":
        max_workers = os.getenv("ITEMBATCH_MAX_WORKERS")
        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
        return cls(
            max_workers=int(max_workers) if max_workers else None,
            log_level=os.getenv("ITEMBATCH_LOG_LEVEL", "INFO"),
            log_format=os.getenv("ITEMBATCH_LOG_FORMAT", "console"),
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
        )
