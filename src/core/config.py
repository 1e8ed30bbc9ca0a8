"""Application settings, read from the environment once per process."""

import os
from functools import lru_cache

from pydantic import BaseModel


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3001
    allowed_origins: list[str] = ["*"]
    log_level: str = "INFO"
    room_id_prefix: str = "q-"


@lru_cache
def get_settings() -> Settings:
    return Settings(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3001")),
        allowed_origins=[
            origin.strip()
            for origin in os.environ.get("ALLOWED_ORIGINS", "*").split(",")
            if origin.strip()
        ],
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        room_id_prefix=os.environ.get("ROOM_ID_PREFIX", "q-"),
    )
