from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    API_BASE_URL: str = "http://localhost:3001"
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    CACHE_REDIS_URL: str = "redis://localhost:6379/1"
    CACHE_KEY_PREFIX: str = "chat:conversation"

    model_config = ConfigDict(
        env_prefix="CHAT_CLIENT_",
        env_file=".env",
        extra="ignore",
    )
