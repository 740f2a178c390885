"""
Room server configuration using pydantic-settings.

Environment variables (prefix: TYCOON_):
    TYCOON_HOST            - Bind host (default: 127.0.0.1)
    TYCOON_PORT            - Bind port (default: 3001)
    TYCOON_ALLOWED_ORIGINS - Comma-separated CORS origins
    TYCOON_MAX_PLAYERS     - Room capacity (default: 5)
    TYCOON_MIN_PLAYERS     - Players needed to start (default: 2)
    TYCOON_NAME_MAX_LENGTH - Player names are cut to this length (default: 20)
    TYCOON_LOG_LEVEL       - Root logging level (default: INFO)
    TYCOON_SEED            - Optional seed for reproducible games
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tycoon.config import MAX_PLAYERS, MIN_PLAYERS


class ServerSettings(BaseSettings):
    """Configuration for the room server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="TYCOON_",
    )

    host: str = Field(default="127.0.0.1", description="Bind host.")
    port: int = Field(default=3001, ge=1, le=65535, description="Bind port.")
    allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:5174,http://127.0.0.1:5173,http://127.0.0.1:5174",
        description="Comma-separated list of CORS origins.",
    )
    max_players: int = Field(default=MAX_PLAYERS, ge=MIN_PLAYERS, le=MAX_PLAYERS)
    min_players: int = Field(default=MIN_PLAYERS, ge=MIN_PLAYERS, le=MAX_PLAYERS)
    name_max_length: int = Field(default=20, ge=1)
    log_level: str = Field(default="INFO")
    seed: Optional[int] = Field(default=None, description="Seed for every new game.")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> str:
        return (value or "INFO").upper()

    @property
    def origin_list(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_server_settings() -> ServerSettings:
    """Return cached server settings instance."""
    return ServerSettings()
