"""Centralized configuration via pydantic-settings. Secrets from .env."""

from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # HyperSync bearer token, shared by every chain endpoint
    hypersync_api_key: str = ""

    # None disables the httpx timeout; callers bound latency themselves
    request_timeout: float | None = None

    # "last_touch": latest event per (contract, token_id) wins
    # "net": incoming credits, outgoing debits, emptied holdings dropped
    nft_holding_mode: Literal["last_touch", "net"] = "last_touch"

    log_level: str = "INFO"

    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the query service, empty if no key is set."""
        if not self.hypersync_api_key:
            return {}
        return {"Authorization": f"Bearer {self.hypersync_api_key}"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
