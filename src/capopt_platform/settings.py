"""
capopt_platform.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `CAPOPT_`).
    Defaults are safe for local dev; prod must override the JWT secret.
    """

    model_config = SettingsConfigDict(env_prefix="CAPOPT_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and self-assigned roles.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "capopt-platform"
    log_level: str = "INFO"
    # "console" renders human-readable lines for local runs; everything else gets JSON.
    log_format: Literal["json", "console"] = "json"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "capopt-platform"
    jwt_audience: str = "capopt-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_ttl_days: int = 7
    auth_cookie_name: str = "capopt_jwt"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./capopt.db"
    db_echo: bool = False
    # Seconds a SQLite connection waits on a locked database before failing.
    sqlite_busy_timeout: float = 30.0
    seed_reference_data: bool = True

    # Used when building public share links for canvases.
    public_base_url: str = "https://capopt.com"

    @property
    def cookie_secure(self) -> bool:
        return self.env == "prod"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every layer reads configuration through `get_settings()`; tests construct
# `Settings(...)` directly and hand it to `create_app`.
