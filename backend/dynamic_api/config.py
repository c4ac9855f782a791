"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden with a DYNAMIC_API_* environment variable
    - get_settings() is cached (lru_cache) — single instance per process
    - Body limits are positive integers

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults match the documented limits (1 MiB body, depth 32): works out-of-the-box
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from dynamic_api.core.domain_types import (
    MAX_BODY_BYTES, MAX_JSON_DEPTH, BindingLimits,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DYNAMIC_API_", env_file=".env", case_sensitive=False,
    )

    # Routing
    base_route: str = "/api"

    @field_validator("base_route")
    @classmethod
    def normalize_base_route(cls, v: str) -> str:
        """FastAPI paths must start with "/"; a trailing "/" would double up."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    # Binding limits
    max_body_bytes: int = MAX_BODY_BYTES
    max_json_depth: int = MAX_JSON_DEPTH

    @field_validator("max_body_bytes", "max_json_depth")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def binding_limits(self) -> BindingLimits:
        return BindingLimits(
            max_body_bytes=self.max_body_bytes,
            max_json_depth=self.max_json_depth,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
