"""Runtime settings, read from the environment (and a .env file if present)."""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

_ENV_PREFIX = "TOOLSHAPE_"

_settings: Optional["Settings"] = None


class Settings(BaseModel):
    """Library-wide defaults. Explicit arguments always win over these."""

    provider: str = "openai"
    model: Optional[str] = None
    max_depth: int = Field(default=64, ge=1)
    apply_defaults: bool = False
    log_level: str = "WARNING"
    log_format: str = "console"

    @field_validator("provider")
    @classmethod
    def _known_provider(cls, value: str) -> str:
        value = value.lower()
        if value not in ("openai", "anthropic"):
            raise ValueError(f"Unknown provider: {value!r}. Use 'anthropic' or 'openai'.")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``TOOLSHAPE_*`` environment variables."""
        load_dotenv()
        data = {}
        for name in cls.model_fields:
            raw = os.environ.get(_ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                data[name] = raw
        return cls.model_validate(data)


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
