"""Environment-based configuration for devman."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FRAPPE_TEMPLATE_URL = "https://github.com/yamenzk/FrappeDev.git"


class Settings(BaseSettings):
    """Settings loaded from ``DEVMAN_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="DEVMAN_", extra="ignore")

    registry_path: Path = Field(default_factory=lambda: Path.home() / ".dev-containers.json")
    projects_dir: Path = Field(default_factory=lambda: Path.home() / "Development")
    frappe_template_url: str = DEFAULT_FRAPPE_TEMPLATE_URL
    frappe_base_port: int = Field(default=8000, ge=1, le=65535)
    python_base_port: int = Field(default=8000, ge=1, le=65535)
    postgres_base_port: int = Field(default=5432, ge=1, le=65535)
    log_level: str = "WARNING"

    @field_validator("registry_path", "projects_dir", mode="after")
    @classmethod
    def expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> str:
        level = str(value).strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value!r}"
            raise ValueError(msg)
        return level
