"""
Process configuration from environment variables and an optional `.env` file.

Required values are checked all at once so a misconfigured deployment reports
every missing or malformed key in one error. Optional tunables fall back to
defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Annotated, Any
from urllib.parse import quote

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)

DB_PARTS = ("db_host", "db_port", "db_name", "db_user", "db_password")


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(o.strip() for o in raw.split(",") if o.strip())


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str

    # Used to assemble database_url when DATABASE_URL is not set.
    db_host: str | None = None
    db_port: int | None = Field(default=None, gt=0, lt=65536)
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = None

    srv_host: str
    srv_port: int = Field(gt=0, lt=65536)

    generation_api_url: str
    generation_api_key: str
    generation_timeout_s: float = Field(default=60.0, gt=0)

    db_pool_min_size: int = Field(default=1, ge=1)
    db_pool_max_size: int = Field(default=5, ge=1)
    db_acquire_timeout_s: float = Field(default=10.0, gt=0)
    db_command_timeout_s: float = Field(default=30.0, gt=0)

    log_level: str = "INFO"
    cors_origins: Annotated[tuple[str, ...], NoDecode] = DEFAULT_CORS_ORIGINS

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def assemble_database_url(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # Blank values count as unset.
        data = {
            key: value.strip() if isinstance(value, str) else value
            for key, value in data.items()
            if not (isinstance(value, str) and not value.strip())
        }
        if data.get("database_url") or not all(data.get(part) for part in DB_PARTS):
            return data

        data["database_url"] = "postgres://{}:{}@{}:{}/{}".format(
            quote(str(data["db_user"]), safe=""),
            quote(str(data["db_password"]), safe=""),
            data["db_host"],
            data["db_port"],
            data["db_name"],
        )
        return data

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _split_origins(value) or DEFAULT_CORS_ORIGINS
        return value


def _describe(error: Mapping[str, Any]) -> str:
    field = str(error["loc"][0]) if error.get("loc") else "settings"
    if field == "database_url" and error.get("type") == "missing":
        return "DATABASE_URL is missing (or set " + ", ".join(p.upper() for p in DB_PARTS) + ")"
    if error.get("type") == "missing":
        return f"{field.upper()} is missing"
    return f"{field.upper()}: {error.get('msg', 'invalid value')}"


def cors_origins() -> tuple[str, ...]:
    return _split_origins(os.environ.get("CORS_ORIGINS", "")) or DEFAULT_CORS_ORIGINS


def load_settings(env_file: str | None = ".env") -> Settings:
    """
    Read settings from the environment (and `env_file`, if it exists).

    Raises ConfigurationError naming every missing or malformed key.
    """
    try:
        return Settings(_env_file=env_file)
    except ValidationError as exc:
        problems = [_describe(error) for error in exc.errors()]
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems) + ".") from exc
