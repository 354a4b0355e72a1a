"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``DaybookConfig``
instance.  Dict-based access through ``Config.get`` keeps working unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import DEFAULT_PAGE_SIZE, DEFAULT_QUOTA_BYTES, DEFAULT_STORAGE_KEY


class PathsConfig(BaseModel):
    """File-system paths used by the application."""

    data_dir: Path
    log_dir: Path | None = None

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser() if v else None
        if isinstance(v, Path):
            return v.expanduser()
        return v


class StorageConfig(BaseModel):
    """Where and how the record sequence is persisted."""

    backend: Literal["local", "memory"] = "local"
    key: str = Field(default=DEFAULT_STORAGE_KEY, min_length=1)
    quota_bytes: int | None = Field(default=DEFAULT_QUOTA_BYTES, gt=0)

    @field_validator("quota_bytes", mode="before")
    @classmethod
    def _blank_means_unlimited(cls, v: Any) -> Any:
        if v in ("", "none", "None"):
            return None
        return v


class ViewConfig(BaseModel):
    """List view settings."""

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)


class LoggingConfig(BaseModel):
    """loguru sink settings."""

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class DaybookConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so callers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.daybook-data"))
    storage: StorageConfig = StorageConfig()
    view: ViewConfig = ViewConfig()
    logging: LoggingConfig = LoggingConfig()
