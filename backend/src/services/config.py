"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import logging
import os
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.hierarchy import Hierarchy, default_hierarchy, parse_hierarchies
from .trail import TrailSelection

LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def split_and_trim(value: str | None, delimiter: str = ",") -> List[str]:
    """Split a delimited string, dropping blank entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(delimiter) if part.strip()]


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    hierarchies: List[Hierarchy] = Field(
        default_factory=lambda: [default_hierarchy()],
        description="Relationship-sets, in index order",
    )
    index_notes: List[str] = Field(
        default_factory=list,
        description="Notes that upward trails should end on",
    )
    trail_selection: TrailSelection = Field(
        default=TrailSelection.ALL,
        description="Which trails to show when several exist",
    )
    trail_default_depth: Optional[int] = Field(
        default=None,
        ge=1,
        description="Truncate trails to this many steps (unbounded when unset)",
    )
    trail_all_if_no_index_path: bool = Field(
        default=False,
        description="Show every upward trail when none reaches an index note",
    )
    log_level: str = Field(default="INFO", description="Root log level for the server")

    @field_validator("hierarchies", mode="before")
    @classmethod
    def _parse_hierarchies(cls, value):
        if isinstance(value, (str, bytes)):
            return parse_hierarchies(value)
        return value

    @field_validator("hierarchies", mode="after")
    @classmethod
    def _require_hierarchy(cls, value: List[Hierarchy]) -> List[Hierarchy]:
        if not value:
            raise ValueError("At least one hierarchy must be configured")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Optional[str]) -> str:
        level = (value or "INFO").strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    values = {
        "index_notes": split_and_trim(_read_env("BREADCRUMBS_INDEX_NOTES")),
        "trail_selection": _read_env("BREADCRUMBS_TRAIL_SELECTION", TrailSelection.ALL.value),
        "log_level": _read_env("BREADCRUMBS_LOG_LEVEL", "INFO"),
    }
    hierarchies = _read_env("BREADCRUMBS_HIERARCHIES")
    if hierarchies:
        values["hierarchies"] = hierarchies
    depth = _read_env("BREADCRUMBS_TRAIL_DEPTH")
    if depth:
        values["trail_default_depth"] = depth
    fallback = _read_env("BREADCRUMBS_TRAIL_ALL_IF_NO_INDEX_PATH")
    if fallback:
        values["trail_all_if_no_index_path"] = fallback.strip()
    return AppConfig(**values)


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "split_and_trim"]
