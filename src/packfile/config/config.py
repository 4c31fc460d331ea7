"""Configuration management."""

from __future__ import annotations

import os
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field

from packfile.core.constants import DEFAULT_READ_CHUNK_SIZE


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class PackConfig(BaseModel):
    """PackFile behaviour configuration."""

    temp_suffix: str = Field(
        ".tmp",
        min_length=1,
        description="Suffix of the temporary file written during save",
    )
    fsync_on_save: bool = Field(
        True,
        description="fsync the temporary file before it replaces the pack",
    )
    allow_dirty_uncache: bool = Field(
        False,
        description="Allow dropping cached content that has not been saved yet",
    )
    read_chunk_size: int = Field(
        DEFAULT_READ_CHUNK_SIZE,
        ge=1,
        description="Chunk size for streaming extraction (bytes)",
    )

    @classmethod
    def from_env(cls) -> "PackConfig":
        return cls(
            temp_suffix=os.getenv("PACKFILE_TEMP_SUFFIX", ".tmp"),
            fsync_on_save=_env_bool("PACKFILE_FSYNC", True),
            allow_dirty_uncache=_env_bool("PACKFILE_ALLOW_DIRTY_UNCACHE", False),
            read_chunk_size=int(
                os.getenv("PACKFILE_READ_CHUNK_SIZE", str(DEFAULT_READ_CHUNK_SIZE))
            ),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "PackConfig":
        """
        Load config from a YAML file.

        Settings may live under a top-level ``packfile:`` key or at the top level.
        """
        with open(path, "r", encoding="utf-8") as f:
            raw: Any = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

        section: Dict[str, Any] = raw.get("packfile", raw)
        if not isinstance(section, dict):
            raise ValueError(f"'packfile' section must be a mapping: {path}")
        return cls(**section)


__all__ = ["PackConfig"]
