"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "UMLX_"
DEFAULT_CONFIG_PATH = Path("~/.config/uml-index/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("storage", "db_path"): "db_path",
    ("storage", "search_db_path"): "search_db_path",
    ("search", "index_name"): "index_name",
    ("extract", "min_length"): "min_source_length",
    ("extract", "start_marker"): "start_marker",
    ("extract", "end_marker"): "end_marker",
    ("plantuml", "backend"): "renderer_backend",
    ("plantuml", "server_url"): "plantuml_server_url",
    ("plantuml", "jar_path"): "plantuml_jar",
    ("plantuml", "java_bin"): "java_bin",
    ("plantuml", "timeout"): "collaborator_timeout",
    ("fetch", "timeout"): "fetch_timeout",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    db_path: Path = Field(default=Path.home() / ".uml-index" / "records.db")
    search_db_path: Path = Field(default=Path.home() / ".uml-index" / "search.db")
    index_name: str = "uml_source"
    min_source_length: int = 50
    start_marker: str = "@startuml"
    end_marker: str = "@enduml"
    renderer_backend: Literal["server", "jar"] = "server"
    plantuml_server_url: str = "http://127.0.0.1:8080"
    plantuml_jar: Path = Field(default=Path("plantuml.jar"))
    java_bin: str = "java"
    collaborator_timeout: float = 30.0
    fetch_timeout: float = 60.0

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("db_path", "search_db_path", "plantuml_jar", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("path settings must be a path or string")

    @field_validator("min_source_length")
    @classmethod
    def _positive_length(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("min_source_length must be positive")
        return value

    @field_validator("start_marker", "end_marker")
    @classmethod
    def _non_empty_marker(cls, value: str) -> str:
        if not value:
            raise ValueError("markers must be non-empty")
        return value

    @field_validator("collaborator_timeout", "fetch_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    @field_validator("plantuml_server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with UMLX_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
