"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATABASE_PATH = PROJECT_ROOT / "data" / "nexus.db"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://localhost:5173")


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    database_path: Path = Field(..., description="SQLite file holding notes and links")
    graph_layout_preset: Literal["panel", "floating"] = Field(
        default="panel",
        description="Layout constants used when a request does not pick a preset",
    )
    graph_canvas_width: int = Field(default=400, ge=40, description="Default canvas width")
    graph_canvas_height: int = Field(default=200, ge=40, description="Default canvas height")
    graph_layout_iterations: Optional[int] = Field(
        default=None,
        ge=1,
        le=1000,
        description="Override for the fixed simulation iteration count",
    )
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_database_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("DATABASE_PATH is required")
        path = value if isinstance(value, Path) else Path(value)
        return path.expanduser().resolve()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: str | List[str] | None) -> List[str]:
        if value is None:
            return list(DEFAULT_CORS_ORIGINS)
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    iterations = _read_env("GRAPH_LAYOUT_ITERATIONS")
    config = AppConfig(
        database_path=_read_env("DATABASE_PATH", str(DEFAULT_DATABASE_PATH)),
        graph_layout_preset=_read_env("GRAPH_LAYOUT_PRESET", "panel"),
        graph_canvas_width=_read_env("GRAPH_CANVAS_WIDTH", "400"),
        graph_canvas_height=_read_env("GRAPH_CANVAS_HEIGHT", "200"),
        graph_layout_iterations=iterations or None,
        cors_origins=_read_env("CORS_ORIGINS"),
    )
    # Ensure the database directory exists for downstream services.
    config.database_path.parent.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_DATABASE_PATH"]
