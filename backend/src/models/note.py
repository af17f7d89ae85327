"""Note-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_CONTENT_BYTES = 1_048_576


class Note(BaseModel):
    """Complete note with content and its backlinks."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "api-design",
                "title": "API Design",
                "content": "See [[auth-flow|the auth flow]] and [[errors]].",
                "outlinks": ["auth-flow", "errors"],
                "backlinks": ["index"],
                "created": "2025-01-10T09:00:00Z",
                "updated": "2025-01-15T14:30:00Z",
            }
        }
    )

    id: str = Field(..., min_length=1, max_length=256, description="Note identifier")
    title: str = Field(..., min_length=1, description="Display title")
    content: str = Field(default="", description="Markdown content")
    outlinks: List[str] = Field(default_factory=list, description="Link targets in content")
    backlinks: List[str] = Field(default_factory=list, description="Notes linking here")
    created: datetime = Field(..., description="Creation timestamp")
    updated: datetime = Field(..., description="Last update timestamp")


class NoteCreate(BaseModel):
    """Request payload to create a note."""

    id: str = Field(..., min_length=1, max_length=256)
    title: Optional[str] = None
    content: str = Field(default="", max_length=MAX_CONTENT_BYTES)

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Note id cannot be blank")
        if any(char in cleaned for char in "[]|"):
            raise ValueError("Note id must not contain '[', ']' or '|'")
        return cleaned


class NoteUpdate(BaseModel):
    """Request payload to update a note."""

    title: Optional[str] = None
    content: str = Field(..., max_length=MAX_CONTENT_BYTES)


class NoteSummary(BaseModel):
    """Lightweight representation used for listings."""

    id: str
    title: str
    updated: datetime


class DeleteResponse(BaseModel):
    """Result of deleting a note."""

    id: str
    rewritten_sources: List[str]


__all__ = ["Note", "NoteCreate", "NoteUpdate", "NoteSummary", "DeleteResponse"]
