"""Tool directive and lookup result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, field_validator


class ToolKind(str, Enum):
    SEARCH = "SEARCH"
    READ = "READ"
    SEARCH_AND_READ = "SEARCH_AND_READ"


class ToolCommand(BaseModel):
    kind: ToolKind
    query: str


class SearchResult(BaseModel):
    title: str = ""
    url: str = ""
    snippet: str = ""

    @field_validator("title", "url", "snippet", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class SearchAndReadResult(BaseModel):
    search_results: list[SearchResult] = []
    content: str = ""
