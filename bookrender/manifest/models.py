"""Pydantic models describing the book structure manifest."""

from __future__ import annotations

import posixpath
from pathlib import PurePosixPath
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils import title_from_stem


class ManifestEntry(BaseModel):
    """One document in the book structure, optionally with nested children."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(description="Display title for the document.")
    path: str = Field(description="Source path relative to the content root.")
    children: list["ManifestEntry"] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        # A bare string is a path whose title comes from the file name.
        if isinstance(data, str):
            data = {"path": data}
        if isinstance(data, dict) and not data.get("title") and data.get("path"):
            data = {**data, "title": title_from_stem(PurePosixPath(str(data["path"])).stem)}
        return data

    @field_validator("title")
    def _strip_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("title cannot be empty")
        return cleaned

    @field_validator("path")
    def _normalize_path(cls, value: str) -> str:
        cleaned = value.strip().replace("\\", "/")
        if not cleaned:
            raise ValueError("path cannot be empty")
        # Collapse "." and ".." segments so aliases of one file compare equal.
        normalized = posixpath.normpath(cleaned)
        if normalized in {".", "/"}:
            raise ValueError(f"path '{value}' does not name a file")
        return normalized

    @field_validator("children", mode="before")
    def _default_children(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("children")
    def _unique_sibling_paths(cls, value: list["ManifestEntry"]) -> list["ManifestEntry"]:
        _ensure_unique_paths(value)
        return value

    def count(self) -> int:
        """Number of entries in this subtree, including this one."""
        return 1 + sum(child.count() for child in self.children)


class Manifest(BaseModel):
    """Ordered tree of manifest entries for a whole book."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, description="Optional book title.")
    entries: list[ManifestEntry] = Field(default_factory=list)
    source_path: Optional[str] = Field(default=None, description="File the manifest was read from.")

    @field_validator("entries", mode="before")
    def _default_entries(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("entries")
    def _unique_top_level_paths(cls, value: list[ManifestEntry]) -> list[ManifestEntry]:
        _ensure_unique_paths(value)
        return value

    def __len__(self) -> int:
        return sum(entry.count() for entry in self.entries)

    def iter_entries(self) -> Iterator[ManifestEntry]:
        """Yield every entry depth-first in manifest order."""
        stack = list(reversed(self.entries))
        while stack:
            entry = stack.pop()
            yield entry
            stack.extend(reversed(entry.children))


def _ensure_unique_paths(entries: list[ManifestEntry]) -> None:
    seen: set[str] = set()
    for entry in entries:
        if entry.path in seen:
            raise ValueError(f"duplicate path '{entry.path}' among sibling entries")
        seen.add(entry.path)
