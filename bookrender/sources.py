"""Read source documents and split off their YAML front matter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConversionError


@dataclass(slots=True)
class SourceDocument:
    """Markdown body of a source file plus any front-matter metadata."""

    path: Path
    body: str
    meta: dict[str, Any] = field(default_factory=dict)
    body_offset: int = 0

    @property
    def title(self) -> str | None:
        value = self.meta.get("title")
        if value is None:
            return None
        text = str(value).strip()
        return text or None


def read_source(path: Path) -> SourceDocument:
    """Load a markdown file, raising ``ConversionError`` on malformed content."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConversionError(f"{path}: source is not valid UTF-8 text", path=path) from exc
    except OSError as exc:
        raise ConversionError(f"{path}: unable to read source: {exc}", path=path) from exc

    meta, body, offset = split_front_matter(text, path)
    return SourceDocument(path=path, body=body, meta=meta, body_offset=offset)


def split_front_matter(text: str, path: Path) -> tuple[dict[str, Any], str, int]:
    """Return front matter, body, and the number of lines preceding the body."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text, 0

    front_lines: list[str] = []
    for idx, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            body = "\n".join(lines[idx + 1 :])
            return _parse_front_matter("\n".join(front_lines), path), body, idx + 1
        front_lines.append(line)
    raise ConversionError(f"{path}: closing front matter delimiter '---' missing", path=path)


def _parse_front_matter(raw: str, path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConversionError(f"{path}: malformed front matter: {exc}", path=path) from exc
    if not isinstance(data, dict):
        raise ConversionError(
            f"{path}: front matter must be a mapping, got {type(data).__name__}", path=path
        )
    return data
