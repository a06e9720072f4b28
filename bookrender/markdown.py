"""Shared Markdown rendering helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import cast

from markdown_it import MarkdownIt
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin


@dataclass(frozen=True, slots=True)
class CodeSample:
    """A fenced code block found in a markdown body."""

    language: str
    code: str
    line: int


@lru_cache(maxsize=1)
def _renderer() -> MarkdownIt:
    """Configure and cache a CommonMark-compliant renderer."""
    md = MarkdownIt("commonmark", {"html": True, "linkify": True, "typographer": True})
    md.enable("table").enable("strikethrough")
    md.use(deflist_plugin)
    md.use(footnote_plugin)
    md.use(tasklists_plugin, label=True)
    return md


def render_markdown(text: str) -> str:
    """Render Markdown to HTML using the shared renderer."""
    if not text.strip():
        return ""
    return cast(str, _renderer().render(text))


def extract_code_samples(text: str) -> list[CodeSample]:
    """Return fenced code blocks in document order with their 1-based start line."""
    samples: list[CodeSample] = []
    for token in _renderer().parse(text):
        if token.type != "fence":
            continue
        info = token.info.strip().split()
        language = info[0].lower() if info else ""
        line = token.map[0] + 1 if token.map else 0
        samples.append(CodeSample(language=language, code=token.content, line=line))
    return samples
