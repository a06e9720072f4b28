"""Small text helpers shared by the builder, renderer, and CLI."""

from __future__ import annotations

import re

SLUG_PATTERN = re.compile(r"[^a-z0-9\-]+")
WHITESPACE_PATTERN = re.compile(r"\s+")


def slugify(value: str) -> str:
    """Convert arbitrary text into a filesystem-safe slug."""
    text = value.strip().lower()
    text = WHITESPACE_PATTERN.sub("-", text)
    text = re.sub(r"_+", "-", text)
    text = SLUG_PATTERN.sub("-", text)
    text = re.sub(r"-{2,}", "-", text)
    return text.strip("-") or "section"


def title_from_stem(stem: str) -> str:
    """Generate a human-friendly title from a filename stem."""
    text = stem.replace("_", " ").replace("-", " ")
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    if not text:
        return "Untitled"
    words = [word.capitalize() if not word.isupper() else word for word in text.split()]
    return " ".join(words)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return ``"<count> <noun>"`` with the noun matching the count."""
    noun = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {noun}"
