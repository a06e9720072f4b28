"""Exception taxonomy for the book rendering pipeline."""

from __future__ import annotations

from pathlib import Path


class BookError(RuntimeError):
    """Base class for failures that abort a rendering run."""

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class ManifestNotFoundError(BookError):
    """Raised when the structure manifest does not exist."""


class ManifestFormatError(BookError):
    """Raised when the structure manifest cannot be parsed or is invalid."""


class SourceNotFoundError(BookError):
    """Raised when a manifest entry points at a missing source document."""


class ConversionError(BookError):
    """Raised when a source document cannot be converted to output."""


class WriteError(BookError):
    """Raised when a rendered file cannot be written to the output root."""
