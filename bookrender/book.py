"""Pipeline object tying the manifest loader, tree builder, and renderer together."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import Config
from .manifest import Manifest, load_manifest
from .render import RenderResult, Renderer
from .tree import DocumentTree, build_tree

logger = logging.getLogger(__name__)


class Book:
    """A loaded book: its manifest and resolved document tree.

    Usage:
        Book.load(content_root, manifest_path).write(output_root)
    """

    def __init__(self, manifest: Manifest, tree: DocumentTree, config: Config | None = None) -> None:
        self.manifest = manifest
        self.tree = tree
        self.config = config or Config()

    @classmethod
    def load(
        cls,
        content_root: str | Path,
        manifest_path: str | Path,
        *,
        config: Config | None = None,
    ) -> "Book":
        """Read the manifest and resolve every entry against ``content_root``."""
        manifest = load_manifest(manifest_path)
        tree = build_tree(manifest, content_root)
        logger.info("Loaded book with %d document(s) from %s", len(tree), manifest.source_path)
        return cls(manifest, tree, config)

    @classmethod
    def from_config(cls, config: Config) -> "Book":
        """Load the book described by a project configuration."""
        return cls.load(config.content_dir, config.manifest, config=config)

    @property
    def title(self) -> str | None:
        return self.config.title or self.manifest.title

    def __len__(self) -> int:
        return len(self.tree)

    def write(self, output_root: str | Path, *, renderer: Renderer | None = None) -> RenderResult:
        """Render every document into ``output_root``."""
        renderer = renderer or Renderer(self.config)
        return renderer.render(self.tree, output_root, book_title=self.title)
