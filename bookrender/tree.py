"""Resolve manifest entries into an ordered tree of document nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence

from .errors import SourceNotFoundError
from .manifest import Manifest, ManifestEntry
from .sources import SourceDocument, read_source
from .utils import slugify

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DocumentNode:
    """A manifest entry resolved against the content root.

    Source text is never held on the node; ``read_source`` loads it on demand.
    """

    title: str
    source_path: Path
    relative_path: str
    position: tuple[int, ...]
    children: list["DocumentNode"] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return f"{self.position[-1]:02d}-{slugify(self.title)}"

    def read_source(self) -> SourceDocument:
        """Read and split the source document for this node."""
        return read_source(self.source_path)

    def walk(self) -> Iterator["DocumentNode"]:
        """Yield this node, then its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(slots=True)
class DocumentTree:
    """Ordered forest of document nodes built from one manifest."""

    content_root: Path
    nodes: list[DocumentNode] = field(default_factory=list)
    title: Optional[str] = None

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())

    def walk(self) -> Iterator[DocumentNode]:
        """Yield every node depth-first (pre-order) in manifest order."""
        for node in self.nodes:
            yield from node.walk()

    def ancestors(self, target: DocumentNode) -> list[DocumentNode]:
        """Return the chain of nodes above ``target``, outermost first."""
        chain: list[DocumentNode] = []
        siblings: Sequence[DocumentNode] = self.nodes
        for index in target.position[:-1]:
            parent = siblings[index - 1]
            chain.append(parent)
            siblings = parent.children
        return chain


def build_tree(manifest: Manifest, content_root: str | Path) -> DocumentTree:
    """Resolve every manifest entry against ``content_root``.

    Raises ``SourceNotFoundError`` for the first entry (depth-first) whose
    source file is missing or lies outside the content root.
    """
    root = Path(content_root).resolve()
    nodes = [
        _build_node(entry, root, (index,))
        for index, entry in enumerate(manifest.entries, start=1)
    ]
    tree = DocumentTree(content_root=root, nodes=nodes, title=manifest.title)
    logger.debug("Resolved %d document node(s) under %s", len(tree), root)
    return tree


def _build_node(entry: ManifestEntry, root: Path, position: tuple[int, ...]) -> DocumentNode:
    source_path = resolve_source(entry.path, root)
    children = [
        _build_node(child, root, (*position, index))
        for index, child in enumerate(entry.children, start=1)
    ]
    return DocumentNode(
        title=entry.title,
        source_path=source_path,
        relative_path=entry.path,
        position=position,
        children=children,
    )


def resolve_source(relative: str, root: Path) -> Path:
    """Return the absolute source path for ``relative`` under the resolved ``root``."""
    candidate = (root / relative).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        raise SourceNotFoundError(
            f"Source '{relative}' resolves outside the content root {root}", path=relative
        ) from None
    if not candidate.is_file():
        raise SourceNotFoundError(
            f"Source '{relative}' not found under content root {root}", path=relative
        )
    return candidate
