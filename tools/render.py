"""Render the book next to this script using its fixed project layout.

Content sources live in the project root, the structure manifest in
``config/structure.yml`` and rendered pages are written to ``site/``.
"""

from __future__ import annotations

import sys
from pathlib import Path

from bookrender import Book, BookError

ROOT = Path(__file__).resolve().parents[1]
MANIFEST = Path("config") / "structure.yml"
OUTPUT = Path("site")


def main(root: Path = ROOT) -> int:
    try:
        Book.load(root, root / MANIFEST).write(root / OUTPUT)
    except BookError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
