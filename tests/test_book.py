from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from bookrender import Book, ManifestNotFoundError, SourceNotFoundError
from bookrender.config import Config
from bookrender.markdown import render_markdown


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_single_entry_renders_one_converted_file(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "intro.md", "# Hello")
    manifest = _write(tmp_path / "structure.yml", '- title: "Intro"\n  path: "intro.md"\n')
    output = tmp_path / "out"

    result = Book.load(content, manifest).write(output)

    files = _snapshot(output)
    assert list(files) == ["01-intro.html"]
    assert render_markdown("# Hello").encode("utf-8") in files["01-intro.html"]
    assert result.written == [output / "01-intro.html"]
    assert result.documents == 1


def test_every_entry_yields_exactly_one_output(tmp_path: Path) -> None:
    content = tmp_path / "content"
    for name in ("a", "b", "c", "d"):
        _write(content / f"{name}.md", f"# {name.upper()}\n")
    manifest = _write(
        tmp_path / "structure.yml",
        "- a.md\n- path: b.md\n  children:\n    - c.md\n    - d.md\n",
    )
    output = tmp_path / "out"

    book = Book.load(content, manifest)
    book.write(output)

    assert len(book) == 4
    assert list(_snapshot(output)) == [
        "01-a.html",
        "02-b/01-c.html",
        "02-b/02-d.html",
        "02-b/index.html",
    ]


def test_rendering_twice_is_byte_identical(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "intro.md", "# Hello\n\n```python\nprint('hi')\n```\n")
    _write(content / "next.md", "---\ntitle: Next Steps\n---\nMore text.\n")
    manifest = _write(tmp_path / "structure.yml", "title: Guide\nentries:\n  - intro.md\n  - next.md\n")
    output = tmp_path / "out"

    Book.load(content, manifest).write(output)
    first = _snapshot(output)
    Book.load(content, manifest).write(output)

    assert _snapshot(output) == first


def test_empty_manifest_produces_empty_output(tmp_path: Path) -> None:
    manifest = _write(tmp_path / "structure.yml", "[]\n")
    output = tmp_path / "out"

    result = Book.load(tmp_path, manifest).write(output)

    assert result.written == []
    assert not output.exists() or _snapshot(output) == {}


def test_missing_source_fails_before_any_output(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "intro.md", "# Hello\n")
    manifest = _write(tmp_path / "structure.yml", "- intro.md\n- missing.md\n")
    output = tmp_path / "out"

    with pytest.raises(SourceNotFoundError, match="missing.md") as excinfo:
        Book.load(content, manifest).write(output)

    assert excinfo.value.path == "missing.md"
    assert not output.exists()


def test_missing_manifest_raises(tmp_path: Path) -> None:
    with pytest.raises(ManifestNotFoundError):
        Book.load(tmp_path, tmp_path / "structure.yml")


def test_config_title_overrides_manifest_title(tmp_path: Path) -> None:
    _write(tmp_path / "intro.md", "# Hello\n")
    manifest = _write(tmp_path / "structure.yml", "title: From Manifest\nentries:\n  - intro.md\n")

    assert Book.load(tmp_path, manifest).title == "From Manifest"
    book = Book.load(tmp_path, manifest, config=Config(title="From Config"))
    assert book.title == "From Config"

    book.write(tmp_path / "out")
    page = (tmp_path / "out" / "01-intro.html").read_text(encoding="utf-8")
    assert "<title>Intro | From Config</title>" in page


def test_from_config_uses_configured_paths(tmp_path: Path) -> None:
    _write(tmp_path / "docs" / "intro.md", "# Hello\n")
    manifest = _write(tmp_path / "book.yml", "- intro.md\n")
    config = Config(content_dir=tmp_path / "docs", manifest=manifest, output_dir=tmp_path / "public")

    book = Book.from_config(config)
    result = book.write(config.output_dir)

    assert result.written == [tmp_path / "public" / "01-intro.html"]


def test_rendered_pages_are_world_readable(tmp_path: Path) -> None:
    _write(tmp_path / "intro.md", "# Hello\n")
    manifest = _write(tmp_path / "structure.yml", "- intro.md\n")
    previous = os.umask(0o022)
    try:
        Book.load(tmp_path, manifest).write(tmp_path / "out")
    finally:
        os.umask(previous)

    assert (tmp_path / "out" / "01-intro.html").stat().st_mode & stat.S_IROTH
