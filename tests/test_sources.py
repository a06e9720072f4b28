from __future__ import annotations

from pathlib import Path

import pytest

from bookrender.errors import ConversionError
from bookrender.sources import read_source


def test_reads_plain_markdown(tmp_path: Path) -> None:
    path = tmp_path / "intro.md"
    path.write_text("# Hello\n\nWelcome.\n", encoding="utf-8")

    source = read_source(path)

    assert source.meta == {}
    assert source.title is None
    assert source.body.startswith("# Hello")
    assert source.body_offset == 0


def test_front_matter_is_split_from_body(tmp_path: Path) -> None:
    path = tmp_path / "intro.md"
    path.write_text("---\ntitle: Welcome Aboard\n---\n# Hello\n", encoding="utf-8")

    source = read_source(path)

    assert source.title == "Welcome Aboard"
    assert source.body == "# Hello"
    assert source.body_offset == 3


def test_unclosed_front_matter_raises_conversion_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.md"
    path.write_text("---\ntitle: Missing\n", encoding="utf-8")

    with pytest.raises(ConversionError, match="closing front matter"):
        read_source(path)


def test_non_mapping_front_matter_raises_conversion_error(tmp_path: Path) -> None:
    path = tmp_path / "list.md"
    path.write_text("---\n- a\n- b\n---\nBody\n", encoding="utf-8")

    with pytest.raises(ConversionError, match="must be a mapping"):
        read_source(path)


def test_undecodable_source_raises_conversion_error(tmp_path: Path) -> None:
    path = tmp_path / "binary.md"
    path.write_bytes(b"\xff\xfe\x00broken")

    with pytest.raises(ConversionError, match="not valid UTF-8"):
        read_source(path)
