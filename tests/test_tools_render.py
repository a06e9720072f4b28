from __future__ import annotations

from pathlib import Path

import pytest

from tools.render import MANIFEST, OUTPUT, main


def test_render_script_uses_fixed_layout(tmp_path: Path) -> None:
    (tmp_path / "intro.md").write_text("# Hello\n", encoding="utf-8")
    manifest = tmp_path / MANIFEST
    manifest.parent.mkdir(parents=True)
    manifest.write_text('- title: "Intro"\n  path: "intro.md"\n', encoding="utf-8")

    assert main(tmp_path) == 0
    assert [path.name for path in (tmp_path / OUTPUT).iterdir()] == ["01-intro.html"]


def test_render_script_reports_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    manifest = tmp_path / MANIFEST
    manifest.parent.mkdir(parents=True)
    manifest.write_text("- missing.md\n", encoding="utf-8")

    assert main(tmp_path) == 1
    assert "missing.md" in capsys.readouterr().err
    assert not (tmp_path / OUTPUT).exists()
