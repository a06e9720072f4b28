from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

import pytest

import bookrender.codecheck as codecheck
from bookrender.codecheck import CodeChecker
from bookrender.config import CodeCheckConfig
from bookrender.markdown import CodeSample, extract_code_samples


def test_extract_code_samples_reports_language_and_line() -> None:
    text = "# Title\n\n```python\nprint('hi')\n```\n\nText\n\n```\nplain\n```\n"

    samples = extract_code_samples(text)

    assert [(sample.language, sample.line) for sample in samples] == [("python", 3), ("", 9)]
    assert samples[0].code == "print('hi')\n"


def test_valid_python_sample_passes() -> None:
    checker = CodeChecker(CodeCheckConfig())

    issues = checker.check([CodeSample(language="python", code="def f():\n    return 1\n", line=4)])

    assert issues == []


def test_broken_python_sample_reports_line() -> None:
    checker = CodeChecker(CodeCheckConfig())

    issues = checker.check([CodeSample(language="py", code="x = 1\ndef broken(:\n", line=10)])

    assert len(issues) == 1
    issue = issues[0]
    assert issue.language == "py"
    assert issue.line == 10
    assert issue.sample_line == 2
    assert issue.location() == 12
    assert issue.location(3) == 15


def test_unchecked_languages_are_ignored() -> None:
    checker = CodeChecker(CodeCheckConfig())

    assert not checker.handles("ruby")
    assert not checker.handles("")
    assert checker.check([CodeSample(language="ruby", code="def (", line=1)]) == []


def test_disabled_checks_skip_everything() -> None:
    checker = CodeChecker(CodeCheckConfig(enabled=False))

    assert not checker.enabled
    assert checker.check([CodeSample(language="python", code="def (", line=1)]) == []


def test_external_command_failure_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[Sequence[str]] = []

    def fake_run(command: Sequence[str], sample: CodeSample) -> subprocess.CompletedProcess[str]:
        calls.append(command)
        return subprocess.CompletedProcess([*command], 1, "", "sample.js:1\nSyntaxError: Unexpected token ;")

    monkeypatch.setattr(codecheck.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(codecheck, "_run_checker", fake_run)
    checker = CodeChecker(CodeCheckConfig(commands={"javascript": ["node", "--check"]}))

    issues = checker.check([CodeSample(language="javascript", code="let x = ;", line=7)])

    assert calls == [["/usr/bin/node", "--check"]]
    assert len(issues) == 1
    assert issues[0].message == "SyntaxError: Unexpected token ;"
    assert issues[0].location() == 7


def test_external_command_success_passes(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: Sequence[str], sample: CodeSample) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess([*command], 0, "", "")

    monkeypatch.setattr(codecheck.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(codecheck, "_run_checker", fake_run)
    checker = CodeChecker(CodeCheckConfig(commands={"javascript": "node --check"}))

    assert checker.check([CodeSample(language="javascript", code="let x = 1;", line=1)]) == []


def test_missing_external_checker_is_skipped(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(codecheck.shutil, "which", lambda name: None)
    checker = CodeChecker(CodeCheckConfig(commands={"javascript": ["node", "--check"]}))

    with caplog.at_level("WARNING"):
        issues = checker.check(
            [
                CodeSample(language="javascript", code="let x = ;", line=1),
                CodeSample(language="javascript", code="let y = ;", line=5),
            ]
        )

    assert issues == []
    assert not checker.handles("javascript")
    assert sum("not found on PATH" in record.getMessage() for record in caplog.records) == 1


def test_run_checker_removes_temporary_sample(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[Path] = []

    def fake_subprocess_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        sample_path = Path(command[-1])
        assert sample_path.read_text(encoding="utf-8") == "let x = 1;"
        assert sample_path.suffix == ".js"
        seen.append(sample_path)
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(codecheck.subprocess, "run", fake_subprocess_run)

    result = codecheck._run_checker(["node", "--check"], CodeSample(language="javascript", code="let x = 1;", line=1))

    assert result.returncode == 0
    assert len(seen) == 1
    assert not seen[0].exists()
