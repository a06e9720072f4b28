"""Syntax checks for fenced code samples embedded in book sources."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .config import CodeCheckConfig
from .markdown import CodeSample

logger = logging.getLogger(__name__)

PYTHON_ALIASES = {"python": "python", "py": "python", "python3": "python"}
SAMPLE_SUFFIXES = {
    "javascript": ".js",
    "js": ".js",
    "ruby": ".rb",
    "rb": ".rb",
    "shell": ".sh",
    "bash": ".sh",
    "sh": ".sh",
}


@dataclass(slots=True)
class CodeSampleIssue:
    """Represents a code sample that failed its syntax check."""

    language: str
    line: int
    message: str
    sample_line: int | None = None

    def location(self, offset: int = 0) -> int:
        """Line of the failure in the source file, given the lines before the body."""
        return offset + self.line + (self.sample_line or 0)


class CodeChecker:
    """Dispatch code samples to the parser or command configured for their language."""

    def __init__(self, config: CodeCheckConfig) -> None:
        self._config = config
        self._languages = {PYTHON_ALIASES.get(name, name) for name in config.languages}
        self._unavailable: set[str] = set()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def check(self, samples: Iterable[CodeSample]) -> list[CodeSampleIssue]:
        """Check every sample with a known checker; return the failures."""
        if not self._config.enabled:
            return []
        issues: list[CodeSampleIssue] = []
        for sample in samples:
            issue = self.check_sample(sample)
            if issue is not None:
                issues.append(issue)
        return issues

    def handles(self, language: str) -> bool:
        if not self._config.enabled or not language:
            return False
        if PYTHON_ALIASES.get(language) in self._languages:
            return True
        return language in self._config.commands and language not in self._unavailable

    def check_sample(self, sample: CodeSample) -> CodeSampleIssue | None:
        language = sample.language
        if not self.handles(language):
            return None
        if PYTHON_ALIASES.get(language) in self._languages:
            return _check_python(sample)
        return self._check_with_command(sample, self._config.commands[language])

    def _check_with_command(self, sample: CodeSample, command: Sequence[str]) -> CodeSampleIssue | None:
        executable = shutil.which(command[0])
        if executable is None:
            logger.warning(
                "Checker '%s' for %s samples not found on PATH; skipping those samples.",
                command[0],
                sample.language,
            )
            self._unavailable.add(sample.language)
            return None

        result = _run_checker([executable, *command[1:]], sample)
        if result.returncode == 0:
            return None
        output = (result.stderr or result.stdout or "").strip()
        message = output.splitlines()[-1] if output else f"exited with status {result.returncode}"
        return CodeSampleIssue(language=sample.language, line=sample.line, message=message)


def _check_python(sample: CodeSample) -> CodeSampleIssue | None:
    try:
        compile(sample.code, f"<{sample.language} sample>", "exec", dont_inherit=True)
    except SyntaxError as exc:
        return CodeSampleIssue(
            language=sample.language,
            line=sample.line,
            message=exc.msg,
            sample_line=exc.lineno,
        )
    except ValueError as exc:
        # compile() rejects source containing null bytes with ValueError.
        return CodeSampleIssue(language=sample.language, line=sample.line, message=str(exc))
    return None


def _run_checker(command: Sequence[str], sample: CodeSample) -> subprocess.CompletedProcess[str]:
    suffix = SAMPLE_SUFFIXES.get(sample.language, ".txt")
    fd, temp_path = tempfile.mkstemp(prefix="bookrender-sample-", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(sample.code)
        return subprocess.run(
            [*command, temp_path],
            capture_output=True,
            text=True,
            check=False,
        )
    finally:
        Path(temp_path).unlink(missing_ok=True)
