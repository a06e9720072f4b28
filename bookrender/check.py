"""Workspace diagnostics: report every manifest, source, and sample problem at once."""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterator

from .config import Config
from .errors import BookError, ConversionError, SourceNotFoundError
from .manifest import Manifest, ManifestEntry, load_manifest
from .render import Renderer
from .tree import DocumentNode, resolve_source

SOURCE_SUFFIXES = {".md", ".markdown"}
MAX_SUGGESTIONS = 3


class IssueSeverity(Enum):
    """Severity level for check findings."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class CheckIssue:
    """A single problem found while checking a book workspace."""

    path: str
    message: str
    severity: IssueSeverity = IssueSeverity.ERROR
    suggestions: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CheckReport:
    """Aggregate results for a workspace check."""

    issues: list[CheckIssue] = field(default_factory=list)
    document_count: int = 0
    code_samples_checked: int = 0

    def add(self, issue: CheckIssue) -> None:
        self.issues.append(issue)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def check_workspace(config: Config, *, renderer: Renderer | None = None) -> CheckReport:
    """Load, resolve, and convert every document without writing any output."""
    report = CheckReport()
    try:
        manifest = load_manifest(config.manifest)
    except BookError as exc:
        report.add(CheckIssue(path=str(config.manifest), message=str(exc)))
        return report

    renderer = renderer or Renderer(config)
    content_root = config.content_dir.resolve()
    available = sorted(_iter_sources(content_root, exclude=config.output_dir))
    referenced: set[str] = set()

    for entry, position in _iter_positions(manifest):
        report.document_count += 1
        try:
            source_path = resolve_source(entry.path, content_root)
        except SourceNotFoundError as exc:
            report.add(
                CheckIssue(
                    path=entry.path,
                    message=str(exc),
                    suggestions=suggest_paths(entry.path, available),
                )
            )
            continue

        referenced.add(source_path.relative_to(content_root).as_posix())
        node = DocumentNode(
            title=entry.title,
            source_path=source_path,
            relative_path=entry.path,
            position=position,
        )
        try:
            converted = renderer.convert(node)
        except ConversionError as exc:
            report.add(CheckIssue(path=entry.path, message=str(exc)))
            continue
        report.code_samples_checked += converted.code_samples_checked

    for orphan in available:
        if orphan not in referenced:
            report.add(
                CheckIssue(
                    path=orphan,
                    message="Source is not referenced by the manifest.",
                    severity=IssueSeverity.WARNING,
                )
            )
    return report


def suggest_paths(missing: str, available: list[str]) -> list[str]:
    """Return the closest existing source paths to a missing one."""
    suggestions = difflib.get_close_matches(missing, available, n=MAX_SUGGESTIONS, cutoff=0.6)
    if suggestions:
        return suggestions
    # Fall back to matching on the file name alone for sources that moved directories.
    name = Path(missing).name
    by_name: dict[str, list[str]] = {}
    for candidate in available:
        by_name.setdefault(Path(candidate).name, []).append(candidate)
    names = difflib.get_close_matches(name, list(by_name), n=MAX_SUGGESTIONS, cutoff=0.6)
    return [path for match in names for path in by_name[match]][:MAX_SUGGESTIONS]


def _iter_positions(manifest: Manifest) -> Iterator[tuple[ManifestEntry, tuple[int, ...]]]:
    def _walk(entries: list[ManifestEntry], prefix: tuple[int, ...]) -> Iterator[tuple[ManifestEntry, tuple[int, ...]]]:
        for index, entry in enumerate(entries, start=1):
            position = (*prefix, index)
            yield entry, position
            yield from _walk(entry.children, position)

    yield from _walk(manifest.entries, ())


def _iter_sources(root: Path, *, exclude: Path) -> Iterator[str]:
    if not root.is_dir():
        return
    # Only an output root nested inside the content root is skipped.
    excluded: Path | None = exclude.resolve()
    if excluded == root or not excluded.is_relative_to(root):
        excluded = None
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in SOURCE_SUFFIXES:
            continue
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if excluded is not None and path.resolve().is_relative_to(excluded):
            continue
        yield relative.as_posix()
