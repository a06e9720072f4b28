"""Build reporting helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from .render import RenderResult
from .writer import write_atomic


class DocumentStats(BaseModel):
    total: int
    code_samples_checked: int


class BuildReport(BaseModel):
    title: str | None
    generated_at: datetime
    duration_seconds: float
    manifest: str
    output_dir: str
    documents: DocumentStats
    written: list[str] = Field(default_factory=list)


def assemble_report(
    *,
    title: str | None,
    manifest: Path,
    output_dir: Path,
    result: RenderResult,
    duration_seconds: float,
) -> BuildReport:
    written = []
    for path in result.written:
        try:
            written.append(path.relative_to(output_dir).as_posix())
        except ValueError:
            written.append(path.as_posix())

    return BuildReport(
        title=title,
        generated_at=datetime.now(timezone.utc),
        duration_seconds=duration_seconds,
        manifest=manifest.as_posix(),
        output_dir=output_dir.as_posix(),
        documents=DocumentStats(
            total=result.documents,
            code_samples_checked=result.code_samples_checked,
        ),
        written=written,
    )


def write_report(report: BuildReport, target: Path) -> Path:
    """Write the report as JSON; raises ``WriteError`` when it cannot be stored."""
    payload = json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2)
    return write_atomic(target, payload.encode("utf-8"))
