"""Read structure manifests from YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import ManifestFormatError, ManifestNotFoundError
from .models import Manifest

logger = logging.getLogger(__name__)


def load_manifest(path: str | Path) -> Manifest:
    """Load the manifest at ``path`` into an ordered entry tree."""
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise ManifestNotFoundError(f"Manifest not found: {manifest_path}", path=manifest_path)

    try:
        text = manifest_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ManifestFormatError(
            f"Manifest {manifest_path} is not valid UTF-8 text", path=manifest_path
        ) from exc

    manifest = parse_manifest(text, source=manifest_path)
    logger.debug("Loaded %d manifest entries from %s", len(manifest), manifest_path)
    return manifest


def parse_manifest(text: str, *, source: str | Path = "<manifest>") -> Manifest:
    """Parse manifest YAML text; ``source`` is only used in error messages."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestFormatError(f"Manifest {source} is not valid YAML: {exc}", path=source) from exc

    payload = _normalize_root(data, source)
    payload["source_path"] = str(source)
    try:
        return Manifest.model_validate(payload)
    except ValidationError as exc:
        raise ManifestFormatError(
            f"Invalid manifest {source}: {_describe_validation_error(exc)}", path=source
        ) from exc


def _normalize_root(data: Any, source: str | Path) -> dict[str, Any]:
    if data is None:
        return {"entries": []}
    if isinstance(data, list):
        return {"entries": data}
    if isinstance(data, dict):
        return dict(data)
    raise ManifestFormatError(
        f"Manifest {source} must be a sequence of entries or a mapping, got {type(data).__name__}",
        path=source,
    )


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = "/".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid value"))
    return f"{message} (at {location})" if location else message
