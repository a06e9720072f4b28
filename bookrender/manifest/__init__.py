"""Structure manifest models and loading helpers."""

from .loader import load_manifest, parse_manifest
from .models import Manifest, ManifestEntry

__all__ = [
    "Manifest",
    "ManifestEntry",
    "load_manifest",
    "parse_manifest",
]
