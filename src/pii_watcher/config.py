"""YAML/dict config loader for pii-watcher.

Supports loading from a YAML file or a plain dict (for embedding
in a larger application config).

Example YAML:

    pii_watcher:
      skip_categories:
        - address
      allow_list:
        - support@example.com
      validate_card_checksum: true
      resolve_overlaps: false
      max_chars: 1000000
      max_workers: 1
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

from .redactor import Detector, DetectorConfig
from .types import Category


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline).

    Raises UnknownCategory for category names outside the catalog.
    """
    data = data or {}
    # Support nested under "pii_watcher" key or flat
    if "pii_watcher" in data:
        data = data["pii_watcher"] or {}

    max_chars = data.get("max_chars")
    return {
        "skip_categories": {Category.parse(c) for c in data.get("skip_categories") or []},
        "allow_list": set(data.get("allow_list") or []),
        "validate_card_checksum": bool(data.get("validate_card_checksum", False)),
        "resolve_overlaps": bool(data.get("resolve_overlaps", False)),
        "max_chars": int(max_chars) if max_chars is not None else None,
        "max_workers": int(data.get("max_workers", 1)),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(Path(path).expanduser()) as f:
        return load_config(yaml.safe_load(f))


def create_detector(config: dict[str, Any] | None = None) -> Detector:
    """Create a configured Detector from a raw or normalized config dict."""
    cfg = load_config(config)
    return Detector(DetectorConfig(**cfg))
