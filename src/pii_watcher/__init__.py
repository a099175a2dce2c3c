"""pii-watcher — find, count and redact PII in plain-text documents."""

from .patterns import DEFAULT_CATALOG, Catalog, CategorySpec, scan
from .redactor import (
    Detector, DetectorConfig,
    anonymize, detect_all, label_for, summarize, unique_values,
)
from .config import create_detector, load_config, load_from_yaml
from .types import (
    Category, Match, RedactedDocument,
    PIIWatcherError, UnknownCategory, InputTooLarge,
)

__all__ = [
    "Detector", "DetectorConfig",
    "Catalog", "CategorySpec", "DEFAULT_CATALOG", "scan",
    "detect_all", "summarize", "unique_values", "anonymize", "label_for",
    "create_detector", "load_config", "load_from_yaml",
    "Category", "Match", "RedactedDocument",
    "PIIWatcherError", "UnknownCategory", "InputTooLarge",
]
__version__ = "0.1.0"
