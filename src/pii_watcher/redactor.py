"""Detector — the main API.  Match, filter, aggregate, redact.

Usage:
    from pii_watcher import Detector

    detector = Detector()            # reusable, holds no per-scan state

    detector.summarize("Call 555-123-4567")
    # {Category.EMAIL: 0, Category.PHONE: 1, ...}

    detector.anonymize("Contact: alice.j@example.com")
    # "Contact: [EMAIL ADDRESSES]"
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .filters import apply_filters, filter_invalid_cards
from .patterns import DEFAULT_CATALOG, Catalog, scan
from .types import Category, InputTooLarge, Match, RedactedDocument

logger = logging.getLogger(__name__)


@dataclass
class DetectorConfig:
    """Configuration for the Detector."""
    # Categories reported with an empty match list
    skip_categories: set[Category] = field(default_factory=set)
    # Values that should NEVER be reported or redacted
    allow_list: set[str] = field(default_factory=set)
    validate_card_checksum: bool = False   # drop card matches failing Luhn
    resolve_overlaps: bool = False         # non-overlapping cover before redaction
    max_chars: int | None = None           # reject longer documents
    max_workers: int = 1                   # >1 scans categories on a thread pool


class Detector:
    """PII detector over a fixed catalog.

    detect()  — one category: match, then false-positive filters
    detect_all() / summarize() / unique_values() — every catalog category
    redact() / anonymize() — placeholder substitution, right-to-left
    """

    def __init__(
        self,
        config: DetectorConfig | None = None,
        catalog: Catalog = DEFAULT_CATALOG,
    ) -> None:
        self.config = config or DetectorConfig()
        self.catalog = catalog

    def label_for(self, category: Category | str) -> str:
        return self.catalog.label_for(category)

    def detect(self, text: str, category: Category | str) -> list[Match]:
        """Retained matches for one category, in textual order.

        Raises UnknownCategory for a name outside the catalog.
        """
        cat = self.catalog.spec_for(category).category
        self._check_size(text)
        if cat in self.config.skip_categories:
            return []

        matches = apply_filters(cat, scan(text, cat, self.catalog))
        if cat is Category.CREDIT_CARD and self.config.validate_card_checksum:
            matches = filter_invalid_cards(matches)
        if self.config.allow_list:
            matches = [m for m in matches if m.value not in self.config.allow_list]
        return matches

    def detect_all(self, text: str) -> dict[Category, list[Match]]:
        """Retained matches for every category, in catalog order."""
        self._check_size(text)
        categories = self.catalog.all_categories()
        if self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                found = list(pool.map(lambda c: self.detect(text, c), categories))
        else:
            found = [self.detect(text, c) for c in categories]

        results = dict(zip(categories, found))
        logger.debug(
            "scanned %d chars: %s", len(text),
            {c.value: len(ms) for c, ms in results.items()},
        )
        return results

    def summarize(self, text: str) -> dict[Category, int]:
        """Match count per category; zero counts included."""
        return {cat: len(ms) for cat, ms in self.detect_all(text).items()}

    def unique_values(self, text: str) -> dict[Category, list[str]]:
        """Distinct matched strings per category, first-seen order."""
        return {
            cat: list(dict.fromkeys(m.value for m in ms))
            for cat, ms in self.detect_all(text).items()
        }

    def redact(self, text: str) -> RedactedDocument:
        """Replace every retained match with its category placeholder.

        Returns a RedactedDocument with the redacted text and metadata.
        """
        all_matches = [m for ms in self.detect_all(text).values() for m in ms]

        dropped: list[Match] = []
        if self.config.resolve_overlaps:
            all_matches, dropped = resolve_overlaps(all_matches)
            for m in dropped:
                logger.warning(
                    "overlapping %s span [%d, %d) dropped before redaction",
                    m.category.value, m.start, m.end,
                )

        # --- Apply replacements (right-to-left to preserve offsets) ---
        # Stable sort: equal starts keep catalog order.
        result = text
        for match in sorted(all_matches, key=lambda m: m.start, reverse=True):
            token = self.catalog.placeholder_for(match.category)
            result = result[:match.start] + token + result[match.end:]

        return RedactedDocument(
            text=result,
            matches=sorted(all_matches, key=lambda m: m.start),
            dropped=dropped,
        )

    def anonymize(self, text: str) -> str:
        """Redacted copy of text (convenience)."""
        return self.redact(text).text

    def _check_size(self, text: str) -> None:
        limit = self.config.max_chars
        if limit is not None and len(text) > limit:
            raise InputTooLarge(len(text), limit)


def resolve_overlaps(matches: list[Match]) -> tuple[list[Match], list[Match]]:
    """Reduce spans to a non-overlapping cover.

    Earliest start wins, then the longest span; ties keep input order.
    Returns (kept, dropped), both sorted by start.
    """
    ranked = sorted(matches, key=lambda m: (m.start, -(m.end - m.start)))
    kept: list[Match] = []
    dropped: list[Match] = []
    covered_to = -1
    for m in ranked:
        if m.start >= covered_to:
            kept.append(m)
            covered_to = m.end
        else:
            dropped.append(m)
    return kept, dropped


# Module-level API over the default catalog and configuration
_default = Detector()


def detect_all(text: str) -> dict[Category, list[Match]]:
    return _default.detect_all(text)


def summarize(text: str) -> dict[Category, int]:
    return _default.summarize(text)


def unique_values(text: str) -> dict[Category, list[str]]:
    return _default.unique_values(text)


def anonymize(text: str) -> str:
    return _default.anonymize(text)


def label_for(category: Category | str) -> str:
    return _default.label_for(category)
