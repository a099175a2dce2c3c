"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class PIIWatcherError(Exception):
    """Base class for errors raised at the package boundary."""


class UnknownCategory(PIIWatcherError, ValueError):
    """A category name that is not part of the catalog."""

    def __init__(self, category: object) -> None:
        super().__init__(f"unknown PII category: {category!r}")
        self.category = category


class InputTooLarge(PIIWatcherError, ValueError):
    """Document exceeds the configured ``max_chars`` cap."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"document has {length} characters, limit is {limit}")
        self.length = length
        self.limit = limit


class Category(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    NAME = "name"
    ADDRESS = "address"
    SSN = "ssn"
    CREDIT_CARD = "credit_card"

    @classmethod
    def parse(cls, value: Category | str) -> Category:
        """Resolve a member or its string value; never invents a category."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownCategory(value) from None


@dataclass(frozen=True, slots=True)
class Match:
    """A single PII span in the original document."""
    category: Category
    start: int
    end: int               # exclusive
    value: str

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "start": self.start,
            "end": self.end,
            "value": self.value,
        }


@dataclass(slots=True)
class RedactedDocument:
    """Result of redacting a document."""
    text: str
    matches: list[Match] = field(default_factory=list)
    dropped: list[Match] = field(default_factory=list)  # lost to overlap resolution
