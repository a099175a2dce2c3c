"""Pattern catalog and matcher.

Each category carries exactly one regex rule and one display label, held
together in a ``CategorySpec``.  Patterns are compiled with ``re.ASCII`` so
``\\d``, ``\\w`` and ``\\b`` keep their plain ASCII meaning.  Whitespace is
spelled out as ``WHITESPACE`` instead of ``\\s`` so that no-break and other
Unicode spaces still separate tokens.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from .types import Category, Match, UnknownCategory


@dataclass(frozen=True, slots=True)
class CategorySpec:
    """Rule and label for one category."""
    category: Category
    label: str
    pattern: re.Pattern


# ASCII whitespace plus NBSP, ogham, en/em spaces, line/paragraph separators,
# narrow NBSP, math space, ideographic space and BOM
_WS_CHARS = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
WHITESPACE = f"[{_WS_CHARS}]"

_STREET_TYPES = (
    "Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|"
    "Lane|Ln|Drive|Dr|Court|Ct|Circle|Cir"
)

# Capitalised word, optionally hyphen/apostrophe joined: Smith, Mac'Leod, Smith-Jones
_NAME_WORD = r"[A-Z][a-z]+(?:[-'][A-Z][a-z]+)?"

_SPECS: tuple[CategorySpec, ...] = (
    CategorySpec(Category.EMAIL, "Email Addresses", re.compile(
        r"\b[A-Za-z0-9][A-Za-z0-9._%+\-]*@[A-Za-z0-9][A-Za-z0-9.\-]*\.[A-Za-z]{2,}\b",
        re.ASCII,
    )),

    # NANP: optional +1 / 1 prefix, then 3-3-4 with optional (area code)
    CategorySpec(Category.PHONE, "Phone Numbers", re.compile(
        rf"\b(?:\+?1[-.{_WS_CHARS}]?)?"
        rf"\(?([0-9]{{3}})\)?[-.{_WS_CHARS}]?"
        rf"([0-9]{{3}})[-.{_WS_CHARS}]?"
        r"([0-9]{4})\b",
        re.ASCII,
    )),

    CategorySpec(Category.NAME, "Names", re.compile(
        rf"\b(?:(?:Dr|Mr|Ms|Mrs|Prof)\.?{WHITESPACE}+)?"
        rf"({_NAME_WORD}){WHITESPACE}+"
        rf"(?:([A-Z]\.?{WHITESPACE}+))?"
        rf"({_NAME_WORD})\b",
        re.ASCII,
    )),

    CategorySpec(Category.ADDRESS, "Street Addresses", re.compile(
        rf"\b\d{{1,5}}{WHITESPACE}+[A-Za-z0-9{_WS_CHARS}]+(?:{_STREET_TYPES})\b",
        re.ASCII,
    )),

    CategorySpec(Category.SSN, "Social Security Numbers", re.compile(
        r"\b\d{3}-\d{2}-\d{4}\b",
        re.ASCII,
    )),

    # Separators may be mixed: 4111-1111 1111-1111 is accepted
    CategorySpec(Category.CREDIT_CARD, "Credit Card Numbers", re.compile(
        rf"\b\d{{4}}[-{_WS_CHARS}]?\d{{4}}[-{_WS_CHARS}]?\d{{4}}[-{_WS_CHARS}]?\d{{4}}\b",
        re.ASCII,
    )),
)


class Catalog:
    """Ordered, read-only mapping of category to rule and label."""

    __slots__ = ("_specs",)

    def __init__(self, specs: Iterable[CategorySpec]) -> None:
        ordered: dict[Category, CategorySpec] = {}
        for spec in specs:
            if spec.category in ordered:
                raise ValueError(f"duplicate catalog entry for {spec.category.value}")
            ordered[spec.category] = spec
        self._specs = ordered

    def spec_for(self, category: Category | str) -> CategorySpec:
        cat = Category.parse(category)
        try:
            return self._specs[cat]
        except KeyError:
            raise UnknownCategory(category) from None

    def rule_for(self, category: Category | str) -> re.Pattern:
        return self.spec_for(category).pattern

    def label_for(self, category: Category | str) -> str:
        return self.spec_for(category).label

    def placeholder_for(self, category: Category | str) -> str:
        """Redaction token, e.g. ``[EMAIL ADDRESSES]``."""
        return f"[{self.label_for(category).upper()}]"

    def all_categories(self) -> tuple[Category, ...]:
        return tuple(self._specs)

    def __iter__(self) -> Iterator[CategorySpec]:
        return iter(self._specs.values())

    def __contains__(self, category: object) -> bool:
        return category in self._specs

    def __len__(self) -> int:
        return len(self._specs)


_missing = set(Category) - {s.category for s in _SPECS}
if _missing:
    raise RuntimeError(f"catalog has no rule for: {sorted(c.value for c in _missing)}")

DEFAULT_CATALOG = Catalog(_SPECS)


def scan(
    text: str,
    category: Category | str,
    catalog: Catalog = DEFAULT_CATALOG,
) -> list[Match]:
    """Run one category's rule over text.

    Matches are leftmost and non-overlapping: each search resumes at the
    previous match's end.  Returned in ascending ``start`` order.
    """
    spec = catalog.spec_for(category)
    return [
        Match(category=spec.category, start=m.start(), end=m.end(), value=m.group())
        for m in spec.pattern.finditer(text)
    ]
