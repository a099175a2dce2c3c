"""False-positive filters, applied per category after matching.

Filters only ever drop matches; they never edit offsets or values.
"""

from __future__ import annotations
import logging
import re
from typing import Callable

from .patterns import WHITESPACE
from .types import Category, Match

logger = logging.getLogger(__name__)

_DIGIT_RUNS = re.compile(r"[0-9]+")
_WORD_SEP = re.compile(WHITESPACE + "+")

# Capitalised words that the name rule picks up at sentence starts and in dates
NAME_STOPLIST = frozenset({
    "The", "This", "That", "Will", "May", "June", "July",
    "August", "March", "April", "January", "February",
})


def _looks_like_date(value: str) -> bool:
    groups = _DIGIT_RUNS.findall(value)
    if len(groups) != 3:
        return False
    return int(groups[0]) <= 12 and int(groups[1]) <= 31


def filter_phone_false_positives(matches: list[Match]) -> list[Match]:
    """Drop phone matches shaped like MM/DD/YYYY."""
    kept = []
    for m in matches:
        if _looks_like_date(m.value):
            logger.debug("dropping date-shaped phone match %r", m.value)
            continue
        kept.append(m)
    return kept


def filter_name_false_positives(matches: list[Match]) -> list[Match]:
    """Drop name matches containing a stoplisted word."""
    kept = []
    for m in matches:
        if any(word in NAME_STOPLIST for word in _WORD_SEP.split(m.value)):
            logger.debug("dropping stoplisted name match %r", m.value)
            continue
        kept.append(m)
    return kept


FILTERS: dict[Category, Callable[[list[Match]], list[Match]]] = {
    Category.PHONE: filter_phone_false_positives,
    Category.NAME: filter_name_false_positives,
}


def apply_filters(category: Category, matches: list[Match]) -> list[Match]:
    """Run the category's filter; identity for unfiltered categories."""
    fn = FILTERS.get(category)
    return fn(matches) if fn else matches


def luhn_check(number: str) -> bool:
    """Luhn algorithm over the digits of number (separators ignored)."""
    digits = [int(d) for d in number if d.isdigit()]
    if len(digits) < 13:
        return False
    total = 0
    for i, d in enumerate(reversed(digits)):
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return total % 10 == 0


def filter_invalid_cards(matches: list[Match]) -> list[Match]:
    """Drop card-shaped matches that fail the Luhn checksum."""
    kept = []
    for m in matches:
        if not luhn_check(m.value):
            logger.debug("dropping card match failing checksum %r", m.value)
            continue
        kept.append(m)
    return kept
