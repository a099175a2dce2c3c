"""CLI interface for pii-watcher.

Usage:
    # Per-category matches as JSON
    echo 'Contact: alice.j@example.com' | pii-watcher detect

    # Only one category
    pii-watcher --file notes.txt detect --category phone

    # Counts and distinct values
    pii-watcher --file notes.txt summary
    pii-watcher --file notes.txt unique

    # Redacted copy on stdout
    pii-watcher --file notes.txt anonymize

Options may also come from a YAML file (--config or $PII_WATCHER_CONFIG);
command-line flags are applied on top of it.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .config import load_config, load_from_yaml
from .redactor import Detector, DetectorConfig
from .types import Category, PIIWatcherError

DEFAULT_CONFIG = os.environ.get("PII_WATCHER_CONFIG", "")


def _build_detector(args: argparse.Namespace) -> Detector:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    config = DetectorConfig(**cfg)
    if args.skip_categories:
        config.skip_categories |= {
            Category.parse(c.strip()) for c in args.skip_categories.split(",") if c.strip()
        }
    if args.allow_list:
        config.allow_list |= {v.strip() for v in args.allow_list.split(",") if v.strip()}
    if args.validate_cards:
        config.validate_card_checksum = True
    if args.resolve_overlaps:
        config.resolve_overlaps = True
    if args.max_chars is not None:
        config.max_chars = args.max_chars
    return Detector(config)


def _read_text(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return sys.stdin.read()


def _dump(data: object) -> None:
    json.dump(data, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_detect(args: argparse.Namespace) -> None:
    """Print retained matches as JSON."""
    detector = _build_detector(args)
    text = _read_text(args)
    if args.category:
        results = {Category.parse(args.category): detector.detect(text, args.category)}
    else:
        results = detector.detect_all(text)
    _dump({
        cat.value: [m.to_dict() for m in matches]
        for cat, matches in results.items()
    })


def cmd_summary(args: argparse.Namespace) -> None:
    """Print per-category counts and the total as JSON."""
    detector = _build_detector(args)
    counts = detector.summarize(_read_text(args))
    _dump({
        "counts": {cat.value: n for cat, n in counts.items()},
        "total": sum(counts.values()),
    })


def cmd_unique(args: argparse.Namespace) -> None:
    """Print distinct matched values per category as JSON."""
    detector = _build_detector(args)
    unique = detector.unique_values(_read_text(args))
    _dump({cat.value: values for cat, values in unique.items()})


def cmd_anonymize(args: argparse.Namespace) -> None:
    """Write the redacted document to stdout."""
    detector = _build_detector(args)
    sys.stdout.write(detector.anonymize(_read_text(args)))


def cmd_categories(args: argparse.Namespace) -> None:
    """List categories with their labels and placeholders."""
    detector = _build_detector(args)
    _dump([
        {
            "category": cat.value,
            "label": detector.label_for(cat),
            "placeholder": detector.catalog.placeholder_for(cat),
        }
        for cat in detector.catalog.all_categories()
    ])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pii-watcher",
        description="Find and redact PII in plain text",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config path")
    parser.add_argument("--file", default="", help="Read text from file instead of stdin")
    parser.add_argument("--skip-categories", default="", help="Comma-separated categories to skip")
    parser.add_argument("--allow-list", default="", help="Comma-separated values to never report")
    parser.add_argument("--validate-cards", action="store_true", help="Drop cards failing Luhn")
    parser.add_argument("--resolve-overlaps", action="store_true",
                        help="Drop overlapping spans before redaction")
    parser.add_argument("--max-chars", type=int, default=None, help="Reject longer documents")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    p_detect = sub.add_parser("detect", help="Matches per category (JSON)")
    p_detect.add_argument("--category", default="", help="Scan a single category")
    sub.add_parser("summary", help="Counts per category (JSON)")
    sub.add_parser("unique", help="Distinct values per category (JSON)")
    sub.add_parser("anonymize", help="Redacted text")
    sub.add_parser("categories", help="List categories")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "detect": cmd_detect,
        "summary": cmd_summary,
        "unique": cmd_unique,
        "anonymize": cmd_anonymize,
        "categories": cmd_categories,
    }
    try:
        cmds[args.command](args)
    except PIIWatcherError as e:
        sys.stderr.write(f"pii-watcher: {e}\n")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
