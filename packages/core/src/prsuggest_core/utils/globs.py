"""Ignore-pattern matching for changed file paths."""

from __future__ import annotations

import fnmatch
import logging

from prsuggest_core.models import ChangeRecord

logger = logging.getLogger(__name__)


def parse_patterns(value) -> list[str]:
    """Normalise an ignore-pattern setting into a list of non-empty patterns.

    Accepts the comma-separated string form (``"dist/**, *.lock"``) or a list
    as loaded from YAML. Entries are trimmed and empty ones discarded.
    """
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [p.strip() for p in value if p and p.strip()]


def is_ignored(path: str, patterns: list[str]) -> bool:
    """Return True if path matches any of the glob patterns.

    fnmatch gives shell-style matching where leading dots are not special,
    so ".github/**" and "*.yml" both match ".github/workflows/ci.yml".
    ``*`` also matches across ``/``, which makes ``dir/**`` cover every
    file below ``dir``.
    """
    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue
        if fnmatch.fnmatchcase(path, pattern):
            return True
    return False


def filter_ignored(records: list[ChangeRecord], patterns: list[str]) -> list[ChangeRecord]:
    if not patterns:
        return list(records)
    kept = [r for r in records if not is_ignored(r.path, patterns)]
    if len(kept) != len(records):
        logger.debug("Ignored %d change record(s) matching %s", len(records) - len(kept), patterns)
    return kept
