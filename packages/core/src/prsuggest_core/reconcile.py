"""Reconciliation of generated suggestions against the diff's change records.

The suggestion source is untrusted: it may invent line numbers, point at
lines outside the supplied diff, or return entries with nothing to say. Only
candidates carrying a body and anchored to an existing change record become
comments. Dropping the rest is the normal case, not an error.
"""

from __future__ import annotations

import logging

from prsuggest_core.models import CandidateSuggestion, ChangeRecord, CommentRecord

logger = logging.getLogger(__name__)


def has_body(candidate: CandidateSuggestion) -> bool:
    return bool(candidate.suggestion_body)


def reconcile(
    change_records: list[ChangeRecord],
    candidates: list[CandidateSuggestion],
) -> list[CommentRecord]:
    """Return a comment for every candidate with a body and a matching change record.

    Candidate order is preserved and duplicates on the same path/line are
    passed through as separate comments.
    """
    anchors = {(r.path, r.line) for r in change_records}

    comments: list[CommentRecord] = []
    for candidate in candidates:
        if not has_body(candidate):
            continue
        if (candidate.path, candidate.line) not in anchors:
            logger.debug(
                "Dropping suggestion for %s:%s (line not in diff)",
                candidate.path,
                candidate.line,
            )
            continue
        comments.append(CommentRecord(path=candidate.path, line=candidate.line, body=candidate.suggestion_body))
    return comments
