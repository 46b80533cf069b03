"""Diff position mapping: parsed diffs to commentable change records.

GitHub's review comment API anchors a comment either to a file line or to a
``position``: the 1-based offset of a line within a file's diff body. The
position counter is cumulative across hunks and every hunk header after the
first one takes a slot, so lines that never become records (context lines,
the ``\\ No newline at end of file`` marker) still consume a position.

A one-line edit shows up in a diff as a deletion immediately followed by an
addition on the same line number. Those two lines collapse into a single
modification record so the reviewer comments once per logical edit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from prsuggest_core.models import NO_NEWLINE_MARKER, ChangeRecord, Chunk, FileDiff, LineKind, RawLine

logger = logging.getLogger(__name__)

# Content of an empty added or removed line: the marker with no payload.
_BARE_MARKERS = frozenset({"+", "-"})


class PairingTag(Enum):
    KEEP = "keep"
    DROP = "drop"
    MERGE_WITH_PREVIOUS = "merge-with-previous"


@dataclass(frozen=True)
class PositionedLine:
    position: int
    line: RawLine


def number_chunk(counter: int, chunk: Chunk, chunk_index: int) -> tuple[int, list[PositionedLine]]:
    """Assign positions to every line of a chunk, starting after ``counter``.

    Returns the advanced counter with the numbered lines. Chunks after the
    first start one slot later to account for their ``@@`` header line.
    """
    if chunk_index > 0:
        counter += 1
    numbered = []
    for raw in chunk.lines:
        counter += 1
        numbered.append(PositionedLine(position=counter, line=raw))
    return counter, numbered


def is_commentable(raw: RawLine) -> bool:
    return raw.kind != LineKind.CONTEXT and raw.content != NO_NEWLINE_MARKER


def tag_pairs(lines: list[PositionedLine]) -> list[PairingTag]:
    """Decide, line by line, what survives the add/delete pairing pass.

    ``lines`` must already be restricted to the commentable lines of a single
    chunk; neighbours are looked up in that list only.
    """
    tags = []
    for k, current in enumerate(lines):
        raw = current.line
        previous = lines[k - 1].line if k > 0 else None
        following = lines[k + 1].line if k < len(lines) - 1 else None

        if raw.content in _BARE_MARKERS:
            tags.append(PairingTag.DROP)
        elif raw.kind == LineKind.ADD:
            if (
                previous is not None
                and previous.kind == LineKind.DELETE
                and previous.line_number == raw.line_number
            ):
                tags.append(PairingTag.MERGE_WITH_PREVIOUS)
            else:
                tags.append(PairingTag.KEEP)
        elif (
            raw.kind == LineKind.DELETE
            and following is not None
            and following.kind == LineKind.ADD
            and following.line_number == raw.line_number
        ):
            # Folded into the next line's modification record.
            tags.append(PairingTag.DROP)
        else:
            tags.append(PairingTag.KEEP)
    return tags


def _materialize(path: str, lines: list[PositionedLine], tags: list[PairingTag]) -> list[ChangeRecord]:
    records = []
    for k, (current, tag) in enumerate(zip(lines, tags)):
        if tag == PairingTag.DROP:
            continue
        previous_content = lines[k - 1].line.content if tag == PairingTag.MERGE_WITH_PREVIOUS else None
        records.append(
            ChangeRecord(
                path=path,
                position=current.position,
                line=current.line.line_number,
                kind=current.line.kind,
                content=current.line.content,
                previous_content=previous_content,
            )
        )
    return records


def extract_file_records(file: FileDiff) -> list[ChangeRecord]:
    path = file.path
    counter = 0
    records: list[ChangeRecord] = []

    for i, chunk in enumerate(file.chunks):
        counter, numbered = number_chunk(counter, chunk, i)
        commentable = [n for n in numbered if is_commentable(n.line)]
        records.extend(_materialize(path, commentable, tag_pairs(commentable)))

    logger.debug("%s: %d change record(s) over %d diff position(s)", path, len(records), counter)
    return records


def extract_change_records(parsed_diff: list[FileDiff]) -> list[ChangeRecord]:
    """Flatten a parsed diff into ordered, position-anchored change records.

    Pure and deterministic: file order and line order are preserved, and
    each logical edited line yields exactly one record.
    """
    records: list[ChangeRecord] = []
    for file in parsed_diff:
        records.extend(extract_file_records(file))
    return records
