"""Unified diff text → FileDiff/Chunk/RawLine structures.

Parsing itself is delegated to ``unidiff``; this module only reshapes its
PatchSet into the typed structures the position mapper walks, keeping the
one-character diff marker on every line's content.
"""

from __future__ import annotations

import logging

from unidiff import PatchSet
from unidiff.constants import LINE_TYPE_ADDED, LINE_TYPE_CONTEXT, LINE_TYPE_NO_NEWLINE, LINE_TYPE_REMOVED
from unidiff.errors import UnidiffParseError

from prsuggest_core.exceptions import DiffParseError
from prsuggest_core.models import NO_NEWLINE_MARKER, Chunk, FileDiff, LineKind, RawLine

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"

_KIND_BY_LINE_TYPE = {
    LINE_TYPE_ADDED: LineKind.ADD,
    LINE_TYPE_REMOVED: LineKind.DELETE,
    LINE_TYPE_CONTEXT: LineKind.CONTEXT,
}


def _strip_prefix(name: str, prefix: str) -> str:
    if name.startswith(prefix):
        return name[len(prefix) :]
    return name


def _to_raw_line(line, previous: RawLine | None) -> RawLine:
    if line.line_type == LINE_TYPE_NO_NEWLINE:
        # The end-of-file marker takes the kind and line number of the line it follows.
        if previous is None:
            return RawLine(kind=LineKind.CONTEXT, content=NO_NEWLINE_MARKER)
        return RawLine(kind=previous.kind, content=NO_NEWLINE_MARKER, line_number=previous.line_number)

    value = line.value.rstrip("\r\n")
    content = f"{line.line_type}{value}"

    kind = _KIND_BY_LINE_TYPE.get(line.line_type, LineKind.CONTEXT)
    if kind == LineKind.DELETE:
        line_number = line.source_line_no
    else:
        line_number = line.target_line_no
    return RawLine(kind=kind, content=content, line_number=line_number)


def _to_chunk(hunk) -> Chunk:
    header = f"@@ -{hunk.source_start},{hunk.source_length} +{hunk.target_start},{hunk.target_length} @@"
    if hunk.section_header:
        header = f"{header} {hunk.section_header}"

    lines: list[RawLine] = []
    for line in hunk:
        lines.append(_to_raw_line(line, lines[-1] if lines else None))
    return Chunk(lines=lines, header=header)


def parse_diff(diff_text: str) -> list[FileDiff]:
    """Parse unified diff text into an ordered list of FileDiff objects.

    Raises DiffParseError when the text is not a well-formed unified diff.
    An empty string parses to an empty list.
    """
    try:
        patch_set = PatchSet(diff_text or "")
    except UnidiffParseError as e:
        raise DiffParseError(f"Could not parse diff: {e}") from e

    files: list[FileDiff] = []
    for patched_file in patch_set:
        from_path = _strip_prefix(patched_file.source_file or DEV_NULL, "a/")
        to_path = _strip_prefix(patched_file.target_file or DEV_NULL, "b/")
        files.append(
            FileDiff(
                from_path=from_path,
                to_path=to_path,
                deleted=patched_file.is_removed_file,
                chunks=[_to_chunk(hunk) for hunk in patched_file],
            )
        )

    logger.debug("Parsed %d file(s) from diff", len(files))
    return files


def build_unified_diff(files) -> str:
    """Assemble unified diff text from per-file patches returned by the hosting API.

    Each item needs ``filename``, ``status``, ``patch`` and, for renames,
    ``previous_filename``. Files without a patch (binary or oversized) are
    skipped because they have no line-level changes to anchor comments to.
    """
    parts: list[str] = []
    for f in files:
        patch = getattr(f, "patch", None)
        if not patch:
            logger.debug("No patch for %s (binary or too large); skipping", f.filename)
            continue

        old_name = getattr(f, "previous_filename", None) or f.filename
        new_name = f.filename
        source = DEV_NULL if f.status == "added" else f"a/{old_name}"
        target = DEV_NULL if f.status == "removed" else f"b/{new_name}"

        parts.append(f"diff --git a/{old_name} b/{new_name}")
        if f.status == "added":
            parts.append("new file mode 100644")
        elif f.status == "removed":
            parts.append("deleted file mode 100644")
        parts.append(f"--- {source}")
        parts.append(f"+++ {target}")
        parts.append(patch.rstrip("\n"))

    if not parts:
        return ""
    return "\n".join(parts) + "\n"
