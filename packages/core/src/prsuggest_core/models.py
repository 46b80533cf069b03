"""Data types shared by the diff mapper, the reconciler and the suggestion sources.

The parsed-diff side (FileDiff → Chunk → RawLine) mirrors the shape produced
by any unified-diff parser. The review side (ChangeRecord → CandidateSuggestion
→ CommentRecord) is what flows through a single review cycle; nothing here is
persisted between cycles.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

NO_NEWLINE_MARKER = "\\ No newline at end of file"


class LineKind(str, Enum):
    ADD = "add"
    DELETE = "delete"
    CONTEXT = "context"


@dataclass
class RawLine:
    """One line of a diff chunk, marker character included in ``content``."""

    kind: LineKind
    content: str
    # New-file line for add/context lines, old-file line for delete lines.
    line_number: int | None = None


@dataclass
class Chunk:
    lines: list[RawLine] = field(default_factory=list)
    header: str = ""


@dataclass
class FileDiff:
    from_path: str
    to_path: str
    deleted: bool = False
    chunks: list[Chunk] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.from_path if self.deleted else self.to_path


@dataclass
class ChangeRecord:
    """A single commentable line change anchored at a diff position.

    ``previous_content`` is only set for a modification record: an added
    line that replaces a deletion reported on the same line number.
    """

    path: str
    position: int
    line: int | None
    kind: LineKind
    content: str
    previous_content: str | None = None

    @property
    def is_modification(self) -> bool:
        return self.previous_content is not None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = getattr(self.kind, "value", self.kind)
        return data


@dataclass
class CandidateSuggestion:
    path: str
    line: int
    suggestion_body: str | None = None


@dataclass
class CommentRecord:
    path: str
    line: int
    body: str

    def to_dict(self) -> dict:
        return {"path": self.path, "line": self.line, "body": self.body}
