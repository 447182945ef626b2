"""Patch model: files, hunks and lines of one unified diff with stage flags."""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)


HUNK_HEADER_RE = re.compile(
    r"@@\s+-(?P<old_start>\d+)(?:,(?P<old_count>\d+))?\s+\+(?P<new_start>\d+)"
    r"(?:,(?P<new_count>\d+))?\s+@@"
)
FILE_HEADER_RE = re.compile(r"^FILE (?P<path>.+) - (?P<change>.+) - (?P<stage>.+)$")
# "<kind><flag> <old> <new> <content>", numbers are "-" when absent
LINE_RE = re.compile(r"^(?P<kind>[+\- ])(?P<flag>[* ]) +(?P<old>\d+|-) +(?P<new>\d+|-) ?(?P<content>.*)$")


class LineKind(str, Enum):
    """Kind of a line inside a hunk"""
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"

    @property
    def marker(self) -> str:
        return {"addition": "+", "deletion": "-", "context": " "}[self.value]

    @classmethod
    def from_marker(cls, marker: str) -> "LineKind":
        for member in cls:
            if member.marker == marker:
                return member
        raise ValueError(f"Unknown line marker: {marker!r}")


class StageStatus(str, Enum):
    """Aggregated stage status of a hunk or file"""
    STAGED = "staged"
    UNSTAGED = "unstaged"
    PARTIAL = "partial"


class ChangeStatus(str, Enum):
    """How a file changed between the old and new tree"""
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    MODIFIED = "modified"

    @classmethod
    def _missing_(cls, value):
        """Handle case-insensitive matching and git's untracked status"""
        if isinstance(value, str):
            value = value.lower()
            if value == "untracked":
                return cls.ADDED
            for member in cls:
                if member.value == value:
                    return member
        return None


def aggregate_status(statuses: Iterable[StageStatus]) -> StageStatus:
    """Fold child statuses into staged, unstaged or partial.

    An empty input is unstaged.
    """
    has_staged = False
    has_unstaged = False
    for status in statuses:
        if status == StageStatus.PARTIAL:
            return StageStatus.PARTIAL
        if status == StageStatus.STAGED:
            has_staged = True
        else:
            has_unstaged = True

    if has_staged and has_unstaged:
        return StageStatus.PARTIAL
    if has_staged:
        return StageStatus.STAGED
    return StageStatus.UNSTAGED


@dataclass(eq=False)
class HunkLine:
    """Represents a single line inside a diff hunk.

    Lines compare by identity so that equal text on two rows stays distinct.
    """

    content: str
    kind: LineKind
    old_line_number: Optional[int] = None
    new_line_number: Optional[int] = None
    staged: bool = False

    def __post_init__(self) -> None:
        self.kind = LineKind(self.kind)
        if self.kind == LineKind.CONTEXT:
            self.staged = False

    @property
    def is_changed(self) -> bool:
        return self.kind != LineKind.CONTEXT

    @property
    def is_addition(self) -> bool:
        return self.kind == LineKind.ADDITION

    @property
    def is_deletion(self) -> bool:
        return self.kind == LineKind.DELETION

    def set_staged(self, staged: bool) -> None:
        """Set the stage flag; context lines are never stageable."""
        if not self.is_changed:
            raise ValueError("Context lines cannot be staged")
        self.staged = staged

    def to_string(self) -> str:
        old = "-" if self.old_line_number is None else str(self.old_line_number)
        new = "-" if self.new_line_number is None else str(self.new_line_number)
        flag = "*" if self.staged else " "
        return f"{self.kind.marker}{flag} {old:>4} {new:>4} {self.content}"

    @classmethod
    def from_string(cls, text: str) -> "HunkLine":
        match = LINE_RE.match(text)
        if not match:
            raise ValueError(f"Malformed hunk line: {text!r}")
        kind = LineKind.from_marker(match.group("kind"))
        old = match.group("old")
        new = match.group("new")
        return cls(
            content=match.group("content"),
            kind=kind,
            old_line_number=None if old == "-" else int(old),
            new_line_number=None if new == "-" else int(new),
            staged=match.group("flag") == "*" and kind != LineKind.CONTEXT,
        )


@dataclass(eq=False)
class DiffHunk:
    """Represents a diff hunk."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: List[HunkLine] = field(default_factory=list)

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"

    def changed_lines(self) -> List[HunkLine]:
        return [line for line in self.lines if line.is_changed]

    def changed_line_indexes(self) -> List[int]:
        return [index for index, line in enumerate(self.lines) if line.is_changed]

    @property
    def has_changes(self) -> bool:
        return any(line.is_changed for line in self.lines)

    @property
    def stage_status(self) -> StageStatus:
        return aggregate_status(
            StageStatus.STAGED if line.staged else StageStatus.UNSTAGED
            for line in self.changed_lines()
        )

    def stage(self) -> None:
        for line in self.changed_lines():
            line.staged = True

    def unstage(self) -> None:
        for line in self.changed_lines():
            line.staged = False

    def to_string(self) -> str:
        rows = [f"HUNK {self.header}"]
        rows.extend(line.to_string() for line in self.lines)
        return "\n".join(rows)

    @classmethod
    def from_string(cls, text: str) -> "DiffHunk":
        rows = text.split("\n")
        match = HUNK_HEADER_RE.search(rows[0]) if rows[0].startswith("HUNK ") else None
        if not match:
            raise ValueError(f"Malformed hunk header: {rows[0]!r}")
        return cls(
            old_start=int(match.group("old_start")),
            old_lines=int(match.group("old_count") or 1),
            new_start=int(match.group("new_start")),
            new_lines=int(match.group("new_count") or 1),
            lines=[HunkLine.from_string(row) for row in rows[1:] if row.strip()],
        )


@dataclass(eq=False)
class FileDiff:
    """Represents a file touched by the diff."""

    old_path: str
    new_path: str
    change_status: ChangeStatus = ChangeStatus.MODIFIED
    hunks: List[DiffHunk] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.change_status = ChangeStatus(self.change_status)

    @property
    def old_file_name(self) -> str:
        return posixpath.basename(self.old_path)

    @property
    def new_file_name(self) -> str:
        return posixpath.basename(self.new_path)

    @property
    def is_added(self) -> bool:
        return self.change_status == ChangeStatus.ADDED

    @property
    def is_deleted(self) -> bool:
        return self.change_status == ChangeStatus.DELETED

    @property
    def is_renamed(self) -> bool:
        return self.change_status == ChangeStatus.RENAMED

    @property
    def size(self) -> int:
        """Number of changed lines in the file"""
        return sum(len(hunk.changed_lines()) for hunk in self.hunks)

    def iter_lines(self) -> Iterator[HunkLine]:
        for hunk in self.hunks:
            yield from hunk.lines

    @property
    def stage_status(self) -> StageStatus:
        # hunks without changed lines have nothing to contribute
        return aggregate_status(hunk.stage_status for hunk in self.hunks if hunk.has_changes)

    def stage(self) -> None:
        for hunk in self.hunks:
            hunk.stage()

    def unstage(self) -> None:
        for hunk in self.hunks:
            hunk.unstage()

    def to_string(self) -> str:
        rows = [f"FILE {self.new_path} - {self.change_status.value} - {self.stage_status.value}"]
        rows.extend(hunk.to_string() for hunk in self.hunks)
        return "\n".join(rows)

    @classmethod
    def from_string(cls, text: str) -> "FileDiff":
        """Parse one FILE block; the stored stage status is derived, not read."""
        rows = text.strip("\n").split("\n")
        match = FILE_HEADER_RE.match(rows[0].strip())
        if not match:
            raise ValueError(f"Malformed file header: {rows[0]!r}")
        path = match.group("path")
        file_diff = cls(old_path=path, new_path=path, change_status=ChangeStatus(match.group("change")))

        block: List[str] = []
        for row in rows[1:]:
            if row.startswith("HUNK "):
                if block:
                    file_diff.hunks.append(DiffHunk.from_string("\n".join(block)))
                block = [row]
            elif block:
                block.append(row)
            elif row.strip():
                raise ValueError(f"Line outside of a hunk: {row!r}")
        if block:
            file_diff.hunks.append(DiffHunk.from_string("\n".join(block)))

        declared = match.group("stage").strip()
        if declared != file_diff.stage_status.value:
            logger.debug(
                "Fixture for %s declares %s but lines aggregate to %s",
                path,
                declared,
                file_diff.stage_status.value,
            )
        return file_diff


def file_diffs_to_string(file_diffs: Iterable[FileDiff]) -> str:
    return "\n".join(file_diff.to_string() for file_diff in file_diffs) + "\n"


def file_diffs_from_string(text: str) -> List[FileDiff]:
    """Parse a document holding any number of FILE blocks."""
    blocks: List[List[str]] = []
    for row in text.split("\n"):
        if row.startswith("FILE "):
            blocks.append([row])
        elif blocks:
            blocks[-1].append(row)
        elif row.strip():
            raise ValueError(f"Expected a FILE header, got: {row!r}")
    return [FileDiff.from_string("\n".join(block)) for block in blocks]
