"""Unified diff parsing into the FileDiff model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from hunkstage.models.patch import HUNK_HEADER_RE, ChangeStatus, DiffHunk, FileDiff, HunkLine, LineKind

logger = logging.getLogger(__name__)


@dataclass
class _FileHeader:
    old_path: Optional[str]
    new_path: Optional[str]
    is_new: bool = False
    is_deleted: bool = False
    is_renamed: bool = False


def _strip_diff_prefix(path: str) -> Optional[str]:
    path = path.split("\t", 1)[0].strip()
    if path.startswith("a/") or path.startswith("b/"):
        path = path[2:]
    if path in ("/dev/null", "dev/null"):
        return None
    return path or None


def _change_status(header: _FileHeader) -> ChangeStatus:
    if header.is_new:
        return ChangeStatus.ADDED
    if header.is_deleted:
        return ChangeStatus.DELETED
    if header.is_renamed:
        return ChangeStatus.RENAMED
    return ChangeStatus.MODIFIED


def _finish(header: _FileHeader, hunks: List[DiffHunk]) -> FileDiff:
    new_path = header.new_path or header.old_path or "unknown"
    old_path = header.old_path or new_path
    return FileDiff(old_path=old_path, new_path=new_path, change_status=_change_status(header), hunks=hunks)


def parse_unified_diff(diff_content: str) -> List[FileDiff]:
    """Parse unified diff content into file diffs with every line unstaged.

    Args:
        diff_content: Git diff output string.

    Returns:
        FileDiff objects in the order git printed them.
    """
    files: List[FileDiff] = []

    header: Optional[_FileHeader] = None
    hunks: List[DiffHunk] = []
    current_hunk: Optional[DiffHunk] = None
    old_line_num = 0
    new_line_num = 0

    for line in diff_content.splitlines():
        if line.startswith("diff --git"):
            if header:
                files.append(_finish(header, hunks))
            parts = line.split()
            header = _FileHeader(
                old_path=_strip_diff_prefix(parts[2]) if len(parts) > 2 else None,
                new_path=_strip_diff_prefix(parts[3]) if len(parts) > 3 else None,
            )
            hunks = []
            current_hunk = None
            continue

        if header is None:
            continue

        if line.startswith("new file mode"):
            header.is_new = True
            continue
        if line.startswith("deleted file mode"):
            header.is_deleted = True
            continue
        if line.startswith("rename from "):
            header.old_path = line[len("rename from ") :].strip() or header.old_path
            header.is_renamed = True
            continue
        if line.startswith("rename to "):
            header.new_path = line[len("rename to ") :].strip() or header.new_path
            header.is_renamed = True
            continue

        if current_hunk is None and line.startswith("--- "):
            path = _strip_diff_prefix(line[4:])
            if path is None:
                header.is_new = True
            else:
                header.old_path = path
            continue
        if current_hunk is None and line.startswith("+++ "):
            path = _strip_diff_prefix(line[4:])
            if path is None:
                header.is_deleted = True
            else:
                header.new_path = path
            continue

        if line.startswith("@@"):
            match = HUNK_HEADER_RE.search(line)
            if not match:
                logger.debug("Skipping malformed hunk header: %s", line)
                current_hunk = None
                continue
            current_hunk = DiffHunk(
                old_start=int(match.group("old_start")),
                old_lines=int(match.group("old_count") or 1),
                new_start=int(match.group("new_start")),
                new_lines=int(match.group("new_count") or 1),
            )
            hunks.append(current_hunk)
            old_line_num = current_hunk.old_start
            new_line_num = current_hunk.new_start
            continue

        if current_hunk is None:
            continue

        if line.startswith("\\ No newline at end of file"):
            continue

        prefix = line[:1]
        content = line[1:]

        if prefix == "+":
            current_hunk.lines.append(HunkLine(content, LineKind.ADDITION, new_line_number=new_line_num))
            new_line_num += 1
        elif prefix == "-":
            current_hunk.lines.append(HunkLine(content, LineKind.DELETION, old_line_number=old_line_num))
            old_line_num += 1
        else:
            current_hunk.lines.append(
                HunkLine(content, LineKind.CONTEXT, old_line_number=old_line_num, new_line_number=new_line_num)
            )
            old_line_num += 1
            new_line_num += 1

    if header:
        files.append(_finish(header, hunks))

    return files


def _anchored_additions(file_diff: FileDiff) -> List[Tuple[int, HunkLine]]:
    """Pair each addition with the HEAD line number it follows."""
    anchored: List[Tuple[int, HunkLine]] = []
    for hunk in file_diff.hunks:
        # a zero-length old range names the line the insertion follows
        previous_old = hunk.old_start - 1 if hunk.old_lines else hunk.old_start
        for line in hunk.lines:
            if line.is_addition:
                anchored.append((previous_old, line))
            else:
                previous_old = line.old_line_number
    return anchored


def _match_addition(
    candidates: List[Tuple[int, HunkLine]], anchor: Optional[int], content: str, claimed: Set[int]
) -> Optional[HunkLine]:
    fallback = None
    for candidate_anchor, line in candidates:
        if id(line) in claimed or line.content != content:
            continue
        if candidate_anchor == anchor:
            return line
        if fallback is None:
            fallback = line
    return fallback


def apply_staged_lines(file_diffs: List[FileDiff], staged_diffs: List[FileDiff]) -> int:
    """Flag lines of ``file_diffs`` that also appear in ``staged_diffs``.

    ``file_diffs`` is HEAD against the working tree and ``staged_diffs`` is
    HEAD against the index. Deletions match on their HEAD line number.
    Additions match on content and on the HEAD line they follow, since their
    new line numbers are shifted by unstaged edits above them; when no
    addition follows the same HEAD line, the first unclaimed one with the
    same content is used.

    Returns:
        Number of lines flagged as staged.
    """
    by_path: Dict[str, FileDiff] = {file_diff.new_path: file_diff for file_diff in file_diffs}
    flagged = 0

    for staged_file in staged_diffs:
        target = by_path.get(staged_file.new_path)
        if target is None:
            logger.warning("Staged file %s is missing from the working tree diff", staged_file.new_path)
            continue

        deletions = {
            line.old_line_number: line for line in target.iter_lines() if line.is_deletion
        }
        candidates = _anchored_additions(target)
        claimed: Set[int] = set()

        staged_lines: List[Tuple[Optional[int], HunkLine]] = [
            (None, line) for line in staged_file.iter_lines() if line.is_deletion
        ]
        staged_lines.extend(_anchored_additions(staged_file))

        for anchor, staged_line in staged_lines:
            if staged_line.is_deletion:
                match = deletions.get(staged_line.old_line_number)
            else:
                match = _match_addition(candidates, anchor, staged_line.content, claimed)

            if match is None:
                logger.warning(
                    "Could not map staged line %r of %s onto the working tree diff",
                    staged_line.content,
                    staged_file.new_path,
                )
                continue
            claimed.add(id(match))
            match.staged = True
            flagged += 1

    return flagged


def build_file_diffs(diff_content: str, staged_diff_content: Optional[str] = None) -> List[FileDiff]:
    """Build file diffs, marking lines already staged in the index."""
    file_diffs = parse_unified_diff(diff_content)
    if staged_diff_content:
        flagged = apply_staged_lines(file_diffs, parse_unified_diff(staged_diff_content))
        logger.debug("Flagged %d staged line(s)", flagged)
    return file_diffs
