"""Data models for hunkstage"""

from hunkstage.models.patch import (
    ChangeStatus,
    DiffHunk,
    FileDiff,
    HunkLine,
    LineKind,
    StageStatus,
    file_diffs_from_string,
    file_diffs_to_string,
)

__all__ = [
    "ChangeStatus",
    "DiffHunk",
    "FileDiff",
    "HunkLine",
    "LineKind",
    "StageStatus",
    "file_diffs_from_string",
    "file_diffs_to_string",
]
