"""Diff extraction and parsing into the patch model."""

from hunkstage.diff.parser import (
    apply_staged_lines,
    build_file_diffs,
    parse_unified_diff,
)
from hunkstage.diff.extractor import (
    get_diff_from_file,
    get_staged_diff,
    get_working_tree_diff,
    validate_git_ref,
)

__all__ = [
    "apply_staged_lines",
    "build_file_diffs",
    "parse_unified_diff",
    "get_diff_from_file",
    "get_staged_diff",
    "get_working_tree_diff",
    "validate_git_ref",
]
