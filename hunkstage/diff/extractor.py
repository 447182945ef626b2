"""Diff extraction helpers."""

from pathlib import Path
import re
import subprocess

# Git ref validation pattern: allows alphanumeric, dots, slashes, hyphens, underscores,
# tildes (for parent refs like HEAD~1) and carets (for commit refs like HEAD^2).
GIT_REF_PATTERN = re.compile(r"^[\w./@^~-]+$")


def validate_git_ref(ref: str) -> None:
    """Validate a single git ref before passing it to git.

    Args:
        ref: Git reference (branch name, commit hash, HEAD~1)

    Raises:
        ValueError: If the ref is empty, option-like, a range or has invalid characters
    """
    if not ref:
        raise ValueError("Git ref cannot be empty")
    if ref.startswith("-"):
        raise ValueError(f"Invalid git ref: {ref!r} (option-style refs are not allowed)")
    if ".." in ref:
        raise ValueError(f"Invalid git ref: {ref!r} (ranges are not supported)")
    if not GIT_REF_PATTERN.match(ref):
        raise ValueError(f"Invalid git ref: {ref!r} (contains invalid characters)")


def _run_git_diff(repo: Path, args: list[str]) -> str:
    result = subprocess.run(
        ["git", "diff", "--no-color", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        stderr = result.stderr.strip() or "Unknown git diff error"
        raise RuntimeError(f"git diff failed: {stderr}")
    return result.stdout


def get_working_tree_diff(repo: Path, base: str = "HEAD", context_lines: int = 3) -> str:
    """Get every change between ``base`` and the working tree."""
    validate_git_ref(base)
    return _run_git_diff(repo, [f"-U{context_lines}", base])


def get_staged_diff(repo: Path, base: str = "HEAD", context_lines: int = 3) -> str:
    """Get the changes between ``base`` and the index."""
    validate_git_ref(base)
    return _run_git_diff(repo, ["--cached", f"-U{context_lines}", base])


def get_diff_from_file(patch_path: Path) -> str:
    """Read diff from patch file."""
    return patch_path.read_text(encoding="utf-8")
