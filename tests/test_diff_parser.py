"""Tests for unified diff parsing, staged-line overlay and git extraction."""

import logging
from pathlib import Path

import pytest

from hunkstage.diff.extractor import (
    get_diff_from_file,
    get_staged_diff,
    get_working_tree_diff,
    validate_git_ref,
)
from hunkstage.diff.parser import apply_staged_lines, build_file_diffs, parse_unified_diff
from hunkstage.models.patch import ChangeStatus, LineKind, StageStatus


def _read(fixtures_dir: Path, name: str) -> str:
    return get_diff_from_file(fixtures_dir / name)


def test_parse_unified_diff_basic():
    """Basic diff parsing should track added/removed lines and files."""
    diff = """diff --git a/app.py b/app.py
index 1111111..2222222 100644
--- a/app.py
+++ b/app.py
@@ -1,2 +1,3 @@
-print("hello")
+print("hi")
+print("there")
 print("bye")
"""
    (file_diff,) = parse_unified_diff(diff)

    assert file_diff.new_path == "app.py"
    assert file_diff.change_status == ChangeStatus.MODIFIED
    (hunk,) = file_diff.hunks
    assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 2, 1, 3)
    assert [line.kind for line in hunk.lines] == [
        LineKind.DELETION,
        LineKind.ADDITION,
        LineKind.ADDITION,
        LineKind.CONTEXT,
    ]
    assert [(line.old_line_number, line.new_line_number) for line in hunk.lines] == [
        (1, None),
        (None, 1),
        (None, 2),
        (2, 3),
    ]
    assert file_diff.stage_status == StageStatus.UNSTAGED


def test_parse_working_tree_fixture(fixtures_dir):
    app, notes = parse_unified_diff(_read(fixtures_dir, "working_tree.diff"))

    assert app.new_path == "src/app.py"
    assert [len(hunk.lines) for hunk in app.hunks] == [7, 7]
    assert app.hunks[0].lines[2].kind == LineKind.CONTEXT
    assert app.hunks[0].lines[2].content == ""

    second = app.hunks[1]
    assert second.header == "@@ -20,6 +21,5 @@"
    assert second.lines[3].content == '        print("usage")'
    assert second.lines[3].old_line_number == 23
    assert second.lines[5].new_line_number == 24

    assert notes.new_path == "docs/notes.md"
    assert notes.is_added
    assert [line.content for line in notes.iter_lines()] == ["# Notes", "first note"]


def test_parse_deleted_and_renamed_files():
    diff = """diff --git a/old.txt b/old.txt
deleted file mode 100644
--- a/old.txt
+++ /dev/null
@@ -1 +0,0 @@
-gone
diff --git a/before.py b/after.py
similarity index 90%
rename from before.py
rename to after.py
--- a/before.py
+++ b/after.py
@@ -3,1 +3,1 @@
-x = 1
+x = 2
"""
    deleted, renamed = parse_unified_diff(diff)

    assert deleted.is_deleted
    assert deleted.old_path == "old.txt"
    assert deleted.hunks[0].old_lines == 1
    assert renamed.is_renamed
    assert (renamed.old_path, renamed.new_path) == ("before.py", "after.py")


def test_dash_lines_inside_hunk_are_content():
    diff = """diff --git a/notes.md b/notes.md
--- a/notes.md
+++ b/notes.md
@@ -1,2 +1,2 @@
--- heading
+++ heading
 tail
"""
    (file_diff,) = parse_unified_diff(diff)
    lines = file_diff.hunks[0].lines
    assert [(line.kind, line.content) for line in lines] == [
        (LineKind.DELETION, "-- heading"),
        (LineKind.ADDITION, "++ heading"),
        (LineKind.CONTEXT, "tail"),
    ]


def test_no_newline_marker_is_ignored():
    diff = """diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-a
\\ No newline at end of file
+b
"""
    (file_diff,) = parse_unified_diff(diff)
    assert [line.content for line in file_diff.iter_lines()] == ["a", "b"]


def test_empty_diff_has_no_files():
    assert parse_unified_diff("") == []


class TestStagedOverlay:
    def test_marks_lines_present_in_index(self, fixtures_dir):
        file_diffs = build_file_diffs(
            _read(fixtures_dir, "working_tree.diff"), _read(fixtures_dir, "index.diff")
        )
        app, notes = file_diffs

        first = app.hunks[0]
        assert [line.staged for line in first.lines if line.is_changed] == [True, True, False]
        assert first.stage_status == StageStatus.PARTIAL
        assert app.hunks[1].stage_status == StageStatus.UNSTAGED
        assert app.stage_status == StageStatus.PARTIAL
        assert notes.stage_status == StageStatus.STAGED

    def test_returns_number_of_flagged_lines(self, fixtures_dir):
        file_diffs = parse_unified_diff(_read(fixtures_dir, "working_tree.diff"))
        staged = parse_unified_diff(_read(fixtures_dir, "index.diff"))
        assert apply_staged_lines(file_diffs, staged) == 4

    def test_duplicate_additions_match_on_head_position(self):
        working = parse_unified_diff(
            """diff --git a/f.txt b/f.txt
--- a/f.txt
+++ b/f.txt
@@ -1,2 +1,4 @@
 a
+X
 b
+X
"""
        )
        staged = parse_unified_diff(
            """diff --git a/f.txt b/f.txt
--- a/f.txt
+++ b/f.txt
@@ -1,2 +1,3 @@
 a
 b
+X
"""
        )

        assert apply_staged_lines(working, staged) == 1

        lines = working[0].hunks[0].lines
        assert lines[1].staged is False
        assert lines[3].staged is True
        assert working[0].stage_status == StageStatus.PARTIAL

    def test_addition_falls_back_to_content_when_position_moved(self):
        working = parse_unified_diff(
            "diff --git a/f.txt b/f.txt\n--- a/f.txt\n+++ b/f.txt\n@@ -1,2 +1,3 @@\n a\n b\n+X\n"
        )
        staged = parse_unified_diff(
            "diff --git a/f.txt b/f.txt\n--- a/f.txt\n+++ b/f.txt\n@@ -1,1 +1,2 @@\n a\n+X\n"
        )

        assert apply_staged_lines(working, staged) == 1
        assert working[0].hunks[0].lines[2].staged is True

    def test_unknown_staged_file_is_logged(self, caplog):
        working = parse_unified_diff(
            "diff --git a/a.txt b/a.txt\n--- a/a.txt\n+++ b/a.txt\n@@ -1 +1 @@\n-a\n+b\n"
        )
        staged = parse_unified_diff(
            "diff --git a/z.txt b/z.txt\n--- a/z.txt\n+++ b/z.txt\n@@ -1 +1 @@\n-y\n+z\n"
        )

        with caplog.at_level(logging.WARNING, logger="hunkstage.diff.parser"):
            assert apply_staged_lines(working, staged) == 0

        assert "z.txt" in caplog.text
        assert working[0].stage_status == StageStatus.UNSTAGED

    def test_without_staged_diff_everything_is_unstaged(self, fixtures_dir):
        file_diffs = build_file_diffs(_read(fixtures_dir, "working_tree.diff"))
        assert all(file_diff.stage_status == StageStatus.UNSTAGED for file_diff in file_diffs)


class TestGitExtraction:
    def test_working_tree_diff_invokes_git(self, monkeypatch):
        calls = []

        class DummyResult:
            returncode = 0
            stdout = "diff output"
            stderr = ""

        def fake_run(args, **kwargs):
            calls.append((args, kwargs["cwd"]))
            return DummyResult()

        monkeypatch.setattr("hunkstage.diff.extractor.subprocess.run", fake_run)

        assert get_working_tree_diff(Path("repo"), base="main", context_lines=5) == "diff output"
        assert get_staged_diff(Path("repo")) == "diff output"

        assert calls == [
            (["git", "diff", "--no-color", "-U5", "main"], Path("repo")),
            (["git", "diff", "--no-color", "--cached", "-U3", "HEAD"], Path("repo")),
        ]

    def test_git_failure_raises_runtime_error(self, monkeypatch):
        """Non-zero git diff exit should raise a RuntimeError."""

        class DummyResult:
            returncode = 128
            stderr = "fatal: not a git repository"
            stdout = ""

        def fake_run(*_args, **_kwargs):
            return DummyResult()

        monkeypatch.setattr("hunkstage.diff.extractor.subprocess.run", fake_run)

        with pytest.raises(RuntimeError, match="not a git repository"):
            get_working_tree_diff(Path("."))

    @pytest.mark.parametrize("ref", ["HEAD", "main", "feature/login-form", "HEAD~1", "HEAD^2", "abc1234"])
    def test_valid_refs(self, ref):
        validate_git_ref(ref)

    @pytest.mark.parametrize(
        "ref, message",
        [
            ("", "cannot be empty"),
            ("--output=/tmp/x", "option-style"),
            ("main..feature", "ranges"),
            ("HEAD; rm -rf /", "invalid characters"),
            ("$(whoami)", "invalid characters"),
        ],
    )
    def test_invalid_refs(self, ref, message):
        with pytest.raises(ValueError, match=message):
            validate_git_ref(ref)

    def test_invalid_ref_never_reaches_git(self, monkeypatch):
        def fail_if_called(*_args, **_kwargs):
            pytest.fail("subprocess.run should not be called for invalid refs")

        monkeypatch.setattr("hunkstage.diff.extractor.subprocess.run", fail_if_called)

        with pytest.raises(ValueError):
            get_staged_diff(Path("."), base="-p")
