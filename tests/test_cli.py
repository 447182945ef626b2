"""Tests for CLI commands"""

import re

import pytest
from click.testing import CliRunner

from hunkstage.cli.main import cli
from hunkstage.models.patch import StageStatus, file_diffs_from_string


@pytest.fixture
def runner():
    """Create a CLI test runner"""
    return CliRunner()


@pytest.fixture
def diff_args(fixtures_dir):
    return [
        "--diff",
        str(fixtures_dir / "working_tree.diff"),
        "--staged-diff",
        str(fixtures_dir / "index.diff"),
    ]


class TestCLIBasics:
    """Test basic CLI functionality"""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "hunkstage" in result.output
        for command in ("show", "walk", "files"):
            assert command in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "hunkstage" in result.output.lower()
        assert re.search(r"\d+\.\d+\.\d+", result.output)


class TestShow:
    def test_show_table(self, runner, diff_args):
        result = runner.invoke(cli, ["show", *diff_args])
        assert result.exit_code == 0
        assert "src/app.py" in result.output
        assert "docs/notes.md" in result.output
        assert "partial" in result.output

    def test_show_fixture_format(self, runner, diff_args):
        result = runner.invoke(cli, ["show", *diff_args, "--format", "fixture"])
        assert result.exit_code == 0

        lines = result.output.splitlines()
        assert lines[0] == "FILE src/app.py - modified - partial"
        assert "FILE docs/notes.md - added - staged" in lines

    def test_show_without_changes(self, runner, tmp_path):
        empty = tmp_path / "empty.diff"
        empty.write_text("")
        result = runner.invoke(cli, ["show", "--diff", str(empty)])
        assert result.exit_code == 0
        assert "No changes" in result.output

    def test_show_reports_git_errors(self, runner, tmp_path, monkeypatch):
        def fail(*_args, **_kwargs):
            raise RuntimeError("git diff failed: fatal: not a git repository")

        monkeypatch.setattr("hunkstage.cli.main.get_working_tree_diff", fail)

        result = runner.invoke(cli, ["show", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert "not a git repository" in result.output

    def test_show_rejects_invalid_base(self, runner, tmp_path):
        result = runner.invoke(cli, ["show", str(tmp_path), "--base", "main..dev"])
        assert result.exit_code == 1
        assert "ranges are not supported" in result.output


class TestWalk:
    def test_walk_stages_selected_hunk(self, runner, diff_args):
        result = runner.invoke(cli, ["walk", *diff_args, "-c", "down", "-c", "stage", "--fixture"])
        assert result.exit_code == 0

        app, notes = file_diffs_from_string(result.output)
        assert app.hunks[0].stage_status == StageStatus.PARTIAL
        assert app.hunks[1].stage_status == StageStatus.STAGED
        assert notes.stage_status == StageStatus.STAGED

    def test_walk_in_line_mode(self, runner, diff_args):
        result = runner.invoke(cli, ["walk", *diff_args, "--mode", "line", "-c", "down"])
        assert result.exit_code == 0
        assert "Mode: line" in result.output
        assert "src/app.py:0:4" in result.output
        assert "src/app.py:0:3" not in result.output

    def test_walk_uses_default_mode_from_environment(self, runner, diff_args, monkeypatch):
        monkeypatch.setenv("HUNKSTAGE_DEFAULT_MODE", "line")
        result = runner.invoke(cli, ["walk", *diff_args])
        assert result.exit_code == 0
        assert "Mode: line" in result.output

    def test_walk_rejects_unknown_command(self, runner, diff_args):
        result = runner.invoke(cli, ["walk", *diff_args, "-c", "sideways"])
        assert result.exit_code == 2


class TestFiles:
    def test_lists_partial_file_in_both_lists(self, runner, diff_args):
        result = runner.invoke(cli, ["files", *diff_args])
        assert result.exit_code == 0
        assert "Unstaged Changes" in result.output
        assert "Staged Changes" in result.output
        assert result.output.count("src/app.py") == 2
        assert result.output.count("●") == 1

    def test_select_single_file(self, runner, diff_args):
        result = runner.invoke(cli, ["files", *diff_args, "--select", "staged:docs/notes.md"])
        assert result.exit_code == 0
        assert "● docs/notes.md" in result.output
        assert result.output.count("●") == 1

    def test_extend_selection_across_lists(self, runner, diff_args):
        result = runner.invoke(
            cli,
            ["files", *diff_args, "--select", "unstaged:src/app.py", "--select", "+staged:docs/notes.md"],
        )
        assert result.exit_code == 0
        assert result.output.count("●") == 3

    def test_toggle_adds_to_selection(self, runner, diff_args):
        result = runner.invoke(
            cli,
            ["files", *diff_args, "--select", "staged:docs/notes.md", "--select", "~unstaged:src/app.py"],
        )
        assert result.exit_code == 0
        assert result.output.count("●") == 2

    def test_move_to_next_list(self, runner, diff_args):
        result = runner.invoke(cli, ["files", *diff_args, "--move", "next-list"])
        assert result.exit_code == 0
        staged_section = result.output.split("Staged Changes", 1)[1]
        assert "● src/app.py" in staged_section

    def test_unknown_list_key(self, runner, diff_args):
        result = runner.invoke(cli, ["files", *diff_args, "--select", "ignored:src/app.py"])
        assert result.exit_code == 1
        assert 'key "ignored" not found' in result.output

    def test_unknown_file(self, runner, diff_args):
        result = runner.invoke(cli, ["files", *diff_args, "--select", "staged:missing.py"])
        assert result.exit_code == 2
        assert "missing.py" in result.output
