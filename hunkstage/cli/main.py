"""Main CLI entry point for hunkstage"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich import box
from rich.console import Console
from rich.table import Table

from hunkstage import __version__
from hunkstage.config import config
from hunkstage.diff.extractor import get_diff_from_file, get_staged_diff, get_working_tree_diff
from hunkstage.diff.parser import build_file_diffs
from hunkstage.errors import SelectionError
from hunkstage.lists.collection import MultiListCollection
from hunkstage.models.patch import FileDiff, StageStatus, file_diffs_to_string
from hunkstage.view.selection import SelectionMode
from hunkstage.view.view_model import DiffViewModel

console = Console()

STATUS_STYLES = {
    StageStatus.STAGED: "green",
    StageStatus.UNSTAGED: "red",
    StageStatus.PARTIAL: "yellow",
}

WALK_COMMANDS = {
    "down": DiffViewModel.move_selection_down,
    "up": DiffViewModel.move_selection_up,
    "expand-down": DiffViewModel.expand_selection_down,
    "expand-up": DiffViewModel.expand_selection_up,
    "toggle-mode": DiffViewModel.toggle_selection_mode,
    "line": lambda view_model: view_model.set_selection_mode(SelectionMode.LINE),
    "hunk": lambda view_model: view_model.set_selection_mode(SelectionMode.HUNK),
    "stage": DiffViewModel.toggle_selected_lines_stage_status,
}

UNSTAGED_KEY = "unstaged"
STAGED_KEY = "staged"


@dataclass(eq=False)
class FileEntry:
    """One row of the staged or unstaged file list"""

    file_diff: FileDiff
    list_key: str

    def __str__(self) -> str:
        return self.file_diff.new_path


def _configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else config.get_log_level()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_file_diffs(
    path: Path, diff_file: Optional[str], staged_diff_file: Optional[str], base: str
) -> List[FileDiff]:
    """Build the patch model from patch files or from git."""
    if diff_file:
        diff = get_diff_from_file(Path(diff_file))
        staged = get_diff_from_file(Path(staged_diff_file)) if staged_diff_file else None
    else:
        context_lines = config.get_context_lines()
        diff = get_working_tree_diff(path, base=base, context_lines=context_lines)
        staged = get_staged_diff(path, base=base, context_lines=context_lines)
    return build_file_diffs(diff, staged)


def _status_text(status: StageStatus) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def _render_table(file_diffs: List[FileDiff], view_model: Optional[DiffViewModel] = None) -> None:
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("", width=1)
    table.add_column("File")
    table.add_column("Change")
    table.add_column("Hunk")
    table.add_column("Lines", justify="right")
    table.add_column("Status")

    for file_index, file_diff in enumerate(file_diffs):
        table.add_row(
            "",
            f"[bold]{file_diff.new_path}[/bold]",
            file_diff.change_status.value,
            "",
            str(file_diff.size),
            _status_text(file_diff.stage_status),
        )
        for hunk_index, hunk in enumerate(file_diff.hunks):
            marker = ""
            if view_model is not None and any(
                view_model.is_line_selected(file_index, hunk_index, line_index)
                for line_index in range(len(hunk.lines))
            ):
                marker = "▶"
            table.add_row(
                marker,
                "",
                "",
                hunk.header,
                str(len(hunk.changed_lines())),
                _status_text(hunk.stage_status),
            )

    console.print(table)


def _render_selected_lines(view_model: DiffViewModel) -> None:
    for file_index, file_diff in enumerate(view_model.get_file_diffs()):
        for hunk_index, hunk in enumerate(file_diff.hunks):
            for line_index, line in enumerate(hunk.lines):
                if view_model.is_line_selected(file_index, hunk_index, line_index):
                    console.print(f"  {file_diff.new_path}:{hunk_index}:{line_index} {line.to_string()}")


def _staging_lists(file_diffs: List[FileDiff]) -> List[Tuple[str, List[FileEntry]]]:
    unstaged = [
        FileEntry(file_diff, UNSTAGED_KEY)
        for file_diff in file_diffs
        if file_diff.stage_status != StageStatus.STAGED
    ]
    staged = [
        FileEntry(file_diff, STAGED_KEY)
        for file_diff in file_diffs
        if file_diff.stage_status != StageStatus.UNSTAGED
    ]
    return [(UNSTAGED_KEY, unstaged), (STAGED_KEY, staged)]


@click.group()
@click.version_option(version=__version__, prog_name="hunkstage")
def cli():
    """
    hunkstage - hunk and line staging state for git diffs

    Inspect a diff, walk its hunks and lines, and stage selections.
    """
    pass


@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--diff", "diff_file", type=click.Path(exists=True), help="Path to diff/patch file")
@click.option(
    "--staged-diff",
    "staged_diff_file",
    type=click.Path(exists=True),
    help="Path to a diff of the index (requires --diff)",
)
@click.option("--base", default="HEAD", help="Base commit to diff the working tree against")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "fixture"]),
    default="table",
    help="Output format",
)
@click.option("--debug", is_flag=True, help="Show verbose diagnostic output")
def show(
    path: str,
    diff_file: Optional[str],
    staged_diff_file: Optional[str],
    base: str,
    output_format: str,
    debug: bool,
):
    """Show files and hunks with their stage status"""
    _configure_logging(debug)
    try:
        file_diffs = _load_file_diffs(Path(path), diff_file, staged_diff_file, base)
    except (RuntimeError, ValueError, OSError) as e:
        console.print(f"[bold red]❌ Error:[/bold red] {e}")
        sys.exit(1)

    if not file_diffs:
        console.print("[dim]No changes[/dim]")
        return

    if output_format == "fixture":
        click.echo(file_diffs_to_string(file_diffs), nl=False)
        return
    _render_table(file_diffs)


@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--diff", "diff_file", type=click.Path(exists=True), help="Path to diff/patch file")
@click.option(
    "--staged-diff",
    "staged_diff_file",
    type=click.Path(exists=True),
    help="Path to a diff of the index (requires --diff)",
)
@click.option("--base", default="HEAD", help="Base commit to diff the working tree against")
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in SelectionMode]),
    default=None,
    help="Initial selection mode (default: HUNKSTAGE_DEFAULT_MODE or hunk)",
)
@click.option(
    "--command",
    "-c",
    "commands",
    multiple=True,
    type=click.Choice(sorted(WALK_COMMANDS)),
    help="Navigation or staging command to replay, in order",
)
@click.option("--fixture", "as_fixture", is_flag=True, help="Print the resulting patch as a fixture")
@click.option("--debug", is_flag=True, help="Show verbose diagnostic output")
def walk(
    path: str,
    diff_file: Optional[str],
    staged_diff_file: Optional[str],
    base: str,
    mode: Optional[str],
    commands: Tuple[str, ...],
    as_fixture: bool,
    debug: bool,
):
    """Replay selection and staging commands over a diff"""
    _configure_logging(debug)
    try:
        file_diffs = _load_file_diffs(Path(path), diff_file, staged_diff_file, base)
    except (RuntimeError, ValueError, OSError) as e:
        console.print(f"[bold red]❌ Error:[/bold red] {e}")
        sys.exit(1)

    initial_mode = SelectionMode(mode) if mode else config.get_default_mode()
    view_model = DiffViewModel(file_diffs, mode=initial_mode)
    for command in commands:
        WALK_COMMANDS[command](view_model)

    if as_fixture:
        click.echo(file_diffs_to_string(view_model.get_file_diffs()), nl=False)
        return

    console.print(f"Mode: [bold]{view_model.get_selection_mode().value}[/bold]")
    _render_table(view_model.get_file_diffs(), view_model)
    console.print("\n[bold]Selected lines[/bold]")
    _render_selected_lines(view_model)


@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--diff", "diff_file", type=click.Path(exists=True), help="Path to diff/patch file")
@click.option(
    "--staged-diff",
    "staged_diff_file",
    type=click.Path(exists=True),
    help="Path to a diff of the index (requires --diff)",
)
@click.option("--base", default="HEAD", help="Base commit to diff the working tree against")
@click.option(
    "--select",
    "selections",
    multiple=True,
    help="Select LIST:PATH; prefix with + to extend from the tail, ~ to toggle",
)
@click.option(
    "--move",
    "moves",
    multiple=True,
    type=click.Choice(["next", "previous", "next-list", "previous-list"]),
    help="Move the cursor; repeatable",
)
@click.option("--wrap/--no-wrap", default=None, help="Wrap list navigation (default: HUNKSTAGE_WRAP_LISTS)")
@click.option("--debug", is_flag=True, help="Show verbose diagnostic output")
def files(
    path: str,
    diff_file: Optional[str],
    staged_diff_file: Optional[str],
    base: str,
    selections: Tuple[str, ...],
    moves: Tuple[str, ...],
    wrap: Optional[bool],
    debug: bool,
):
    """Select files in the unstaged and staged lists"""
    _configure_logging(debug)
    try:
        file_diffs = _load_file_diffs(Path(path), diff_file, staged_diff_file, base)
    except (RuntimeError, ValueError, OSError) as e:
        console.print(f"[bold red]❌ Error:[/bold red] {e}")
        sys.exit(1)

    lists = _staging_lists(file_diffs)
    collection = MultiListCollection([{"key": key, "items": items} for key, items in lists])
    wrap = config.get_wrap_lists() if wrap is None else wrap

    try:
        for choice in selections:
            action = choice[0] if choice[:1] in ("+", "~") else ""
            key, _, file_path = choice[len(action):].partition(":")
            items = collection.get_items_for_key(key)
            entry = next((item for item in items if item.file_diff.new_path == file_path), None)
            if entry is None:
                raise click.BadParameter(f"{file_path} is not in the {key} list", param_hint="--select")
            if action == "~":
                collection.toggle_item_for_key(entry, key)
            else:
                collection.select_item_for_key(entry, key, tail=not action, add_to_existing=bool(action))
    except SelectionError as e:
        console.print(f"[bold red]❌ Error:[/bold red] {e}")
        sys.exit(1)

    for move in moves:
        if move == "next":
            collection.select_next_item()
        elif move == "previous":
            collection.select_previous_item()
        elif move == "next-list":
            collection.select_next_list(wrap=wrap)
        else:
            collection.select_previous_list(wrap=wrap)

    for key, items in lists:
        console.print(f"[bold]{key.capitalize()} Changes[/bold]")
        if not items:
            console.print("  [dim](none)[/dim]")
        for item in items:
            marker = "●" if collection.is_item_selected(item) else " "
            console.print(f"  {marker} {item} {_status_text(item.file_diff.stage_status)}")


if __name__ == "__main__":
    cli()
