"""Hunk and line selection over a list of file diffs, and staging of it."""

from __future__ import annotations

import bisect
import logging
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from hunkstage.errors import InvalidPositionError, SelectionModeError
from hunkstage.models.patch import FileDiff, HunkLine
from hunkstage.view.selection import DiffSelection, Position, PositionLike, SelectionMode, SelectionSet, as_position

logger = logging.getLogger(__name__)


class DiffViewModel:
    """Keyboard-style selection state for one diff review session.

    Selectable units are whole hunks in hunk mode and addition/deletion
    lines in line mode; context lines are never selectable. Moving past the
    first or last unit is a silent no-op.
    """

    def __init__(
        self,
        file_diffs: Sequence[FileDiff],
        did_change_selection: Optional[Callable[[], None]] = None,
        mode: SelectionMode = SelectionMode.HUNK,
    ):
        self._file_diffs: List[FileDiff] = list(file_diffs)
        self._did_change_selection = did_change_selection
        self._selection = SelectionSet(SelectionMode.HUNK)

        units = self._units(SelectionMode.HUNK)
        if units:
            self._selection = SelectionSet(SelectionMode.HUNK, (DiffSelection.at(SelectionMode.HUNK, units[0]),))
        if SelectionMode(mode) == SelectionMode.LINE:
            self._apply_mode(SelectionMode.LINE)

    # Read surface

    def get_file_diffs(self) -> List[FileDiff]:
        return self._file_diffs

    def get_selection_mode(self) -> SelectionMode:
        return self._selection.mode

    def get_selections(self) -> Tuple[DiffSelection, ...]:
        return self._selection.selections

    def is_line_selected(self, file_index: int, hunk_index: int, line_index: int) -> bool:
        position = Position(file_index, hunk_index, line_index)
        line = self._line_at(position)
        if line is None:
            return False
        if self._selection.mode == SelectionMode.LINE and not line.is_changed:
            return False
        return self._selection.contains(position)

    def get_selected_lines(self) -> List[HunkLine]:
        """Changed lines covered by the current selection, in document order"""
        return [line for position, line in self._changed_lines() if self._selection.contains(position)]

    # Navigation

    def move_selection_down(self) -> None:
        if not self._selection:
            return
        anchor = max(selection.end for selection in self._selection)
        units = self._units()
        index = bisect.bisect_right(units, anchor)
        if index >= len(units):
            logger.debug("Already at the last %s", self._selection.mode.value)
            return
        self._replace(SelectionSet(self._selection.mode, (DiffSelection.at(self._selection.mode, units[index]),)))

    def move_selection_up(self) -> None:
        if not self._selection:
            return
        anchor = min(selection.start for selection in self._selection)
        units = self._units()
        index = bisect.bisect_left(units, anchor) - 1
        if index < 0:
            logger.debug("Already at the first %s", self._selection.mode.value)
            return
        self._replace(SelectionSet(self._selection.mode, (DiffSelection.at(self._selection.mode, units[index]),)))

    def expand_selection_down(self) -> None:
        selection = self._selection.last
        if selection is None:
            return
        units = self._units()
        index = bisect.bisect_right(units, selection.head)
        if index >= len(units):
            return
        self._replace(self._selection.with_last(selection.with_head(units[index])))

    def expand_selection_up(self) -> None:
        selection = self._selection.last
        if selection is None:
            return
        units = self._units()
        index = bisect.bisect_left(units, selection.head) - 1
        if index < 0:
            return
        self._replace(self._selection.with_last(selection.with_head(units[index])))

    # Mode

    def set_selection_mode(self, mode: SelectionMode) -> None:
        mode = SelectionMode(mode)
        if mode == self._selection.mode:
            return
        if self._apply_mode(mode):
            self._notify()

    def toggle_selection_mode(self) -> None:
        self.set_selection_mode(self._selection.mode.other)

    # Explicit selections

    def set_selection(self, selection: DiffSelection) -> None:
        """Replace every selection; the view adopts the selection's mode."""
        self._validate(selection)
        self._replace(SelectionSet(selection.mode, (selection,)))

    def add_selection(self, selection: DiffSelection) -> None:
        if selection.mode != self._selection.mode:
            raise SelectionModeError(
                f"Cannot add a {selection.mode.value} selection in {self._selection.mode.value} mode"
            )
        self._validate(selection)
        self._replace(self._selection.added(selection))

    # Staging

    def toggle_selected_lines_stage_status(self) -> None:
        """Stage every selected line unless all of them are staged already.

        A partially staged selection therefore always ends up staged.
        """
        lines = self.get_selected_lines()
        if not lines:
            return
        staged = not all(line.staged for line in lines)
        for line in lines:
            line.set_staged(staged)
        logger.debug("%s %d line(s)", "Staged" if staged else "Unstaged", len(lines))
        self._notify()

    # Internals

    def _changed_lines(self) -> Iterator[Tuple[Position, HunkLine]]:
        for file_index, file_diff in enumerate(self._file_diffs):
            for hunk_index, hunk in enumerate(file_diff.hunks):
                for line_index, line in enumerate(hunk.lines):
                    if line.is_changed:
                        yield Position(file_index, hunk_index, line_index), line

    def _units(self, mode: Optional[SelectionMode] = None) -> List[Position]:
        mode = self._selection.mode if mode is None else mode
        if mode == SelectionMode.LINE:
            return [position for position, _line in self._changed_lines()]
        return [
            Position(file_index, hunk_index)
            for file_index, file_diff in enumerate(self._file_diffs)
            for hunk_index in range(len(file_diff.hunks))
        ]

    def _line_at(self, position: Position) -> Optional[HunkLine]:
        if min(position) < 0:
            return None
        try:
            return self._file_diffs[position.file_index].hunks[position.hunk_index].lines[position.line_index]
        except IndexError:
            return None

    def _first_line_unit_for(self, hunk_position: Position) -> Optional[Position]:
        """First changed line of the hunk, None when the hunk has none"""
        hunk = self._file_diffs[hunk_position.file_index].hunks[hunk_position.hunk_index]
        indexes = hunk.changed_line_indexes()
        if not indexes:
            return None
        return Position(hunk_position.file_index, hunk_position.hunk_index, indexes[0])

    def _apply_mode(self, mode: SelectionMode) -> bool:
        current = self._selection
        if mode == SelectionMode.LINE:
            if current.last is None:
                self._selection = SelectionSet(mode)
                return True
            line = self._first_line_unit_for(current.last.head.hunk)
            if line is None:
                logger.debug(
                    "Hunk %s has no changed lines, staying in hunk mode", tuple(current.last.head.hunk)
                )
                return False
            self._selection = SelectionSet(mode, (DiffSelection.at(mode, line),))
        else:
            widened = SelectionSet(mode)
            for selection in current:
                widened = widened.added(DiffSelection(mode, selection.head.hunk, selection.tail.hunk))
            self._selection = widened
        logger.debug("Selection mode %s -> %s", current.mode.value, mode.value)
        return True

    def _validate(self, selection: DiffSelection) -> None:
        for position in (selection.head, selection.tail):
            self._validate_position(position, selection.mode)

    def _validate_position(self, position: PositionLike, mode: SelectionMode) -> None:
        file_index, hunk_index, line_index = as_position(position)
        if not 0 <= file_index < len(self._file_diffs):
            raise InvalidPositionError(f"File index {file_index} out of range")
        hunks = self._file_diffs[file_index].hunks
        if not 0 <= hunk_index < len(hunks):
            raise InvalidPositionError(f"Hunk index {hunk_index} out of range for file {file_index}")
        if mode == SelectionMode.LINE and not 0 <= line_index < len(hunks[hunk_index].lines):
            raise InvalidPositionError(
                f"Line index {line_index} out of range for hunk {hunk_index} of file {file_index}"
            )

    def _replace(self, selection: SelectionSet) -> None:
        changed = selection != self._selection
        self._selection = selection
        if changed:
            self._notify()

    def _notify(self) -> None:
        if self._did_change_selection is not None:
            self._did_change_selection()
