"""Selection values over the file -> hunk -> line hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple, Union

from hunkstage.errors import SelectionModeError


class SelectionMode(str, Enum):
    """Granularity of a diff selection"""
    HUNK = "hunk"
    LINE = "line"

    @property
    def other(self) -> "SelectionMode":
        return SelectionMode.LINE if self == SelectionMode.HUNK else SelectionMode.HUNK


class Position(NamedTuple):
    """A coordinate in document order; tuples compare lexicographically."""

    file_index: int
    hunk_index: int
    line_index: int = 0

    @property
    def hunk(self) -> "Position":
        """The same coordinate with the line dropped"""
        return Position(self.file_index, self.hunk_index, 0)


PositionLike = Union[Position, Sequence[int]]


def as_position(value: PositionLike) -> Position:
    if isinstance(value, Position):
        return value
    return Position(*value)


@dataclass(frozen=True)
class DiffSelection:
    """One contiguous selection span between a tail anchor and a moving head.

    In hunk mode the line index is always zero.
    """

    mode: SelectionMode
    head: Position
    tail: Position

    def __post_init__(self) -> None:
        mode = SelectionMode(self.mode)
        head = as_position(self.head)
        tail = as_position(self.tail)
        if mode == SelectionMode.HUNK:
            head = head.hunk
            tail = tail.hunk
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "head", head)
        object.__setattr__(self, "tail", tail)

    @classmethod
    def at(cls, mode: SelectionMode, position: PositionLike) -> "DiffSelection":
        """Single-unit selection anchored at ``position``"""
        return cls(mode, as_position(position), as_position(position))

    @property
    def start(self) -> Position:
        return min(self.head, self.tail)

    @property
    def end(self) -> Position:
        return max(self.head, self.tail)

    @property
    def bounds(self) -> Tuple[Position, Position]:
        return self.start, self.end

    def contains(self, position: PositionLike) -> bool:
        position = as_position(position)
        if self.mode == SelectionMode.HUNK:
            position = position.hunk
        return self.start <= position <= self.end

    def with_head(self, head: PositionLike) -> "DiffSelection":
        return DiffSelection(self.mode, as_position(head), self.tail)


@dataclass(frozen=True)
class SelectionSet:
    """One or more selections sharing a single granularity mode."""

    mode: SelectionMode
    selections: Tuple[DiffSelection, ...] = ()

    def __post_init__(self) -> None:
        mode = SelectionMode(self.mode)
        selections = tuple(self.selections)
        for selection in selections:
            if selection.mode != mode:
                raise SelectionModeError(
                    f"Cannot combine a {selection.mode.value} selection with {mode.value} selections"
                )
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "selections", selections)

    def __iter__(self):
        return iter(self.selections)

    def __len__(self) -> int:
        return len(self.selections)

    @property
    def last(self) -> Optional[DiffSelection]:
        return self.selections[-1] if self.selections else None

    def contains(self, position: PositionLike) -> bool:
        return any(selection.contains(position) for selection in self.selections)

    def added(self, selection: DiffSelection) -> "SelectionSet":
        """Union with ``selection``; identical spans collapse."""
        if any(existing.bounds == selection.bounds for existing in self.selections):
            return SelectionSet(self.mode, self.selections)
        return SelectionSet(self.mode, self.selections + (selection,))

    def with_last(self, selection: DiffSelection) -> "SelectionSet":
        return SelectionSet(self.mode, self.selections[:-1] + (selection,))
