"""Diff selection values and the view model that navigates them"""

from hunkstage.view.selection import DiffSelection, Position, SelectionMode, SelectionSet
from hunkstage.view.view_model import DiffViewModel

__all__ = [
    "DiffSelection",
    "DiffViewModel",
    "Position",
    "SelectionMode",
    "SelectionSet",
]
