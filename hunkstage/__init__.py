"""
hunkstage - selection and staging state for hunk and line level git staging
"""

from hunkstage.errors import (
    InvalidPositionError,
    ItemNotFoundError,
    ListKeyNotFoundError,
    SelectionError,
    SelectionModeError,
)
from hunkstage.lists.collection import Endpoint, MultiListCollection
from hunkstage.lists.multi_list import MultiList, OrderedList
from hunkstage.models.patch import ChangeStatus, DiffHunk, FileDiff, HunkLine, LineKind, StageStatus
from hunkstage.view.selection import DiffSelection, Position, SelectionMode, SelectionSet
from hunkstage.view.view_model import DiffViewModel

__version__ = "0.1.0"

__all__ = [
    "ChangeStatus",
    "DiffHunk",
    "DiffSelection",
    "DiffViewModel",
    "Endpoint",
    "FileDiff",
    "HunkLine",
    "InvalidPositionError",
    "ItemNotFoundError",
    "LineKind",
    "ListKeyNotFoundError",
    "MultiList",
    "MultiListCollection",
    "OrderedList",
    "Position",
    "SelectionError",
    "SelectionMode",
    "SelectionModeError",
    "SelectionSet",
    "StageStatus",
]
