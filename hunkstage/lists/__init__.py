"""Cursor and multi-item selection across keyed lists"""

from hunkstage.lists.collection import Endpoint, MultiListCollection
from hunkstage.lists.multi_list import MultiList, OrderedList

__all__ = [
    "Endpoint",
    "MultiList",
    "MultiListCollection",
    "OrderedList",
]
