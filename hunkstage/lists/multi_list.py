"""Single-cursor navigation over several ordered, keyed lists."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from hunkstage.errors import ItemNotFoundError, ListKeyNotFoundError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]


@dataclass
class OrderedList:
    """An ordered sequence of items identified by a unique key"""

    key: Hashable
    items: List[Any] = field(default_factory=list)


ListLike = Union[OrderedList, Mapping[str, Any], Tuple[Hashable, Sequence[Any]]]


def as_ordered_list(value: ListLike) -> OrderedList:
    if isinstance(value, OrderedList):
        return OrderedList(value.key, list(value.items))
    if isinstance(value, Mapping):
        return OrderedList(value["key"], list(value["items"]))
    key, items = value
    return OrderedList(key, list(items))


def index_by_identity(items: Sequence[Any], item: Any) -> int:
    """Position of ``item`` in ``items`` compared by identity, -1 if absent."""
    for index, candidate in enumerate(items):
        if candidate is item:
            return index
    return -1


class MultiList:
    """Tracks one selected list and one selected item across several lists.

    The cursor is a ``(list_index, item_index)`` pair. It is ``None`` only
    when every list is empty.
    """

    def __init__(
        self,
        lists: Iterable[ListLike] = (),
        did_change_selection: Optional[ChangeCallback] = None,
    ):
        self._did_change_selection = did_change_selection
        self._lists: List[OrderedList] = []
        self._cursor: Optional[Tuple[int, int]] = None
        self._set_lists(lists)
        self._cursor = self._first_cursor_from(0, step=1)

    # Queries

    def get_lists(self) -> List[OrderedList]:
        return list(self._lists)

    def get_list_keys(self) -> List[Hashable]:
        return [ordered.key for ordered in self._lists]

    def get_items_for_key(self, key: Hashable) -> List[Any]:
        return self._lists[self._list_index_for_key(key)].items

    def get_item_index_for_key(self, key: Hashable, item: Any) -> int:
        return index_by_identity(self.get_items_for_key(key), item)

    def get_key_for_item(self, item: Any) -> Optional[Hashable]:
        for ordered in self._lists:
            if index_by_identity(ordered.items, item) >= 0:
                return ordered.key
        return None

    def get_selected_list_key(self) -> Optional[Hashable]:
        if self._cursor is None:
            return None
        return self._lists[self._cursor[0]].key

    def get_selected_item(self) -> Any:
        if self._cursor is None:
            return None
        list_index, item_index = self._cursor
        return self._lists[list_index].items[item_index]

    def get_cursor(self) -> Optional[Tuple[int, int]]:
        return self._cursor

    # Mutations

    def update_lists(self, lists: Iterable[ListLike], suppress_callback: bool = False) -> None:
        """Replace every list and re-resolve the cursor.

        The previously selected item keeps the cursor if it is still present
        anywhere; otherwise the cursor is clamped to the nearest valid spot.
        """
        previous_item = self.get_selected_item()
        previous_cursor = self._cursor
        self._set_lists(lists)

        cursor = None
        if previous_cursor is not None:
            cursor = self._find_item(previous_item)
            if cursor is None:
                cursor = self._clamp(*previous_cursor)
        else:
            cursor = self._first_cursor_from(0, step=1)

        logger.debug("Lists updated, cursor %s -> %s", previous_cursor, cursor)
        self._cursor = cursor
        if not suppress_callback:
            self._notify()

    def select_next_list(self, wrap: bool = False) -> None:
        self._select_adjacent_list(step=1, wrap=wrap)

    def select_previous_list(self, wrap: bool = False) -> None:
        self._select_adjacent_list(step=-1, wrap=wrap)

    def select_next_item(self, stop_at_bounds: bool = False) -> None:
        if self._cursor is None:
            return
        list_index, item_index = self._cursor
        if item_index + 1 < len(self._lists[list_index].items):
            self._move_to((list_index, item_index + 1))
        elif not stop_at_bounds:
            cursor = self._first_cursor_from(list_index + 1, step=1)
            if cursor is not None:
                self._move_to(cursor)

    def select_previous_item(self, stop_at_bounds: bool = False) -> None:
        if self._cursor is None:
            return
        list_index, item_index = self._cursor
        if item_index > 0:
            self._move_to((list_index, item_index - 1))
        elif not stop_at_bounds:
            cursor = self._first_cursor_from(list_index - 1, step=-1, last_item=True)
            if cursor is not None:
                self._move_to(cursor)

    def select_item(self, item: Any, suppress_callback: bool = False) -> None:
        cursor = self._find_item(item)
        if cursor is None:
            raise ItemNotFoundError(item)
        self._move_to(cursor, suppress_callback=suppress_callback)

    def select_list_for_key(self, key: Hashable, suppress_callback: bool = False) -> None:
        list_index = self._list_index_for_key(key)
        if not self._lists[list_index].items:
            logger.debug("Not selecting empty list %r", key)
            return
        if self._cursor is not None and self._cursor[0] == list_index:
            return
        self._move_to((list_index, 0), suppress_callback=suppress_callback)

    # Internals

    def _set_lists(self, lists: Iterable[ListLike]) -> None:
        new_lists = [as_ordered_list(value) for value in lists]
        keys = [ordered.key for ordered in new_lists]
        if len(set(keys)) != len(keys):
            raise ValueError(f"List keys must be unique: {keys!r}")
        self._lists = new_lists

    def _list_index_for_key(self, key: Hashable) -> int:
        for index, ordered in enumerate(self._lists):
            if ordered.key == key:
                return index
        raise ListKeyNotFoundError(key)

    def _find_item(self, item: Any) -> Optional[Tuple[int, int]]:
        for list_index, ordered in enumerate(self._lists):
            item_index = index_by_identity(ordered.items, item)
            if item_index >= 0:
                return list_index, item_index
        return None

    def _first_cursor_from(
        self, start: int, step: int, last_item: bool = False
    ) -> Optional[Tuple[int, int]]:
        index = start
        while 0 <= index < len(self._lists):
            items = self._lists[index].items
            if items:
                return index, len(items) - 1 if last_item else 0
            index += step
        return None

    def _clamp(self, list_index: int, item_index: int) -> Optional[Tuple[int, int]]:
        if list_index < len(self._lists) and self._lists[list_index].items:
            return list_index, min(item_index, len(self._lists[list_index].items) - 1)
        for distance in range(1, len(self._lists) + 1):
            for candidate in (list_index + distance, list_index - distance):
                if 0 <= candidate < len(self._lists) and self._lists[candidate].items:
                    return candidate, 0
        return None

    def _select_adjacent_list(self, step: int, wrap: bool) -> None:
        count = len(self._lists)
        if count == 0:
            return
        current = self._cursor[0] if self._cursor is not None else (-1 if step > 0 else count)
        candidates = []
        for offset in range(1, count + 1):
            index = current + step * offset
            if not 0 <= index < count:
                if not wrap:
                    break
                index %= count
            candidates.append(index)
        for index in candidates:
            if self._lists[index].items:
                self._move_to((index, 0))
                return

    def _move_to(self, cursor: Tuple[int, int], suppress_callback: bool = False) -> None:
        changed = cursor != self._cursor
        self._cursor = cursor
        if changed and not suppress_callback:
            self._notify()

    def _notify(self) -> None:
        if self._did_change_selection is not None:
            self._did_change_selection()
