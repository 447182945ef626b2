"""Multi-item selection with a tail anchor on top of MultiList."""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from hunkstage.errors import ItemNotFoundError, ListKeyNotFoundError
from hunkstage.lists.multi_list import ChangeCallback, ListLike, MultiList, index_by_identity

logger = logging.getLogger(__name__)


class Endpoint(NamedTuple):
    """A ``{key, item}`` pair naming one item of one list"""

    key: Hashable
    item: Any


EndpointLike = Union[Endpoint, Mapping[str, Any], Tuple[Hashable, Any]]


def as_endpoint(value: EndpointLike) -> Endpoint:
    if isinstance(value, Endpoint):
        return value
    if isinstance(value, Mapping):
        return Endpoint(value["key"], value["item"])
    key, item = value
    return Endpoint(key, item)


class _ItemSet:
    """Insertion-ordered set of items keyed by identity"""

    def __init__(self, items: Iterable[Any] = ()):
        self._items: Dict[int, Any] = {}
        for item in items:
            self.add(item)

    def add(self, item: Any) -> None:
        self._items.setdefault(id(item), item)

    def discard(self, item: Any) -> None:
        self._items.pop(id(item), None)

    def copy(self) -> "_ItemSet":
        return _ItemSet(self._items.values())

    def __contains__(self, item: Any) -> bool:
        return id(item) in self._items

    def __iter__(self):
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)


class MultiListCollection:
    """Tracks an arbitrary selection of items and keys across several lists.

    Selections made before the current tail anchor are kept as a committed
    base; range operations from the tail replace only what lies on top of it,
    the way shift-click extends a selection started with ctrl-click.
    """

    def __init__(
        self,
        lists: Iterable[ListLike] = (),
        did_change_selection: Optional[ChangeCallback] = None,
    ):
        self.list = MultiList(lists)
        self._did_change_selection = did_change_selection
        self._selected_items = _ItemSet()
        self._selected_keys: Dict[Hashable, None] = {}
        self._committed_items = _ItemSet()
        self._committed_keys: Dict[Hashable, None] = {}
        self._tail: Optional[Endpoint] = None
        self._select_cursor()

    # Read surface

    def get_tail(self) -> Optional[Endpoint]:
        return self._tail

    def get_selected_items(self) -> List[Any]:
        return list(self._selected_items)

    def get_selected_keys(self) -> List[Hashable]:
        return list(self._selected_keys)

    def is_item_selected(self, item: Any) -> bool:
        return item in self._selected_items

    def get_items_for_key(self, key: Hashable) -> List[Any]:
        return self.list.get_items_for_key(key)

    def get_last_selected_list_key(self) -> Optional[Hashable]:
        return self.list.get_selected_list_key()

    def get_last_selected_item(self) -> Any:
        return self.list.get_selected_item()

    # Mutations

    def update_lists(self, lists: Iterable[ListLike], suppress_callback: bool = False) -> None:
        """Replace the lists and drop selections that no longer exist"""
        self.list.update_lists(lists, suppress_callback=True)
        keys = set(self.list.get_list_keys())

        def present(item):
            return self.list.get_key_for_item(item) is not None

        def still_selected(key, selected):
            if key not in keys:
                return False
            items = self.list.get_items_for_key(key)
            return not items or any(item in selected for item in items)

        self._selected_items = _ItemSet(item for item in self._selected_items if present(item))
        self._committed_items = _ItemSet(item for item in self._committed_items if present(item))
        self._selected_keys = {
            key: None for key in self._selected_keys if still_selected(key, self._selected_items)
        }
        self._committed_keys = {
            key: None for key in self._committed_keys if still_selected(key, self._committed_items)
        }

        if not self._selected_items:
            self._selected_keys = {}
            self._committed_items = _ItemSet()
            self._committed_keys = {}
            self._select_cursor()
        elif not self._tail_is_valid():
            self._tail = self._endpoint_for(list(self._selected_items)[-1])
        self._notify(suppress_callback)

    def select_next_list(self, wrap: bool = False, add_to_existing: bool = False) -> None:
        self.list.select_next_list(wrap=wrap)
        self._update_selections(add_to_existing)

    def select_previous_list(self, wrap: bool = False, add_to_existing: bool = False) -> None:
        self.list.select_previous_list(wrap=wrap)
        self._update_selections(add_to_existing)

    def select_next_item(self, add_to_existing: bool = False, stop_at_bounds: bool = False) -> None:
        self.list.select_next_item(stop_at_bounds=stop_at_bounds)
        self._update_selections(add_to_existing)

    def select_previous_item(self, add_to_existing: bool = False, stop_at_bounds: bool = False) -> None:
        self.list.select_previous_item(stop_at_bounds=stop_at_bounds)
        self._update_selections(add_to_existing)

    def select_item_for_key(
        self,
        item: Any,
        key: Hashable,
        tail: bool = False,
        add_to_existing: bool = False,
        suppress_callback: bool = False,
    ) -> None:
        """Select from the tail anchor to ``{key, item}``.

        Without ``add_to_existing`` the previous selection is discarded and
        the anchor restarts at the item. With ``tail`` the item becomes the
        new anchor and the current selection is kept underneath it.
        """
        if index_by_identity(self.get_items_for_key(key), item) < 0:
            raise ItemNotFoundError(item, key)

        if not add_to_existing:
            self._clear()
        elif tail:
            self._commit()
        if tail or self._tail is None:
            self._tail = Endpoint(key, item)

        self._select_range(self._tail, Endpoint(key, item))
        logger.debug("Selected %r in %r from tail %r", item, key, self._tail)
        self._notify(suppress_callback)

    def toggle_item_for_key(self, item: Any, key: Hashable, suppress_callback: bool = False) -> None:
        items_for_key = self.get_items_for_key(key)
        if index_by_identity(items_for_key, item) < 0:
            raise ItemNotFoundError(item, key)

        if item not in self._selected_items:
            self.select_item_for_key(
                item, key, tail=True, add_to_existing=True, suppress_callback=suppress_callback
            )
            return

        self._selected_items.discard(item)
        if not any(other in self._selected_items for other in items_for_key):
            self._selected_keys.pop(key, None)
        self._commit()

        if not self._selected_items:
            self._tail = None
        elif not self._tail_is_valid():
            self._tail = self._endpoint_for(list(self._selected_items)[-1])
        self._notify(suppress_callback)

    def select_all_items_for_key(self, key: Hashable, add_to_existing: bool = False) -> None:
        items = self.get_items_for_key(key)
        if not add_to_existing:
            self._clear()
        self._selected_keys[key] = None
        for item in items:
            self._selected_items.add(item)
        self._commit()
        if items:
            self._tail = Endpoint(key, items[0])
            self.list.select_item(items[-1], suppress_callback=True)
        self._notify()

    def select_first_item_for_key(self, key: Hashable, add_to_existing: bool = False) -> None:
        items = self.get_items_for_key(key)
        if items:
            self.select_item_for_key(items[0], key, tail=True, add_to_existing=add_to_existing)
            return
        if not add_to_existing:
            self._clear()
        self._selected_keys[key] = None
        self._notify()

    def select_items_and_keys_in_range(self, endpoint1: EndpointLike, endpoint2: EndpointLike) -> None:
        """Select everything between two endpoints, inclusive.

        ``endpoint1`` becomes the tail anchor; the order of the endpoints does
        not change which items and keys end up selected.
        """
        endpoint1 = as_endpoint(endpoint1)
        endpoint2 = as_endpoint(endpoint2)
        self._select_range(endpoint1, endpoint2)
        self._tail = endpoint1
        self._notify()

    # Internals

    def _range(self, endpoint1: Endpoint, endpoint2: Endpoint) -> Tuple[List[Hashable], List[Any]]:
        list_keys = self.list.get_list_keys()
        if endpoint1.key not in list_keys:
            raise ListKeyNotFoundError(endpoint1.key)
        if endpoint2.key not in list_keys:
            raise ListKeyNotFoundError(endpoint2.key)
        index1 = list_keys.index(endpoint1.key)
        index2 = list_keys.index(endpoint2.key)

        if index1 <= index2:
            start_point, end_point = endpoint1, endpoint2
            start_key_index, end_key_index = index1, index2
        else:
            start_point, end_point = endpoint2, endpoint1
            start_key_index, end_key_index = index2, index1

        start_item_index = self.list.get_item_index_for_key(start_point.key, start_point.item)
        end_item_index = self.list.get_item_index_for_key(end_point.key, end_point.item)
        if start_item_index < 0:
            raise ItemNotFoundError(start_point.item)
        if end_item_index < 0:
            raise ItemNotFoundError(end_point.item)

        if start_key_index == end_key_index:
            low, high = sorted((start_item_index, end_item_index))
            items = self.list.get_items_for_key(start_point.key)
            return [start_point.key], items[low : high + 1]

        keys: List[Hashable] = []
        selected: List[Any] = []
        for index in range(start_key_index, end_key_index + 1):
            key = list_keys[index]
            items = self.list.get_items_for_key(key)
            keys.append(key)
            if index == start_key_index:
                selected.extend(items[start_item_index:])
            elif index == end_key_index:
                selected.extend(items[: end_item_index + 1])
            else:
                selected.extend(items)
        return keys, selected

    def _select_range(self, endpoint1: Endpoint, endpoint2: Endpoint) -> None:
        keys, items = self._range(endpoint1, endpoint2)
        self._selected_items = self._committed_items.copy()
        self._selected_keys = dict(self._committed_keys)
        for key in keys:
            self._selected_keys[key] = None
        for item in items:
            self._selected_items.add(item)
        self.list.select_item(endpoint2.item, suppress_callback=True)

    def _update_selections(self, add_to_existing: bool) -> None:
        key = self.list.get_selected_list_key()
        item = self.list.get_selected_item()
        if key is None:
            return
        if add_to_existing:
            self.select_item_for_key(item, key, add_to_existing=True)
        else:
            self.select_item_for_key(item, key, tail=True)

    def _select_cursor(self) -> None:
        key = self.list.get_selected_list_key()
        item = self.list.get_selected_item()
        if key is None:
            self._tail = None
            return
        self._tail = Endpoint(key, item)
        self._selected_items = _ItemSet([item])
        self._selected_keys = {key: None}

    def _clear(self) -> None:
        self._selected_items = _ItemSet()
        self._selected_keys = {}
        self._committed_items = _ItemSet()
        self._committed_keys = {}
        self._tail = None

    def _commit(self) -> None:
        self._committed_items = self._selected_items.copy()
        self._committed_keys = dict(self._selected_keys)

    def _endpoint_for(self, item: Any) -> Endpoint:
        return Endpoint(self.list.get_key_for_item(item), item)

    def _tail_is_valid(self) -> bool:
        if self._tail is None or self._tail.key not in self.list.get_list_keys():
            return False
        if self.list.get_item_index_for_key(self._tail.key, self._tail.item) < 0:
            return False
        return self._tail.item in self._selected_items

    def _notify(self, suppress_callback: bool = False) -> None:
        if not suppress_callback and self._did_change_selection is not None:
            self._did_change_selection()
