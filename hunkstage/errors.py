"""Exceptions raised by the selection and staging models"""


class SelectionError(Exception):
    """Base class for selection lookup and consistency failures"""


class ListKeyNotFoundError(SelectionError, KeyError):
    """A list key is not present in the multi-list"""

    def __init__(self, key):
        self.key = key
        super().__init__(f'key "{key}" not found')

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class ItemNotFoundError(SelectionError, KeyError):
    """An item is not present in the list it was looked up in"""

    def __init__(self, item, key=None):
        self.item = item
        self.key = key
        if key is None:
            message = f'item "{item}" not found'
        else:
            message = f"item {item} not found for key {key}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class InvalidPositionError(SelectionError, IndexError):
    """A diff coordinate points outside the patch it is applied to"""


class SelectionModeError(SelectionError, ValueError):
    """Selections of different granularity modes were combined"""
