"""
Selection Cursor

An ordered list of items with a single highlighted position. Shared by the
flat song list, the folder browser, the queue pane and search results.
"""

from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class SelectionCursor(Generic[T]):
    """
    Items plus an optional selected index.

    `selected` is None exactly when there are no items; otherwise it is a
    valid index. Moving clamps at both ends.
    """

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: List[T] = []
        self._selected: Optional[int] = None
        if items is not None:
            self.replace(items)

    @property
    def items(self) -> Tuple[T, ...]:
        return tuple(self._items)

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, items: Iterable[T]) -> None:
        """Swap the whole list; selection goes back to the top."""
        self._items = list(items)
        self._selected = 0 if self._items else None

    def move_up(self) -> None:
        if self._selected is not None and self._selected > 0:
            self._selected -= 1

    def move_down(self) -> None:
        if self._selected is not None and self._selected < len(self._items) - 1:
            self._selected += 1

    def select(self, index: int) -> None:
        if not self._items:
            return
        self._selected = max(0, min(index, len(self._items) - 1))

    def current(self) -> Optional[T]:
        if self._selected is None:
            return None
        return self._items[self._selected]

    def split_rotated_at(self, index: int) -> List[T]:
        """items[index:] followed by items[:index]."""
        return self._items[index:] + self._items[:index]

    def labels(self) -> List[str]:
        return [item.label() for item in self._items]
