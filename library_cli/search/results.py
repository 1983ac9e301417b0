from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterator, List, Sequence, Tuple, TypeVar

from .fuzzy import MatchSpan

T = TypeVar("T")


@dataclass(frozen=True)
class ResultEntry(Generic[T]):
    item: T
    spans: Tuple[MatchSpan, ...] = ()
    score: int = 0


class SelectionSet(Generic[T]):
    """Insertion-ordered set of items with a fixed capacity."""

    def __init__(self, max_size: int = 3) -> None:
        self.max_size = max_size
        self._items: List[T] = []

    def __contains__(self, item: Any) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_full(self) -> bool:
        return len(self._items) >= self.max_size

    def add(self, item: T) -> bool:
        if item in self._items or self.is_full():
            return False
        self._items.append(item)
        return True

    def remove(self, item: T) -> bool:
        if item not in self._items:
            return False
        self._items.remove(item)
        return True

    def toggle(self, item: T) -> bool:
        """Remove ``item`` if present, otherwise add it when there is room."""
        if item in self._items:
            return self.remove(item)
        return self.add(item)

    def items(self) -> List[T]:
        return list(self._items)


class ResultList(Generic[T]):
    """Ranked results plus highlight and scroll state.

    ``highlighted`` is ``-1`` or a valid index into ``entries``. ``scroll_offset``
    is kept so the highlighted row is inside a window of ``viewport_height`` rows.
    """

    def __init__(self, viewport_height: int = 10) -> None:
        self.entries: List[ResultEntry[T]] = []
        self.highlighted = -1
        self.scroll_offset = 0
        self.viewport_height = max(viewport_height, 1)

    def __len__(self) -> int:
        return len(self.entries)

    def set_results(self, entries: Sequence[ResultEntry[T]]) -> None:
        self.entries = list(entries)
        if not 0 <= self.highlighted < len(self.entries):
            self.highlighted = -1
        self.scroll_offset = 0
        self._keep_highlight_visible()

    def set_viewport_height(self, height: int) -> None:
        self.viewport_height = max(height, 1)
        self._keep_highlight_visible()

    def move_highlight_up(self) -> None:
        self._move_highlight(-1)

    def move_highlight_down(self) -> None:
        self._move_highlight(1)

    def _move_highlight(self, step: int) -> None:
        if not self.entries:
            return
        self.highlighted = min(max(self.highlighted + step, 0), len(self.entries) - 1)
        self._keep_highlight_visible()

    def _keep_highlight_visible(self) -> None:
        if self.highlighted < 0:
            self.scroll_offset = 0
            return
        if self.highlighted < self.scroll_offset:
            self.scroll_offset = self.highlighted
        elif self.highlighted >= self.scroll_offset + self.viewport_height:
            self.scroll_offset = self.highlighted - self.viewport_height + 1

    def highlighted_entry(self) -> ResultEntry[T] | None:
        if self.highlighted < 0:
            return None
        return self.entries[self.highlighted]

    def toggle_selection_at_highlight(self, selection: SelectionSet[T]) -> bool:
        entry = self.highlighted_entry()
        if entry is None:
            return False
        return selection.toggle(entry.item)

    def visible(self) -> List[Tuple[int, ResultEntry[T]]]:
        """(index, entry) pairs inside the current scroll window."""
        window = self.entries[self.scroll_offset:self.scroll_offset + self.viewport_height]
        return list(enumerate(window, start=self.scroll_offset))
