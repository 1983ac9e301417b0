"""Interactive search-and-select flow.

``SelectionController`` is a three-state machine::

    EDITING --Esc (empty query)--> CONFIRMING --proceed--> DONE(selection)
       ^                              |  |
       +-------- back to search ------+  +--cancel--> DONE(empty)

Each loop iteration renders the current ``SelectionView``, reads one
``KeyEvent`` and applies it. The controller never writes to the terminal;
drawing is delegated to a ``Renderer`` which reports back how many result
rows fit on screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar

from . import fuzzy, keys
from .fuzzy import MatchSpan
from .keys import Key, KeyEvent
from .query import QueryEditor
from .results import ResultEntry, ResultList, SelectionSet

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_SELECTION = 3


class CatalogueView(Protocol[T]):
    """What the selector needs from the catalogue."""

    def all_items(self) -> Sequence[T]: ...

    def search(self, query: str, candidates: Sequence[T]) -> Sequence[T]: ...

    def display(self, item: T) -> str: ...


class State(Enum):
    EDITING = "editing"
    CONFIRMING = "confirming"
    DONE = "done"


@dataclass(frozen=True)
class RowView:
    display_text: str
    spans: Tuple[MatchSpan, ...]
    is_selected: bool
    is_highlighted: bool


@dataclass(frozen=True)
class SelectionView:
    state: State
    query_text: str
    cursor: int
    rows: Tuple[RowView, ...]
    prompt: str
    selected_count: int
    max_selection: int
    total_results: int
    scroll_offset: int


class Renderer(Protocol):
    def render(self, view: SelectionView) -> int:
        """Draw ``view`` and return the number of result rows that fit."""
        ...


EDITING_PROMPT = "Type to search · ↑/↓ move · Enter select · Esc clear/finish ({count}/{limit} selected)"
CONFIRMING_PROMPT = "Continue with {count} book(s)? Enter/y proceed · b back to search · Esc/n cancel"

_PROCEED_CHARS = {"y", "Y"}
_BACK_CHARS = {"b", "B"}
_CANCEL_CHARS = {"n", "N", "q", "Q"}


class SelectionController(Generic[T]):
    def __init__(
        self,
        catalogue: CatalogueView[T],
        max_selection: int = DEFAULT_MAX_SELECTION,
        viewport_height: int = 10,
    ) -> None:
        self.catalogue = catalogue
        self.query = QueryEditor()
        self.results: ResultList[T] = ResultList(viewport_height)
        self.selection: SelectionSet[T] = SelectionSet(max_selection)
        self.state = State.EDITING
        self.outcome: List[T] = []
        self.refresh()

    # ------------------------- Search ------------------------- #
    def refresh(self) -> None:
        """Recompute the result list for the current query."""
        items = list(self.catalogue.all_items())
        text = self.query.text
        if self.query.is_empty():
            self.results.set_results([ResultEntry(item) for item in items])
            return

        entries = []
        for item in self.catalogue.search(text, items):
            found = fuzzy.match(self.catalogue.display(item), text)
            if found is None:
                entries.append(ResultEntry(item))
            else:
                entries.append(ResultEntry(item, found.spans, found.score))
        logger.debug("query %r matched %d of %d items", text, len(entries), len(items))
        self.results.set_results(entries)

    # ------------------------- Input ------------------------- #
    def handle(self, event: KeyEvent) -> None:
        if self.state is State.EDITING:
            self._handle_editing(event)
        elif self.state is State.CONFIRMING:
            self._handle_confirming(event)

    def _handle_editing(self, event: KeyEvent) -> None:
        editor = self.query
        edits: Dict[Key, Callable[[], bool]] = {
            Key.BACKSPACE: editor.delete_before,
            Key.DELETE: editor.delete_after,
            Key.LEFT: editor.move_left,
            Key.RIGHT: editor.move_right,
            Key.HOME: editor.move_home,
            Key.END: editor.move_end,
        }
        if event.key is Key.CHAR:
            changed = editor.insert(event.char)
        elif event.key in edits:
            changed = edits[event.key]()
        elif event.key is Key.UP:
            self.results.move_highlight_up()
            return
        elif event.key is Key.DOWN:
            self.results.move_highlight_down()
            return
        elif event.key is Key.ENTER:
            self.results.toggle_selection_at_highlight(self.selection)
            return
        elif event.key is Key.ESCAPE:
            if editor.is_empty():
                self.state = State.CONFIRMING
                return
            changed = editor.clear()
        else:
            return

        if changed:
            self.refresh()

    def _handle_confirming(self, event: KeyEvent) -> None:
        if event.key is Key.ENTER or (event.key is Key.CHAR and event.char in _PROCEED_CHARS):
            self._finish(self.selection.items())
        elif event.key is Key.BACKSPACE or (event.key is Key.CHAR and event.char in _BACK_CHARS):
            self.state = State.EDITING
        elif event.key is Key.ESCAPE or (event.key is Key.CHAR and event.char in _CANCEL_CHARS):
            self._finish([])

    def _finish(self, items: List[T]) -> None:
        self.outcome = items
        self.state = State.DONE
        logger.info("selection finished with %d item(s)", len(items))

    # ------------------------- View ------------------------- #
    def view(self) -> SelectionView:
        count = len(self.selection)
        limit = self.selection.max_size
        if self.state is State.CONFIRMING:
            rows = tuple(
                RowView(self.catalogue.display(item), (), True, False)
                for item in self.selection
            )
            prompt = CONFIRMING_PROMPT.format(count=count)
        else:
            rows = tuple(
                RowView(
                    display_text=self.catalogue.display(entry.item),
                    spans=entry.spans,
                    is_selected=entry.item in self.selection,
                    is_highlighted=index == self.results.highlighted,
                )
                for index, entry in self.results.visible()
            )
            prompt = EDITING_PROMPT.format(count=count, limit=limit)
        return SelectionView(
            state=self.state,
            query_text=self.query.text,
            cursor=self.query.cursor,
            rows=rows,
            prompt=prompt,
            selected_count=count,
            max_selection=limit,
            total_results=len(self.results),
            scroll_offset=self.results.scroll_offset,
        )

    def run(self, read_event: Callable[[], KeyEvent], renderer: Renderer) -> List[T]:
        while self.state is not State.DONE:
            height = renderer.render(self.view())
            self.results.set_viewport_height(height)
            self.handle(read_event())
        return list(self.outcome)


def run_interactive_selection(
    catalogue: CatalogueView[T],
    *,
    max_selection: int = DEFAULT_MAX_SELECTION,
    viewport_height: int = 10,
    read_event: Optional[Callable[[], KeyEvent]] = None,
    renderer: Optional[Renderer] = None,
) -> List[T]:
    """Let the user pick up to ``max_selection`` items from ``catalogue``.

    Returns the confirmed items in the order they were selected, or an empty
    list when the user cancels. By default keys are read from the terminal
    and the screen is drawn with rich.
    """
    if read_event is None:
        read_event = keys.read_event
    if renderer is None:
        from .render import RichRenderer
        renderer = RichRenderer()
    controller: SelectionController[T] = SelectionController(
        catalogue, max_selection=max_selection, viewport_height=viewport_height
    )
    return controller.run(read_event, renderer)
