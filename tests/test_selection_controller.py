import pytest

from conftest import ListCatalogue, RecordingRenderer, keys
from library_cli.search import Key, KeyEvent, SelectionController, State, run_interactive_selection

GATSBY = "The Great Gatsby, F. Scott Fitzgerald"
HOBBIT = "The Hobbit, J.R.R. Tolkien"
BOOKS = [GATSBY, HOBBIT, "1984, George Orwell", "Pride and Prejudice, Jane Austen", "Dune, Frank Herbert"]


def feed(controller, *events):
    read = keys(*events)
    for _ in range(sum(1 if not isinstance(e, str) else len(e) for e in events)):
        controller.handle(read())

@pytest.fixture
def controller():
    return SelectionController(ListCatalogue(BOOKS), max_selection=3)

def test_starts_editing_with_unfiltered_catalogue(controller):
    assert controller.state is State.EDITING
    assert [e.item for e in controller.results.entries] == BOOKS
    assert all(e.spans == () and e.score == 0 for e in controller.results.entries)

def test_typing_filters_results():
    controller = SelectionController(ListCatalogue([GATSBY, HOBBIT]))
    feed(controller, "grtgts")
    assert [e.item for e in controller.results.entries] == [GATSBY]
    assert controller.results.entries[0].score > 0

    controller.query.clear()
    controller.refresh()
    feed(controller, "zzz")
    assert controller.results.entries == []

def test_control_characters_do_not_trigger_search(controller):
    catalogue = controller.catalogue
    feed(controller, KeyEvent.of("\t"))
    assert controller.query.text == ""
    assert catalogue.searches == []

def test_cursor_moves_do_not_rerun_search(controller):
    feed(controller, "hob")
    searches = len(controller.catalogue.searches)
    feed(controller, Key.LEFT, Key.HOME, Key.RIGHT, Key.END)
    assert len(controller.catalogue.searches) == searches
    feed(controller, Key.BACKSPACE)
    assert controller.query.text == "ho"
    assert len(controller.catalogue.searches) == searches + 1

def test_delete_edits_at_cursor(controller):
    feed(controller, "hobx", Key.LEFT, Key.DELETE)
    assert controller.query.text == "hob"
    assert [e.item for e in controller.results.entries] == [HOBBIT]

def test_escape_clears_query_then_confirms(controller):
    feed(controller, "hob", Key.ESCAPE)
    assert controller.state is State.EDITING
    assert controller.query.text == ""
    assert [e.item for e in controller.results.entries] == BOOKS
    feed(controller, Key.ESCAPE)
    assert controller.state is State.CONFIRMING

def test_select_first_three_rows(renderer):
    picked = run_interactive_selection(
        ListCatalogue(BOOKS),
        read_event=keys(
            Key.DOWN, Key.ENTER,
            Key.DOWN, Key.ENTER,
            Key.DOWN, Key.ENTER,
            Key.DOWN, Key.ENTER,
            Key.ESCAPE, Key.ENTER,
        ),
        renderer=renderer,
    )
    assert picked == BOOKS[:3]

def test_selection_survives_back_to_search(renderer):
    picked = run_interactive_selection(
        ListCatalogue(BOOKS),
        read_event=keys(Key.DOWN, Key.ENTER, Key.ESCAPE, "b", Key.ESCAPE, Key.ENTER),
        renderer=renderer,
    )
    assert picked == [GATSBY]
    states = [view.state for view in renderer.views]
    assert states == [State.EDITING, State.EDITING, State.EDITING, State.CONFIRMING, State.EDITING, State.CONFIRMING]

def test_backspace_returns_to_search_keeping_selection(controller):
    feed(controller, "hob", Key.DOWN, Key.ENTER, Key.ESCAPE, Key.ESCAPE)
    assert controller.state is State.CONFIRMING
    assert controller.selection.items() == [HOBBIT]
    feed(controller, Key.BACKSPACE)
    assert controller.state is State.EDITING
    assert controller.selection.items() == [HOBBIT]

def test_cancel_from_confirmation_returns_nothing(renderer):
    picked = run_interactive_selection(
        ListCatalogue(BOOKS),
        read_event=keys(Key.DOWN, Key.ENTER, Key.ESCAPE, Key.ESCAPE),
        renderer=renderer,
    )
    assert picked == []

def test_unknown_keys_in_confirmation_are_ignored(controller):
    feed(controller, Key.ESCAPE, "x", Key.UP)
    assert controller.state is State.CONFIRMING
    feed(controller, "y")
    assert controller.state is State.DONE

def test_done_ignores_further_input(controller):
    feed(controller, Key.ESCAPE, Key.ENTER)
    assert controller.state is State.DONE
    feed(controller, "abc", Key.BACKSPACE)
    assert controller.query.text == ""
    assert controller.state is State.DONE

def test_enter_without_highlight_selects_nothing(controller):
    feed(controller, Key.ENTER, Key.ESCAPE, Key.ENTER)
    assert controller.outcome == []

def test_view_marks_highlight_selection_and_spans(controller):
    feed(controller, "hob", Key.DOWN, Key.ENTER)
    view = controller.view()
    assert view.query_text == "hob"
    assert view.cursor == 3
    assert len(view.rows) == 1
    row = view.rows[0]
    assert row.display_text == HOBBIT
    assert row.is_highlighted and row.is_selected
    assert "".join(HOBBIT[s.start:s.end] for s in row.spans).lower() == "hob"
    assert "1/3" in view.prompt

def test_confirmation_view_lists_selection(controller):
    feed(controller, Key.DOWN, Key.ENTER, Key.ESCAPE)
    view = controller.view()
    assert view.state is State.CONFIRMING
    assert [row.display_text for row in view.rows] == [GATSBY]

def test_renderer_height_sizes_the_window():
    renderer = RecordingRenderer(height=2)
    run_interactive_selection(
        ListCatalogue(BOOKS),
        read_event=keys(Key.DOWN, Key.DOWN, Key.DOWN, Key.ESCAPE, Key.ESCAPE),
        renderer=renderer,
    )
    # frames: initial, after 1st, 2nd, 3rd down, after first escape
    assert [len(v.rows) for v in renderer.views[1:4]] == [2, 2, 2]
    assert renderer.views[3].scroll_offset == 1
    assert [r.is_highlighted for r in renderer.views[3].rows] == [False, True]

def test_search_errors_propagate():
    class Broken(ListCatalogue):
        def search(self, query, candidates):
            raise RuntimeError("catalogue offline")

    controller = SelectionController(Broken(BOOKS))
    with pytest.raises(RuntimeError):
        controller.handle(KeyEvent.of("a"))
