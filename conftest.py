from datetime import date

import pytest

from library_cli.config import settings
from library_cli.library import Library
from library_cli.main import LibraryManager
from library_cli.search.keys import Key, KeyEvent

CATALOGUE = [
    ("The Great Gatsby", "F. Scott Fitzgerald", 1925),
    ("To Kill a Mockingbird", "Harper Lee", 1960),
    ("1984", "George Orwell", 1949),
    ("Pride and Prejudice", "Jane Austen", 1813),
    ("The Catcher in the Rye", "J.D. Salinger", 1951),
    ("The Lord of the Rings", "J.R.R. Tolkien", 1954),
    ("The Hobbit", "J.R.R. Tolkien", 1937),
]


class ListCatalogue:
    """Catalogue view over a plain list of strings."""

    def __init__(self, items):
        self.items = list(items)
        self.searches = []

    def all_items(self):
        return list(self.items)

    def search(self, query, candidates):
        from library_cli.search import fuzzy
        self.searches.append(query)
        return fuzzy.rank(query, candidates, key=str)

    def display(self, item):
        return str(item)


class RecordingRenderer:
    """Keeps every view it is asked to draw."""

    def __init__(self, height=10):
        self.height = height
        self.views = []

    def render(self, view):
        self.views.append(view)
        return self.height


def keys(*events):
    """Build a read_event callable from KeyEvents, Keys and strings (typed text)."""
    queue = []
    for event in events:
        if isinstance(event, KeyEvent):
            queue.append(event)
        elif isinstance(event, Key):
            queue.append(KeyEvent(event))
        else:
            queue.extend(KeyEvent.of(ch) for ch in event)
    it = iter(queue)
    return lambda: next(it)


@pytest.fixture
def lib():
    library = Library()
    for title, author, year in CATALOGUE:
        library.add_book(title, author, date(year, 1, 1))
    return library


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    # Each test gets its own data file
    path = tmp_path / "library.json"
    monkeypatch.setattr(settings, "data_file", str(path))
    monkeypatch.setenv("LIB_CLI_OUTPUT", "plain")
    LibraryManager.reset()
    yield path
    LibraryManager.reset()
