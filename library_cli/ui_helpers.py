import os
import json
from typing import List, Any, Dict, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .search import fuzzy
from .search.render import highlight_text

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def _book_row(book: Any, available: Optional[int]) -> Dict[str, Any]:
    row = {
        "book_id": book.book_id,
        "title": book.title,
        "author": book.author,
        "year": book.publication_date.year,
    }
    if available is not None:
        row["available"] = available
    return row

def print_book_list(books: List[Any], library: Any = None, query: str = "") -> None:
    """Print titles in the current output mode.
    - plain: 'ID - Title by Author (Year) [n available]' lines
    - json: array of objects
    - rich: table, with query matches highlighted when ``query`` is given
    """
    mode = get_output_mode()

    if not books:
        print("No books found.")
        return

    counts = [library.get_number_of_available_copies(b) if library is not None else None for b in books]

    if mode == "json":
        print(json.dumps([_book_row(b, n) for b, n in zip(books, counts)], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Catalogue", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title, Author", style="white")
        table.add_column("Year", style="white")
        if library is not None:
            table.add_column("Available", style="green")
        for b, n in zip(books, counts):
            label = highlight_text(b.display, fuzzy.spans(b.display, query)) if query else b.display
            cells = [str(b.book_id), label, str(b.publication_date.year)]
            if n is not None:
                cells.append(str(n))
            table.add_row(*cells)
        _console.print(table)
    else:
        for b, n in zip(books, counts):
            suffix = f" [{n} available]" if n is not None else ""
            print(f"{b.book_id} - {b.title} by {b.author} ({b.publication_date.year}){suffix}")

def print_borrowed_list(books: List[Any], mode: Optional[str] = None) -> None:
    mode = mode or get_output_mode()

    if not books:
        print("No books are currently borrowed.")
        return

    if mode == "json":
        payload = [
            {"unique_id": b.unique_id, "title": b.title, "user_id": b.user_id,
             "due_date": b.due_date.isoformat() if b.due_date else None}
            for b in books
        ]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📕 Borrowed", show_lines=True, header_style="bold cyan")
        table.add_column("Copy", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("User", style="white")
        table.add_column("Due", style="yellow")
        for b in books:
            table.add_row(str(b.unique_id), b.title, str(b.user_id), str(b.due_date or ""))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.unique_id} - {b.title} (user {b.user_id}, due {b.due_date})")

def print_user_list(users: List[Any], mode: Optional[str] = None) -> None:
    mode = mode or get_output_mode()

    if not users:
        print("No users registered.")
        return

    if mode == "json":
        payload = [
            {"user_id": u.user_id, "name": u.name, "email": u.email,
             "fees_owed": u.fees_owed, "borrowed": len(u.books)}
            for u in users
        ]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="👤 Users", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Email", style="white")
        table.add_column("Borrowed", style="white")
        table.add_column("Fees", style="red")
        for u in users:
            table.add_row(str(u.user_id), u.name, u.email, str(len(u.books)), f"{u.fees_owed:.2f}")
        _console.print(table)
    else:
        for u in users:
            print(f"{u.user_id}, {u.name} ({u.email}) - {len(u.books)} borrowed, fees {u.fees_owed:.2f}")

def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = {
        "total_titles": "Titles",
        "total_copies": "Copies",
        "borrowed_copies": "Borrowed Copies",
        "total_users": "Users",
        "borrowing_users": "Borrowing Users",
    }

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{labels.get(k, k)}:[/] {v}" for k, v in stats.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for k, v in stats.items():
            print(f"{labels.get(k, k)}: {v}")
