import logging
import sys
from datetime import date
from functools import wraps
from typing import Callable, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import FloatPrompt, IntPrompt, Prompt
from rich.table import Table

from .book import Book
from .config import settings
from .library import AvailableCatalogue, Library
from .search import KeyEvent, run_interactive_selection
from .search.controller import Renderer
from .search.render import RichRenderer
from .storage import StorageError, load_library, save_library
from .ui_helpers import (
    print_book_list,
    print_borrowed_list,
    print_stats_result,
    print_user_list,
    set_output_mode,
)
from .user import BorrowError, User

logger = logging.getLogger(__name__)

console = Console()


class LibraryManager:
    """Holds the Library loaded from ``settings.data_file``."""

    _instance: Optional[Library] = None
    _data_file: Optional[str] = None

    @classmethod
    def get_instance(cls) -> Library:
        """Load the library, reloading when the configured data file changes."""
        if cls._instance is None or cls._data_file != settings.data_file:
            cls._instance = load_library(settings.data_file)
            cls._data_file = settings.data_file
            logger.debug("library loaded from %s", settings.data_file)
        return cls._instance

    @classmethod
    def save(cls) -> None:
        if cls._instance is not None:
            save_library(cls._instance, cls._data_file or settings.data_file)

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._data_file = None


def persist_changes(func):
    """Save the library after a command that modifies it."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        result = func(*args, **kwargs)
        LibraryManager.save()
        return result
    return wrapper


def _load_or_exit() -> Library:
    try:
        return LibraryManager.get_instance()
    except StorageError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)


def _user_or_exit(lib: Library, user_id: int) -> User:
    user = lib.find_user_by_id(user_id)
    if user is None:
        print(f"User {user_id} not found.")
        raise typer.Exit(code=1)
    return user


def select_and_borrow(
    lib: Library,
    user: User,
    read_event: Optional[Callable[[], KeyEvent]] = None,
    renderer: Optional[Renderer] = None,
    today: Optional[date] = None,
) -> List[Book]:
    """Run the interactive selector over available titles and borrow the picks.

    Returns the borrowed copies; an empty list when nothing was selected.
    An account that may not borrow raises BorrowError before the selector
    opens. ValueError from the borrowing rules propagates.
    """
    user.check_can_borrow()
    if renderer is None:
        renderer = RichRenderer(console=console, highlight_style=settings.highlight_style)
    selected = run_interactive_selection(
        AvailableCatalogue(lib),
        max_selection=user.max_number_of_books,
        viewport_height=settings.viewport_height,
        read_event=read_event,
        renderer=renderer,
    )
    if not selected:
        return []
    return lib.borrow(user, selected, today=today)


# --- Typer CLI application ---
app = typer.Typer(help=settings.app_name)

@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)

@app.command("list")
def cli_list():
    """List every title in the catalogue with its available copies."""
    lib = _load_or_exit()
    print_book_list(lib.copies, lib)

@app.command("users")
def cli_users():
    """List registered users."""
    lib = _load_or_exit()
    print_user_list(lib.users)

@app.command("add-book")
@persist_changes
def cli_add_book(
    title: str,
    author: str,
    year: int = typer.Option(..., "--year", "-y", help="Publication year"),
    copies: int = typer.Option(1, "--copies", "-c", help="Number of copies to add"),
):
    """Add a title with one or more copies."""
    lib = _load_or_exit()
    try:
        added = lib.add_book(title, author, date(year, 1, 1), copies=copies)
    except ValueError as e:
        print(f"Error: {e}")
        return
    print(f"Successfully added {len(added)} copy(ies) of {added[0].title} by {added[0].author}")

@app.command("add-user")
@persist_changes
def cli_add_user(name: str, email: str):
    """Register a new user."""
    lib = _load_or_exit()
    try:
        user = lib.add_user(name, email)
    except ValueError as e:
        print(f"Error: {e}")
        return
    print(f"User {user.name} added with id {user.user_id}.")

@app.command("search")
def cli_search(
    query: str = typer.Argument(..., help="Keywords; characters are matched in order"),
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum number of results"),
):
    """Fuzzy search over title and author."""
    lib = _load_or_exit()
    results = lib.search_by_keyword(query)[:limit]
    if not results:
        print("No books match the search.")
        return
    print_book_list(results, lib, query=query)

@app.command("borrowed")
def cli_borrowed():
    """List copies that are currently out."""
    lib = _load_or_exit()
    print_borrowed_list(lib.get_borrowed_books())

@app.command("borrow")
@persist_changes
def cli_borrow(user_id: int):
    """Pick books interactively and borrow them for a user."""
    lib = _load_or_exit()
    user = _user_or_exit(lib, user_id)
    try:
        borrowed = select_and_borrow(lib, user)
    except (BorrowError, ValueError) as e:
        print(f"Error: {e}")
        return
    if not borrowed:
        print("No books borrowed.")
        return
    for book in borrowed:
        print(f"Borrowed: {book.title} (due {book.due_date})")

@app.command("return")
@persist_changes
def cli_return(user_id: int):
    """Return all books held by a user and apply late fees."""
    lib = _load_or_exit()
    user = _user_or_exit(lib, user_id)
    if not user.books:
        print(f"User {user.name} has no borrowed books.")
        return
    count = len(user.books)
    fee = user.return_books()
    print(f"Returned {count} book(s). Late fees: {fee:.2f}")

@app.command("pay")
@persist_changes
def cli_pay(user_id: int, amount: float):
    """Pay towards a user's late fees."""
    lib = _load_or_exit()
    user = _user_or_exit(lib, user_id)
    try:
        user.pay_fee(amount)
    except ValueError as e:
        print(f"Error: {e}")
        return
    print(f"Payment accepted. Remaining fees: {user.fees_owed:.2f}")

@app.command("stats")
def cli_stats():
    """Show library statistics."""
    lib = _load_or_exit()
    print_stats_result(lib.get_statistics())


# --- Interactive menu ---
def _menu(title: str, options: List[str]) -> int:
    """Show a numbered menu and return the chosen index."""
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for i, label in enumerate(options, 1):
        table.add_row(f"[reverse]{i}[/]", label)
    console.print(Panel(table, title=title, border_style="cyan", box=box.HEAVY, padding=(1, 2)))
    choices = [str(i) for i in range(1, len(options) + 1)]
    return int(Prompt.ask("Please choose an option", choices=choices, default="1")) - 1

def _show_books_table(title: str, books: List[Book], lib: Library) -> None:
    if not books:
        console.print("[yellow]No books to show.[/]")
        return
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("ID", style="magenta", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Available", style="green")
    for b in books:
        table.add_row(str(b.book_id), escape(b.title), escape(b.author), str(lib.get_number_of_available_copies(b)))
    console.print(table)

@persist_changes
def create_user() -> None:
    lib = LibraryManager.get_instance()
    name = Prompt.ask("Please enter your name").strip()
    email = Prompt.ask("Please enter your email address").strip()
    try:
        user = lib.add_user(name, email)
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return
    console.print(f"[green]User [bold]{escape(user.name)}[/] added with id {user.user_id}.[/]")

def select_user() -> None:
    lib = LibraryManager.get_instance()
    if not lib.users:
        console.print("[yellow]No users registered yet.[/]")
        return
    for u in lib.users:
        console.print(f"{u.user_id}, {escape(u.name)} ({escape(u.email)})")
    user = lib.find_user_by_id(IntPrompt.ask("User id"))
    if user is None:
        console.print("[yellow]User not found.[/]")
        return
    user_account(user)

@persist_changes
def borrow_for(user: User) -> None:
    lib = LibraryManager.get_instance()
    try:
        borrowed = select_and_borrow(lib, user)
    except (BorrowError, ValueError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        return
    if not borrowed:
        console.print("[blue]No books borrowed.[/]")
        return
    for book in borrowed:
        console.print(f"[green]✅ Borrowed [bold]{escape(book.title)}[/], due {book.due_date}[/]")

@persist_changes
def return_for(user: User) -> None:
    if not user.books:
        console.print("[yellow]You have no borrowed books.[/]")
        return
    fee = user.return_books()
    console.print(f"[green]Books returned.[/] Late fees added: {fee:.2f}")

@persist_changes
def pay_for(user: User) -> None:
    console.print(f"You owe {user.fees_owed:.2f}")
    if user.fees_owed <= 0:
        return
    try:
        user.pay_fee(FloatPrompt.ask("Amount to pay"))
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return
    console.print(f"[green]Payment accepted.[/] Remaining fees: {user.fees_owed:.2f}")

def user_account(user: User) -> None:
    console.print(f"Welcome, [bold]{escape(user.name)}[/]")
    while True:
        choice = _menu("What would you like to do today?", [
            "View my borrowed books",
            "Borrow some new books",
            "Return borrowed books",
            "Pay late fees",
            "Logout",
        ])
        if choice == 0:
            books = sorted(user.books, key=lambda b: (b.author, b.title))
            if not books:
                console.print("[yellow]You have no borrowed books.[/]")
            for b in books:
                console.print(f"{b.book_id}: {escape(b.author)}, {escape(b.title)} (due {b.due_date})")
        elif choice == 1:
            borrow_for(user)
        elif choice == 2:
            return_for(user)
        elif choice == 3:
            pay_for(user)
        else:
            return
        console.print()

@persist_changes
def add_book_interactive() -> None:
    lib = LibraryManager.get_instance()
    title = Prompt.ask("Title").strip()
    author = Prompt.ask("Author").strip()
    year = IntPrompt.ask("Publication year")
    copies = IntPrompt.ask("Copies", default=1)
    try:
        added = lib.add_book(title, author, date(year, 1, 1), copies=copies)
    except ValueError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return
    console.print(f"[green]Added {len(added)} copy(ies) of [bold]{escape(title)}[/].[/]")

def admin_account() -> None:
    lib = LibraryManager.get_instance()
    while True:
        choice = _menu("Administration", [
            "List catalogue",
            "List users",
            "Add a book",
            "Show borrowed books",
            "Back",
        ])
        if choice == 0:
            _show_books_table("📚 Catalogue", lib.copies, lib)
        elif choice == 1:
            print_user_list(lib.users, mode="rich")
        elif choice == 2:
            add_book_interactive()
        elif choice == 3:
            print_borrowed_list(lib.get_borrowed_books(), mode="rich")
        else:
            return
        console.print()

def run_menu() -> None:
    """Simple interactive menu for the library CLI."""
    try:
        LibraryManager.get_instance()
    except StorageError as e:
        console.print(f"[bold red]{e}[/]")
        return
    while True:
        choice = _menu(settings.app_name, [
            "Create new user account",
            "Login as user account",
            "Login as admin user",
            "Exit program",
        ])
        if choice == 0:
            create_user()
        elif choice == 1:
            select_user()
        elif choice == 2:
            admin_account()
        else:
            console.print("[green]Goodbye![/]")
            break
        console.print()


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()


if __name__ == "__main__":
    main()
