from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .book import Book
from .search import fuzzy
from .user import User

logger = logging.getLogger(__name__)


class Library:
    """Manages the book copies and user accounts of the library."""

    def __init__(self) -> None:
        self.books: List[Book] = []
        self.users: List[User] = []
        self.next_book_id = 1
        self.next_user_id = 1
        self.next_unique_book_id = 1

    # ------------------------- Core operations ------------------------- #
    def add_book(self, title: str, author: str, publication_date: date, copies: int = 1) -> List[Book]:
        """Add ``copies`` copies of a title. Copies share a book id."""
        if copies < 1:
            raise ValueError("At least one copy must be added.")
        if not title.strip() or not author.strip():
            raise ValueError("Title and author cannot be empty.")

        book_id = self.next_book_id
        self.next_book_id += 1
        added = []
        for _ in range(copies):
            book = Book(self.next_unique_book_id, book_id, title, author, publication_date)
            self.next_unique_book_id += 1
            self.books.append(book)
            added.append(book)
        logger.info("added %d copy(ies) of %r as book %d", copies, title, book_id)
        return added

    def add_user(self, name: str, email: str) -> User:
        if not name.strip() or not email.strip():
            raise ValueError("Name and email cannot be empty.")
        user = User(self.next_user_id, name, email)
        self.next_user_id += 1
        self.users.append(user)
        return user

    @property
    def copies(self) -> List[Book]:
        """One representative copy per title, in catalogue order."""
        seen = set()
        titles = []
        for book in self.books:
            if book.book_id not in seen:
                seen.add(book.book_id)
                titles.append(book)
        return titles

    # ------------------------- Search ------------------------- #
    def search_by_title(self, title: str) -> List[Book]:
        needle = title.lower()
        return [b for b in self.copies if needle in b.title.lower()]

    def search_by_author(self, author: str) -> List[Book]:
        needle = author.lower()
        return [b for b in self.copies if needle in b.author.lower()]

    def search_by_keyword(self, keywords: str, candidates: Optional[Sequence[Book]] = None) -> List[Book]:
        """Fuzzy search over "title, author", best matches first."""
        pool = self.copies if candidates is None else candidates
        return fuzzy.rank(keywords, pool, key=lambda b: b.display)

    # ------------------------- Lookups ------------------------- #
    def find_user_by_id(self, user_id: int) -> Optional[User]:
        return next((u for u in self.users if u.user_id == user_id), None)

    def find_book_by_id(self, book_id: int) -> Optional[Book]:
        return next((b for b in self.books if b.book_id == book_id), None)

    def find_book_by_unique_id(self, unique_id: int) -> Optional[Book]:
        return next((b for b in self.books if b.unique_id == unique_id), None)

    def get_available_copies(self, book: Union[Book, int]) -> List[Book]:
        book_id = book.book_id if isinstance(book, Book) else book
        return [b for b in self.books if b.book_id == book_id and b.is_available]

    def get_number_of_available_copies(self, book: Union[Book, int]) -> int:
        return len(self.get_available_copies(book))

    def get_borrowed_books(self) -> List[Book]:
        return [b for b in self.books if not b.is_available]

    def get_borrowing_users(self) -> List[User]:
        return [u for u in self.users if u.books]

    # ------------------------- Borrowing ------------------------- #
    def borrow(self, user: User, titles: Iterable[Book], today: Optional[date] = None) -> List[Book]:
        """Lend ``user`` one available copy of each title."""
        chosen = []
        for title in titles:
            available = self.get_available_copies(title)
            if not available:
                raise ValueError(f"Cannot borrow book {title.title}, as it is not available.")
            chosen.append(available[0])
        user.borrow_books(chosen, today=today)
        return chosen

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_titles": len(self.copies),
            "total_copies": len(self.books),
            "borrowed_copies": len(self.get_borrowed_books()),
            "total_users": len(self.users),
            "borrowing_users": len(self.get_borrowing_users()),
        }

    # ------------------------- Persistence ------------------------- #
    def to_dict(self) -> dict:
        return {
            "books": [b.to_dict() for b in self.books],
            "users": [u.to_dict() for u in self.users],
            "next_book_id": self.next_book_id,
            "next_user_id": self.next_user_id,
            "next_unique_book_id": self.next_unique_book_id,
        }

    @staticmethod
    def from_dict(data: dict) -> "Library":
        lib = Library()
        lib.books = [Book.from_dict(b) for b in data.get("books", [])]
        lib.users = []
        for raw in data.get("users", []):
            user = User.from_dict(raw)
            for unique_id in raw.get("unique_book_ids", []):
                book = lib.find_book_by_unique_id(unique_id)
                if book is not None:
                    user.books.append(book)
            lib.users.append(user)
        lib.next_book_id = data.get("next_book_id", max((b.book_id for b in lib.books), default=0) + 1)
        lib.next_user_id = data.get("next_user_id", max((u.user_id for u in lib.users), default=0) + 1)
        lib.next_unique_book_id = data.get(
            "next_unique_book_id", max((b.unique_id for b in lib.books), default=0) + 1
        )
        return lib


class AvailableCatalogue:
    """Catalogue view for the borrow selector: titles with a copy on the shelf."""

    def __init__(self, library: Library) -> None:
        self.library = library

    def all_items(self) -> List[Book]:
        return [b for b in self.library.copies if self.library.get_number_of_available_copies(b) > 0]

    def search(self, query: str, candidates: Sequence[Book]) -> List[Book]:
        return self.library.search_by_keyword(query, candidates)

    def display(self, item: Book) -> str:
        return item.display
