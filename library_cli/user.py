from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from .book import Book
from .config import settings

logger = logging.getLogger(__name__)


class BorrowError(Exception):
    """The account is not allowed to borrow right now."""


class User:
    """A library member and the copies they currently hold."""

    def __init__(self, user_id: int, name: str, email: str, fees_owed: float = 0.0) -> None:
        self.user_id = user_id
        self.name = name.strip()
        self.email = email.strip()
        self.fees_owed = fees_owed
        self.books: List[Book] = []

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} ({self.email})"

    # Borrowing rules follow the current settings
    @property
    def max_number_of_books(self) -> int:
        return settings.borrow_limit

    @property
    def borrow_days(self) -> int:
        return settings.borrow_days

    @property
    def late_fee_per_day(self) -> float:
        return settings.late_fee_per_day

    @property
    def unique_book_ids(self) -> List[int]:
        return [b.unique_id for b in self.books]

    def check_can_borrow(self) -> None:
        """Raise BorrowError when fees are owed or books are still out."""
        if self.fees_owed > 0:
            raise BorrowError(f"User {self.name} must pay their late fees before borrowing again.")
        if self.books:
            raise BorrowError(f"User {self.name} must return their borrowed books before borrowing again.")

    def borrow_books(self, books: Iterable[Book], today: Optional[date] = None) -> None:
        """Borrow up to ``max_number_of_books`` copies at once.

        Raises BorrowError when fees are owed or books are still out, and
        ValueError for too many books or a copy that is not on the shelf.
        Nothing is borrowed unless every copy can be.
        """
        books = list(books)
        self.check_can_borrow()
        if len(books) > self.max_number_of_books:
            raise ValueError(f"You can only borrow {self.max_number_of_books} book(s) at a time.")
        for book in books:
            if not book.is_available:
                raise ValueError(f"Cannot borrow book {book.title}, as it is not available.")

        due_date = (today or date.today()) + timedelta(days=self.borrow_days)
        for book in books:
            book.assign_user(self, due_date)
            self.books.append(book)
        logger.info("user %s borrowed %d book(s) due %s", self.user_id, len(books), due_date)

    def return_books(self, today: Optional[date] = None) -> float:
        """Return every borrowed copy and charge late fees. Returns the fee added."""
        today = today or date.today()
        added = 0.0
        for book in list(self.books):
            if book.user_id == self.user_id and book.due_date is not None:
                days_late = max((today - book.due_date).days, 0)
                added += self.late_fee_per_day * days_late
            book.remove_user()
            self.books.remove(book)
        self.fees_owed += added
        if added:
            logger.info("user %s charged %.2f in late fees", self.user_id, added)
        return added

    def pay_fee(self, amount: float) -> None:
        if amount <= 0:
            raise ValueError("Payment amount must be positive.")
        self.fees_owed = max(self.fees_owed - amount, 0.0)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "fees_owed": self.fees_owed,
            "unique_book_ids": self.unique_book_ids,
        }

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(
            user_id=data["user_id"],
            name=data["name"],
            email=data["email"],
            fees_owed=data.get("fees_owed", 0.0),
        )
