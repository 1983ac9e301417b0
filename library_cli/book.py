from __future__ import annotations

from datetime import date


class Book:
    """A single physical copy of a title in the library.

    Copies of the same title share ``book_id``; ``unique_id`` identifies the copy.
    """

    def __init__(self, unique_id: int, book_id: int, title: str, author: str,
                 publication_date: date, user_id: int = -1, due_date: date | None = None) -> None:
        self.unique_id = unique_id
        self.book_id = book_id
        self.title = title.strip()
        self.author = author.strip()
        self.publication_date = publication_date
        self.user_id = user_id
        self.due_date = due_date

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.publication_date.year})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(unique_id={self.unique_id}, book_id={self.book_id}, title={self.title!r})"

    @property
    def is_available(self) -> bool:
        return self.user_id == -1

    @property
    def display(self) -> str:
        """The string the keyword search matches against."""
        return f"{self.title}, {self.author}"

    def assign_user(self, user, due_date: date) -> None:
        """Lend this copy to ``user`` (a User or a user id) until ``due_date``."""
        self.user_id = user if isinstance(user, int) else user.user_id
        self.due_date = due_date

    def remove_user(self) -> None:
        self.user_id = -1
        self.due_date = None

    def to_dict(self) -> dict:
        return {
            "unique_id": self.unique_id,
            "book_id": self.book_id,
            "title": self.title,
            "author": self.author,
            "publication_date": self.publication_date.isoformat(),
            "user_id": self.user_id,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        due = data.get("due_date")
        return Book(
            unique_id=data["unique_id"],
            book_id=data["book_id"],
            title=data["title"],
            author=data["author"],
            publication_date=date.fromisoformat(data["publication_date"]),
            user_id=data.get("user_id", -1),
            due_date=date.fromisoformat(due) if due else None,
        )
