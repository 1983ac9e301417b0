from datetime import date

import pytest

from conftest import CATALOGUE
from library_cli.config import settings
from library_cli.library import AvailableCatalogue, Library
from library_cli.user import BorrowError, User

TODAY = date(2024, 3, 1)

def test_add_book_and_find(lib):
    assert len(lib.books) == len(CATALOGUE)
    book = lib.find_book_by_id(1)
    assert book.title == "The Great Gatsby"
    assert book.is_available
    assert book.display == "The Great Gatsby, F. Scott Fitzgerald"

@pytest.mark.parametrize("copies", [1, 3])
def test_add_book_multiple_copies(copies):
    lib = Library()
    added = lib.add_book("Dune", "Frank Herbert", date(1965, 1, 1), copies=copies)
    assert len(added) == copies
    assert {b.book_id for b in added} == {1}
    assert len({b.unique_id for b in added}) == copies
    assert len(lib.copies) == 1
    assert lib.get_number_of_available_copies(1) == copies

@pytest.mark.parametrize("copies", [0, -3])
def test_add_book_rejects_non_positive_copies(copies):
    lib = Library()
    with pytest.raises(ValueError):
        lib.add_book("Dune", "Frank Herbert", date(1965, 1, 1), copies=copies)
    assert lib.books == []

def test_add_user_assigns_ids():
    lib = Library()
    first = lib.add_user("Emily Johnson", "emily.johnson@example.com")
    second = lib.add_user("Michael Lee", "michael.lee@example.com")
    assert (first.user_id, second.user_id) == (1, 2)
    assert lib.find_user_by_id(2) is second
    assert lib.find_user_by_id(99) is None

def test_search_by_title_and_author(lib):
    assert [b.title for b in lib.search_by_title("the")] == [
        "The Great Gatsby", "The Catcher in the Rye", "The Lord of the Rings", "The Hobbit",
    ]
    assert [b.title for b in lib.search_by_author("tolkien")] == ["The Lord of the Rings", "The Hobbit"]

def test_search_by_keyword_is_fuzzy(lib):
    assert [b.title for b in lib.search_by_keyword("grtgts")] == ["The Great Gatsby"]
    assert [b.title for b in lib.search_by_keyword("jrr tolkien")] == ["The Lord of the Rings", "The Hobbit"]
    assert lib.search_by_keyword("zzz") == []

def test_borrow_assigns_due_date(lib):
    user = lib.add_user("Sophia Patel", "sophia.patel@example.com")
    borrowed = lib.borrow(user, lib.search_by_author("tolkien"), today=TODAY)
    assert len(borrowed) == 2
    for book in borrowed:
        assert not book.is_available
        assert book.user_id == user.user_id
        assert (book.due_date - TODAY).days == settings.borrow_days
    assert lib.get_borrowed_books() == borrowed
    assert lib.get_borrowing_users() == [user]

def test_borrow_picks_an_available_copy():
    lib = Library()
    lib.add_book("Dune", "Frank Herbert", date(1965, 1, 1), copies=2)
    first = lib.add_user("A", "a@example.com")
    second = lib.add_user("B", "b@example.com")
    title = lib.copies[0]
    lib.borrow(first, [title], today=TODAY)
    lib.borrow(second, [title], today=TODAY)
    assert {b.user_id for b in lib.books} == {1, 2}
    third = lib.add_user("C", "c@example.com")
    with pytest.raises(ValueError, match="not available"):
        lib.borrow(third, [title], today=TODAY)
    assert AvailableCatalogue(lib).all_items() == []

def test_borrow_limit(lib):
    user = lib.add_user("David Hernandez", "david@example.com")
    with pytest.raises(ValueError, match="only borrow"):
        lib.borrow(user, lib.copies[:settings.borrow_limit + 1], today=TODAY)
    assert user.books == []
    assert lib.get_borrowed_books() == []

def test_must_return_before_borrowing_again(lib):
    user = lib.add_user("Olivia Nguyen", "olivia@example.com")
    lib.borrow(user, lib.copies[:1], today=TODAY)
    with pytest.raises(BorrowError, match="return"):
        lib.borrow(user, lib.copies[1:2], today=TODAY)

def test_borrowing_rules_follow_settings(lib, monkeypatch):
    monkeypatch.setattr(settings, "borrow_limit", 1)
    monkeypatch.setattr(settings, "borrow_days", 14)
    user = lib.add_user("Olivia Nguyen", "olivia@example.com")
    assert user.max_number_of_books == 1
    with pytest.raises(ValueError, match="only borrow 1"):
        lib.borrow(user, lib.copies[:2], today=TODAY)
    lib.borrow(user, lib.copies[:1], today=TODAY)
    assert (user.books[0].due_date - TODAY).days == 14

def test_check_can_borrow(lib):
    user = lib.add_user("Michael Lee", "michael.lee@example.com")
    user.check_can_borrow()
    user.fees_owed = 2.5
    with pytest.raises(BorrowError, match="fees"):
        user.check_can_borrow()

def test_late_return_charges_fees_and_blocks_borrowing(lib):
    user = lib.add_user("Jonn Smith", "john.smith@example.com")
    lib.borrow(user, lib.copies[:2], today=TODAY)
    due = user.books[0].due_date
    fee = user.return_books(today=date.fromordinal(due.toordinal() + 3))
    assert fee == pytest.approx(2 * 3 * settings.late_fee_per_day)
    assert user.fees_owed == pytest.approx(fee)
    assert user.books == []
    assert all(b.is_available for b in lib.books)
    with pytest.raises(BorrowError, match="fees"):
        lib.borrow(user, lib.copies[:1], today=TODAY)
    user.pay_fee(fee)
    assert user.fees_owed == 0
    lib.borrow(user, lib.copies[:1], today=TODAY)

def test_on_time_return_is_free(lib):
    user = lib.add_user("Michael Lee", "michael.lee@example.com")
    lib.borrow(user, lib.copies[:1], today=TODAY)
    assert user.return_books(today=TODAY) == 0
    assert user.fees_owed == 0

def test_pay_fee_rejects_non_positive_amounts():
    user = User(1, "Emily Johnson", "emily.johnson@example.com", fees_owed=10.78)
    with pytest.raises(ValueError):
        user.pay_fee(0)
    user.pay_fee(20)
    assert user.fees_owed == 0

def test_available_catalogue_hides_lent_titles(lib):
    user = lib.add_user("Sophia Patel", "sophia.patel@example.com")
    hobbit = lib.search_by_title("hobbit")[0]
    lib.borrow(user, [hobbit], today=TODAY)
    catalogue = AvailableCatalogue(lib)
    assert hobbit not in catalogue.all_items()
    assert len(catalogue.all_items()) == len(CATALOGUE) - 1
    assert catalogue.search("tolkien", catalogue.all_items())[0].title == "The Lord of the Rings"
    assert catalogue.display(hobbit) == "The Hobbit, J.R.R. Tolkien"

def test_statistics(lib):
    user = lib.add_user("Sophia Patel", "sophia.patel@example.com")
    lib.borrow(user, lib.copies[:2], today=TODAY)
    assert lib.get_statistics() == {
        "total_titles": len(CATALOGUE),
        "total_copies": len(CATALOGUE),
        "borrowed_copies": 2,
        "total_users": 1,
        "borrowing_users": 1,
    }
