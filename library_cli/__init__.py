"""Library CLI - Core Application Package

This package contains the application modules including:
- CLI interface and interactive menu (main.py)
- Library catalogue and borrowing rules (library.py, user.py)
- Data models (book.py)
- JSON persistence (storage.py)
- Interactive fuzzy search and selection (search/)
"""
