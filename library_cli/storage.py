import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from .library import Library

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class StorageError(Exception):
    """The library data file could not be read."""


def load_library(path: PathLike) -> Library:
    """Load the library from a JSON file. A missing file gives an empty library."""
    path = Path(path)
    if not path.exists():
        logger.info("no data file at %s, starting empty", path)
        return Library()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return Library.from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Could not read library data from {path}: {e}") from e


def save_library(library: Library, path: PathLike) -> None:
    """Write the library to ``path``, replacing it atomically."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".library-", suffix=".json", dir=str(path.parent or "."))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(library.to_dict(), f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except Exception:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    logger.debug("library saved to %s", path)
