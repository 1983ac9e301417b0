from __future__ import annotations


class QueryEditor:
    """Single-line query buffer with a cursor.

    Mutating operations return ``True`` when the text changed, which is the
    signal to re-run the search. Cursor moves always return ``False``.
    """

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.cursor = len(text)

    def insert(self, ch: str) -> bool:
        if len(ch) != 1 or not ch.isprintable():
            return False
        self.text = self.text[:self.cursor] + ch + self.text[self.cursor:]
        self.cursor += 1
        return True

    def delete_before(self) -> bool:
        if self.cursor == 0:
            return False
        self.text = self.text[:self.cursor - 1] + self.text[self.cursor:]
        self.cursor -= 1
        return True

    def delete_after(self) -> bool:
        if self.cursor >= len(self.text):
            return False
        self.text = self.text[:self.cursor] + self.text[self.cursor + 1:]
        return True

    def move_left(self) -> bool:
        self.cursor = max(self.cursor - 1, 0)
        return False

    def move_right(self) -> bool:
        self.cursor = min(self.cursor + 1, len(self.text))
        return False

    def move_home(self) -> bool:
        self.cursor = 0
        return False

    def move_end(self) -> bool:
        self.cursor = len(self.text)
        return False

    def clear(self) -> bool:
        changed = bool(self.text)
        self.text = ""
        self.cursor = 0
        return changed

    def is_empty(self) -> bool:
        return not self.text
