"""Keyboard events for the interactive selector.

``read_event`` blocks for one key press on the controlling terminal and
returns it decoded into a ``KeyEvent``. Decoding is kept separate in
``decode_key`` so escape-sequence handling can be exercised without a tty.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import Enum


class Key(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    DELETE = "delete"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    ENTER = "enter"
    ESCAPE = "escape"


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    char: str = ""

    @classmethod
    def of(cls, ch: str) -> "KeyEvent":
        return cls(Key.CHAR, ch)


_SEQUENCES = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
    "\x1b[H": Key.HOME,
    "\x1b[F": Key.END,
    "\x1bOH": Key.HOME,
    "\x1bOF": Key.END,
    "\x1b[1~": Key.HOME,
    "\x1b[7~": Key.HOME,
    "\x1b[4~": Key.END,
    "\x1b[8~": Key.END,
    "\x1b[3~": Key.DELETE,
}

# Second byte after a 0x00/0xE0 prefix from msvcrt.getwch()
_WINDOWS_SCANCODES = {
    "H": Key.UP,
    "P": Key.DOWN,
    "K": Key.LEFT,
    "M": Key.RIGHT,
    "G": Key.HOME,
    "O": Key.END,
    "S": Key.DELETE,
}


def decode_key(seq: str) -> KeyEvent:
    """Map a raw key sequence to a ``KeyEvent``.

    Ctrl-C raises ``KeyboardInterrupt`` because raw mode swallows SIGINT.
    Unknown escape sequences collapse to ESCAPE; any other single character
    becomes CHAR and is left to the query editor to accept or ignore.
    """
    if seq == "\x03":
        raise KeyboardInterrupt
    if seq in ("\r", "\n"):
        return KeyEvent(Key.ENTER)
    if seq in ("\x7f", "\x08"):
        return KeyEvent(Key.BACKSPACE)
    if seq.startswith("\x1b"):
        return KeyEvent(_SEQUENCES.get(seq, Key.ESCAPE))
    return KeyEvent.of(seq[:1])


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_posix(fd: int) -> str:
    import select
    import termios
    import tty

    # Reads go straight to the fd: a buffered sys.stdin would swallow the
    # rest of an escape sequence where select() can no longer see it.
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd, termios.TCSANOW)
        first = os.read(fd, 1)
        if not first:
            raise EOFError("terminal closed")
        if first != b"\x1b":
            data = first
            for _ in range(_utf8_length(first[0]) - 1):
                data += os.read(fd, 1)
            return data.decode("utf-8", errors="replace")
        seq = first
        while True:
            ready, _, _ = select.select([fd], [], [], 0.02)
            if not ready:
                break
            nxt = os.read(fd, 1)
            if not nxt:
                break
            seq += nxt
            if (len(seq) > 2 and (nxt.isalpha() or nxt == b"~")) or len(seq) >= 8:
                break
        return seq.decode("ascii", errors="replace")
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def _read_windows() -> KeyEvent:
    import msvcrt

    ch = msvcrt.getwch()
    if ch in ("\x00", "\xe0"):
        code = msvcrt.getwch()
        return KeyEvent(_WINDOWS_SCANCODES.get(code, Key.ESCAPE))
    return decode_key(ch)


def read_event() -> KeyEvent:
    """Block until the next key press and return it as a ``KeyEvent``."""
    if os.name == "nt":
        return _read_windows()
    return decode_key(_read_posix(sys.stdin.fileno()))
