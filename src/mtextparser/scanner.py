"""Character cursor over an immutable text."""

from __future__ import annotations

import re


class Cursor:
    """Scanning primitive: position tracking, lookahead and bounded advance.

    Knows nothing about markup. All operations are total: reading past the
    end returns ``""`` and advancing is clamped to the text.
    """

    __slots__ = ("_text", "_len", "_index")

    def __init__(self, text: str) -> None:
        self._text = text
        self._len = len(text)
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_empty(self) -> bool:
        return self._index >= self._len

    @property
    def has_data(self) -> bool:
        return self._index < self._len

    @property
    def tail(self) -> str:
        """The unconsumed remainder of the text."""
        return self._text[self._index :]

    @property
    def text(self) -> str:
        return self._text

    def peek(self, offset: int = 0) -> str:
        idx = self._index + offset
        if 0 <= idx < self._len:
            return self._text[idx]
        return ""

    def get(self) -> str:
        """Return the next character and advance, or ``""`` at the end."""
        if self._index >= self._len:
            return ""
        ch = self._text[self._index]
        self._index += 1
        return ch

    def consume(self, count: int = 1) -> None:
        """Advance by ``count``; a negative count rewinds. Clamped to the text."""
        self._index = max(0, min(self._index + count, self._len))

    def consume_spaces(self) -> int:
        """Skip a run of spaces and return how many were skipped."""
        count = 0
        while self.peek() == " ":
            self._index += 1
            count += 1
        return count

    def find(self, char: str, escape: bool = False) -> int:
        """Return the absolute index of the next ``char``, or -1.

        With ``escape`` set, a backslash and the character following it are
        skipped as a pair, so ``\\;`` never matches ``;``.
        """
        index = self._index
        while index < self._len:
            ch = self._text[index]
            if escape and ch == "\\":
                index += 2
                continue
            if ch == char:
                return index
            index += 1
        return -1

    def match(self, pattern: re.Pattern[str]) -> str:
        """Match ``pattern`` at the current offset, consume and return the match.

        Returns ``""`` (consuming nothing) when the pattern does not match.
        """
        m = pattern.match(self._text, self._index)
        if m is None:
            return ""
        self._index = m.end()
        return m.group(0)
