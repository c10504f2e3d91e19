"""Token types, payload structures, and character classification helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from mtextparser.context import FormattingContext


class TokenType(Enum):
    NONE = 0
    WORD = 1  # data: str
    STACK = 2  # data: StackFraction
    SPACE = 3
    NBSP = 4  # \~
    TABULATOR = 5  # tab, ^I
    NEW_PARAGRAPH = 6  # \P, line feed, ^J
    NEW_COLUMN = 7  # \N
    WRAP_AT_DIMLINE = 8  # \X
    PROPERTIES_CHANGED = 9  # data: PropertyChange


class StackFraction(NamedTuple):
    """Payload of a STACK token: ``\\S<numerator><divider><denominator>;``.

    ``divider`` is ``"/"`` (fraction with horizontal rule), ``"#"`` (diagonal
    rule), ``"^"`` (stacked without rule) or ``""`` when no divider was found.
    """

    numerator: str
    denominator: str
    divider: str


@dataclass(frozen=True, slots=True)
class PropertyChange:
    """Payload of a PROPERTIES_CHANGED token.

    ``changes`` maps FormattingContext field names to their new values and
    holds only the fields the command actually changed.
    """

    command: str
    changes: Mapping[str, Any] = field(default_factory=dict)
    raw: str = ""


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with the formatting context valid at its position."""

    type: TokenType
    ctx: FormattingContext
    data: str | StackFraction | PropertyChange | None = None


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


def position_at(source: str, offset: int) -> Position:
    """Return the line/column Position of ``offset`` within ``source``."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start + 1, offset)


def is_control_char(ch: str) -> bool:
    """Return True for a single character below code point 0x20."""
    return ch != "" and ord(ch) < 0x20
