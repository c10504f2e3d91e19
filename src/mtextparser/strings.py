"""Stateless helpers for MText strings: colors, caret notation, line endings."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mtextparser.context import FormattingContext

RGB = tuple[int, int, int]

# Rendered for caret sequences and multi-byte codes that cannot be decoded
REPLACEMENT_CHAR = "▯"

_CARET_RE = re.compile(r"\^(.)")
_LINE_ENDING_RE = re.compile(r"\r\n|\r|\n")


def rgb2int(rgb: RGB) -> int:
    """Pack an RGB triple into an int, component 0 in the low byte."""
    r, g, b = rgb
    return (b << 16) | (g << 8) | r


def int2rgb(value: int) -> RGB:
    """Unpack an int into an RGB triple, component 0 from the low byte."""
    r = value & 0xFF
    g = (value >> 8) & 0xFF
    b = (value >> 16) & 0xFF
    return (r, g, b)


def decode_caret_char(ch: str) -> str:
    """Return the replacement for ``^`` followed by ``ch``.

    ``^ `` is a literal caret, ``^I`` a tab, ``^J`` a line feed and ``^M``
    (carriage return) is dropped. Everything else renders as an empty box.
    """
    if ch == " ":
        return "^"
    if ch == "I":
        return "\t"
    if ch == "J":
        return "\n"
    if ch == "M":
        return ""
    return REPLACEMENT_CHAR


def caret_decode(text: str) -> str:
    """Decode DXF caret notation (https://en.wikipedia.org/wiki/Caret_notation).

    A single pass: the caret produced by ``^ `` is never decoded again.
    A caret at the end of the text or before a line feed stays literal.
    """
    return _CARET_RE.sub(lambda m: decode_caret_char(m.group(1)), text)


def escape_dxf_line_endings(text: str) -> str:
    """Replace CR, LF and CR+LF line endings by the ``\\P`` paragraph command."""
    return _LINE_ENDING_RE.sub(r"\\P", text)


def has_inline_formatting_codes(text: str) -> bool:
    """Return True if ``text`` contains any inline formatting command.

    ``\\P`` and ``\\~`` are plain text structure, not formatting.
    """
    return "\\" in text.replace("\\P", "").replace("\\~", "")


def extract_font_names(text: str) -> set[str]:
    """Return the distinct font family names set by ``\\f`` and ``\\F`` commands."""
    from mtextparser.lexer import Lexer
    from mtextparser.tokens import PropertyChange, TokenType

    names: set[str] = set()
    for token in Lexer(text, yield_property_commands=True).parse():
        if token.type is not TokenType.PROPERTIES_CHANGED:
            continue
        change = token.data
        if isinstance(change, PropertyChange) and change.command in "fF":
            family = token.ctx.font_face.family
            if family:
                names.add(family)
    return names


def plain_text(text: str, ctx: FormattingContext | None = None) -> str:
    """Return the text content of an MText string with all formatting removed.

    Paragraph and column breaks become line feeds, fractions are written as
    ``numerator/denominator``.
    """
    from mtextparser.lexer import Lexer
    from mtextparser.tokens import StackFraction, TokenType

    parts: list[str] = []
    for token in Lexer(text, ctx).parse():
        tt = token.type
        if tt is TokenType.WORD:
            parts.append(str(token.data))
        elif tt in (TokenType.SPACE, TokenType.NBSP):
            parts.append(" ")
        elif tt is TokenType.TABULATOR:
            parts.append("\t")
        elif tt in (TokenType.NEW_PARAGRAPH, TokenType.NEW_COLUMN):
            parts.append("\n")
        elif tt is TokenType.STACK and isinstance(token.data, StackFraction):
            numerator, denominator, divider = token.data
            parts.append(f"{numerator}/{denominator}" if divider else numerator)
    return "".join(parts)
