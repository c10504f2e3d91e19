"""MText inline formatting tokenizer."""

from __future__ import annotations

from mtextparser.context import (
    FontFace,
    FormattingContext,
    LineAlignment,
    ParagraphAlignment,
    ParagraphProperties,
    ScaleFactor,
    Stroke,
    TabStop,
    TabStopKind,
)
from mtextparser.errors import (
    ColorRangeError,
    ConfigError,
    MTextError,
    UnknownCommandError,
    ValueOverflowError,
)
from mtextparser.lexer import Lexer, tokenize
from mtextparser.scanner import Cursor
from mtextparser.strings import (
    caret_decode,
    escape_dxf_line_endings,
    extract_font_names,
    has_inline_formatting_codes,
    int2rgb,
    plain_text,
    rgb2int,
)
from mtextparser.tokens import PropertyChange, StackFraction, Token, TokenType

__version__ = "0.1.0"

__all__ = [
    "ColorRangeError",
    "ConfigError",
    "Cursor",
    "FontFace",
    "FormattingContext",
    "Lexer",
    "LineAlignment",
    "MTextError",
    "ParagraphAlignment",
    "ParagraphProperties",
    "PropertyChange",
    "ScaleFactor",
    "StackFraction",
    "Stroke",
    "TabStop",
    "TabStopKind",
    "Token",
    "TokenType",
    "UnknownCommandError",
    "ValueOverflowError",
    "caret_decode",
    "escape_dxf_line_endings",
    "extract_font_names",
    "has_inline_formatting_codes",
    "int2rgb",
    "plain_text",
    "rgb2int",
    "tokenize",
]
