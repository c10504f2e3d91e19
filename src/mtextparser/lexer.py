"""MText lexer: converts MText content into a lazy stream of formatted tokens."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator

from mtextparser.context import (
    FontFace,
    FormattingContext,
    LineAlignment,
    ParagraphAlignment,
    ParagraphProperties,
    ScaleFactor,
    TabStop,
    TabStopKind,
)
from mtextparser.errors import MTextError, UnknownCommandError, ValueOverflowError
from mtextparser.log import get_logger
from mtextparser.scanner import Cursor
from mtextparser.strings import REPLACEMENT_CHAR, decode_caret_char, int2rgb
from mtextparser.tokens import (
    PropertyChange,
    StackFraction,
    Token,
    TokenType,
    is_control_char,
)

logger = get_logger(__name__)

SPECIAL_CHAR_ENCODING = {
    "c": "⌀",
    "d": "°",
    "p": "±",
}

CHAR_TO_ALIGN = {
    "l": ParagraphAlignment.LEFT,
    "r": ParagraphAlignment.RIGHT,
    "c": ParagraphAlignment.CENTER,
    "j": ParagraphAlignment.JUSTIFIED,
    "d": ParagraphAlignment.DISTRIBUTED,
}

# Tried in order for \M+XXXX double-byte characters
LEGACY_CODEPAGES = ("gbk", "big5")

STACK_DIVIDERS = "^/#"

_FLOAT = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
SIGNED_FLOAT_RE = re.compile(_FLOAT, re.ASCII)
RELATIVE_FLOAT_RE = re.compile(_FLOAT + "x?", re.ASCII)
INT_RE = re.compile(r"[0-9]+")
MULTIBYTE_RE = re.compile(r"\+([0-9A-Fa-f]{4})")

_SCALE_COMMANDS = {
    "H": "cap_height",
    "W": "width_factor",
    "T": "char_tracking_factor",
}


class Lexer:
    """Tokenize MText content into a stream of Token objects.

    ``ctx`` seeds the initial formatting state, e.g. when continuing a
    paragraph started under earlier formatting. With
    ``yield_property_commands`` every recognised property command is
    reported as a PROPERTIES_CHANGED token; otherwise its effect only shows
    in the context of the following tokens.
    """

    def __init__(
        self,
        content: str,
        ctx: FormattingContext | None = None,
        yield_property_commands: bool = False,
    ) -> None:
        self._scanner = Cursor(content)
        self._ctx = ctx.copy() if ctx is not None else FormattingContext()
        self._ctx_stack: list[FormattingContext] = []
        self._continue_stroke = self._ctx.continue_stroke
        self._yield_property_commands = yield_property_commands
        self._word: list[str] = []

    @property
    def ctx(self) -> FormattingContext:
        """The formatting context currently in effect."""
        return self._ctx

    def parse(self) -> Iterator[Token]:
        """Yield tokens one at a time until the content is exhausted."""
        scanner = self._scanner
        while scanner.has_data:
            ch = scanner.peek()

            if is_control_char(ch):
                scanner.consume(1)
                yield from self._flush()
                if ch == "\t":
                    yield self._token(TokenType.TABULATOR)
                elif ch == "\n":
                    yield self._token(TokenType.NEW_PARAGRAPH)
                else:
                    yield self._token(TokenType.SPACE)
                continue

            if ch == "\\":
                escaped = scanner.peek(1)
                if escaped and escaped in "\\{}":
                    scanner.consume(2)
                    self._word.append(escaped)
                    continue
                yield from self._flush()
                yield from self._lex_command()
                continue

            if ch == "%" and scanner.peek(1) == "%":
                code = scanner.peek(2).lower()
                scanner.consume(3)
                special = SPECIAL_CHAR_ENCODING.get(code)
                if special:
                    self._word.append(special)
                continue

            if ch == " ":
                scanner.consume(1)
                yield from self._flush()
                yield self._token(TokenType.SPACE)
                continue

            if ch == "{":
                scanner.consume(1)
                yield from self._flush()
                self._ctx_stack.append(self._ctx)
                continue

            if ch == "}":
                scanner.consume(1)
                yield from self._flush()
                if self._ctx_stack:
                    self._ctx = self._ctx_stack.pop()
                else:
                    logger.debug("unbalanced '}' at offset %d ignored", scanner.index - 1)
                continue

            if ch == "^":
                yield from self._lex_caret()
                continue

            scanner.consume(1)
            self._word.append(ch)

        yield from self._flush()

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _token(
        self, tt: TokenType, data: str | StackFraction | PropertyChange | None = None
    ) -> Token:
        return Token(tt, self._ctx, data)

    def _flush(self) -> Iterator[Token]:
        if self._word:
            word = "".join(self._word)
            self._word.clear()
            yield self._token(TokenType.WORD, word)

    # ------------------------------------------------------------------
    # Caret notation
    # ------------------------------------------------------------------

    def _lex_caret(self) -> Iterator[Token]:
        scanner = self._scanner
        code = scanner.peek(1)
        if code in ("", "\n"):
            scanner.consume(1)
            self._word.append("^")
            return

        scanner.consume(2)
        decoded = decode_caret_char(code)
        if decoded == "\t":
            yield from self._flush()
            yield self._token(TokenType.TABULATOR)
        elif decoded == "\n":
            yield from self._flush()
            yield self._token(TokenType.NEW_PARAGRAPH)
        elif decoded:
            self._word.append(decoded)

    # ------------------------------------------------------------------
    # Backslash commands
    # ------------------------------------------------------------------

    def _lex_command(self) -> Iterator[Token]:
        scanner = self._scanner
        start = scanner.index
        scanner.consume(1)  # backslash
        cmd = scanner.get()

        if not cmd or cmd == " " or is_control_char(cmd):
            # not a command: keep the backslash, rescan what follows it
            scanner.consume(-len(cmd))
            self._word.append("\\")
            return

        if cmd == "~":
            yield self._token(TokenType.NBSP)
        elif cmd == "P":
            yield self._token(TokenType.NEW_PARAGRAPH)
        elif cmd == "N":
            yield self._token(TokenType.NEW_COLUMN)
        elif cmd == "X":
            yield self._token(TokenType.WRAP_AT_DIMLINE)
        elif cmd == "S":
            yield self._token(TokenType.STACK, self._parse_stacking())
        elif cmd in "Mm":
            char = self._parse_multibyte()
            self._word.append(char if char is not None else scanner.text[start : scanner.index])
        else:
            previous = self._ctx
            try:
                self._parse_properties(cmd, start)
            except MTextError as exc:
                logger.debug("command kept as literal text\n%s", exc)
                self._word.append(scanner.text[start : scanner.index])
                return
            if self._yield_property_commands:
                change = PropertyChange(
                    command=cmd,
                    changes=previous.diff(self._ctx),
                    raw=scanner.text[start : scanner.index],
                )
                yield self._token(TokenType.PROPERTIES_CHANGED, change)

    def _parse_multibyte(self) -> str | None:
        """Decode ``+XXXX`` after ``\\M``; None if the pattern does not match."""
        code = self._scanner.match(MULTIBYTE_RE)
        if not code:
            return None
        raw = bytes.fromhex(code[1:])
        for codepage in LEGACY_CODEPAGES:
            try:
                char = raw.decode(codepage)
            except UnicodeDecodeError:
                continue
            if len(char) == 1:
                return char
        logger.debug("cannot decode multi-byte character %s", code)
        return REPLACEMENT_CHAR

    def _extract_expression(self, escape: bool = False) -> str:
        """Return the text up to the next ``;`` (consumed) or to the end."""
        scanner = self._scanner
        stop = scanner.find(";", escape)
        if stop < 0:
            expr = scanner.tail
            scanner.consume(len(expr))
            return expr
        expr = scanner.text[scanner.index : stop]
        scanner.consume(len(expr) + 1)
        return expr

    def _consume_optional_terminator(self) -> None:
        if self._scanner.peek() == ";":
            self._scanner.consume(1)

    # ------------------------------------------------------------------
    # Stacking: \S<numerator><divider><denominator>;
    # ------------------------------------------------------------------

    def _parse_stacking(self) -> StackFraction:
        stack = Cursor(self._extract_expression(escape=True))
        numerator: list[str] = []
        denominator: list[str] = []
        divider = ""

        while stack.has_data:
            c, escaped = _next_stack_char(stack)
            if not escaped and c and c in STACK_DIVIDERS:
                divider = c
                break
            numerator.append(c)

        if divider:
            if divider == "^":
                # the space after ^ only separates it from caret notation
                stack.consume_spaces()
            while stack.has_data:
                c, _ = _next_stack_char(stack)
                denominator.append(c)

        return StackFraction("".join(numerator), "".join(denominator), divider)

    # ------------------------------------------------------------------
    # Property commands
    # ------------------------------------------------------------------

    def _parse_properties(self, cmd: str, start: int) -> None:
        new_ctx = self._ctx.copy()

        if cmd == "L":
            new_ctx.underline = True
            self._continue_stroke = True
        elif cmd == "l":
            new_ctx.underline = False
            if not new_ctx.has_any_stroke:
                self._continue_stroke = False
        elif cmd == "O":
            new_ctx.overline = True
            self._continue_stroke = True
        elif cmd == "o":
            new_ctx.overline = False
            if not new_ctx.has_any_stroke:
                self._continue_stroke = False
        elif cmd == "K":
            new_ctx.strike_through = True
            self._continue_stroke = True
        elif cmd == "k":
            new_ctx.strike_through = False
            if not new_ctx.has_any_stroke:
                self._continue_stroke = False
        elif cmd == "A":
            self._parse_align(new_ctx)
        elif cmd == "C":
            self._parse_aci_color(new_ctx)
        elif cmd == "c":
            self._parse_rgb_color(new_ctx)
        elif cmd in _SCALE_COMMANDS:
            self._parse_scale(new_ctx, cmd)
        elif cmd == "Q":
            self._parse_oblique(new_ctx)
        elif cmd == "p":
            self._parse_paragraph_properties(new_ctx)
        elif cmd in "fF":
            self._parse_font_properties(new_ctx)
        else:
            raise UnknownCommandError(cmd, start, self._scanner.text)

        new_ctx.continue_stroke = self._continue_stroke
        self._ctx = new_ctx

    def _parse_align(self, ctx: FormattingContext) -> None:
        ch = self._scanner.peek()
        if ch and ch in "012":
            self._scanner.consume(1)
            ctx.align = LineAlignment(int(ch))
        else:
            ctx.align = LineAlignment.BOTTOM
        self._consume_optional_terminator()

    def _parse_aci_color(self, ctx: FormattingContext) -> None:
        expr = self._scanner.match(INT_RE)
        digits = expr.lstrip("0") or "0"
        # more than three significant digits is always >= 257: consumed and ignored
        if expr and len(digits) <= 3:
            aci = int(digits)
            if aci < 257:
                ctx.aci = aci
        self._consume_optional_terminator()

    def _parse_rgb_color(self, ctx: FormattingContext) -> None:
        expr = self._scanner.match(INT_RE)
        if expr:
            # 10**24 is a multiple of 2**24, the last 24 digits fix the low 24 bits
            b, g, r = int2rgb(int(expr[-24:]) & 0xFFFFFF)
            ctx.rgb = (r, g, b)
        self._consume_optional_terminator()

    def _parse_scale(self, ctx: FormattingContext, cmd: str) -> None:
        expr = self._scanner.match(RELATIVE_FLOAT_RE)
        if expr:
            relative = expr.endswith("x")
            value = _parse_float(cmd, expr[:-1] if relative else expr)
            setattr(ctx, _SCALE_COMMANDS[cmd], ScaleFactor(abs(value), relative))
        self._consume_optional_terminator()

    def _parse_oblique(self, ctx: FormattingContext) -> None:
        expr = self._scanner.match(SIGNED_FLOAT_RE)
        if expr:
            ctx.oblique = _parse_float("Q", expr)
        self._consume_optional_terminator()

    def _parse_font_properties(self, ctx: FormattingContext) -> None:
        parts = self._extract_expression().split("|")
        name = parts[0]
        if not name:
            return
        style = "Regular"
        weight = 400
        for part in parts[1:]:
            if part.startswith("b1"):
                weight = 700
            elif part.startswith("i1"):
                style = "Italic"
        ctx.font_face = FontFace(family=name, style=style, weight=weight)

    def _parse_paragraph_properties(self, ctx: FormattingContext) -> None:
        args = Cursor(self._extract_expression())
        indent = ctx.paragraph.indent
        left = ctx.paragraph.left
        right = ctx.paragraph.right
        align = ctx.paragraph.align
        tab_stops = ctx.paragraph.tab_stops

        while args.has_data:
            cmd = args.get()
            if cmd == "i":
                indent = _paragraph_float(args, indent)
            elif cmd == "l":
                left = _paragraph_float(args, left)
            elif cmd == "r":
                right = _paragraph_float(args, right)
            elif cmd == "q":
                align = CHAR_TO_ALIGN.get(args.get(), ParagraphAlignment.DEFAULT)
                _skip_commas(args)
            elif cmd == "t":
                tab_stops = _parse_tab_stops(args)
            # "x", separators and unknown tags are skipped

        ctx.paragraph = ParagraphProperties(
            indent=indent,
            left=left,
            right=right,
            align=align,
            tab_stops=tab_stops,
        )


# ----------------------------------------------------------------------
# Sub-expression helpers
# ----------------------------------------------------------------------


def _next_stack_char(stack: Cursor) -> tuple[str, bool]:
    """Return the next stacking character and whether it was backslash-escaped."""
    c = stack.peek()
    escaped = False
    if c == "\\":
        escaped = True
        stack.consume(1)
        c = stack.peek()
    stack.consume(1)
    if is_control_char(c):
        c = " "
    return c, escaped


def _skip_commas(args: Cursor) -> None:
    while args.peek() == ",":
        args.consume(1)


def _match_float(args: Cursor) -> float | None:
    expr = args.match(SIGNED_FLOAT_RE)
    if not expr:
        return None
    _skip_commas(args)
    return float(expr)


def _parse_float(cmd: str, literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueOverflowError(cmd, literal)
    return value


def _paragraph_float(args: Cursor, default: float) -> float:
    value = _match_float(args)
    return default if value is None else value


def _parse_tab_stops(args: Cursor) -> tuple[TabStop, ...]:
    stops: list[TabStop] = []
    while args.has_data:
        prefix = args.peek()
        if prefix in ("r", "c"):
            args.consume(1)
            kind = TabStopKind.RIGHT if prefix == "r" else TabStopKind.CENTER
        else:
            kind = TabStopKind.LEFT
        value = _match_float(args)
        if value is None:
            if kind is TabStopKind.LEFT:
                args.consume(1)
            continue
        stops.append(TabStop(value, kind))
    return tuple(stops)


def tokenize(
    content: str,
    ctx: FormattingContext | None = None,
    yield_property_commands: bool = False,
) -> list[Token]:
    """Convenience function: tokenize MText content and return the token list."""
    return list(Lexer(content, ctx, yield_property_commands).parse())
