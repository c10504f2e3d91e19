"""Error types with formatted source context."""

from __future__ import annotations

from mtextparser.tokens import Position, position_at


class MTextError(Exception):
    """Base class for all mtextparser errors."""


class ColorRangeError(MTextError, ValueError):
    """Raised when an ACI color index is assigned outside [0, 256]."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"ACI not in range [0, 256]: {value}")


class ConfigError(MTextError):
    """Raised on an invalid configuration file or context table."""


class ValueOverflowError(MTextError):
    """Raised inside the lexer when a numeric argument is not a finite float."""

    def __init__(self, command: str, literal: str) -> None:
        self.command = command
        self.literal = literal
        super().__init__(f"value out of range for '\\{command}': {literal}")


class UnknownCommandError(MTextError):
    """Raised inside the lexer when a property command letter is not recognised.

    The lexer catches it and re-emits the command as literal text; the
    formatted message is only ever logged, so the source position and the
    snippet are computed on demand.
    """

    def __init__(self, command: str, offset: int, source: str) -> None:
        self.command = command
        self.offset = offset
        self.source = source
        self.message = f"unknown command '\\{command}'"
        super().__init__(self.message)

    @property
    def position(self) -> Position:
        return position_at(self.source, self.offset)

    def format(self, filename: str = "<mtext>") -> str:
        return _format_context(self.message, self.position, self.source, 2, filename)

    def __str__(self) -> str:
        return self.format()


def _format_context(
    message: str, position: Position, source: str, width: int, filename: str
) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = position.line - 1
    col = position.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline at least 1 char, but stay within the line
    underline_len = max(1, min(width, len(source_line) - col + 1))

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(position.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{position.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )
