"""Human-readable token dump."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, TextIO

from mtextparser.context import FormattingContext
from mtextparser.tokens import PropertyChange, StackFraction, Token, TokenType


def dump_tokens(
    tokens: Iterable[Token],
    *,
    file: TextIO = sys.stderr,
    base: FormattingContext | None = None,
) -> None:
    """Print one line per token to *file*.

    Each line shows the token type, its payload and the context fields that
    differ from *base* (the default context when omitted).
    """
    if base is None:
        base = FormattingContext()
    for token in tokens:
        file.write(format_token(token, base))
        file.write("\n")


def format_token(token: Token, base: FormattingContext) -> str:
    parts = [token.type.name]
    payload = _format_payload(token)
    if payload:
        parts.append(payload)
    if token.type is not TokenType.PROPERTIES_CHANGED:
        changed = base.diff(token.ctx)
        if changed:
            parts.append(_format_fields(changed))
    return " ".join(parts)


def _format_payload(token: Token) -> str:
    data = token.data
    if isinstance(data, StackFraction):
        return f"{data.numerator!r} {data.divider or '-'} {data.denominator!r}"
    if isinstance(data, PropertyChange):
        return f"{data.raw!r} {_format_fields(data.changes)}"
    if isinstance(data, str):
        return repr(data)
    return ""


def _format_fields(fields: Mapping[str, Any]) -> str:
    return "{" + ", ".join(f"{name}={_format_value(v)}" for name, v in fields.items()) + "}"


def _format_value(value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    return repr(value)
