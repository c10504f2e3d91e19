"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from mtextparser.context import FormattingContext
from mtextparser.lexer import tokenize
from mtextparser.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes MText content and returns the token list."""

    def _lex(
        content: str,
        ctx: FormattingContext | None = None,
        properties: bool = False,
    ) -> list[Token]:
        return tokenize(content, ctx, yield_property_commands=properties)

    return _lex


@pytest.fixture
def first_word(lex):
    """Return a helper that tokenizes content and returns the first WORD token."""

    def _first_word(content: str) -> Token:
        words = find_tokens(lex(content), TokenType.WORD)
        assert words, f"No WORD token in {content!r}"
        return words[0]

    return _first_word


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[object]) -> None:
    """Assert that the token payloads match the expected list."""
    actual = [t.data for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], tt: TokenType) -> list[Token]:
    """Return all tokens of the given type."""
    return [t for t in tokens if t.type == tt]


def words(tokens: list[Token]) -> list[str]:
    """Return the payloads of all WORD tokens."""
    return [str(t.data) for t in tokens if t.type == TokenType.WORD]
