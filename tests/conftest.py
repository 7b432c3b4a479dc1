"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tagweave.config import TagConfig
from tagweave.scanner import scan
from tagweave.tokens import Command, CommandKind, Text, Token, TrimMode


@pytest.fixture
def config() -> TagConfig:
    """The configuration most templates use: interpolation is the default kind."""
    return TagConfig("<%", "%>", None, "*", "-", "_", "tR")


@pytest.fixture
def lex(config):
    """Return a helper that scans source with the default test config."""

    def _lex(source: str) -> list[Token]:
        return scan(source, config)

    return _lex


def assert_text(token: Token, value: str) -> None:
    """Assert that a token is a Text with the given value."""
    assert isinstance(token, Text), f"Expected Text, got {type(token).__name__}"
    assert token.value == value, f"Expected {value!r}, got {token.value!r}"


def assert_command(
    token: Token,
    kind: CommandKind,
    body: str,
    opening: TrimMode = TrimMode.NONE,
    closing: TrimMode = TrimMode.NONE,
) -> None:
    """Assert the kind, body, and trim modes of a Command token."""
    assert isinstance(token, Command), f"Expected Command, got {type(token).__name__}"
    assert token.kind is kind, f"Expected {kind}, got {token.kind}"
    assert token.body == body, f"Expected body {body!r}, got {token.body!r}"
    assert token.opening_trim is opening, f"Expected opening {opening}, got {token.opening_trim}"
    assert token.closing_trim is closing, f"Expected closing {closing}, got {token.closing_trim}"


def text_values(tokens: list[Token]) -> list[str]:
    """Return the values of all Text tokens."""
    return [t.value for t in tokens if isinstance(t, Text)]
