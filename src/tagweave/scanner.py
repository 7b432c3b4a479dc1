"""Scanner: converts template source into Text and Command tokens."""

from __future__ import annotations

import logging

from tagweave.config import TagConfig
from tagweave.errors import MissingClosingTagError, MissingCommandTypeError
from tagweave.tokens import Command, CommandKind, Position, Span, Text, Token, TrimMode

logger = logging.getLogger(__name__)


class Scanner:
    """Split template source into literal text and directives in one forward pass."""

    def __init__(self, source: str, config: TagConfig) -> None:
        self._source = source
        self._config = config
        self._pos = 0
        self._line = 0
        self._tokens: list[Token] = []

    def scan(self) -> list[Token]:
        """Scan the full source and return the token list."""
        opening = self._config.opening_tag

        while (found := self._source.find(opening, self._pos)) >= 0:
            if found > self._pos:
                self._emit_text(found)
            start = self._pos
            self._consume(len(opening))
            if self._pos >= len(self._source):
                raise MissingClosingTagError(self._current_pos(), self._source)
            self._lex_command(start)

        if self._pos < len(self._source):
            self._emit_text(len(self._source))

        logger.debug("scanned %d tokens over %d lines", len(self._tokens), self._line + 1)
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._pos)

    def _peek(self) -> str:
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _consume(self, count: int) -> str:
        text = self._source[self._pos : self._pos + count]
        self._pos += len(text)
        self._line += text.count("\n")
        return text

    def _emit_text(self, end: int) -> None:
        start = self._pos
        text = self._consume(end - start)
        self._tokens.append(Text(text, Span(start, self._pos)))

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _lex_command(self, start: int) -> None:
        # The trim marker may sit on either side of the command marker:
        # "<%_*" and "<%*_" are the same directive.
        opening_trim = self._lex_trim_marker()
        kind = self._lex_command_kind()
        if opening_trim is TrimMode.NONE:
            opening_trim = self._lex_trim_marker()

        closing = self._config.closing_tag
        end = self._source.find(closing, self._pos)
        if end < 0:
            raise MissingClosingTagError(self._current_pos(), self._source)

        body = self._source[self._pos : end]
        closing_trim = self._trim_mode(body[-1:])
        if closing_trim is not TrimMode.NONE:
            body = body[:-1]

        self._consume(end - self._pos + len(closing))
        self._tokens.append(
            Command(kind, opening_trim, closing_trim, body, Span(start, self._pos))
        )

    def _lex_trim_marker(self) -> TrimMode:
        mode = self._trim_mode(self._peek())
        if mode is not TrimMode.NONE:
            self._consume(1)
        return mode

    def _trim_mode(self, ch: str) -> TrimMode:
        if not ch:
            return TrimMode.NONE
        if ch == self._config.multiple_whitespace:
            return TrimMode.MULTIPLE
        if ch == self._config.single_whitespace:
            return TrimMode.SINGLE
        return TrimMode.NONE

    def _lex_command_kind(self) -> CommandKind:
        ch = self._peek()
        config = self._config

        if ch and ch == config.execution:
            self._consume(1)
            return CommandKind.EXECUTION
        if ch and ch == config.interpolate:
            self._consume(1)
            return CommandKind.INTERPOLATE

        if config.default_kind_count != 1:
            raise MissingCommandTypeError(self._current_pos(), self._source)
        if config.interpolate is None:
            return CommandKind.INTERPOLATE
        return CommandKind.EXECUTION


def scan(source: str, config: TagConfig | None = None) -> list[Token]:
    """Convenience function: scan source text and return the token list."""
    return Scanner(source, config or TagConfig()).scan()
