"""--debug token and program dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from tagweave.generator import Program
from tagweave.tokens import Command, Text, Token, TrimMode


def dump_tokens(tokens: list[Token], *, file: TextIO | None = None) -> None:
    """Print one line per token to *file* (default: stderr)."""
    file = file or sys.stderr
    file.write("Tokens\n")
    for token in tokens:
        span = f"{token.span.start}..{token.span.end}"
        if isinstance(token, Text):
            file.write(f"  Text {span} {token.value!r}\n")
        elif isinstance(token, Command):
            file.write(
                f"  Command {span} {token.kind.name.lower()}"
                f"{_trim_suffix('open', token.opening_trim)}"
                f"{_trim_suffix('close', token.closing_trim)}"
                f" {token.body!r}\n"
            )


def dump_program(program: Program, *, file: TextIO | None = None) -> None:
    """Print the generated Python source to *file* (default: stderr)."""
    file = file or sys.stderr
    file.write("Program\n")
    for line in program.python_source().splitlines():
        file.write(f"  | {line}\n")


def _trim_suffix(label: str, mode: TrimMode) -> str:
    if mode is TrimMode.NONE:
        return ""
    return f" {label}={mode.name.lower()}"
