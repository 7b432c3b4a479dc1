"""Code generator: turns a token sequence into an async Python function."""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Iterable
from dataclasses import dataclass

from tagweave.config import TagConfig
from tagweave.runtime import PLACEHOLDER
from tagweave.tokens import CommandKind, Side, Text, Token, TrimMode
from tagweave.whitespace import trim

logger = logging.getLogger(__name__)

FUNCTION_NAME = "__template"

# Names the generated function expects to find in its globals
ENQUEUE_NAME = "__enqueue"
COLLECT_NAME = "__collect"
DISCARD_NAME = "__discard"
SUBSTITUTE_NAME = "__substitute"

# Locals of the generated function
PENDING_NAME = "__pending"
RESULTS_NAME = "__results"

RESERVED_NAMES = frozenset(
    {
        FUNCTION_NAME,
        ENQUEUE_NAME,
        COLLECT_NAME,
        DISCARD_NAME,
        SUBSTITUTE_NAME,
        PENDING_NAME,
        RESULTS_NAME,
    }
)

_INDENT = "    "

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "'": "\\'", "\0": "\\x00"}


@dataclass(frozen=True, slots=True)
class AppendText:
    """Append a literal fragment to the output buffer."""

    text: str


@dataclass(frozen=True, slots=True)
class Evaluate:
    """Start an expression and append a placeholder for its result."""

    expression: str


@dataclass(frozen=True, slots=True)
class Execute:
    """Run a statement for its effect."""

    statement: str


Instruction = AppendText | Evaluate | Execute


@dataclass(frozen=True, slots=True)
class Program:
    """Ordered instructions plus the names used when rendering them as Python."""

    instructions: tuple[Instruction, ...]
    accumulator: str = "tR"
    context_name: str = "tp"

    def python_source(self) -> str:
        """Render the program as the source of an ``async def`` function."""
        out = self.accumulator
        guarded: list[str] = []
        for ins in self.instructions:
            if isinstance(ins, AppendText):
                guarded.append(f"{out} += '{escape_text(ins.text)}'")
            elif isinstance(ins, Evaluate):
                expr = ins.expression
                if not expr.strip():
                    expr = "''"
                elif "#" in expr:
                    expr += "\n"
                guarded.append(f"{ENQUEUE_NAME}({PENDING_NAME}, ({expr}))")
                guarded.append(f"{out} += '{PLACEHOLDER}'")
            else:
                guarded.extend(_normalize_statement(ins.statement))
        guarded.append(f"{RESULTS_NAME} = await {COLLECT_NAME}({PENDING_NAME})")

        # Work already started is cancelled if any later step fails
        body = [
            f"{PENDING_NAME} = []",
            f"{out} = ''",
            "try:",
            *(textwrap.indent(line, _INDENT) for line in guarded),
            "except BaseException:",
            f"{_INDENT}await {DISCARD_NAME}({PENDING_NAME})",
            f"{_INDENT}raise",
            f"{out} = {SUBSTITUTE_NAME}({out}, {RESULTS_NAME})",
            f"return {out}",
        ]
        header = f"async def {FUNCTION_NAME}({self.context_name}):"
        return "\n".join([header, *(textwrap.indent(line, _INDENT) for line in body)]) + "\n"


def escape_text(text: str) -> str:
    """Escape a fragment for use inside a single-quoted Python string literal."""
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def _normalize_statement(statement: str) -> list[str]:
    """Dedent a statement body so it can sit inside the function body."""
    lines = statement.rstrip().splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        return ["pass"]
    lines = textwrap.dedent("\n".join(lines)).splitlines()
    lines[0] = lines[0].lstrip()
    return lines


def generate(tokens: Iterable[Token], config: TagConfig | None = None) -> Program:
    """Build the instruction program for a scanned token sequence.

    Literal text is held back until the next command is seen, so it can be
    trimmed by the previous command's closing marker and the next command's
    opening marker.
    """
    config = config or TagConfig()
    instructions: list[Instruction] = []
    carried = TrimMode.NONE
    held: Text | None = None

    for token in tokens:
        if isinstance(token, Text):
            held = token
            continue

        if held is not None:
            text = trim(held.value, carried, Side.LEADING)
            text = trim(text, token.opening_trim, Side.TRAILING)
            instructions.append(AppendText(text))
            held = None
        carried = token.closing_trim

        if token.kind is CommandKind.INTERPOLATE:
            instructions.append(Evaluate(token.body))
        else:
            instructions.append(Execute(token.body))

    if held is not None:
        instructions.append(AppendText(trim(held.value, carried, Side.LEADING)))

    logger.debug("generated %d instructions", len(instructions))
    return Program(tuple(instructions), config.accumulator, config.context_name)
