"""Token types and source position data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class CommandKind(Enum):
    INTERPOLATE = auto()  # result is spliced into the output
    EXECUTION = auto()  # run for effect only


class TrimMode(Enum):
    NONE = auto()
    SINGLE = auto()  # one line terminator
    MULTIPLE = auto()  # all contiguous whitespace


class Side(Enum):
    LEADING = auto()
    TRAILING = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Scanner position, 0-based line and 0-based character offset."""

    line: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open source range [start, end) in character offsets."""

    start: int
    end: int

    def slice(self, source: str) -> str:
        return source[self.start : self.end]


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text between directives."""

    value: str
    span: Span


@dataclass(frozen=True, slots=True)
class Command:
    """A directive with its markers resolved and its body left opaque."""

    kind: CommandKind
    opening_trim: TrimMode
    closing_trim: TrimMode
    body: str
    span: Span


Token = Text | Command
