"""Error types with formatted source context."""

from __future__ import annotations

from tagweave.tokens import Position


def line_column(source: str, position: Position) -> int:
    """Return the number of characters consumed on the position's line."""
    lines = source.split("\n")
    return position.offset - sum(len(line) + 1 for line in lines[: position.line])


def backtrace(source: str, position: Position) -> str:
    """Render the failing source line with a caret under the failing column.

    The column is the number of characters consumed on the failing line, so
    the caret sits under the last character the scanner accepted.
    """
    lines = source.split("\n")
    col = line_column(source, position)

    if 0 <= position.line < len(lines):
        source_line = lines[position.line].rstrip("\r")
    else:
        source_line = ""

    pad = " " * max(col - 1, 0)
    return f"line {position.line + 1} col {col}:\n\n{source_line}\n{pad}^"


class TemplateError(Exception):
    """Base class for every error raised while compiling or rendering."""


class ConfigError(TemplateError):
    """Raised when a TagConfig is not usable."""


class ScanError(TemplateError):
    """Raised on the first structural problem, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        self.backtrace = backtrace(source, position)
        super().__init__(self.format())

    def format(self) -> str:
        return f"error: {self.message}\n{self.backtrace}"


class MissingCommandTypeError(ScanError):
    """No command-type marker and no unambiguous default kind."""

    def __init__(self, position: Position, source: str) -> None:
        super().__init__("missing command type", position, source)


class MissingClosingTagError(ScanError):
    """An opening tag was never closed."""

    def __init__(self, position: Position, source: str) -> None:
        super().__init__("missing closing command tag", position, source)


class TemplateSyntaxError(TemplateError):
    """The generated program did not compile."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"syntax error inside command: {message}")


class FunctionError(TemplateError):
    """The compiled template raised while running."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"template function call error: {message}")
