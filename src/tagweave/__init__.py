"""tagweave template-directive compiler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tagweave.config import TagConfig

__version__ = "0.1.0"


def compile(source: str, config: TagConfig | None = None) -> str:
    """Scan and generate template source, returning the generated Python function."""
    from tagweave.generator import generate
    from tagweave.scanner import scan

    tokens = scan(source, config)
    return generate(tokens, config).python_source()


def render(source: str, context: Any = None, config: TagConfig | None = None) -> str:
    """Compile and run template source against a context object."""
    from tagweave.renderer import render as _render

    return _render(source, context, config)
