"""Host layer: compile generated programs into callables and run them."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tagweave import runtime
from tagweave.config import TagConfig
from tagweave.errors import FunctionError, TemplateSyntaxError
from tagweave.generator import (
    COLLECT_NAME,
    DISCARD_NAME,
    ENQUEUE_NAME,
    FUNCTION_NAME,
    SUBSTITUTE_NAME,
    Program,
    generate,
)
from tagweave.scanner import scan

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """A compiled template function, callable with one context argument."""

    program: Program
    function: Callable[[Any], Awaitable[str]]

    async def render_async(self, context: Any = None) -> str:
        try:
            return await self.function(context)
        except Exception as exc:
            raise FunctionError(f"{type(exc).__name__}: {exc}") from exc

    def render(self, context: Any = None) -> str:
        return asyncio.run(self.render_async(context))


def compile_program(
    program: Program,
    filename: str = "<template>",
    globals: dict[str, Any] | None = None,
) -> CompiledTemplate:
    """Compile a generated program into a CompiledTemplate."""
    source = program.python_source()
    try:
        code = compile(source, filename, "exec")
    except SyntaxError as exc:
        raise TemplateSyntaxError(exc.msg or str(exc)) from exc
    except ValueError as exc:  # NUL bytes inside a directive body
        raise TemplateSyntaxError(str(exc)) from exc

    namespace: dict[str, Any] = dict(globals or {})
    namespace[ENQUEUE_NAME] = runtime.enqueue
    namespace[COLLECT_NAME] = runtime.collect
    namespace[DISCARD_NAME] = runtime.discard
    namespace[SUBSTITUTE_NAME] = runtime.substitute
    exec(code, namespace)
    logger.debug("compiled %s (%d instructions)", filename, len(program.instructions))
    return CompiledTemplate(program, namespace[FUNCTION_NAME])


def compile_template(
    source: str,
    config: TagConfig | None = None,
    filename: str = "<template>",
    globals: dict[str, Any] | None = None,
) -> CompiledTemplate:
    """Scan, generate, and compile template source."""
    config = config or TagConfig()
    tokens = scan(source, config)
    return compile_program(generate(tokens, config), filename, globals)


async def render_async(
    source: str,
    context: Any = None,
    config: TagConfig | None = None,
    globals: dict[str, Any] | None = None,
) -> str:
    """Compile and render template source inside a running event loop."""
    return await compile_template(source, config, globals=globals).render_async(context)


def render(
    source: str,
    context: Any = None,
    config: TagConfig | None = None,
    globals: dict[str, Any] | None = None,
) -> str:
    """Compile and render template source, returning the finished text."""
    return compile_template(source, config, globals=globals).render(context)


class Renderer:
    """Renders many templates with one shared configuration and globals."""

    def __init__(self, config: TagConfig | None = None, globals: dict[str, Any] | None = None):
        self.config = config or TagConfig()
        self.globals = dict(globals or {})

    def compile(self, source: str, filename: str = "<template>") -> CompiledTemplate:
        return compile_template(source, self.config, filename, self.globals)

    async def render_content(self, source: str, context: Any = None) -> str:
        return await self.compile(source).render_async(context)
