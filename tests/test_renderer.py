"""End-to-end tests: compile templates and run them against a context."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from tagweave import compile as compile_source
from tagweave import render as render_source
from tagweave.config import TagConfig
from tagweave.errors import FunctionError, MissingClosingTagError, TemplateSyntaxError
from tagweave.renderer import Renderer, compile_template, render, render_async
from tagweave.runtime import PLACEHOLDER


class TestRender:
    def test_plain_text(self):
        assert render("just text") == "just text"

    def test_interpolation(self):
        ctx = SimpleNamespace(name="World")
        assert render("Hello <% tp.name %>!", ctx) == "Hello World!"

    def test_non_string_results(self):
        assert render("<% 1 + 2 %>/<% None %>/<% [1] %>") == "3/None/[1]"

    def test_statement_defines_name(self):
        assert render("<%* items = [1, 2, 3] %>n=<% len(items) %>") == "n=3"

    def test_statement_writes_accumulator(self):
        assert render("a<%* tR += 'b' %>c") == "abc"

    def test_multiline_statement(self):
        template = "<%*\nfor i in range(3):\n    tR += str(i)\n%>!"
        assert render(template) == "012!"

    def test_quotes_and_backslashes_survive(self):
        template = "it's <% 'a' %> \\n \"q\"\r\n"
        assert render(template) == "it's a \\n \"q\"\r\n"

    def test_empty_interpolation_renders_nothing(self):
        assert render("a<%%>b<%   %>c") == "abc"

    def test_whitespace_control(self):
        template = "<%* x = 1 -%>\nvalue: <% x %>\n<%_ '' _%>  \n  end"
        assert render(template) == "value: 1end"

    def test_custom_accumulator_and_context(self):
        config = TagConfig("{{", "}}", None, "%", accumulator="out", context_name="ctx")
        template = "{{% out += ctx.upper() }}-{{ ctx }}"
        assert render(template, "abc", config) == "ABC-abc"

    def test_globals(self):
        template = compile_template("<% shout('hi') %>", globals={"shout": str.upper})
        assert template.render() == "HI"

    def test_package_level_helpers(self):
        assert render_source("<% tp %>", 5) == "5"
        assert compile_source("x").startswith("async def __template(tp):")


class TestAsyncInterpolation:
    def test_reverse_completion_order(self):
        async def fetch(name: str, delay: float) -> str:
            await asyncio.sleep(delay)
            return name

        template = compile_template(
            "<% fetch('a', 0.03) %>,<% fetch('b', 0.02) %>,<% fetch('c', 0.01) %>",
            globals={"fetch": fetch},
        )
        assert template.render() == "a,b,c"

    def test_expressions_run_concurrently(self):
        running = 0
        peak = 0

        async def work() -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return peak

        template = compile_template("<% work() %><% work() %><% work() %>", globals={"work": work})
        template.render()
        assert peak == 3

    def test_render_async_in_running_loop(self):
        async def main() -> str:
            return await render_async("<% tp * 2 %>", 21)

        assert asyncio.run(main()) == "42"

    def test_renderer_render_content(self):
        renderer = Renderer(TagConfig(), globals={"greeting": "hey"})
        result = asyncio.run(renderer.render_content("<% greeting %> <% tp %>", "you"))
        assert result == "hey you"


class TestErrors:
    def test_scan_error_propagates(self):
        with pytest.raises(MissingClosingTagError):
            render("<% never closed")

    def test_syntax_error(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            render("test <%* / %> test")
        assert exc_info.value.message

    def test_syntax_error_in_expression(self):
        with pytest.raises(TemplateSyntaxError):
            compile_template("<% 1 + %>")

    def test_function_error(self):
        with pytest.raises(FunctionError) as exc_info:
            render("<% 1 / 0 %>")
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)

    def test_async_function_error(self):
        async def boom() -> str:
            raise RuntimeError("nope")

        template = compile_template("ok <% boom() %>", globals={"boom": boom})
        with pytest.raises(FunctionError, match="nope"):
            template.render()

    def test_missing_name_is_function_error(self):
        with pytest.raises(FunctionError, match="NameError"):
            render("<% undefined_name %>")

    def test_placeholder_in_text_is_function_error(self):
        with pytest.raises(FunctionError, match="placeholder"):
            render(f"x {PLACEHOLDER} <% 1 %>")


class TestFailureCleanup:
    @pytest.mark.parametrize("failing", ["<% boom() %>", "<% 1 / 0 %>", "<%* 1 / 0 %>"])
    def test_started_work_cancelled(self, failing):
        cancelled: list[bool] = []

        async def hang() -> str:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(True)
                raise
            return "never"

        async def boom() -> str:
            raise RuntimeError("boom")

        async def run():
            template = compile_template(
                f"<% hang() %><%* await asyncio.sleep(0) %>{failing}<% hang() %>",
                globals={"asyncio": asyncio, "hang": hang, "boom": boom},
            )
            with pytest.raises(FunctionError):
                await template.render_async()
            return asyncio.all_tasks() - {asyncio.current_task()}

        assert asyncio.run(run()) == set()
        assert cancelled
