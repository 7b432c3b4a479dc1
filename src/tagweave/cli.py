"""Command-line interface for tagweave."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace

from tagweave.config import TagConfig, load_config, tags_from_config
from tagweave.errors import (
    ConfigError,
    FunctionError,
    ScanError,
    TemplateError,
    TemplateSyntaxError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    context: dict[str, str]
    tags: TagConfig
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="tagweave",
        description="Render a template containing <% %> directives",
    )
    p.add_argument("input", help="Input template file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-d",
        "--define",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a context variable (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover tagweave.toml)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-render")
    p.add_argument(
        "--debug", action="store_true", help="Dump tokens and generated code to stderr"
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return p


def parse_define_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid define format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    if not name.isidentifier():
        raise argparse.ArgumentTypeError(f"invalid context variable name: {name!r}")
    return name, value


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Context variables: config < CLI
    context: dict[str, str] = {}
    cfg_context = config.get("context")
    if isinstance(cfg_context, dict):
        for k, v in cfg_context.items():
            context[str(k)] = str(v)
    for raw in args.define:
        name, value = parse_define_arg(raw)
        context[name] = value

    tags = tags_from_config(config)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        context=context,
        tags=tags,
        watch=args.watch,
        debug=args.debug,
    )


def render_file(options: CliOptions) -> str:
    """Read, scan, generate, compile, and run a template file."""
    from tagweave.debug import dump_program, dump_tokens
    from tagweave.generator import generate
    from tagweave.renderer import compile_program
    from tagweave.scanner import scan

    source = options.input_file.read_text(encoding="utf-8")
    tokens = scan(source, options.tags)
    program = generate(tokens, options.tags)

    if options.debug:
        dump_tokens(tokens)
        dump_program(program)

    template = compile_program(program, str(options.input_file))
    return template.render(SimpleNamespace(**options.context))


def write_output(options: CliOptions, text: str) -> None:
    if options.output_file:
        options.output_file.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-render on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    write_output(options, render_file(options))
                    print(f"Rendered {options.input_file}", file=sys.stderr)
                except TemplateError as exc:
                    print(str(exc), file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, ConfigError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        text = render_file(options)
    except ScanError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (TemplateSyntaxError, FunctionError) as exc:
        logger.debug("render failed", exc_info=exc.__cause__)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    write_output(options, text)
    return 0
