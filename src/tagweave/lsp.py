"""Minimal LSP server for tagweave templates — diagnostics only."""

from __future__ import annotations

import tomllib
from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from tagweave.config import TagConfig, load_config, tags_from_config
from tagweave.errors import ConfigError, ScanError, TemplateSyntaxError, line_column
from tagweave.generator import generate
from tagweave.renderer import compile_program
from tagweave.scanner import scan

server = LanguageServer("tagweave-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)


def _diagnostic(
    line: int, col: int, width: int, message: str, severity: DiagnosticSeverity
) -> Diagnostic:
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=col),
            end=Position(line=line, character=col + width),
        ),
        message=message,
        severity=severity,
        source="tagweave",
    )


def _document_config(path: str) -> TagConfig:
    """Tags from the ``tagweave.toml`` beside the document, as the CLI finds it."""
    return tags_from_config(load_config(None, Path(path).parent))


def _validate(ls: LanguageServer, uri: str, config: TagConfig | None = None) -> None:
    """Scan and compile the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    if config is None:
        try:
            config = _document_config(doc.path)
        except (ConfigError, tomllib.TOMLDecodeError) as exc:
            diagnostics.append(
                _diagnostic(0, 0, 0, f"tagweave.toml: {exc}", DiagnosticSeverity.Error)
            )
            ls.text_document_publish_diagnostics(
                PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
            )
            return

    try:
        tokens = scan(source, config)
    except ScanError as exc:
        line = exc.position.line
        col = max(line_column(source, exc.position) - 1, 0)
        diagnostics.append(_diagnostic(line, col, 1, exc.message, DiagnosticSeverity.Error))
    else:
        try:
            compile_program(generate(tokens, config), filename)
        except TemplateSyntaxError as exc:
            diagnostics.append(_diagnostic(0, 0, 0, exc.message, DiagnosticSeverity.Warning))

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
