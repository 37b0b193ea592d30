"""Minimal LSP server for Svelte components: formatting and parse diagnostics."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_FORMATTING,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentFormattingParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from svelteprint.bridge import SvelteParser
from svelteprint.cli import load_config
from svelteprint.errors import (
    LoadError,
    OptionsError,
    ParserError,
    SveltePrintError,
)
from svelteprint.errors import Position as ErrorPosition
from svelteprint.layout import print_doc
from svelteprint.options import PrintOptions
from svelteprint.printer import print_component

logger = logging.getLogger(__name__)

server = LanguageServer("svelteprint-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)
parser = SvelteParser()


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _position(source: str, pos: ErrorPosition) -> Position:
    # LSP columns count UTF-16 code units
    line_start = pos.offset - (pos.column - 1)
    return Position(line=pos.line - 1, character=_utf16_len(source[line_start : pos.offset]))


def _error_range(exc: SveltePrintError) -> Range:
    if exc.start is None:
        return Range(start=Position(line=0, character=0), end=Position(line=0, character=0))
    start = _position(exc.source, exc.start)
    if exc.end is not None:
        end = _position(exc.source, exc.end)
    else:
        end = Position(line=start.line, character=start.character + 1)
    return Range(start=start, end=end)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the document and publish any parser diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    try:
        parser.parse(doc.source)
    except (ParserError, LoadError) as exc:
        diagnostics.append(
            Diagnostic(
                range=_error_range(exc),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="svelteprint",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _print_options(path: str | None, params: DocumentFormattingParams) -> PrintOptions:
    """Options from svelteprint.toml next to the document, with the client's indentation."""
    config = load_config(None, Path(path).parent) if path else {}
    options = PrintOptions.from_mapping(config.get("format", {}))
    return options.with_overrides(
        tab_width=params.options.tab_size,
        use_tabs=not params.options.insert_spaces,
    )


def _format(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit] | None:
    """Format the whole document; None when it cannot be parsed or printed."""
    uri = params.text_document.uri
    doc = ls.workspace.get_text_document(uri)
    source = doc.source

    try:
        options = _print_options(doc.path, params)
    except (OptionsError, tomllib.TOMLDecodeError) as exc:
        logger.warning("not formatting %s: invalid config: %s", uri, exc)
        return None

    try:
        root = parser.parse(source)
        formatted = print_doc(
            print_component(root, source, options),
            print_width=options.print_width,
            tab_width=options.tab_width,
            use_tabs=options.use_tabs,
        )
    except SveltePrintError as exc:
        logger.warning("not formatting %s: %s", uri, exc.message)
        return None

    if formatted == source:
        return []

    lines = source.split("\n")
    end = Position(line=len(lines) - 1, character=_utf16_len(lines[-1]))
    return [TextEdit(range=Range(start=Position(line=0, character=0), end=end), new_text=formatted)]


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_FORMATTING)
def formatting(ls: LanguageServer, params: DocumentFormattingParams) -> list[TextEdit] | None:
    return _format(ls, params)


def main() -> None:
    server.start_io()
