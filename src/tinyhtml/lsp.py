"""Minimal LSP server for TML: diagnostics only."""

from __future__ import annotations

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

from tinyhtml import __version__
from tinyhtml.errors import InputTooLarge, InvalidInput, ParseError
from tinyhtml.parser import parse

server = LanguageServer(
    "tinyhtml-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _diagnostic(line: int, col: int, message: str) -> Diagnostic:
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=col),
            end=Position(line=line, character=col + 1),
        ),
        message=message,
        severity=DiagnosticSeverity.Error,
        source="tinyhtml",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    diagnostics: list[Diagnostic] = []

    if source:
        try:
            parse(source)
        except ParseError as exc:
            diagnostics.append(_diagnostic(exc.line - 1, exc.column - 1, exc.message))
        except (InvalidInput, InputTooLarge) as exc:
            diagnostics.append(_diagnostic(0, 0, str(exc)))

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
