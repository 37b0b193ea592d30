"""Error types with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


def position_at(source: str, offset: int) -> Position:
    """Resolve a 0-based offset into a line/column position."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start + 1, offset)


def _render(
    message: str,
    source: str,
    start: Position | None,
    end: Position | None,
    filename: str,
) -> str:
    if start is None:
        return f"error: {message}\n  --> {filename}"

    lines = source.splitlines(keepends=True)
    line_idx = start.line - 1
    col = start.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline the full span when on one line, otherwise to end of line
    if end is not None and end.line == start.line:
        underline_len = max(1, end.column - col)
    else:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(start.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class SveltePrintError(Exception):
    """Base class for every error raised by svelteprint."""

    def __init__(
        self,
        message: str,
        source: str = "",
        start: int | None = None,
        end: int | None = None,
    ) -> None:
        self.message = message
        self.source = source
        self.start = position_at(source, start) if start is not None else None
        self.end = position_at(source, end) if end is not None else None
        super().__init__(self.format())

    def format(self, filename: str = "input.svelte") -> str:
        return _render(self.message, self.source, self.start, self.end, filename)


class LoadError(SveltePrintError):
    """Raised when a parse tree does not have the expected shape."""


class ParserError(SveltePrintError):
    """Raised when the external Svelte parser fails or rejects the source."""


class PrintError(SveltePrintError):
    """Raised on an internal invariant violation while building the document."""


class UnknownNodeError(PrintError):
    """Raised when a node kind is neither known nor printable as an expression."""

    def __init__(self, node_type: str, source: str = "", start: int | None = None) -> None:
        self.node_type = node_type
        super().__init__(f"unknown node type: {node_type}", source, start)


class EmbedError(SveltePrintError):
    """Raised when an embedded-language sub-printer fails."""


class OptionsError(SveltePrintError):
    """Raised on an invalid formatting option value."""

    def __init__(self, message: str) -> None:
        super().__init__(message)

    def format(self, filename: str = "input.svelte") -> str:
        return f"error: {self.message}"
