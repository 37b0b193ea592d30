"""--debug Document IR dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from svelteprint.doc import (
    BreakParent,
    Concat,
    Dedent,
    Doc,
    Fill,
    Group,
    Indent,
    Line,
)


def dump_doc(doc: Doc, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable document tree to *file*."""
    _dump(doc, 0, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _line_name(d: Line) -> str:
    if d.literal:
        return "literalline"
    if d.hard:
        return "hardline(lonely)" if d.keep_if_lonely else "hardline"
    return "softline" if d.soft else "line"


def _dump(doc: Doc, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    if isinstance(doc, str):
        f.write(f"{pad}{doc!r}\n")
    elif isinstance(doc, Line):
        f.write(f"{pad}{_line_name(doc)}\n")
    elif isinstance(doc, BreakParent):
        f.write(f"{pad}breakParent\n")
    elif isinstance(doc, Concat):
        f.write(f"{pad}Concat\n")
        for part in doc.parts:
            _dump(part, depth + 1, f)
    elif isinstance(doc, Fill):
        f.write(f"{pad}Fill\n")
        for part in doc.parts:
            _dump(part, depth + 1, f)
    elif isinstance(doc, Group):
        f.write(f"{pad}Group{' (break)' if doc.should_break else ''}\n")
        _dump(doc.contents, depth + 1, f)
    elif isinstance(doc, Indent):
        f.write(f"{pad}Indent\n")
        _dump(doc.contents, depth + 1, f)
    elif isinstance(doc, Dedent):
        f.write(f"{pad}Dedent\n")
        _dump(doc.contents, depth + 1, f)
