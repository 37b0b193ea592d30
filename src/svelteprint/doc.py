"""Document IR: the closed algebra handed to the layout engine."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Concat:
    parts: tuple[Doc, ...]


@dataclass(frozen=True, slots=True)
class Line:
    """Line break opportunity.

    In flat mode a plain line prints as one space and a soft line as nothing.
    A hard line always breaks; a literal line breaks without re-indenting.
    ``keep_if_lonely`` keeps the line when it is the only content left.
    """

    soft: bool = False
    hard: bool = False
    literal: bool = False
    keep_if_lonely: bool = False


@dataclass(frozen=True, slots=True)
class Group:
    """Measured as a unit: all contained lines print flat, or all break."""

    contents: Doc
    should_break: bool = False


@dataclass(frozen=True, slots=True)
class Indent:
    contents: Doc


@dataclass(frozen=True, slots=True)
class Dedent:
    """Print contents one indentation level shallower."""

    contents: Doc


@dataclass(frozen=True, slots=True)
class Fill:
    """Alternating content/separator parts, broken only where needed."""

    parts: tuple[Doc, ...]


@dataclass(frozen=True, slots=True)
class BreakParent:
    """Forces every enclosing group into break mode."""


type Doc = str | Concat | Line | Group | Indent | Dedent | Fill | BreakParent

BREAK_PARENT = BreakParent()
line = Line()
softline = Line(soft=True)
hardline = Concat((Line(hard=True), BREAK_PARENT))
literalline = Concat((Line(hard=True, literal=True), BREAK_PARENT))


def concat(parts: Iterable[Doc]) -> Concat:
    flat: list[Doc] = []
    for p in parts:
        if isinstance(p, Concat):
            flat.extend(p.parts)
        else:
            flat.append(p)
    return Concat(tuple(flat))


def join(sep: Doc, parts: Iterable[Doc]) -> Concat:
    out: list[Doc] = []
    for i, p in enumerate(parts):
        if i:
            out.append(sep)
        out.append(p)
    return Concat(tuple(out))


def group(contents: Doc, should_break: bool = False) -> Group:
    return Group(contents, should_break)


def group_concat(parts: Iterable[Doc]) -> Group:
    return Group(concat(parts))


def indent(contents: Doc) -> Indent:
    return Indent(contents)


def dedent(contents: Doc) -> Dedent:
    return Dedent(contents)


def fill(parts: Iterable[Doc]) -> Fill:
    return Fill(tuple(parts))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_line(doc: Doc) -> bool:
    return isinstance(doc, Line)


def is_empty_doc(doc: Doc) -> bool:
    """Return True if *doc* prints nothing that must survive trimming."""
    if isinstance(doc, str):
        return doc == ""
    if isinstance(doc, Line):
        return not doc.keep_if_lonely
    if isinstance(doc, (Group, Indent, Dedent)):
        return is_empty_doc(doc.contents)
    if isinstance(doc, (Concat, Fill)):
        return all(is_empty_doc(p) for p in doc.parts)
    return False


def _parts(doc: Doc) -> tuple[Doc, ...] | None:
    if isinstance(doc, (Concat, Fill)):
        return doc.parts
    if isinstance(doc, Group):
        return _parts(doc.contents)
    return None


def _with_parts(doc: Doc, parts: list[Doc]) -> Doc:
    if isinstance(doc, Group):
        return Group(_with_parts(doc.contents, parts), doc.should_break)
    if isinstance(doc, Fill):
        return Fill(tuple(parts))
    return Concat(tuple(parts))


def trim_left(docs: Sequence[Doc], is_whitespace: Callable[[Doc], bool]) -> list[Doc]:
    """Drop leading whitespace docs, descending into the first concat or fill."""
    result = list(docs)
    first = next((i for i, d in enumerate(result) if not is_whitespace(d)), len(result))
    if first > 0:
        removed, result = result[:first], result[first:]
        if result and all(is_empty_doc(d) for d in removed):
            return trim_left(result, is_whitespace)
        return result
    if result:
        parts = _parts(result[0])
        if parts is not None:
            result[0] = _with_parts(result[0], trim_left(parts, is_whitespace))
    return result


def trim_right(docs: Sequence[Doc], is_whitespace: Callable[[Doc], bool]) -> list[Doc]:
    """Drop trailing whitespace docs, descending into the last concat or fill."""
    result = list(docs)
    last = next(
        (i for i in range(len(result) - 1, -1, -1) if not is_whitespace(result[i])),
        -1,
    )
    if last < len(result) - 1:
        removed, result = result[last + 1 :], result[: last + 1]
        if result and all(is_empty_doc(d) for d in removed):
            return trim_right(result, is_whitespace)
        return result
    if result:
        parts = _parts(result[-1])
        if parts is not None:
            result[-1] = _with_parts(result[-1], trim_right(parts, is_whitespace))
    return result


def trim(docs: Sequence[Doc], is_whitespace: Callable[[Doc], bool]) -> list[Doc]:
    return trim_right(trim_left(docs, is_whitespace), is_whitespace)


def replace_end_of_line_with(text: str, replacement: Doc) -> list[Doc]:
    """Split *text* on newlines, putting *replacement* between the pieces."""
    parts: list[Doc] = []
    for i, piece in enumerate(text.split("\n")):
        if i:
            parts.append(replacement)
        parts.append(piece)
    return parts


def lines_to_doc(text: str, separator: Doc = literalline) -> Concat:
    return concat(replace_end_of_line_with(text, separator))
