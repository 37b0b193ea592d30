"""Layout engine: renders a Document IR value to text under a width budget."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

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

type Mode = Literal["flat", "break"]

MODE_FLAT: Mode = "flat"
MODE_BREAK: Mode = "break"


@dataclass(frozen=True, slots=True)
class _Indentation:
    levels: tuple[str, ...]
    width: int

    @property
    def value(self) -> str:
        return "".join(self.levels)


type _Command = tuple[_Indentation, Mode, Doc]

_ROOT = _Indentation((), 0)


def print_doc(
    doc: Doc,
    *,
    print_width: int = 80,
    tab_width: int = 2,
    use_tabs: bool = False,
) -> str:
    """Render *doc* into a string, breaking groups that exceed *print_width*."""
    breaking = propagate_breaks(doc)
    unit = "\t" if use_tabs else " " * tab_width

    out: list[str] = []
    pos = 0
    should_remeasure = False
    cmds: list[_Command] = [(_ROOT, MODE_BREAK, doc)]

    while cmds:
        ind, mode, d = cmds.pop()

        if isinstance(d, str):
            out.append(d)
            pos += len(d)
            continue

        if isinstance(d, Concat):
            # push in reverse so first part is processed first
            for p in reversed(d.parts):
                cmds.append((ind, mode, p))
            continue

        if isinstance(d, Indent):
            cmds.append((_Indentation((*ind.levels, unit), ind.width + tab_width), mode, d.contents))
            continue

        if isinstance(d, Dedent):
            cmds.append((_dedent(ind, tab_width), mode, d.contents))
            continue

        if isinstance(d, Group):
            broken = id(d) in breaking
            if mode == MODE_FLAT and not should_remeasure:
                cmds.append((ind, MODE_BREAK if broken else MODE_FLAT, d.contents))
                continue
            should_remeasure = False
            flat_cmd: _Command = (ind, MODE_FLAT, d.contents)
            if not broken and _fits(flat_cmd, cmds, print_width - pos, breaking):
                cmds.append(flat_cmd)
            else:
                cmds.append((ind, MODE_BREAK, d.contents))
            continue

        if isinstance(d, Fill):
            _layout_fill(ind, mode, d, cmds, print_width - pos, breaking)
            continue

        if isinstance(d, Line):
            if mode == MODE_FLAT and not d.hard:
                if not d.soft:
                    out.append(" ")
                    pos += 1
                continue
            if mode == MODE_FLAT:
                # A hard line inside a flat group invalidates its measurement
                should_remeasure = True
            if d.literal:
                out.append("\n")
                pos = 0
            else:
                _trim_trailing(out)
                out.append("\n" + ind.value)
                pos = ind.width
            continue

        # BreakParent only matters to propagate_breaks

    return "".join(out)


def propagate_breaks(doc: Doc) -> frozenset[int]:
    """Return the ids of groups forced into break mode.

    A group breaks when it is marked ``should_break`` or when it contains a
    BreakParent or a breaking group.
    """
    breaking: set[int] = set()
    group_stack: list[Group] = []
    stack: list[tuple[Doc, bool]] = [(doc, False)]

    while stack:
        d, exiting = stack.pop()
        if exiting:
            closed = group_stack.pop()
            if id(closed) in breaking and group_stack:
                breaking.add(id(group_stack[-1]))
            continue
        if isinstance(d, BreakParent):
            if group_stack:
                breaking.add(id(group_stack[-1]))
        elif isinstance(d, Group):
            if d.should_break:
                breaking.add(id(d))
            group_stack.append(d)
            stack.append((d, True))
            stack.append((d.contents, False))
        elif isinstance(d, (Concat, Fill)):
            stack.extend((p, False) for p in reversed(d.parts))
        elif isinstance(d, (Indent, Dedent)):
            stack.append((d.contents, False))

    return frozenset(breaking)


def _dedent(ind: _Indentation, tab_width: int) -> _Indentation:
    if not ind.levels:
        return ind
    last = ind.levels[-1]
    width = tab_width if last == "\t" else len(last)
    return _Indentation(ind.levels[:-1], ind.width - width)


def _layout_fill(
    ind: _Indentation,
    mode: Mode,
    d: Fill,
    cmds: list[_Command],
    remaining: int,
    breaking: frozenset[int],
) -> None:
    parts = d.parts
    if not parts:
        return

    content = parts[0]
    content_flat: _Command = (ind, MODE_FLAT, content)
    content_break: _Command = (ind, MODE_BREAK, content)
    content_fits = _fits(content_flat, [], remaining, breaking, must_be_flat=True)

    if len(parts) == 1:
        cmds.append(content_flat if content_fits else content_break)
        return

    whitespace = parts[1]
    whitespace_flat: _Command = (ind, MODE_FLAT, whitespace)
    whitespace_break: _Command = (ind, MODE_BREAK, whitespace)

    if len(parts) == 2:
        if content_fits:
            cmds.extend((whitespace_flat, content_flat))
        else:
            cmds.extend((whitespace_break, content_break))
        return

    rest: _Command = (ind, mode, Fill(parts[2:]))
    pair_flat: _Command = (ind, MODE_FLAT, Concat((content, whitespace, parts[2])))
    pair_fits = _fits(pair_flat, [], remaining, breaking, must_be_flat=True)

    if pair_fits:
        cmds.extend((rest, whitespace_flat, content_flat))
    elif content_fits:
        cmds.extend((rest, whitespace_break, content_flat))
    else:
        cmds.extend((rest, whitespace_break, content_break))


def _fits(
    first: _Command,
    rest: list[_Command],
    width: int,
    breaking: frozenset[int],
    must_be_flat: bool = False,
) -> bool:
    """
    Lookahead: simulate rendering (without producing output) until:
    - we exceed width => doesn't fit
    - we hit a line in break mode => fits (the rest goes on the next line).
    """
    rest_idx = len(rest)
    lookahead: list[_Command] = [first]

    while width >= 0:
        if not lookahead:
            if rest_idx == 0:
                return True
            rest_idx -= 1
            lookahead.append(rest[rest_idx])
            continue

        ind, mode, d = lookahead.pop()

        if isinstance(d, str):
            width -= len(d)
        elif isinstance(d, (Concat, Fill)):
            for p in reversed(d.parts):
                lookahead.append((ind, mode, p))
        elif isinstance(d, (Indent, Dedent)):
            lookahead.append((ind, mode, d.contents))
        elif isinstance(d, Group):
            broken = id(d) in breaking
            if must_be_flat and broken:
                return False
            lookahead.append((ind, MODE_BREAK if broken else mode, d.contents))
        elif isinstance(d, Line):
            if mode == MODE_BREAK or d.hard:
                return True
            if not d.soft:
                width -= 1

    return False


def _trim_trailing(out: list[str]) -> None:
    while out:
        trimmed = out[-1].rstrip(" \t")
        if trimmed:
            out[-1] = trimmed
            return
        out.pop()
