"""State carried through one print invocation."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from svelteprint.ast import AnyNode, Fragment
from svelteprint.doc import Doc
from svelteprint.embed import (
    BodyFormatter,
    ExpressionPrinter,
    ReindentFormatter,
    SourceExpressionPrinter,
)
from svelteprint.options import PrintOptions


type PrintFn = Callable[[AnyNode, Sequence[AnyNode], PrintContext], Doc]


@dataclass(frozen=True, slots=True)
class Frame:
    """One ancestor on the print path, with the sibling list it was printed from."""

    node: AnyNode
    siblings: tuple[AnyNode, ...]


@dataclass
class PrintContext:
    """Per-invocation state: source, options, sub-printers, path and suppression flags.

    ``ignore_next`` suppresses formatting of the next printed sibling,
    ``ignore_range`` everything up to the matching end directive, and
    ``options_doc`` holds the relocated ``<svelte:options>`` document until
    the section reorderer splices it in.
    """

    source: str
    options: PrintOptions = field(default_factory=PrintOptions)
    expressions: ExpressionPrinter = field(default_factory=SourceExpressionPrinter)
    scripts: BodyFormatter = field(default_factory=ReindentFormatter)
    styles: BodyFormatter = field(default_factory=ReindentFormatter)
    html: Fragment | None = None
    sections: tuple[AnyNode, ...] = ()
    stack: list[Frame] = field(default_factory=list)
    ignore_next: bool = False
    ignore_range: bool = False
    options_doc: Doc | None = None

    def reset(self) -> None:
        self.ignore_next = False
        self.ignore_range = False
        self.options_doc = None
        self.stack.clear()

    @contextmanager
    def frame(self, node: AnyNode, siblings: Sequence[AnyNode] = ()) -> Iterator[None]:
        self.stack.append(Frame(node, tuple(siblings)))
        try:
            yield
        finally:
            self.stack.pop()

    @property
    def node(self) -> AnyNode:
        return self.stack[-1].node

    @property
    def parent(self) -> AnyNode | None:
        return self.stack[-2].node if len(self.stack) > 1 else None

    def ancestor(self, level: int) -> AnyNode | None:
        """Return the ancestor *level* steps above the parent."""
        idx = -2 - level
        return self.stack[idx].node if len(self.stack) >= -idx else None

    @property
    def siblings(self) -> tuple[AnyNode, ...]:
        return self.stack[-1].siblings if self.stack else ()

    def text(self, start: int | None, end: int | None) -> str:
        if start is None or end is None:
            return ""
        return self.source[start:end]

    @property
    def top_level(self) -> bool:
        """Return True while printing a direct child of the root fragment."""
        return isinstance(self.parent, Fragment)
