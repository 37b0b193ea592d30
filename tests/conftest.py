"""Shared test fixtures and helpers."""

from __future__ import annotations

import re

import pytest

from svelteprint import format as format_source
from svelteprint.ast import (
    Attribute,
    AttributeShorthand,
    Binding,
    Class,
    Comment,
    EachBlock,
    Element,
    ElseBlock,
    EventHandler,
    Expression,
    Fragment,
    IfBlock,
    KeyBlock,
    MustacheTag,
    Node,
    RawMustacheTag,
    Root,
    Script,
    Spread,
    Style,
    Text,
)
from svelteprint.elements import SELF_CLOSING_TAGS
from svelteprint.options import PrintOptions

_NAME_RE = re.compile(r"[A-Za-z0-9:._-]+")
_ATTR_NAME_RE = re.compile(r"[^\s=>/\"']+")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][\w$]*")

_KINDS = {
    "svelte:options": "Options",
    "svelte:head": "Head",
    "svelte:window": "Window",
    "svelte:body": "Body",
    "svelte:document": "Document",
    "slot": "Slot",
    "title": "Title",
}
_RAW_CONTENT = ("pre", "textarea")


class TreeBuilder:
    """Builds syntax trees for a small subset of Svelte markup.

    Enough for the printer tests: elements, attributes and the common
    directives, text, comments, interpolations, if/each/key blocks and
    top-level script and style sections. Offsets match what the Svelte
    compiler reports.
    """

    def __init__(self, source: str) -> None:
        self.s = source
        self.i = 0
        self.depth = 0
        self.scripts: list[Script] = []
        self.css: Style | None = None

    # -- scanning ----------------------------------------------------------

    def at(self, text: str) -> bool:
        return self.s.startswith(text, self.i)

    def expect(self, text: str) -> None:
        if not self.at(text):
            raise AssertionError(f"expected {text!r} at {self.i}: {self.s[self.i : self.i + 20]!r}")
        self.i += len(text)

    def skip_ws(self) -> None:
        while self.i < len(self.s) and self.s[self.i].isspace():
            self.i += 1

    def matching_brace(self, pos: int) -> int:
        """Index of the ``}`` closing the expression starting at *pos*."""
        depth = 0
        quote = ""
        j = pos
        while j < len(self.s):
            ch = self.s[j]
            if quote:
                if ch == "\\":
                    j += 1
                elif ch == quote:
                    quote = ""
            elif ch in "'\"`":
                quote = ch
            elif ch in "{([":
                depth += 1
            elif ch in ")]":
                depth -= 1
            elif ch == "}":
                if depth == 0:
                    return j
                depth -= 1
            j += 1
        raise AssertionError(f"unclosed expression at {pos}")

    def expression_between(self, start: int, end: int) -> Expression:
        text = self.s[start:end]
        lead = len(text) - len(text.lstrip())
        stripped = text.strip()
        s, e = start + lead, start + lead + len(stripped)
        if _IDENTIFIER_RE.fullmatch(stripped):
            return Expression("Identifier", s, e, {"type": "Identifier", "name": stripped})
        return Expression("Expression", s, e, {"type": "Expression"})

    def expression(self) -> Expression:
        """Read an expression up to and including its closing brace."""
        end = self.matching_brace(self.i)
        expr = self.expression_between(self.i, end)
        self.i = end + 1
        return expr

    # -- tree --------------------------------------------------------------

    def root(self) -> Root:
        children = self.children()
        if self.i != len(self.s):
            raise AssertionError(f"unexpected {self.s[self.i : self.i + 20]!r} at {self.i}")
        html = Fragment(
            children,
            children[0].start if children else None,
            children[-1].end if children else None,
        )
        module = next((s for s in self.scripts if s.context == "module"), None)
        instance = next((s for s in self.scripts if s.context != "module"), None)
        return Root(html, self.css, instance, module)

    def children(self) -> tuple[Node, ...]:
        nodes: list[Node] = []
        while self.i < len(self.s):
            if self.at("</") or self.at("{/") or self.at("{:"):
                break
            if self.at("<!--"):
                nodes.append(self.comment())
            elif self.depth == 0 and (self.at("<script") or self.at("<style")):
                self.section()
            elif self.at("<"):
                nodes.append(self.element())
            elif self.at("{#if "):
                start = self.i
                self.i += len("{#if ")
                nodes.append(self.if_block(start))
            elif self.at("{#each "):
                nodes.append(self.each_block())
            elif self.at("{#key "):
                nodes.append(self.key_block())
            elif self.at("{@html "):
                start = self.i
                self.i += len("{@html ")
                nodes.append(RawMustacheTag(self.expression(), start, self.i))
            elif self.at("{"):
                start = self.i
                self.i += 1
                nodes.append(MustacheTag(self.expression(), start, self.i))
            else:
                nodes.append(self.text())
        return tuple(nodes)

    def text(self, stops: str = "<{") -> Text:
        start = self.i
        while self.i < len(self.s) and self.s[self.i] not in stops:
            self.i += 1
        data = self.s[start : self.i]
        return Text(data, data, start, self.i)

    def comment(self) -> Comment:
        start = self.i
        end = self.s.index("-->", start) + 3
        self.i = end
        return Comment(self.s[start + 4 : end - 3], start, end)

    def section(self) -> None:
        start = self.i
        tag = "script" if self.at("<script") else "style"
        header_end = self.s.index(">", start)
        self.i = self.s.index(f"</{tag}>", header_end) + len(f"</{tag}>")
        if tag == "style":
            self.css = Style(start, self.i)
        else:
            header = self.s[start:header_end]
            context = "module" if 'context="module"' in header else "default"
            self.scripts.append(Script(context, start, self.i))

    def element(self) -> Element:
        start = self.i
        self.expect("<")
        m = _NAME_RE.match(self.s, self.i)
        assert m is not None
        name = m.group()
        self.i = m.end()

        if name[0].isupper():
            kind = "InlineComponent"
        else:
            kind = _KINDS.get(name, "Element")

        attributes = []
        while True:
            self.skip_ws()
            if self.at("/>"):
                self.i += 2
                return Element(kind, name, tuple(attributes), (), start, self.i)
            if self.at(">"):
                self.i += 1
                break
            attributes.append(self.attribute())

        if name.lower() in SELF_CLOSING_TAGS:
            return Element(kind, name, tuple(attributes), (), start, self.i)

        if name in _RAW_CONTENT:
            close = self.s.index(f"</{name}>", self.i)
            children: tuple[Node, ...] = ()
            if close > self.i:
                data = self.s[self.i : close]
                children = (Text(data, data, self.i, close),)
            self.i = close
        else:
            self.depth += 1
            children = self.children()
            self.depth -= 1
        self.expect(f"</{name}>")
        return Element(kind, name, tuple(attributes), children, start, self.i)

    def attribute(self):
        start = self.i
        if self.at("{..."):
            self.i += 4
            return Spread(self.expression(), start, self.i)
        if self.at("{"):
            self.i += 1
            expr = self.expression()
            value = (AttributeShorthand(expr, start, self.i),)
            return Attribute(expr.name or "", value, start, self.i)

        m = _ATTR_NAME_RE.match(self.s, self.i)
        assert m is not None, f"bad attribute at {self.i}"
        name = m.group()
        self.i = m.end()

        prefix, _, directive = name.partition(":")
        if directive and prefix in ("bind", "class", "on"):
            expr = None
            if self.at("={"):
                self.i += 2
                expr = self.expression()
            if prefix == "on":
                return EventHandler(directive, expr, start, self.i)
            if expr is None:
                expr = Expression(
                    "Identifier", None, None, {"type": "Identifier", "name": directive}
                )
            cls = Binding if prefix == "bind" else Class
            return cls(directive, expr, start, self.i)

        if not self.at("="):
            return Attribute(name, True, start, self.i)
        self.i += 1

        if self.at("{"):
            value_start = self.i
            self.i += 1
            value = (MustacheTag(self.expression(), value_start, self.i),)
            return Attribute(name, value, start, self.i)

        quote = self.s[self.i]
        if quote not in "\"'":
            word = self.text(stops=" \t\n>")
            return Attribute(name, (word,), start, self.i)

        self.i += 1
        parts = []
        while not self.at(quote):
            if self.at("{"):
                part_start = self.i
                self.i += 1
                parts.append(MustacheTag(self.expression(), part_start, self.i))
            else:
                parts.append(self.text(stops=quote + "{"))
        self.i += 1
        return Attribute(name, tuple(parts), start, self.i)

    def if_block(self, start: int, elseif: bool = False) -> IfBlock:
        expr = self.expression()
        children = self.children()
        else_ = None
        if self.at("{:else if "):
            else_start = self.i
            self.i += len("{:else if ")
            inner = self.if_block(else_start, elseif=True)
            else_ = ElseBlock((inner,), else_start, inner.end)
        elif self.at("{:else}"):
            else_start = self.i
            self.i += len("{:else}")
            else_children = self.children()
            else_ = ElseBlock(else_children, else_start, self.i)
        if elseif:
            # Chained branches share the outermost {/if}
            return IfBlock(expr, children, start, self.i, else_, True)
        self.expect("{/if}")
        return IfBlock(expr, children, start, self.i, else_)

    def each_block(self) -> EachBlock:
        start = self.i
        self.i += len("{#each ")
        close = self.matching_brace(self.i)
        head_end = self.s.index(" as ", self.i, close)
        expr = self.expression_between(self.i, head_end)
        self.i = head_end + len(" as ")

        comma = self.s.find(",", self.i, close)
        context = self.expression_between(self.i, comma if comma >= 0 else close)
        index = self.s[comma + 1 : close].strip() if comma >= 0 else None
        self.i = close + 1

        children = self.children()
        else_ = None
        if self.at("{:else}"):
            else_start = self.i
            self.i += len("{:else}")
            else_children = self.children()
            else_ = ElseBlock(else_children, else_start, self.i)
        self.expect("{/each}")
        return EachBlock(expr, context, children, start, self.i, index, None, else_)

    def key_block(self) -> KeyBlock:
        start = self.i
        self.i += len("{#key ")
        expr = self.expression()
        children = self.children()
        self.expect("{/key}")
        return KeyBlock(expr, children, start, self.i)


def build_tree(source: str) -> Root:
    """Build the syntax tree for *source*."""
    return TreeBuilder(source).root()


def fmt(source: str, **options: object) -> str:
    """Format *source* with the given option overrides."""
    return format_source(source, build_tree(source), PrintOptions(**options))


@pytest.fixture
def tree():
    """Return a helper that builds the syntax tree for a source string."""
    return build_tree


@pytest.fixture
def format_svelte():
    """Return a helper that formats a source string with option overrides."""
    return fmt
