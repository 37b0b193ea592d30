"""Whitespace and node-kind predicates used by the printers."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace
from typing import Literal

from svelteprint.ast import (
    AnyNode,
    Attribute,
    AttributeShorthand,
    Comment,
    Element,
    MustacheTag,
    RawMustacheTag,
    Script,
    Style,
    Text,
)
from svelteprint.context import PrintContext
from svelteprint.elements import (
    BLOCK_ELEMENTS,
    FORMATTABLE_ATTRIBUTES,
    UNSUPPORTED_LANGUAGES,
    VERBATIM_ELEMENTS,
    resolve_directive,
)
from svelteprint.options import PrintOptions

type BlockWhitespace = Literal["none", "space", "line"]

_STARTS_WITH_WS = re.compile(r"^\s")
_ENDS_WITH_WS = re.compile(r"\s\Z")
_START_LINEBREAK: dict[int, re.Pattern[str]] = {}
_END_LINEBREAK: dict[int, re.Pattern[str]] = {}


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def starts_with_linebreak(text: str, nr_lines: int = 1) -> bool:
    """Return True if *text* opens with at least *nr_lines* newlines (blank lines only)."""
    pattern = _START_LINEBREAK.get(nr_lines)
    if pattern is None:
        pattern = _START_LINEBREAK[nr_lines] = re.compile(rf"^([\t\f\r ]*\n){{{nr_lines}}}")
    return pattern.search(text) is not None


def ends_with_linebreak(text: str, nr_lines: int = 1) -> bool:
    pattern = _END_LINEBREAK.get(nr_lines)
    if pattern is None:
        pattern = _END_LINEBREAK[nr_lines] = re.compile(rf"(\n[\t\f\r ]*){{{nr_lines}}}\Z")
    return pattern.search(text) is not None


def is_empty_text_node(node: AnyNode | None) -> bool:
    return isinstance(node, Text) and node.unencoded.strip() == ""


def is_text_node_starting_with_linebreak(node: AnyNode | None, nr_lines: int = 1) -> bool:
    return isinstance(node, Text) and starts_with_linebreak(node.unencoded, nr_lines)


def is_text_node_ending_with_linebreak(node: AnyNode | None, nr_lines: int = 1) -> bool:
    return isinstance(node, Text) and ends_with_linebreak(node.unencoded, nr_lines)


def is_text_node_starting_with_whitespace(node: AnyNode | None) -> bool:
    return isinstance(node, Text) and _STARTS_WITH_WS.search(node.unencoded) is not None


def is_text_node_ending_with_whitespace(node: AnyNode | None) -> bool:
    return isinstance(node, Text) and _ENDS_WITH_WS.search(node.unencoded) is not None


def trim_text_node_left(node: Text) -> Text:
    return replace(node, data=node.data.lstrip(), raw=node.raw.lstrip())


def trim_text_node_right(node: Text) -> Text:
    return replace(node, data=node.data.rstrip(), raw=node.raw.rstrip())


# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------


def is_block_element(node: AnyNode | None, options: PrintOptions) -> bool:
    """Block-like children are isolated onto their own lines."""
    return (
        isinstance(node, Element)
        and node.kind == "Element"
        and options.whitespace_sensitivity != "strict"
        and (options.whitespace_sensitivity == "ignore" or node.name in BLOCK_ELEMENTS)
    )


def is_inline_element(node: AnyNode | None, ctx: PrintContext) -> bool:
    """Inline-like children pack with their neighbours."""
    return (
        isinstance(node, Element)
        and node.kind == "Element"
        and not is_block_element(node, ctx.options)
        and not is_pre_tag_content(ctx)
    )


def is_verbatim_element(node: AnyNode | None) -> bool:
    return isinstance(node, Element) and node.kind == "Element" and node.name.lower() in VERBATIM_ELEMENTS


def is_pre_tag_content(ctx: PrintContext) -> bool:
    """Return True inside whitespace-preserving elements and unformatted attribute values."""
    for frame in ctx.stack:
        node = frame.node
        if is_verbatim_element(node):
            return True
        if isinstance(node, Attribute) and node.name not in FORMATTABLE_ATTRIBUTES:
            return True
    return False


def is_lone_mustache_tag(value: object) -> bool:
    return isinstance(value, tuple) and len(value) == 1 and isinstance(value[0], MustacheTag)


def is_attribute_shorthand(value: object) -> bool:
    return isinstance(value, tuple) and len(value) == 1 and isinstance(value[0], AttributeShorthand)


def is_or_can_be_converted_to_shorthand(name: str, value: object) -> bool:
    """Return True for ``{name}`` or ``name={name}`` values."""
    if is_attribute_shorthand(value):
        return True
    if is_lone_mustache_tag(value):
        expression = value[0].expression  # type: ignore[index]
        return expression.type == "Identifier" and expression.name == name
    return False


def is_lone_interpolation(children: Sequence[AnyNode]) -> bool:
    return len(children) == 1 and isinstance(children[0], (MustacheTag, RawMustacheTag))


def is_inside_quoted_attribute(ctx: PrintContext) -> bool:
    return any(
        isinstance(f.node, Attribute)
        and (not is_lone_mustache_tag(f.node.value) or ctx.options.strict_mode)
        for f in ctx.stack
    )


def _directive(node: AnyNode | None) -> str | None:
    if isinstance(node, Comment):
        return resolve_directive(node.data)
    return None


def is_ignore_directive(node: AnyNode | None) -> bool:
    return _directive(node) == "ignore"


def is_ignore_start_directive(node: AnyNode | None) -> bool:
    return _directive(node) == "ignore-start"


def is_ignore_end_directive(node: AnyNode | None) -> bool:
    return _directive(node) == "ignore-end"


# ---------------------------------------------------------------------------
# Embedded languages
# ---------------------------------------------------------------------------


def _attribute_text(value: object) -> str | None:
    if not isinstance(value, tuple):
        return None
    return "".join(v.data for v in value if isinstance(v, Text))


def get_lang_attribute(node: Element | Script | Style) -> str | None:
    """Return the ``lang``/``type`` attribute value without a ``text/`` prefix."""
    for attr in node.attributes:
        if isinstance(attr, Attribute) and attr.name in ("lang", "type"):
            text = _attribute_text(attr.value)
            if text:
                return text.removeprefix("text/")
    return None


def is_node_supported_language(node: Element | Script | Style) -> bool:
    lang = get_lang_attribute(node)
    return not (lang and lang in UNSUPPORTED_LANGUAGES)


# ---------------------------------------------------------------------------
# Siblings and source adjacency
# ---------------------------------------------------------------------------


def index_of(siblings: Sequence[AnyNode], node: AnyNode) -> int | None:
    for idx, sibling in enumerate(siblings):
        if sibling is node:
            return idx
    for idx, sibling in enumerate(siblings):
        if sibling == node:
            return idx
    return None


def get_next_node(node: AnyNode, siblings: Sequence[AnyNode]) -> AnyNode | None:
    idx = index_of(siblings, node)
    if idx is None or idx + 1 >= len(siblings):
        return None
    return siblings[idx + 1]


def does_embed_start_after_node(
    node: AnyNode | None,
    siblings: Sequence[AnyNode],
    ctx: PrintContext,
    top_level: bool,
) -> bool:
    """Return True if a cut-out script or style section sits right after *node*."""
    if node is None or not top_level:
        return False
    end = getattr(node, "end", None)
    if end is None:
        return False
    next_node = get_next_node(node, siblings)
    next_start = getattr(next_node, "start", None)
    return any(
        section.start >= end and (next_start is None or section.end <= next_start)
        for section in ctx.sections
        if isinstance(section, (Script, Style))
    )


def check_whitespace_at_start_of_block(
    children: Sequence[AnyNode], source: str
) -> BlockWhitespace:
    """Classify the whitespace between a block's opening tag and its first child."""
    if not children:
        return "none"
    first = children[0]
    if is_text_node_starting_with_linebreak(first):
        return "line"
    if is_text_node_starting_with_whitespace(first):
        return "space"

    # The parser may swallow whitespace between the opening `}` and the first child
    start = getattr(first, "start", None)
    if start is None:
        return "none"
    opening_end = source.rfind("}", 0, start + 1)
    if opening_end > 0 and start > opening_end + 1:
        between = source[opening_end + 1 : start]
        if between.strip() == "":
            return "line" if starts_with_linebreak(between) else "space"
    return "none"


def check_whitespace_at_end_of_block(
    children: Sequence[AnyNode], source: str
) -> BlockWhitespace:
    if not children:
        return "none"
    last = children[-1]
    if is_text_node_ending_with_linebreak(last):
        return "line"
    if is_text_node_ending_with_whitespace(last):
        return "space"

    end = getattr(last, "end", None)
    if end is None:
        return "none"
    closing_start = source.find("{", end)
    if closing_start > 0 and end < closing_start:
        between = source[end:closing_start]
        if between.strip() == "":
            return "line" if ends_with_linebreak(between) else "space"
    return "none"


def print_raw(node: Element, source: str, strip_edge_newlines: bool = False) -> str:
    """Return the source text spanned by *node*'s children."""
    if not node.children:
        return ""
    raw = source[node.children[0].start : node.children[-1].end]
    if not strip_edge_newlines:
        return raw
    if starts_with_linebreak(raw):
        raw = raw[raw.index("\n") + 1 :]
    if ends_with_linebreak(raw):
        raw = raw[: raw.rindex("\n")]
        if raw.endswith("\r"):
            raw = raw[:-1]
    return raw
