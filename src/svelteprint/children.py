"""Children assembly: inline/block flow, hugging and whitespace separators."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from svelteprint.ast import (
    AnyNode,
    Comment,
    Element,
    Fragment,
    Node,
    Text,
)
from svelteprint.classify import (
    check_whitespace_at_end_of_block,
    check_whitespace_at_start_of_block,
    does_embed_start_after_node,
    is_block_element,
    is_empty_text_node,
    is_ignore_end_directive,
    is_ignore_start_directive,
    is_inline_element,
    is_lone_interpolation,
    is_pre_tag_content,
    is_text_node_ending_with_linebreak,
    is_text_node_ending_with_whitespace,
    is_text_node_starting_with_linebreak,
    is_text_node_starting_with_whitespace,
    is_verbatim_element,
    trim_text_node_left,
    trim_text_node_right,
)
from svelteprint.context import PrintContext, PrintFn
from svelteprint.doc import (
    BREAK_PARENT,
    Doc,
    concat,
    dedent,
    group,
    group_concat,
    hardline,
    indent,
    line,
    softline,
)
from svelteprint.options import PrintOptions

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def _has_this_binding(node: AnyNode) -> bool:
    if not isinstance(node, Element):
        return False
    if node.kind == "InlineComponent":
        return node.expression is not None
    return node.kind == "Element" and node.tag is not None


def get_attribute_line(node: AnyNode, options: PrintOptions) -> Doc:
    """Separator placed before each attribute of *node*."""
    attributes = [a for a in getattr(node, "attributes", ()) if getattr(a, "name", None) != "this"]
    if options.single_attribute_per_line and (
        len(attributes) > 1 or (attributes and _has_this_binding(node))
    ):
        return hardline
    return line


def print_attributes(node: AnyNode, ctx: PrintContext, print_fn: PrintFn) -> list[Doc]:
    """Print every attribute of *node*, each preceded by the attribute line."""
    attributes = getattr(node, "attributes", ())
    attribute_line = get_attribute_line(node, ctx.options)
    docs: list[Doc] = []
    for attr in attributes:
        if getattr(attr, "name", None) == "this":
            docs.append("")
            continue
        docs.append(concat([attribute_line, print_fn(attr, attributes, ctx)]))
    return docs


def print_self_closing_tag(node: Element, ctx: PrintContext, print_fn: PrintFn) -> Doc:
    """``<name attrs />`` for the special elements that never have content."""
    bracket_same_line = ctx.options.bracket_same_line
    return group_concat(
        [
            "<",
            node.name,
            indent(
                group_concat(
                    [
                        *print_attributes(node, ctx, print_fn),
                        "" if bracket_same_line else dedent(line),
                    ]
                )
            ),
            " " if bracket_same_line else "",
            "/>",
        ]
    )


def print_comment(node: Comment) -> Doc:
    return group_concat(["<!--", node.data, "-->"])


# ---------------------------------------------------------------------------
# Hugging
# ---------------------------------------------------------------------------


def _always_hugs(node: Element) -> bool:
    return is_verbatim_element(node) or is_lone_interpolation(node.children)


def should_hug_start(node: Element, is_supported_language: bool, options: PrintOptions) -> bool:
    """Return True if the opening tag's ``>`` sits directly against the first child."""
    if not is_supported_language or _always_hugs(node):
        return True
    if is_block_element(node, options):
        return False
    if not node.children:
        return True
    if options.whitespace_sensitivity == "ignore":
        return False
    return not is_text_node_starting_with_whitespace(node.children[0])


def should_hug_end(node: Element, is_supported_language: bool, options: PrintOptions) -> bool:
    """Return True if the closing ``</name`` sits directly against the last child."""
    if not is_supported_language or _always_hugs(node):
        return True
    if is_block_element(node, options):
        return False
    if not node.children:
        return True
    if options.whitespace_sensitivity == "ignore":
        return False
    return not is_text_node_ending_with_whitespace(node.children[-1])


def _hugs_start_of_next_node(node: Element, source: str) -> bool:
    if node.end >= len(source):
        return False
    return not source[node.end].isspace()


def _is_last_child_within_parent_block_element(node: Element, ctx: PrintContext) -> bool:
    parent = ctx.parent
    if parent is None or not is_block_element(parent, ctx.options):
        return False
    children = getattr(parent, "children", ())
    return bool(children) and (children[-1] is node or children[-1] == node)


def can_omit_softline_before_closing_tag(node: Element, ctx: PrintContext) -> bool:
    """Return True if the final ``>`` of *node* may stay on the content's last line."""
    return ctx.options.bracket_same_line and (
        not _hugs_start_of_next_node(node, ctx.source)
        or _is_last_child_within_parent_block_element(node, ctx)
    )


# ---------------------------------------------------------------------------
# Child list preparation
# ---------------------------------------------------------------------------


def trim_children(
    children: Sequence[Node], ctx: PrintContext, top_level: bool
) -> tuple[Node, ...]:
    """Trim whitespace off the text nodes at both ends of a root child list."""
    nodes = list(children)
    if not nodes:
        return ()

    first = next(
        (
            i
            for i, n in enumerate(nodes)
            if not is_empty_text_node(n)
            and not does_embed_start_after_node(n, nodes, ctx, top_level)
        ),
        len(nodes) - 1,
    )
    last = next(
        (
            i
            for i in range(len(nodes) - 1, -1, -1)
            if not is_empty_text_node(nodes[i])
            # The last node may end where a cut-out section starts, unless it is
            # a comment, which belongs to that section
            and (
                (i == len(nodes) - 1 and not isinstance(nodes[i], Comment))
                or not does_embed_start_after_node(nodes[i], nodes, ctx, top_level)
            )
        ),
        0,
    )

    for i in range(first + 1):
        n = nodes[i]
        if isinstance(n, Text):
            nodes[i] = trim_text_node_left(n)
    for i in range(len(nodes) - 1, last - 1, -1):
        n = nodes[i]
        if isinstance(n, Text):
            nodes[i] = trim_text_node_right(n)
    return tuple(nodes)


def _is_options(node: AnyNode | None) -> bool:
    return isinstance(node, Element) and node.kind == "Options"


def _is_comment_followed_by_options(children: Sequence[Node], idx: int) -> bool:
    node = children[idx]
    if (
        not isinstance(node, Comment)
        or is_ignore_end_directive(node)
        or is_ignore_start_directive(node)
    ):
        return False
    if idx + 1 >= len(children):
        return False
    following = children[idx + 1]
    if is_empty_text_node(following):
        return idx + 2 < len(children) and _is_options(children[idx + 2])
    return _is_options(following)


def _merge_texts(nodes: Sequence[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        prev = merged[-1] if merged else None
        if isinstance(node, Text) and isinstance(prev, Text):
            merged[-1] = replace(
                prev,
                data=prev.data + node.data,
                raw=prev.raw + node.raw,
                end=node.end,
            )
        else:
            merged.append(node)
    return merged


def prepare_children(
    children: Sequence[Node],
    ctx: PrintContext,
    print_fn: PrintFn,
    top_level: bool,
) -> list[Node]:
    """Drop empty texts, relocate ``<svelte:options>`` and merge adjacent texts.

    The relocated options tag, with the comment right above it, is stored in
    ``ctx.options_doc`` for the section reorderer.
    """
    options_comment: Doc | None = None
    kept: list[Node] = []
    relocate = ctx.options.sort_order != "none"

    idx = 0
    while idx < len(children):
        child = children[idx]
        idx += 1

        if isinstance(child, Text) and child.unencoded == "":
            continue
        if is_empty_text_node(child) and does_embed_start_after_node(
            child, children, ctx, top_level
        ):
            continue

        if relocate:
            if _is_comment_followed_by_options(children, idx - 1):
                assert isinstance(child, Comment)
                options_comment = print_comment(child)
                if idx < len(children) and is_empty_text_node(children[idx]):
                    idx += 1
                continue

            if isinstance(child, Element) and child.kind == "Options":
                with ctx.frame(child, children):
                    tag = print_self_closing_tag(child, ctx, print_fn)
                options_doc: Doc = group_concat([tag, hardline])
                if options_comment is not None:
                    options_doc = group_concat([options_comment, hardline, options_doc])
                ctx.options_doc = options_doc
                logger.debug("relocated <%s> at offset %d", child.name, child.start)
                continue

        kept.append(child)

    return _merge_texts(kept)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


@dataclass
class _Assembler:
    """Walks one prepared child list, emitting docs and inter-child separators."""

    nodes: list[Node]
    ctx: PrintContext
    print_fn: PrintFn
    docs: list[Doc] = field(default_factory=list)
    # The previous text's trailing whitespace was trimmed and is owed to the next inline child
    pending_whitespace: bool = False

    def print_child(self, idx: int) -> Doc:
        return self.print_fn(self.nodes[idx], self.nodes, self.ctx)

    def child(self, idx: int) -> Node | None:
        if 0 <= idx < len(self.nodes):
            return self.nodes[idx]
        return None

    def is_block(self, node: AnyNode | None) -> bool:
        return is_block_element(node, self.ctx.options)

    def is_inline(self, node: AnyNode | None) -> bool:
        return is_inline_element(node, self.ctx)

    def run(self) -> Doc:
        for idx, node in enumerate(self.nodes):
            if isinstance(node, Text):
                self.handle_text(idx)
            elif self.is_block(node):
                self.handle_block(idx)
            elif self.is_inline(node):
                self.handle_inline(idx)
            else:
                self.docs.append(self.print_child(idx))
                self.pending_whitespace = False

        if len(self.nodes) > 1 and any(self.is_block(n) for n in self.nodes):
            self.docs.append(BREAK_PARENT)
        return concat(self.docs)

    def handle_inline(self, idx: int) -> None:
        if self.pending_whitespace:
            self.docs.append(group_concat([line, self.print_child(idx)]))
        else:
            self.docs.append(self.print_child(idx))
        self.pending_whitespace = False

    def handle_block(self, idx: int) -> None:
        prev = self.child(idx - 1)
        if (
            prev is not None
            and not self.is_block(prev)
            and (
                not isinstance(prev, Text)
                or self.pending_whitespace
                or not is_text_node_ending_with_whitespace(prev)
            )
        ):
            self.docs.append(softline)

        self.docs.append(self.print_child(idx))

        nxt = self.child(idx + 1)
        if nxt is not None and (
            not isinstance(nxt, Text)
            or (
                (not is_empty_text_node(nxt) or self.is_inline(self.child(idx + 2)))
                and not is_text_node_starting_with_linebreak(nxt)
            )
        ):
            self.docs.append(softline)
        self.pending_whitespace = False

    def handle_text(self, idx: int) -> None:
        self.pending_whitespace = False

        if idx == 0 or idx == len(self.nodes) - 1:
            self.docs.append(self.print_child(idx))
            return

        node = self.nodes[idx]
        assert isinstance(node, Text)
        prev = self.nodes[idx - 1]
        nxt = self.nodes[idx + 1]

        if is_text_node_starting_with_whitespace(node) and not is_empty_text_node(node):
            if self.is_inline(prev) and not is_text_node_starting_with_linebreak(node):
                node = trim_text_node_left(node)
                self.docs.append(group_concat([self.docs.pop(), line]))
            if self.is_block(prev) and not is_text_node_starting_with_linebreak(node):
                node = trim_text_node_left(node)

        if is_text_node_ending_with_whitespace(node):
            if self.is_inline(nxt) and not is_text_node_ending_with_linebreak(node):
                self.pending_whitespace = not self.is_block(prev)
                node = trim_text_node_right(node)
            if self.is_block(nxt) and not is_text_node_ending_with_linebreak(node, 2):
                self.pending_whitespace = not self.is_block(prev)
                node = trim_text_node_right(node)

        self.nodes[idx] = node
        self.docs.append(self.print_child(idx))


def print_children(
    parent: AnyNode,
    children: Sequence[Node],
    ctx: PrintContext,
    print_fn: PrintFn,
) -> Doc:
    """Print *parent*'s children, deciding the separators between them.

    *parent* must be the node on top of ``ctx.stack``; *children* may differ
    from ``parent.children`` when the caller trimmed edge whitespace.
    """
    if is_pre_tag_content(ctx):
        return concat(print_fn(child, children, ctx) for child in children)

    nodes = prepare_children(children, ctx, print_fn, isinstance(parent, Fragment))
    if not nodes:
        return ""
    return _Assembler(nodes, ctx, print_fn).run()


def print_block_children(
    block: AnyNode,
    ctx: PrintContext,
    print_fn: PrintFn,
    children: Sequence[Node] | None = None,
) -> Doc:
    """Print the body of a ``{#...}`` block or branch, keeping its edge whitespace style."""
    nodes = list(getattr(block, "children", ()) if children is None else children)
    if not nodes:
        return ""

    at_start = check_whitespace_at_start_of_block(nodes, ctx.source)
    at_end = check_whitespace_at_end_of_block(nodes, ctx.source)
    breaks = "line" in (at_start, at_end)
    start_line: Doc = "" if at_start == "none" else hardline if breaks else line
    end_line: Doc = "" if at_end == "none" else hardline if breaks else line

    first = nodes[0]
    if isinstance(first, Text) and is_text_node_starting_with_whitespace(first):
        nodes[0] = trim_text_node_left(first)
    last = nodes[-1]
    if isinstance(last, Text) and is_text_node_ending_with_whitespace(last):
        nodes[-1] = trim_text_node_right(last)

    return concat(
        [
            indent(concat([start_line, group(print_children(block, nodes, ctx, print_fn))])),
            end_line,
        ]
    )
