"""Top-level sections: comment reattachment, script/style printing and reordering."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from svelteprint.ast import (
    Comment,
    CommentInfo,
    Fragment,
    Node,
    Root,
    Script,
    Style,
    Text,
)
from svelteprint.attributes import extract_attributes, split_section
from svelteprint.children import print_attributes
from svelteprint.classify import (
    get_lang_attribute,
    is_empty_text_node,
    is_ignore_directive,
    is_ignore_end_directive,
    is_ignore_start_directive,
    is_node_supported_language,
)
from svelteprint.context import PrintContext, PrintFn
from svelteprint.doc import (
    BREAK_PARENT,
    BreakParent,
    Concat,
    Doc,
    Line,
    concat,
    dedent,
    group_concat,
    hardline,
    indent,
    is_line,
    join,
    lines_to_doc,
    literalline,
    softline,
    trim_right,
)
from svelteprint.elements import PRAGMA, has_pragma
from svelteprint.errors import EmbedError
from svelteprint.options import SortOrderPart

logger = logging.getLogger(__name__)

type Section = Script | Style

# Hard line that survives trimming when it is all that is left
_LONELY_HARDLINE = Concat((Line(hard=True, keep_if_lonely=True), BREAK_PARENT))


# ---------------------------------------------------------------------------
# Comment reattachment
# ---------------------------------------------------------------------------


def _ending_at(children: Sequence[Node], offset: int) -> Node | None:
    return next((c for c in children if getattr(c, "end", None) == offset), None)


def remove_and_get_leading_comments(
    children: Sequence[Node], section: Section
) -> tuple[tuple[CommentInfo, ...], tuple[Node, ...]]:
    """Detach the comments directly above *section* from the markup.

    Returns the comments in source order and the remaining markup children.
    Whitespace between the comments goes with them; ignore range directives
    are never taken.
    """
    if not children:
        return (), tuple(children)

    comments: list[Comment] = []
    # newlines[i] is the whitespace following comments[i]
    newlines: list[Text | None] = []

    prev = _ending_at(children, section.start)
    while prev is not None:
        if (
            isinstance(prev, Comment)
            and not is_ignore_start_directive(prev)
            and not is_ignore_end_directive(prev)
        ):
            comments.append(prev)
            if len(comments) != len(newlines):
                newlines.append(None)
        elif isinstance(prev, Text) and is_empty_text_node(prev):
            newlines.append(prev)
        else:
            break
        prev = _ending_at(children, prev.start)

    # A whitespace node in front of the first comment stays in the markup
    del newlines[len(comments) :]

    removed = {id(n) for n in (*comments, *newlines) if n is not None}
    remaining = tuple(c for c in children if id(c) not in removed)

    infos = tuple(
        CommentInfo(comment, nl is not None and len(nl.unencoded.split("\n")) > 2)
        for comment, nl in zip(comments, newlines)
    )
    return infos[::-1], remaining


def assign_comments_to_sections(root: Root) -> Root:
    """Move the comments above each script and style from the markup onto the section."""
    html = root.html
    children: tuple[Node, ...] = html.children
    updates: dict[str, Section] = {}

    for field_name in ("module", "instance", "css"):
        section: Section | None = getattr(root, field_name)
        if section is None:
            continue
        comments, children = remove_and_get_leading_comments(children, section)
        updates[field_name] = replace(section, comments=comments)

    return replace(root, html=replace(html, children=children), **updates)


def _with_attributes(section: Section, source: str) -> Section:
    parts = split_section(source, section.start, section.end)
    return replace(section, attributes=extract_attributes(parts.header, parts.attributes_start))


# ---------------------------------------------------------------------------
# Script and style sections
# ---------------------------------------------------------------------------


def _preformatted_body(content: str) -> Doc:
    if not content:
        return ""
    if content.lstrip("\t\f\r ").startswith("\n"):
        content = content[content.index("\n") + 1 :]
    tail = content.rstrip("\t\f\r ")
    if tail.endswith("\n"):
        content = tail[:-1]
    return concat([literalline, lines_to_doc(content, literalline), hardline])


def _format_body(section: Section, content: str, ctx: PrintContext) -> Doc:
    formatter = ctx.scripts if isinstance(section, Script) else ctx.styles
    try:
        body = formatter.format_body(content, get_lang_attribute(section))
    except EmbedError as exc:
        logger.warning(
            "keeping <%s> at offset %d unformatted: %s",
            "script" if isinstance(section, Script) else "style",
            section.start,
            exc.message,
        )
        return _preformatted_body(content)

    if body is None:
        body = ""
    if ctx.options.indent_script_and_style:
        return concat([indent(concat([hardline, body])), hardline])
    return concat([hardline, body, hardline])


def print_embedded(section: Section, ctx: PrintContext, print_fn: PrintFn) -> Doc:
    """Print a ``<script>`` or ``<style>`` section with the comments relocated with it."""
    tag = "script" if isinstance(section, Script) else "style"
    content = split_section(ctx.source, section.start, section.end).content

    last_comment = section.comments[-1].comment if section.comments else None
    can_format = is_node_supported_language(section) and not is_ignore_directive(last_comment)

    body: Doc
    if not can_format:
        body = _preformatted_body(content)
    elif content.strip():
        body = _format_body(section, content, ctx)
    elif content:
        body = _LONELY_HARDLINE
    else:
        body = ""

    opening_tag = group_concat(
        [
            "<",
            tag,
            indent(
                group_concat(
                    [
                        *print_attributes(section, ctx, print_fn),
                        "" if ctx.options.bracket_same_line else dedent(softline),
                    ]
                )
            ),
            ">",
        ]
    )
    result = group_concat([opening_tag, body, "</", tag, ">"])

    comments: list[Doc] = []
    for info in section.comments:
        comments.extend(["<!--", info.comment.data, "-->", hardline])
        if info.empty_line_after:
            comments.append(hardline)

    if ctx.options.sort_order != "none":
        # The section left its source position; its comments go with it
        return concat([*comments, result, hardline])
    return concat([*comments, result]) if comments else result


# ---------------------------------------------------------------------------
# Reordering
# ---------------------------------------------------------------------------


def _interleave(html: Fragment, sections: Sequence[Section]) -> Fragment:
    """Put each section back in front of the markup node that followed it."""
    by_end = {s.end: s for s in sections}
    children: list[Node] = []
    for child in html.children:
        section = by_end.pop(getattr(child, "start", -1), None)
        if section is not None:
            children.append(section)
        children.append(child)
    # Sections at the very end of the file have no following node
    children.extend(sorted(by_end.values(), key=lambda s: s.start))
    return replace(html, children=tuple(children))


def _is_trailing_line(doc: Doc) -> bool:
    return is_line(doc) or isinstance(doc, BreakParent)


def _with_pragma(doc: Doc, ctx: PrintContext) -> Doc:
    if ctx.options.insert_pragma and not has_pragma(ctx.source):
        return concat([PRAGMA, hardline, doc])
    return doc


def print_top_level_parts(root: Root, ctx: PrintContext, print_fn: PrintFn) -> Doc:
    """Print the markup and every section, concatenated in the configured order."""
    root = assign_comments_to_sections(root)
    source = ctx.source

    module = _with_attributes(root.module, source) if root.module else None
    instance = _with_attributes(root.instance, source) if root.instance else None
    css = _with_attributes(root.css, source) if root.css else None
    sections: list[Section] = [s for s in (module, instance, css) if s is not None]
    ctx.sections = tuple(sections)

    if ctx.options.sort_order == "none":
        html = _interleave(root.html, sections)
        ctx.html = html
        logger.debug("printing %d section(s) in source order", len(sections))
        return _with_pragma(print_fn(html, (), ctx), ctx)

    ctx.html = root.html
    parts: dict[SortOrderPart, list[Doc]] = {
        "options": [],
        "scripts": [],
        "markup": [],
        "styles": [],
    }

    for script in (module, instance):
        if script is not None:
            parts["scripts"].append(print_fn(script, (), ctx))
    if css is not None:
        parts["styles"].append(print_fn(css, (), ctx))

    markup = print_fn(root.html, (), ctx)
    if markup != "":
        parts["markup"].append(markup)
    if ctx.options_doc is not None:
        parts["options"].append(ctx.options_doc)

    docs: list[Doc] = [doc for part in ctx.options.sort_parts for doc in parts[part]]
    logger.debug("section order: %s", ctx.options.sort_order)

    ctx.ignore_next = False
    ctx.ignore_range = False
    ctx.options_doc = None

    if ctx.options.parent_parser == "markdown" and docs:
        # Embedded in markdown: no empty line before the closing code fence
        docs[-1] = trim_right([docs[-1]], _is_trailing_line)[0]

    return _with_pragma(group_concat([join(hardline, docs)]), ctx)
