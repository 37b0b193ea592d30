"""Node printer: turns each syntax-tree node into a Document IR value."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from svelteprint.ast import (
    Action,
    Animation,
    AnyNode,
    Attribute,
    AttributeShorthand,
    AwaitBlock,
    Binding,
    CatchBlock,
    Class,
    Comment,
    ConstTag,
    DebugTag,
    EachBlock,
    Element,
    ElseBlock,
    EventHandler,
    Expression,
    Fragment,
    IfBlock,
    KeyBlock,
    Let,
    MustacheTag,
    PendingBlock,
    RawMustacheTag,
    Ref,
    Root,
    Script,
    Spread,
    Style,
    StyleDirective,
    Text,
    ThenBlock,
    Transition,
)
from svelteprint.children import (
    can_omit_softline_before_closing_tag,
    get_attribute_line,
    print_attributes,
    print_block_children,
    print_children,
    print_comment,
    print_self_closing_tag,
    should_hug_end,
    should_hug_start,
    trim_children,
)
from svelteprint.classify import (
    does_embed_start_after_node,
    ends_with_linebreak,
    get_next_node,
    is_empty_text_node,
    is_ignore_directive,
    is_ignore_end_directive,
    is_ignore_start_directive,
    is_inline_element,
    is_inside_quoted_attribute,
    is_lone_mustache_tag,
    is_node_supported_language,
    is_or_can_be_converted_to_shorthand,
    is_pre_tag_content,
    is_text_node_ending_with_whitespace,
    is_text_node_starting_with_linebreak,
    is_text_node_starting_with_whitespace,
    print_raw,
    starts_with_linebreak,
    trim_text_node_left,
    trim_text_node_right,
)
from svelteprint.context import PrintContext
from svelteprint.doc import (
    BREAK_PARENT,
    BreakParent,
    Doc,
    concat,
    dedent,
    fill,
    group,
    group_concat,
    hardline,
    indent,
    is_empty_doc,
    is_line,
    join,
    line,
    lines_to_doc,
    literalline,
    replace_end_of_line_with,
    softline,
    trim,
)
from svelteprint.elements import (
    ELEMENT_KINDS,
    FORMATTABLE_ATTRIBUTES,
    SELF_CLOSING_KINDS,
    SELF_CLOSING_TAGS,
)
from svelteprint.embed import BodyFormatter, ExpressionFlags, ExpressionPrinter
from svelteprint.errors import EmbedError, PrintError, UnknownNodeError
from svelteprint.options import PrintOptions
from svelteprint.sections import print_embedded, print_top_level_parts

logger = logging.getLogger(__name__)

_WORD_SEPARATOR_RE = re.compile(r"[\t\n\f\r ]+")
_TWO_NEWLINES_RE = re.compile(r"\n\r?\s*\n\r?")
_CLASS_WHITESPACE_RE = re.compile(r"([^ \t\n])(([ \t]+\Z)|([ \t]+(\r?\n))|[ \t]+)")
_CLASS_TRAILING_RE = re.compile(r"([^ \t\n])[ \t]+\Z")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def print_component(
    root: Root,
    source: str,
    options: PrintOptions | None = None,
    *,
    expressions: ExpressionPrinter | None = None,
    scripts: BodyFormatter | None = None,
    styles: BodyFormatter | None = None,
) -> Doc:
    """Build the document for a whole component."""
    ctx = PrintContext(source, options or PrintOptions())
    if expressions is not None:
        ctx.expressions = expressions
    if scripts is not None:
        ctx.scripts = scripts
    if styles is not None:
        ctx.styles = styles
    return build_document(root, ctx)


def build_document(root: Root, ctx: PrintContext) -> Doc:
    """Print *root* with *ctx*, clearing the suppression state before and after."""
    ctx.reset()
    try:
        return print_top_level_parts(root, ctx, print_node)
    finally:
        ctx.reset()


def print_node(node: AnyNode, siblings: Sequence[AnyNode], ctx: PrintContext) -> Doc:
    """Print *node*, pushing it onto the context's ancestor stack."""
    with ctx.frame(node, siblings):
        return _print(node, ctx)


def _is_suppressed(node: AnyNode, ctx: PrintContext) -> bool:
    if not (ctx.ignore_next or (ctx.ignore_range and not is_ignore_end_directive(node))):
        return False
    return not (isinstance(node, Text) and is_empty_text_node(node))


def _print(node: AnyNode, ctx: PrintContext) -> Doc:
    if _is_suppressed(node, ctx):
        ctx.ignore_next = False
        text = ctx.text(getattr(node, "start", None), getattr(node, "end", None))
        return concat(replace_end_of_line_with(text, literalline))

    opts = ctx.options

    match node:
        case Fragment():
            return _print_fragment(node, ctx)
        case Text():
            return _print_text(node, ctx)
        case Element() if node.kind in ELEMENT_KINDS:
            return _print_element(node, ctx)
        case Element() if node.kind == "Options" and opts.sort_order != "none":
            raise PrintError(
                "<svelte:options> should have been relocated before printing",
                ctx.source,
                node.start,
                node.end,
            )
        case Element() if node.kind in SELF_CLOSING_KINDS:
            return print_self_closing_tag(node, ctx, print_node)
        case Expression(type="Identifier"):
            return node.name or ""
        case AttributeShorthand():
            return node.expression.name or print_js(node.expression, ctx)
        case Attribute():
            return _print_attribute(node, ctx)
        case StyleDirective():
            return _print_style_directive(node, ctx)
        case MustacheTag():
            return concat(
                [
                    "{",
                    print_js(
                        node.expression, ctx, force_single_quote=is_inside_quoted_attribute(ctx)
                    ),
                    "}",
                ]
            )
        case RawMustacheTag():
            return concat(["{@html ", print_js(node.expression, ctx), "}"])
        case ConstTag():
            return concat(
                ["{@const ", print_js(node.expression, ctx, remove_parentheses=True), "}"]
            )
        case Spread():
            return concat(["{...", print_js(node.expression, ctx), "}"])
        case DebugTag():
            identifiers = [print_node(i, node.identifiers, ctx) for i in node.identifiers]
            return concat(
                [
                    "{@debug",
                    concat([" ", join(", ", identifiers)]) if identifiers else "",
                    "}",
                ]
            )
        case IfBlock():
            return _print_if_block(node, ctx)
        case ElseBlock():
            return _print_else_block(node, ctx)
        case EachBlock():
            return _print_each_block(node, ctx)
        case AwaitBlock():
            return _print_await_block(node, ctx)
        case KeyBlock():
            parts: list[Doc] = [
                "{#key ",
                print_block_js(node.expression, ctx),
                "}",
                print_block_children(node, ctx, print_node),
                "{/key}",
            ]
            return concat([group_concat(parts), BREAK_PARENT])
        case PendingBlock() | ThenBlock() | CatchBlock():
            return print_block_children(node, ctx, print_node)
        case EventHandler():
            return concat(
                [
                    "on:",
                    node.name,
                    _print_modifiers(node.modifiers),
                    concat(["=", *_print_js_attribute(node.expression, ctx)])
                    if node.expression is not None
                    else "",
                ]
            )
        case Binding() | Class():
            prefix = "bind:" if isinstance(node, Binding) else "class:"
            shorthand = (
                node.expression.type == "Identifier"
                and node.expression.name == node.name
                and opts.allow_shorthand
                and not opts.strict_mode
            )
            return concat(
                [
                    prefix,
                    node.name,
                    "" if shorthand else concat(["=", *_print_js_attribute(node.expression, ctx)]),
                ]
            )
        case Let():
            # shorthand let directives have no expression
            shorthand = node.expression is None or (
                node.expression.type == "Identifier" and node.expression.name == node.name
            )
            return concat(
                [
                    "let:",
                    node.name,
                    "" if shorthand else concat(["=", *_print_js_attribute(node.expression, ctx)]),
                ]
            )
        case Transition():
            if node.intro and node.outro:
                kind = "transition"
            elif node.intro:
                kind = "in"
            else:
                kind = "out"
            return concat(
                [
                    kind,
                    ":",
                    node.name,
                    _print_modifiers(node.modifiers),
                    concat(["=", *_print_js_attribute(node.expression, ctx)])
                    if node.expression is not None
                    else "",
                ]
            )
        case Action() | Animation():
            prefix = "use:" if isinstance(node, Action) else "animate:"
            return concat(
                [
                    prefix,
                    node.name,
                    concat(["=", *_print_js_attribute(node.expression, ctx)])
                    if node.expression is not None
                    else "",
                ]
            )
        case Ref():
            return concat(["ref:", node.name])
        case Comment():
            return _print_comment_node(node, ctx)
        case Script() | Style():
            return print_embedded(node, ctx, print_node)

    return _print_unknown(node, ctx)


# ---------------------------------------------------------------------------
# Embedded expressions
# ---------------------------------------------------------------------------


def print_js(
    expression: Expression,
    ctx: PrintContext,
    *,
    force_single_quote: bool = False,
    force_single_line: bool = False,
    remove_parentheses: bool = False,
) -> Doc:
    """Delegate *expression* to the expression sub-printer with the given flags."""
    flags = ExpressionFlags(force_single_quote, force_single_line, remove_parentheses)
    doc = ctx.expressions.print_expression(expression, ctx.source, flags)
    return "" if doc is None else doc


def print_block_js(expression: Expression, ctx: PrintContext) -> Doc:
    return print_js(expression, ctx, force_single_line=True)


def _print_js_attribute(expression: Expression, ctx: PrintContext) -> list[Doc]:
    strict = ctx.options.strict_mode
    open_, close = ('"{', '}"') if strict else ("{", "}")
    return [open_, print_js(expression, ctx, force_single_quote=strict), close]


def _print_unknown(node: AnyNode, ctx: PrintContext) -> Doc:
    """Print a node of an unmodelled kind as a plain expression, if possible."""
    node_type = getattr(node, "type", type(node).__name__)
    start = getattr(node, "start", None)
    end = getattr(node, "end", None)
    data: Mapping[str, Any] = getattr(node, "data", {})
    expression = Expression(node_type, start, end, data)
    try:
        return print_js(expression, ctx)
    except EmbedError:
        logger.error(
            "cannot print node:\n%s", json.dumps({"type": node_type, **data}, indent=4, default=str)
        )
        raise UnknownNodeError(node_type, ctx.source, start) from None


def _print_modifiers(modifiers: Sequence[str]) -> Doc:
    if not modifiers:
        return ""
    return concat(["|", join("|", modifiers)])


def expand_pattern(expression: Expression | None, ctx: PrintContext) -> str:
    """Render a destructuring pattern with a leading space, e.g. ``" { a, b }"``."""
    if expression is None:
        return ""
    data = dict(expression.data)
    data.setdefault("type", expression.type)
    if expression.start is not None:
        data.setdefault("start", expression.start)
        data.setdefault("end", expression.end)
    return _expand(data, None, ctx)


def _expand(node: Mapping[str, Any] | None, parent: Mapping[str, Any] | None, ctx: PrintContext) -> str:
    if node is None:
        return ""

    match node.get("type"):
        case "ArrayExpression" | "ArrayPattern":
            elements = ",".join(_expand(e, None, ctx) for e in node.get("elements", ()))
            return " [" + elements[1:] + "]"
        case "AssignmentPattern":
            return _expand(node["left"], None, ctx) + " =" + _expand(node["right"], None, ctx)
        case "Identifier":
            return " " + node["name"]
        case "Literal":
            return " " + str(node.get("raw", node.get("value")))
        case "ObjectExpression":
            props = ",".join(_expand(p, node, ctx) for p in node.get("properties", ()))
            return " {" + props + " }"
        case "ObjectPattern":
            props = ",".join(_expand(p, None, ctx) for p in node.get("properties", ()))
            return " {" + props + " }"
        case "Property":
            key, value = node["key"], node["value"]
            if value.get("type") in ("ObjectPattern", "ArrayPattern"):
                return " " + key.get("name", "") + ":" + _expand(value, None, ctx)
            if (value.get("type") == "Identifier" and key.get("name") != value.get("name")) or (
                parent is not None and parent.get("type") == "ObjectExpression"
            ):
                return _expand(key, None, ctx) + ":" + _expand(value, None, ctx)
            return _expand(value, None, ctx)
        case "RestElement":
            return " ..." + node["argument"]["name"]

    start, end = node.get("start"), node.get("end")
    if isinstance(start, int) and isinstance(end, int):
        return " " + ctx.source[start:end].strip()
    node_type = str(node.get("type"))
    logger.error("cannot expand pattern:\n%s", json.dumps(node, indent=4, default=str))
    raise UnknownNodeError(node_type, ctx.source, None)


# ---------------------------------------------------------------------------
# Fragment and text
# ---------------------------------------------------------------------------


def _is_whitespace_doc(doc: Doc) -> bool:
    # print_children may end with a BreakParent hiding lines before it
    return is_line(doc) or (isinstance(doc, str) and doc.strip() == "") or isinstance(doc, BreakParent)


def _print_fragment(node: Fragment, ctx: PrintContext) -> Doc:
    children = node.children
    if not children or all(is_empty_text_node(c) for c in children):
        return ""
    if is_pre_tag_content(ctx):
        return group_concat(print_node(c, children, ctx) for c in children)

    trimmed = trim_children(children, ctx, top_level=True)
    output = trim([print_children(node, trimmed, ctx, print_node)], _is_whitespace_doc)
    if all(is_empty_doc(d) for d in output):
        return ""
    return group_concat([*output, hardline])


def split_text_to_docs(text: str) -> list[Doc]:
    """Words of *text* separated by lines; edge newlines become hard lines.

    Two or more newlines at an edge keep one blank line.
    """
    docs: list[Doc] = [d for d in join(line, _WORD_SEPARATOR_RE.split(text)).parts if d != ""]

    if starts_with_linebreak(text):
        docs[0] = hardline
    if starts_with_linebreak(text, 2):
        docs = [hardline, *docs]

    if ends_with_linebreak(text):
        docs[-1] = hardline
    if ends_with_linebreak(text, 2):
        docs = [*docs, hardline]

    return docs


def _collapse_class_whitespace(m: re.Match[str]) -> str:
    if m.group(3):
        return m.group(0)
    return m.group(1) + (m.group(5) if m.group(4) else " ")


def _print_text(node: Text, ctx: PrintContext) -> Doc:
    text = node.unencoded

    if not is_pre_tag_content(ctx):
        if is_empty_text_node(node):
            if _TWO_NEWLINES_RE.search(text):
                return concat([hardline, hardline])
            if "\n" in text:
                return hardline
            if text:
                return line
            return ""
        return fill(split_text_to_docs(text))

    parent = ctx.parent
    if not isinstance(parent, Attribute):
        return text

    grandparent = ctx.ancestor(1)
    if parent.name == "class" and isinstance(grandparent, Element) and grandparent.kind == "Element":
        # Keep the user's line structure but collapse whitespace runs within each line
        text = _CLASS_WHITESPACE_RE.sub(_collapse_class_whitespace, text)
        values = parent.value if isinstance(parent.value, tuple) else ()
        is_last = bool(values) and values[-1] == node
        text = _CLASS_TRAILING_RE.sub(r"\1" if is_last else r"\1 ", text, count=1)
    return concat(replace_end_of_line_with(text, literalline))


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def _print_attribute_value(
    node: Attribute | StyleDirective, quotes: bool, ctx: PrintContext
) -> Doc:
    values = node.value if isinstance(node.value, tuple) else ()
    docs = [print_node(v, values, ctx) for v in values]
    if not quotes or node.name not in FORMATTABLE_ATTRIBUTES:
        return concat(docs)
    return indent(group_concat(trim(docs, is_line)))


def _print_attribute(node: Attribute, ctx: PrintContext) -> Doc:
    opts = ctx.options
    name = node.name

    if is_or_can_be_converted_to_shorthand(name, node.value):
        if opts.strict_mode:
            return concat([name, '="{', name, '}"'])
        if opts.allow_shorthand:
            return concat(["{", name, "}"])
        return concat([name, "={", name, "}"])

    if node.value is True:
        return name

    quotes = not is_lone_mustache_tag(node.value) or opts.strict_mode
    value = _print_attribute_value(node, quotes, ctx)
    if quotes:
        return concat([name, "=", '"', value, '"'])
    return concat([name, "=", value])


def _print_style_directive(node: StyleDirective, ctx: PrintContext) -> Doc:
    opts = ctx.options
    prefix: list[Doc] = ["style:", node.name, _print_modifiers(node.modifiers)]

    if node.value is True or is_or_can_be_converted_to_shorthand(node.name, node.value):
        if opts.strict_mode:
            return concat([*prefix, '="{', node.name, '}"'])
        if opts.allow_shorthand:
            return concat(prefix)
        return concat([*prefix, "={", node.name, "}"])

    quotes = not is_lone_mustache_tag(node.value) or opts.strict_mode
    value = _print_attribute_value(node, quotes, ctx)
    if quotes:
        return concat([*prefix, "=", '"', value, '"'])
    return concat([*prefix, "=", value])


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


def _print_this_binding(node: Element, attribute_line: Doc, ctx: PrintContext) -> Doc:
    if node.kind == "InlineComponent" and node.expression is not None:
        return concat([attribute_line, "this=", *_print_js_attribute(node.expression, ctx)])
    if node.kind == "Element" and node.tag is not None:
        if isinstance(node.tag, str):
            return concat([attribute_line, "this=", f'"{node.tag}"'])
        return concat([attribute_line, "this=", *_print_js_attribute(node.tag, ctx)])
    return ""


def _print_pre(node: Element, ctx: PrintContext) -> Doc:
    """Children of a verbatim element: text exactly as written, other nodes printed."""
    parts: list[Doc] = []
    for child in node.children:
        if isinstance(child, Text):
            for j, piece in enumerate(_LINE_SPLIT_RE.split(ctx.text(child.start, child.end))):
                if j:
                    parts.append(literalline)
                parts.append(piece)
        else:
            parts.append(print_node(child, node.children, ctx))
    return concat(parts)


def _print_element(node: Element, ctx: PrintContext) -> Doc:
    opts = ctx.options
    bracket_same_line = opts.bracket_same_line
    name = node.name

    is_supported_language = not (name == "template" and not is_node_supported_language(node))
    is_empty = all(is_empty_text_node(c) for c in node.children)
    is_doctype = name.upper() == "!DOCTYPE"
    is_self_closing = is_empty and (
        not opts.strict_mode
        or node.kind != "Element"
        or name in SELF_CLOSING_TAGS
        or is_doctype
    )
    pre = is_pre_tag_content(ctx)

    # Attributes are printed before the children
    attributes = print_attributes(node, ctx, print_node)
    this_binding = _print_this_binding(node, get_attribute_line(node, opts), ctx)

    if is_self_closing:
        return group_concat(
            [
                "<",
                name,
                indent(
                    group_concat(
                        [
                            this_binding,
                            *attributes,
                            "" if bracket_same_line or is_doctype else dedent(line),
                        ]
                    )
                ),
                " " if bracket_same_line and not is_doctype else "",
                ">" if is_doctype else "/>",
            ]
        )

    hug_start = should_hug_start(node, is_supported_language, opts)
    hug_end = should_hug_end(node, is_supported_language, opts)

    if hug_start or bracket_same_line or pre:
        tag_end: Doc = ""
    else:
        tag_end = dedent(softline)
    opening_tag: list[Doc] = [
        "<",
        name,
        indent(group_concat([this_binding, *attributes, tag_end])),
    ]

    if pre:
        return group_concat([*opening_tag, ">", _print_pre(node, ctx), f"</{name}>"])

    if not is_supported_language and not is_empty:
        # Hard lines but no indentation keep `lang="..."` and `>` on one line
        raw = lines_to_doc(print_raw(node, ctx.source, strip_edge_newlines=True))
        return group_concat(
            [*opening_tag, ">", group_concat([hardline, raw, hardline]), f"</{name}>"]
        )

    children = list(node.children)

    if is_empty:
        inline = is_inline_element(node, ctx)
        if inline and children and is_text_node_starting_with_whitespace(children[0]):
            body: Doc = line
        else:
            body = softline if bracket_same_line else ""
    else:
        body = ""

    if hug_start and hug_end:
        if not is_empty:
            body = print_children(node, children, ctx, print_node)
        hugged = concat([softline, group_concat([">", body, f"</{name}"])])
        omit_closing_softline = (
            is_empty and not bracket_same_line
        ) or can_omit_softline_before_closing_tag(node, ctx)
        return group_concat(
            [
                *opening_tag,
                group(hugged) if is_empty else group(indent(hugged)),
                "" if omit_closing_softline else softline,
                ">",
            ]
        )

    # Without hugging the element is block-like or has whitespace at an edge
    separator_start: Doc = softline
    separator_end: Doc = softline
    inline = is_inline_element(node, ctx)
    did_set_end_separator = False

    first = children[0] if children else None
    last = children[-1] if children else None
    if not hug_start and isinstance(first, Text):
        if (
            is_text_node_starting_with_linebreak(first)
            and first is not last
            and (not inline or is_text_node_ending_with_whitespace(last))
        ):
            separator_start = hardline
            separator_end = hardline
            did_set_end_separator = True
        elif inline:
            separator_start = line
        children[0] = trim_text_node_left(first)
    if not hug_end and isinstance(last, Text):
        if inline and not did_set_end_separator:
            separator_end = line
        children[-1] = trim_text_node_right(children[-1])  # type: ignore[arg-type]

    if not is_empty:
        body = print_children(node, children, ctx, print_node)

    if hug_start:
        return group_concat(
            [
                *opening_tag,
                indent(concat([softline, group_concat([">", body])])),
                separator_end,
                f"</{name}>",
            ]
        )

    if hug_end:
        return group_concat(
            [
                *opening_tag,
                ">",
                indent(concat([separator_start, group_concat([body, f"</{name}"])])),
                "" if can_omit_softline_before_closing_tag(node, ctx) else softline,
                ">",
            ]
        )

    if is_empty:
        return group_concat([*opening_tag, ">", body, f"</{name}>"])

    return group_concat(
        [
            *opening_tag,
            ">",
            indent(concat([separator_start, body])),
            separator_end,
            f"</{name}>",
        ]
    )


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def _print_if_block(node: IfBlock, ctx: PrintContext) -> Doc:
    parts: list[Doc] = [
        "{#if ",
        print_block_js(node.expression, ctx),
        "}",
        print_block_children(node, ctx, print_node),
    ]
    if node.else_ is not None:
        parts.append(print_node(node.else_, (), ctx))
    parts.append("{/if}")
    return concat([group_concat(parts), BREAK_PARENT])


def _print_else_block(node: ElseBlock, ctx: PrintContext) -> Doc:
    children = node.children
    # An each block's else cannot chain, {:else if} there would read as a new branch
    if (
        len(children) == 1
        and isinstance(children[0], IfBlock)
        and not isinstance(ctx.parent, EachBlock)
    ):
        if_node = children[0]
        with ctx.frame(if_node, children):
            parts: list[Doc] = [
                "{:else if ",
                print_block_js(if_node.expression, ctx),
                "}",
                print_block_children(if_node, ctx, print_node),
            ]
            if if_node.else_ is not None:
                parts.append(print_node(if_node.else_, (), ctx))
        return concat(parts)

    return concat(["{:else}", print_block_children(node, ctx, print_node)])


def _print_each_block(node: EachBlock, ctx: PrintContext) -> Doc:
    parts: list[Doc] = [
        "{#each ",
        print_block_js(node.expression, ctx),
        " as",
        expand_pattern(node.context, ctx),
    ]
    if node.index:
        parts.extend([", ", node.index])
    if node.key is not None:
        parts.extend([" (", print_block_js(node.key, ctx), ")"])
    parts.extend(["}", print_block_children(node, ctx, print_node)])
    if node.else_ is not None:
        parts.append(print_node(node.else_, (), ctx))
    parts.append("{/each}")
    return concat([group_concat(parts), BREAK_PARENT])


def _has_content(children: Sequence[AnyNode]) -> bool:
    return any(not is_empty_text_node(c) for c in children)


def _print_await_block(node: AwaitBlock, ctx: PrintContext) -> Doc:
    has_pending = _has_content(node.pending.children)
    has_then = _has_content(node.then.children)
    has_catch = _has_content(node.catch.children)
    expression = print_block_js(node.expression, ctx)

    block: list[Doc] = []
    if not has_pending and has_then:
        block.append(
            group_concat(["{#await ", expression, " then", expand_pattern(node.value, ctx), "}"])
        )
        block.append(print_node(node.then, (), ctx))
    elif not has_pending and has_catch:
        block.append(
            group_concat(["{#await ", expression, " catch", expand_pattern(node.error, ctx), "}"])
        )
        block.append(print_node(node.catch, (), ctx))
    else:
        block.append(group_concat(["{#await ", expression, "}"]))
        if has_pending:
            block.append(print_node(node.pending, (), ctx))
        if has_then:
            block.append(group_concat(["{:then", expand_pattern(node.value, ctx), "}"]))
            block.append(print_node(node.then, (), ctx))

    if (has_pending or has_then) and has_catch:
        block.append(group_concat(["{:catch", expand_pattern(node.error, ctx), "}"]))
        block.append(print_node(node.catch, (), ctx))

    block.append("{/await}")
    return group_concat(block)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


def _print_comment_node(node: Comment, ctx: PrintContext) -> Doc:
    siblings = ctx.siblings
    top_level = ctx.top_level
    following = get_next_node(node, siblings)

    if is_ignore_start_directive(node) and top_level:
        ctx.ignore_range = True
    elif is_ignore_end_directive(node) and top_level:
        ctx.ignore_range = False
    elif does_embed_start_after_node(node, siblings, ctx, top_level) or (
        is_empty_text_node(following)
        and does_embed_start_after_node(following, siblings, ctx, top_level)
    ):
        # The comment belongs to a cut-out script or style and is printed with it
        return ""
    elif is_ignore_directive(node):
        ctx.ignore_next = True

    return print_comment(node)
