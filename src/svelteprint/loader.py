"""Loader: builds the syntax tree from the Svelte compiler's JSON parse result."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from svelteprint.ast import (
    Action,
    Animation,
    Attribute,
    AttributeLike,
    AttributeShorthand,
    AttributeValue,
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
    Node,
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
    UnknownNode,
)
from svelteprint.elements import ELEMENT_KINDS, SELF_CLOSING_KINDS
from svelteprint.errors import LoadError

logger = logging.getLogger(__name__)

type Raw = Mapping[str, Any]


def load_json(text: str, source: str) -> Root:
    """Decode a JSON parse result and build the tree."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LoadError(f"invalid parse tree JSON: {exc.msg}") from None
    return load_tree(data, source)


def load_tree(data: Raw, source: str) -> Root:
    """Build a Root from the ``parse`` result mapping (``html``, ``css``, ``instance``, ``module``)."""
    return _Loader(source).root(data)


def utf16_index_map(source: str) -> list[int] | None:
    """Map UTF-16 code unit offsets of *source* to string indices.

    The compiler runs in JavaScript, so its offsets count UTF-16 code units.
    Returns None when every character is in the BMP and the two agree.
    """
    if all(ord(ch) <= 0xFFFF for ch in source):
        return None
    table: list[int] = []
    for i, ch in enumerate(source):
        table.append(i)
        if ord(ch) > 0xFFFF:
            table.append(i + 1)
    table.append(len(source))
    return table


def to_index(table: list[int] | None, offset: int) -> int:
    """Convert a UTF-16 offset with a table from :func:`utf16_index_map`."""
    if table is None or offset < 0:
        return offset
    return table[min(offset, len(table) - 1)]


class _Loader:
    def __init__(self, source: str) -> None:
        self.source = source
        self.table = utf16_index_map(source)

    # -- helpers -----------------------------------------------------------

    def error(self, message: str, raw: object = None) -> LoadError:
        start = raw.get("start") if isinstance(raw, Mapping) else None
        if not isinstance(start, int):
            return LoadError(message, self.source)
        return LoadError(message, self.source, self.index(start))

    def mapping(self, raw: object, what: str) -> Raw:
        if not isinstance(raw, Mapping):
            raise self.error(f"expected {what} object, got {type(raw).__name__}")
        return raw

    def node_type(self, raw: Raw) -> str:
        node_type = raw.get("type")
        if not isinstance(node_type, str):
            raise self.error("node has no type", raw)
        return node_type

    def offset(self, raw: Raw, key: str, required: bool = True) -> int | None:
        value = raw.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return self.index(value)
        if value is None and not required:
            return None
        raise self.error(f"{raw.get('type', 'node')} has an invalid {key!r} offset", raw)

    def index(self, offset: int) -> int:
        return to_index(self.table, offset)

    def remap(self, raw: Any) -> Any:
        """Copy of a raw ESTree value with every start/end offset converted."""
        if self.table is None:
            return raw
        if isinstance(raw, Mapping):
            return {
                k: self.index(v)
                if k in ("start", "end") and isinstance(v, int) and not isinstance(v, bool)
                else self.remap(v)
                for k, v in raw.items()
            }
        if isinstance(raw, list):
            return [self.remap(v) for v in raw]
        return raw

    def span(self, raw: Raw) -> tuple[int, int]:
        start = self.offset(raw, "start")
        end = self.offset(raw, "end")
        assert start is not None and end is not None
        return start, end

    def string(self, raw: Raw, key: str, default: str | None = None) -> str:
        value = raw.get(key, default)
        if not isinstance(value, str):
            raise self.error(f"{raw.get('type', 'node')} has an invalid {key!r}", raw)
        return value

    def list_of(self, raw: Raw, key: str) -> Sequence[Any]:
        value = raw.get(key) or []
        if not isinstance(value, list):
            raise self.error(f"{raw.get('type', 'node')} has an invalid {key!r} list", raw)
        return value

    def modifiers(self, raw: Raw) -> tuple[str, ...]:
        return tuple(str(m) for m in self.list_of(raw, "modifiers"))

    # -- expressions -------------------------------------------------------

    def expression(self, raw: object) -> Expression:
        if isinstance(raw, str):
            # Older compilers give plain names for each contexts
            return Expression("Identifier", None, None, {"type": "Identifier", "name": raw})
        data = self.mapping(raw, "expression")
        return Expression(
            self.node_type(data),
            self.offset(data, "start", required=False),
            self.offset(data, "end", required=False),
            self.remap(data),
        )

    def optional_expression(self, raw: object) -> Expression | None:
        return None if raw is None else self.expression(raw)

    # -- tree --------------------------------------------------------------

    def root(self, data: Raw) -> Root:
        data = self.mapping(data, "parse result")
        html = self.fragment(self.mapping(data.get("html"), "html"))
        css = self.style(data["css"]) if data.get("css") else None
        instance = self.script(data["instance"]) if data.get("instance") else None
        module = self.script(data["module"]) if data.get("module") else None
        return Root(html, css, instance, module)

    def fragment(self, raw: Raw) -> Fragment:
        return Fragment(
            self.children(raw),
            self.offset(raw, "start", required=False),
            self.offset(raw, "end", required=False),
        )

    def script(self, raw: object) -> Script:
        data = self.mapping(raw, "script")
        start, end = self.span(data)
        return Script(self.string(data, "context", "default"), start, end)

    def style(self, raw: object) -> Style:
        data = self.mapping(raw, "style")
        start, end = self.span(data)
        return Style(start, end)

    def children(self, raw: Raw, key: str = "children") -> tuple[Node, ...]:
        return tuple(self.node(child) for child in self.list_of(raw, key))

    def node(self, raw: object) -> Node:
        data = self.mapping(raw, "node")
        node_type = self.node_type(data)

        match node_type:
            case "Text":
                start, end = self.span(data)
                text = self.string(data, "data", "")
                return Text(text, self.string(data, "raw", text), start, end)
            case "Comment":
                start, end = self.span(data)
                ignores = tuple(str(i) for i in self.list_of(data, "ignores"))
                return Comment(self.string(data, "data", ""), start, end, ignores)
            case "MustacheTag" | "RawMustacheTag" | "ConstTag":
                start, end = self.span(data)
                cls = {
                    "MustacheTag": MustacheTag,
                    "RawMustacheTag": RawMustacheTag,
                    "ConstTag": ConstTag,
                }[node_type]
                return cls(self.expression(data.get("expression")), start, end)
            case "DebugTag":
                start, end = self.span(data)
                identifiers = tuple(self.expression(i) for i in self.list_of(data, "identifiers"))
                return DebugTag(identifiers, start, end)
            case "IfBlock":
                start, end = self.span(data)
                return IfBlock(
                    self.expression(data.get("expression")),
                    self.children(data),
                    start,
                    end,
                    self.else_block(data.get("else")),
                    bool(data.get("elseif", False)),
                )
            case "ElseBlock":
                return self.else_block(data)  # type: ignore[return-value]
            case "EachBlock":
                start, end = self.span(data)
                index = data.get("index")
                return EachBlock(
                    self.expression(data.get("expression")),
                    self.optional_expression(data.get("context")),
                    self.children(data),
                    start,
                    end,
                    index if isinstance(index, str) else None,
                    self.optional_expression(data.get("key")),
                    self.else_block(data.get("else")),
                )
            case "AwaitBlock":
                start, end = self.span(data)
                return AwaitBlock(
                    self.expression(data.get("expression")),
                    self.optional_expression(data.get("value")),
                    self.optional_expression(data.get("error")),
                    self.branch(PendingBlock, data.get("pending")),
                    self.branch(ThenBlock, data.get("then")),
                    self.branch(CatchBlock, data.get("catch")),
                    start,
                    end,
                )
            case "KeyBlock":
                start, end = self.span(data)
                return KeyBlock(self.expression(data.get("expression")), self.children(data), start, end)
            case _ if node_type in ELEMENT_KINDS or node_type in SELF_CLOSING_KINDS:
                return self.element(node_type, data)
            case "Script":
                return self.script(data)
            case "Style":
                return self.style(data)

        logger.debug("keeping unmodelled node %s", node_type)
        return UnknownNode(
            node_type,
            self.offset(data, "start", required=False),
            self.offset(data, "end", required=False),
            self.remap(data),
        )

    def else_block(self, raw: object) -> ElseBlock | None:
        if raw is None:
            return None
        data = self.mapping(raw, "else block")
        start, end = self.span(data)
        return ElseBlock(self.children(data), start, end)

    def branch[B: (PendingBlock, ThenBlock, CatchBlock)](self, cls: type[B], raw: object) -> B:
        if raw is None:
            return cls((), None, None, True)
        data = self.mapping(raw, "await branch")
        return cls(
            self.children(data),
            self.offset(data, "start", required=False),
            self.offset(data, "end", required=False),
            bool(data.get("skip", False)),
        )

    def element(self, kind: str, data: Raw) -> Element:
        start, end = self.span(data)
        tag = data.get("tag")
        return Element(
            kind,
            self.string(data, "name"),
            tuple(self.attribute(a) for a in self.list_of(data, "attributes")),
            self.children(data),
            start,
            end,
            tag if isinstance(tag, str) else self.optional_expression(tag),
            self.optional_expression(data.get("expression")),
        )

    # -- attributes --------------------------------------------------------

    def attribute_value(self, raw: object) -> bool | tuple[AttributeValue, ...]:
        if raw is True:
            return True
        if not isinstance(raw, list):
            raise self.error(f"invalid attribute value: {raw!r}")
        values: list[AttributeValue] = []
        for item in raw:
            data = self.mapping(item, "attribute value")
            start, end = self.span(data)
            match self.node_type(data):
                case "Text":
                    text = self.string(data, "data", "")
                    values.append(Text(text, self.string(data, "raw", text), start, end))
                case "MustacheTag":
                    values.append(MustacheTag(self.expression(data.get("expression")), start, end))
                case "AttributeShorthand":
                    values.append(
                        AttributeShorthand(self.expression(data.get("expression")), start, end)
                    )
                case other:
                    raise self.error(f"unexpected {other} in attribute value", data)
        return tuple(values)

    def attribute(self, raw: object) -> AttributeLike:
        data = self.mapping(raw, "attribute")
        node_type = self.node_type(data)
        start, end = self.span(data)

        match node_type:
            case "Attribute":
                value = self.attribute_value(data.get("value", True))
                return Attribute(self.string(data, "name"), value, start, end)  # type: ignore[arg-type]
            case "StyleDirective":
                value = self.attribute_value(data.get("value", True))
                return StyleDirective(
                    self.string(data, "name"), value, start, end, self.modifiers(data)  # type: ignore[arg-type]
                )
            case "Spread":
                return Spread(self.expression(data.get("expression")), start, end)
            case "Ref":
                return Ref(self.string(data, "name"), start, end)
            case "Binding" | "Class":
                cls = Binding if node_type == "Binding" else Class
                return cls(
                    self.string(data, "name"),
                    self.expression(data.get("expression")),
                    start,
                    end,
                    self.modifiers(data),
                )
            case "Transition":
                return Transition(
                    self.string(data, "name"),
                    self.optional_expression(data.get("expression")),
                    start,
                    end,
                    self.modifiers(data),
                    bool(data.get("intro", False)),
                    bool(data.get("outro", False)),
                )
            case "EventHandler" | "Let" | "Action" | "Animation":
                directive = {
                    "EventHandler": EventHandler,
                    "Let": Let,
                    "Action": Action,
                    "Animation": Animation,
                }[node_type]
                return directive(
                    self.string(data, "name"),
                    self.optional_expression(data.get("expression")),
                    start,
                    end,
                    self.modifiers(data),
                )

        raise self.error(f"unknown attribute type: {node_type}", data)
