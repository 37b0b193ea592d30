"""Tests for building the syntax tree from the compiler's JSON parse result."""

from __future__ import annotations

import json

import pytest

from svelteprint import format as format_source
from svelteprint.ast import (
    Attribute,
    AttributeShorthand,
    AwaitBlock,
    Binding,
    Comment,
    EachBlock,
    Element,
    EventHandler,
    IfBlock,
    MustacheTag,
    Text,
    Transition,
    UnknownNode,
)
from svelteprint.errors import LoadError
from svelteprint.loader import load_json, load_tree, to_index, utf16_index_map


def _text(data: str, start: int) -> dict:
    return {"type": "Text", "start": start, "end": start + len(data), "raw": data, "data": data}


def _ident(name: str, start: int) -> dict:
    return {"type": "Identifier", "start": start, "end": start + len(name), "name": name}


def _html(*children: dict) -> dict:
    return {"html": {"type": "Fragment", "start": 0, "end": 0, "children": list(children)}}


class TestRoot:
    def test_sections(self) -> None:
        data = {
            **_html(),
            "css": {"type": "Style", "start": 30, "end": 50},
            "instance": {"type": "Script", "start": 0, "end": 20, "context": "default"},
            "module": {"type": "Script", "start": 20, "end": 30, "context": "module"},
        }
        root = load_tree(data, "")
        assert root.instance is not None and root.instance.context == "default"
        assert root.module is not None and root.module.context == "module"
        assert root.css is not None and (root.css.start, root.css.end) == (30, 50)

    def test_missing_sections(self) -> None:
        root = load_tree({**_html(), "css": None, "instance": None}, "")
        assert root.css is None and root.instance is None and root.module is None

    def test_missing_html(self) -> None:
        with pytest.raises(LoadError, match="expected html object"):
            load_tree({}, "")

    def test_invalid_json(self) -> None:
        with pytest.raises(LoadError, match="invalid parse tree JSON"):
            load_json("{not json", "")

    def test_json_round(self) -> None:
        root = load_json(json.dumps(_html(_text("hi", 0))), "hi")
        assert root.html.children == (Text("hi", "hi", 0, 2),)


class TestNodes:
    def test_text_and_comment(self) -> None:
        data = _html(
            _text("a", 0),
            {"type": "Comment", "start": 1, "end": 10, "data": " c ", "ignores": ["a11y"]},
        )
        children = load_tree(data, "").html.children
        assert children[0] == Text("a", "a", 0, 1)
        assert children[1] == Comment(" c ", 1, 10, ("a11y",))

    def test_element(self) -> None:
        source = '<div class="x" {id}>{y}</div>'
        data = _html(
            {
                "type": "Element",
                "name": "div",
                "start": 0,
                "end": 29,
                "attributes": [
                    {
                        "type": "Attribute",
                        "name": "class",
                        "start": 5,
                        "end": 14,
                        "value": [_text("x", 12)],
                    },
                    {
                        "type": "Attribute",
                        "name": "id",
                        "start": 15,
                        "end": 19,
                        "value": [
                            {
                                "type": "AttributeShorthand",
                                "start": 16,
                                "end": 18,
                                "expression": _ident("id", 16),
                            }
                        ],
                    },
                ],
                "children": [
                    {"type": "MustacheTag", "start": 20, "end": 23, "expression": _ident("y", 21)}
                ],
            }
        )
        (div,) = load_tree(data, source).html.children
        assert isinstance(div, Element)
        assert div.kind == "Element" and div.name == "div"
        class_attr, id_attr = div.attributes
        assert isinstance(class_attr, Attribute)
        assert class_attr.value == (Text("x", "x", 12, 13),)
        assert isinstance(id_attr, Attribute)
        assert isinstance(id_attr.value[0], AttributeShorthand)  # type: ignore[index]
        (child,) = div.children
        assert isinstance(child, MustacheTag)
        assert child.expression.name == "y"

    def test_valueless_attribute(self) -> None:
        data = _html(
            {
                "type": "Element",
                "name": "input",
                "start": 0,
                "end": 17,
                "attributes": [
                    {"type": "Attribute", "name": "disabled", "start": 7, "end": 15, "value": True}
                ],
                "children": [],
            }
        )
        (node,) = load_tree(data, "").html.children
        assert node.attributes[0].value is True  # type: ignore[union-attr]

    def test_component_and_special_kinds(self) -> None:
        data = _html(
            {"type": "InlineComponent", "name": "Foo", "start": 0, "end": 7, "children": []},
            {"type": "Options", "name": "svelte:options", "start": 7, "end": 30},
        )
        foo, options = load_tree(data, "").html.children
        assert isinstance(foo, Element) and foo.kind == "InlineComponent"
        assert isinstance(options, Element) and options.kind == "Options"

    def test_directives(self) -> None:
        data = _html(
            {
                "type": "Element",
                "name": "input",
                "start": 0,
                "end": 60,
                "attributes": [
                    {
                        "type": "Binding",
                        "name": "value",
                        "start": 7,
                        "end": 17,
                        "expression": _ident("value", 12),
                    },
                    {
                        "type": "EventHandler",
                        "name": "click",
                        "start": 18,
                        "end": 40,
                        "modifiers": ["once", "preventDefault"],
                        "expression": None,
                    },
                    {
                        "type": "Transition",
                        "name": "fade",
                        "start": 41,
                        "end": 48,
                        "intro": True,
                        "outro": False,
                    },
                ],
                "children": [],
            }
        )
        (node,) = load_tree(data, "").html.children
        binding, handler, transition = node.attributes  # type: ignore[union-attr]
        assert isinstance(binding, Binding) and binding.expression.name == "value"
        assert isinstance(handler, EventHandler)
        assert handler.expression is None
        assert handler.modifiers == ("once", "preventDefault")
        assert isinstance(transition, Transition) and transition.intro and not transition.outro

    def test_unknown_attribute_type(self) -> None:
        data = _html(
            {
                "type": "Element",
                "name": "div",
                "start": 0,
                "end": 10,
                "attributes": [{"type": "Mystery", "start": 5, "end": 6}],
                "children": [],
            }
        )
        with pytest.raises(LoadError, match="unknown attribute type: Mystery"):
            load_tree(data, "<div x></div>")

    def test_blocks(self) -> None:
        data = _html(
            {
                "type": "IfBlock",
                "start": 0,
                "end": 30,
                "expression": _ident("a", 5),
                "children": [_text("x", 7)],
                "else": {"type": "ElseBlock", "start": 8, "end": 20, "children": []},
            },
            {
                "type": "EachBlock",
                "start": 30,
                "end": 60,
                "expression": _ident("items", 37),
                "context": "item",
                "index": "i",
                "children": [],
            },
        )
        if_block, each = load_tree(data, "").html.children
        assert isinstance(if_block, IfBlock)
        assert if_block.else_ is not None and if_block.else_.children == ()
        assert not if_block.elseif
        assert isinstance(each, EachBlock)
        assert each.context is not None and each.context.name == "item"
        assert each.index == "i"
        assert each.key is None and each.else_ is None

    def test_await_missing_branches(self) -> None:
        data = _html(
            {
                "type": "AwaitBlock",
                "start": 0,
                "end": 30,
                "expression": _ident("p", 8),
                "value": _ident("v", 15),
                "error": None,
                "then": {"type": "ThenBlock", "start": 17, "end": 20, "children": []},
            }
        )
        (node,) = load_tree(data, "").html.children
        assert isinstance(node, AwaitBlock)
        assert node.pending.skip and node.pending.children == ()
        assert not node.then.skip and node.then.start == 17
        assert node.catch.skip
        assert node.error is None

    def test_unknown_node_kept(self) -> None:
        data = _html({"type": "SnippetBlock", "start": 0, "end": 4, "extra": 1})
        (node,) = load_tree(data, "").html.children
        assert isinstance(node, UnknownNode)
        assert node.type == "SnippetBlock"
        assert (node.start, node.end) == (0, 4)
        assert node.data["extra"] == 1

    def test_node_without_type(self) -> None:
        with pytest.raises(LoadError, match="node has no type"):
            load_tree(_html({"start": 0, "end": 1}), "x")

    def test_bad_offset(self) -> None:
        with pytest.raises(LoadError, match="offset"):
            load_tree(_html({"type": "Text", "start": "0", "end": 1, "data": "x"}), "x")


class TestFormatMapping:
    def test_format_accepts_mapping(self) -> None:
        source = "<p>hi</p>"
        data = _html(
            {
                "type": "Element",
                "name": "p",
                "start": 0,
                "end": 9,
                "attributes": [],
                "children": [_text("hi", 3)],
            }
        )
        assert format_source(source, data) == "<p>hi</p>\n"


def _node(type_: str, start: int, end: int, **fields) -> dict:
    return {"type": type_, "start": start, "end": end, **fields}


def _p(start: int, end: int, *children: dict) -> dict:
    return _node("Element", start, end, name="p", attributes=[], children=list(children))


class TestUtf16Offsets:
    """Compiler offsets count UTF-16 code units; characters outside the BMP take two."""

    def test_index_map(self) -> None:
        assert utf16_index_map("abc") is None
        table = utf16_index_map("a😀b")
        assert table == [0, 1, 2, 2, 3]
        assert to_index(table, 3) == 2
        assert to_index(table, 99) == 3
        assert to_index(None, 7) == 7

    def test_interpolation_after_emoji(self) -> None:
        source = "<p>😀 {name}</p>"
        data = _html(
            _p(
                0,
                16,
                _node("Text", 3, 6, raw="😀 ", data="😀 "),
                _node("MustacheTag", 6, 12, expression=_node("Identifier", 7, 11, name="name")),
            )
        )
        (p,) = load_tree(data, source).html.children
        text, tag = p.children
        assert (p.start, p.end) == (0, 15)
        assert (text.start, text.end) == (3, 5)
        assert (tag.start, tag.end) == (5, 11)
        assert (tag.expression.start, tag.expression.end) == (6, 10)
        assert tag.expression.data["start"] == 6
        assert source[tag.start : tag.end] == "{name}"
        assert format_source(source, data) == "<p>😀 {name}</p>\n"

    def test_ignored_node_after_emoji(self) -> None:
        source = "<!-- prettier-ignore -->\n<p>😀  {x}</p>\n<p>😀  {x}</p>"
        data = _html(
            _node("Comment", 0, 24, data=" prettier-ignore "),
            _node("Text", 24, 25, raw="\n", data="\n"),
            _p(
                25,
                39,
                _node("Text", 28, 32, raw="😀  ", data="😀  "),
                _node("MustacheTag", 32, 35, expression=_node("Identifier", 33, 34, name="x")),
            ),
            _node("Text", 39, 40, raw="\n", data="\n"),
            _p(
                40,
                54,
                _node("Text", 43, 47, raw="😀  ", data="😀  "),
                _node("MustacheTag", 47, 50, expression=_node("Identifier", 48, 49, name="x")),
            ),
        )
        out = format_source(source, data)
        assert out == "<!-- prettier-ignore -->\n<p>😀  {x}</p>\n<p>😀 {x}</p>\n"

    def test_script_with_emoji(self) -> None:
        source = '<script>\n  let x = "😀";\n</script>\n\n<p>{x}</p>'
        data = {
            **_html(
                _node("Text", 34, 36, raw="\n\n", data="\n\n"),
                _p(
                    36,
                    46,
                    _node("MustacheTag", 39, 42, expression=_node("Identifier", 40, 41, name="x")),
                ),
            ),
            "instance": _node("Script", 0, 34, context="default"),
        }
        root = load_tree(data, source)
        assert root.instance is not None and root.instance.end == 33
        assert format_source(source, data) == source + "\n"

    def test_unknown_node_data_remapped(self) -> None:
        source = "😀{@render x()}"
        data = _html(
            _node("RenderTag", 2, 15, expression=_node("CallExpression", 11, 14, optional=False))
        )
        (node,) = load_tree(data, source).html.children
        assert isinstance(node, UnknownNode)
        assert (node.start, node.end) == (1, 14)
        assert node.data["expression"]["start"] == 10
        assert node.data["expression"]["optional"] is False
