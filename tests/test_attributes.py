"""Tests for splitting section sources and extracting their attributes."""

from __future__ import annotations

from svelteprint.ast import Attribute, Text
from svelteprint.attributes import extract_attributes, split_section


class TestSplitSection:
    def test_header_and_content(self) -> None:
        source = '<script lang="ts" context="module">let a;</script>'
        parts = split_section(source, 0, len(source))
        assert parts.header == 'lang="ts" context="module"'
        assert parts.header_start == 0
        assert parts.attributes_start == 8
        assert parts.content == "let a;"
        assert parts.content_start == 35

    def test_offset_section(self) -> None:
        source = "<div />\n<style>\n  p {}\n</style>"
        start = source.index("<style>")
        parts = split_section(source, start, len(source))
        assert parts.header == ""
        assert parts.content == "\n  p {}\n"

    def test_empty_body(self) -> None:
        source = "<script></script>"
        assert split_section(source, 0, len(source)).content == ""


class TestExtractAttributes:
    def test_quoted_values(self) -> None:
        attrs = extract_attributes('lang="ts" context="module"', 8)
        assert attrs == (
            Attribute("lang", (Text("ts", "ts", 14, 16),), 8, 17),
            Attribute("context", (Text("module", "module", 27, 33),), 18, 34),
        )

    def test_single_quotes(self) -> None:
        (attr,) = extract_attributes("lang='scss'")
        assert attr.value == (Text("scss", "scss", 6, 10),)

    def test_unquoted_value(self) -> None:
        (attr,) = extract_attributes("lang=ts")
        assert attr.name == "lang"
        assert attr.value == (Text("ts", "ts", 5, 7),)
        assert attr.end == 7

    def test_valueless(self) -> None:
        attrs = extract_attributes("defer global")
        assert [a.name for a in attrs] == ["defer", "global"]
        assert all(a.value is True for a in attrs)

    def test_empty_header(self) -> None:
        assert extract_attributes("") == ()
