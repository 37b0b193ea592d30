"""Tests for the document IR builders and trimming helpers."""

from __future__ import annotations

from svelteprint.doc import (
    BREAK_PARENT,
    Concat,
    Group,
    Line,
    concat,
    group,
    group_concat,
    hardline,
    is_empty_doc,
    is_line,
    join,
    line,
    lines_to_doc,
    literalline,
    replace_end_of_line_with,
    softline,
    trim,
    trim_left,
    trim_right,
)


class TestBuilders:
    def test_concat_flattens_nested_concats(self) -> None:
        assert concat(["a", concat(["b", "c"])]).parts == ("a", "b", "c")

    def test_join(self) -> None:
        assert join(", ", ["a", "b", "c"]).parts == ("a", ", ", "b", ", ", "c")

    def test_join_empty(self) -> None:
        assert join(line, []).parts == ()

    def test_hardline_carries_break_parent(self) -> None:
        assert hardline.parts == (Line(hard=True), BREAK_PARENT)

    def test_replace_end_of_line_with(self) -> None:
        assert replace_end_of_line_with("a\nb", hardline) == ["a", hardline, "b"]

    def test_lines_to_doc_uses_literal_lines(self) -> None:
        assert lines_to_doc("a\nb") == concat(["a", literalline, "b"])


class TestEmptiness:
    def test_empty_string(self) -> None:
        assert is_empty_doc("")
        assert not is_empty_doc("x")

    def test_lines_are_empty(self) -> None:
        assert is_empty_doc(group(concat(["", softline, line])))

    def test_lonely_line_is_kept(self) -> None:
        assert not is_empty_doc(Line(hard=True, keep_if_lonely=True))

    def test_break_parent_is_not_empty(self) -> None:
        assert not is_empty_doc(BREAK_PARENT)


class TestTrim:
    def test_trim_both_edges(self) -> None:
        assert trim([line, "a", line], is_line) == ["a"]

    def test_trim_right_descends_into_concat(self) -> None:
        assert trim_right([concat(["a", line])], is_line) == [Concat(("a",))]

    def test_trim_left_descends_into_group(self) -> None:
        result = trim_left([group_concat([softline, "a"])], is_line)
        assert result == [Group(Concat(("a",)))]

    def test_nothing_to_trim(self) -> None:
        assert trim(["a", "b"], is_line) == ["a", "b"]
