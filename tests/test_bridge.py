"""Tests for the parser subprocess bridge, using small stand-in parser scripts."""

from __future__ import annotations

import subprocess
import sys

import pytest

from svelteprint.ast import Text
from svelteprint.bridge import DEFAULT_COMMAND, PARSE_SCRIPT, SvelteParser
from svelteprint.errors import ParserError

ECHO_TEXT = """\
import json, sys
src = sys.stdin.read()
text = {"type": "Text", "start": 0, "end": len(src), "data": src, "raw": src}
html = {"type": "Fragment", "start": 0, "end": len(src), "children": [text]}
print(json.dumps({"ast": {"html": html, "css": None, "instance": None, "module": None}}))
"""

SYNTAX_ERROR = """\
import json
print(json.dumps({"error": {"message": "Unexpected token", "start": 3, "end": 4}}))
"""


def _parser(script: str, **kwargs) -> SvelteParser:
    return SvelteParser([sys.executable, "-c", script], **kwargs)


class TestParse:
    def test_tree_loaded(self) -> None:
        root = _parser(ECHO_TEXT).parse("hello")
        assert root.html.children == (Text("hello", "hello", 0, 5),)
        assert root.css is None

    def test_raw_mapping(self) -> None:
        tree = _parser(ECHO_TEXT).parse_json("hi")
        assert tree["html"]["children"][0]["data"] == "hi"

    def test_default_command_runs_node(self) -> None:
        assert DEFAULT_COMMAND[0] == "node"
        assert DEFAULT_COMMAND[-1] == PARSE_SCRIPT
        assert 'require("svelte/compiler")' in PARSE_SCRIPT


class TestFailures:
    def test_syntax_error_has_position(self) -> None:
        with pytest.raises(ParserError) as exc_info:
            _parser(SYNTAX_ERROR).parse("<div\n")
        err = exc_info.value
        assert err.message == "Unexpected token"
        assert err.start is not None
        assert (err.start.line, err.start.column) == (1, 4)
        assert "<div" in err.format()

    def test_error_position_after_emoji(self) -> None:
        # 😀 is two UTF-16 code units, so offset 3 is the "<"
        with pytest.raises(ParserError) as exc_info:
            _parser(SYNTAX_ERROR).parse("😀x<")
        err = exc_info.value
        assert err.start is not None and err.end is not None
        assert (err.start.line, err.start.column) == (1, 3)
        assert (err.start.offset, err.end.offset) == (2, 3)

    def test_nonzero_exit(self) -> None:
        script = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        with pytest.raises(ParserError, match=r"failed \(exit 3\): boom"):
            _parser(script).parse("x")

    def test_invalid_json(self) -> None:
        with pytest.raises(ParserError, match="invalid JSON"):
            _parser("print('nope')").parse("x")

    def test_no_tree(self) -> None:
        with pytest.raises(ParserError, match="no tree"):
            _parser("print('{}')").parse("x")

    def test_missing_command(self) -> None:
        parser = SvelteParser(["svelteprint-no-such-parser-command"])
        with pytest.raises(ParserError, match="could not be started"):
            parser.parse("x")

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(args, **kwargs):
            raise subprocess.TimeoutExpired(args, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(ParserError, match="timed out after 0.5s"):
            SvelteParser(timeout=0.5).parse("x")
