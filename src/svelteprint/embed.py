"""Sub-printers for embedded script expressions and script/style bodies."""

from __future__ import annotations

import logging
import re
import subprocess
import textwrap
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from svelteprint.ast import Expression
from svelteprint.doc import Doc, concat, hardline, lines_to_doc
from svelteprint.errors import EmbedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExpressionFlags:
    """How an embedded expression must be printed."""

    force_single_quote: bool = False
    force_single_line: bool = False
    remove_parentheses: bool = False


class ExpressionPrinter(Protocol):
    def print_expression(self, expression: Expression, source: str, flags: ExpressionFlags) -> Doc:
        ...


class BodyFormatter(Protocol):
    def format_body(self, content: str, lang: str | None) -> Doc:
        ...


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

_STRING_RE = re.compile(
    r"""'(?:[^'\\\n]|\\.)*'|"(?:[^"\\\n]|\\.)*"|`(?:[^`\\]|\\.)*`""",
    re.DOTALL,
)
_NEWLINE_RUN_RE = re.compile(r"[ \t]*\r?\n\s*")


def _segments(text: str) -> list[tuple[bool, str]]:
    """Split *text* into (is_string_literal, chunk) pairs."""
    result: list[tuple[bool, str]] = []
    pos = 0
    for m in _STRING_RE.finditer(text):
        if m.start() > pos:
            result.append((False, text[pos : m.start()]))
        result.append((True, m.group()))
        pos = m.end()
    if pos < len(text):
        result.append((False, text[pos:]))
    return result


def _single_quoted(literal: str) -> str:
    if not literal.startswith('"'):
        return literal
    inner = literal[1:-1]
    if "'" in inner:
        return literal
    return "'" + inner.replace('\\"', '"') + "'"


def _strip_parentheses(text: str) -> str:
    while text.startswith("(") and text.endswith(")"):
        depth = 0
        closes_at_end = False
        offset = 0
        for is_string, chunk in _segments(text):
            if is_string:
                offset += len(chunk)
                continue
            for ch in chunk:
                if ch == "(":
                    depth += 1
                elif ch == ")":
                    depth -= 1
                    if depth == 0:
                        closes_at_end = offset == len(text) - 1
                        break
                offset += 1
            if depth == 0:
                break
        if not closes_at_end:
            return text
        text = text[1:-1].strip()
    return text


@dataclass(frozen=True, slots=True)
class SourceExpressionPrinter:
    """Prints expressions from their source text.

    String literals are never rewritten except for the single-quote
    conversion; line comments disable single-line collapsing.
    """

    def print_expression(self, expression: Expression, source: str, flags: ExpressionFlags) -> Doc:
        text = self.expression_text(expression, source)

        if flags.remove_parentheses:
            text = _strip_parentheses(text)

        chunks = _segments(text)
        if flags.force_single_quote:
            chunks = [(s, _single_quoted(c) if s else c) for s, c in chunks]
        if flags.force_single_line and not any("//" in c for s, c in chunks if not s):
            chunks = [(s, c if s else _NEWLINE_RUN_RE.sub(" ", c)) for s, c in chunks]
        text = "".join(c for _, c in chunks)

        if "\n" not in text:
            return text
        if any(s and "\n" in c for s, c in chunks):
            # Lines inside a template literal are content
            return lines_to_doc(text)
        first, _, rest = text.partition("\n")
        lines = [first, *textwrap.dedent(rest).split("\n")]
        parts: list[Doc] = []
        for i, piece in enumerate(lines):
            if i:
                parts.append(hardline)
            parts.append(piece.rstrip())
        return concat(parts)

    def expression_text(self, expression: Expression, source: str) -> str:
        if expression.start is not None and expression.end is not None:
            return source[expression.start : expression.end].strip()
        if expression.type == "Identifier" and expression.name:
            return expression.name
        raw = expression.data.get("raw")
        if isinstance(raw, str):
            return raw
        raise EmbedError(f"cannot print {expression.type} without source offsets")


# ---------------------------------------------------------------------------
# Script / style bodies
# ---------------------------------------------------------------------------


def body_lines_doc(text: str) -> Doc:
    """Dedent *text*, drop blank edges, keep at most one blank line in a row."""
    parts: list[Doc] = []
    blank = False
    for raw in textwrap.dedent(text).strip("\n").split("\n"):
        stripped = raw.rstrip()
        if not stripped:
            blank = True
            continue
        if parts:
            parts.append(hardline)
            if blank:
                parts.append(hardline)
        parts.append(stripped)
        blank = False
    return concat(parts)


@dataclass(frozen=True, slots=True)
class ReindentFormatter:
    """Keeps the body's own layout, re-indented under its tag."""

    def format_body(self, content: str, lang: str | None) -> Doc:
        return body_lines_doc(content)


@dataclass
class CommandFormatter:
    """Pipes a body through an external formatter command.

    ``{lang}`` in any argument is replaced by the section's language.
    """

    command: Sequence[str]
    timeout: float = 5.0
    default_lang: str = "js"
    env: dict[str, str] | None = field(default=None, repr=False)

    def format_body(self, content: str, lang: str | None) -> Doc:
        args = [a.replace("{lang}", lang or self.default_lang) for a in self.command]
        logger.debug("running body formatter: %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                input=content,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=self.env,
            )
        except subprocess.TimeoutExpired:
            raise EmbedError(f"formatter '{args[0]}' timed out after {self.timeout}s") from None
        except OSError as exc:
            raise EmbedError(f"formatter '{args[0]}' could not be started: {exc}") from None

        if result.returncode != 0:
            stderr = result.stderr.strip()
            msg = f"formatter '{args[0]}' failed (exit {result.returncode})"
            if stderr:
                msg += f": {stderr}"
            raise EmbedError(msg)

        return body_lines_doc(result.stdout)
