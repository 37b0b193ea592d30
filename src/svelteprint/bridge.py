"""Subprocess bridge to the Svelte compiler's parser."""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from svelteprint.ast import Root
from svelteprint.errors import ParserError
from svelteprint.loader import load_tree, to_index, utf16_index_map

logger = logging.getLogger(__name__)

# Reads the component on stdin, writes {"ast": ...} or {"error": ...} on stdout
PARSE_SCRIPT = """\
const { parse } = require("svelte/compiler");
let input = "";
process.stdin.setEncoding("utf8");
process.stdin.on("data", (chunk) => (input += chunk));
process.stdin.on("end", () => {
  let out;
  try {
    out = { ast: parse(input) };
  } catch (err) {
    out = {
      error: {
        message: String(err.message || err),
        start: err.start ? err.start.character : null,
        end: err.end ? err.end.character : null,
      },
    };
  }
  process.stdout.write(JSON.stringify(out));
});
"""

DEFAULT_COMMAND: tuple[str, ...] = ("node", "-e", PARSE_SCRIPT)


@dataclass
class SvelteParser:
    """Runs the external parser command and loads its JSON output."""

    command: Sequence[str] = DEFAULT_COMMAND
    timeout: float = 10.0
    cwd: str | None = None
    env: dict[str, str] | None = field(default=None, repr=False)

    def parse_json(self, source: str) -> dict[str, Any]:
        """Run the command on *source* and return the raw parse tree mapping."""
        args = list(self.command)
        logger.debug("running parser: %s", args[0])
        try:
            result = subprocess.run(
                args,
                input=source,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self.cwd,
                env=self.env,
            )
        except subprocess.TimeoutExpired:
            raise ParserError(f"parser '{args[0]}' timed out after {self.timeout}s") from None
        except OSError as exc:
            raise ParserError(f"parser '{args[0]}' could not be started: {exc}") from None

        if result.returncode != 0:
            stderr = result.stderr.strip()
            msg = f"parser '{args[0]}' failed (exit {result.returncode})"
            if stderr:
                msg += f": {stderr}"
            raise ParserError(msg)

        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ParserError(f"parser '{args[0]}' wrote invalid JSON: {exc.msg}") from None
        if not isinstance(payload, dict):
            raise ParserError(f"parser '{args[0]}' wrote unexpected output")

        error = payload.get("error")
        if isinstance(error, dict):
            table = utf16_index_map(source)
            start = error.get("start")
            end = error.get("end")
            raise ParserError(
                str(error.get("message", "parse error")),
                source,
                to_index(table, start) if isinstance(start, int) else None,
                to_index(table, end) if isinstance(end, int) else None,
            )

        tree = payload.get("ast")
        if not isinstance(tree, dict):
            raise ParserError(f"parser '{args[0]}' returned no tree")
        return tree

    def parse(self, source: str) -> Root:
        return load_tree(self.parse_json(source), source)
