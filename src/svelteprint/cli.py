"""Command-line interface for svelteprint."""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from svelteprint.errors import (
    LoadError,
    OptionsError,
    ParserError,
    SveltePrintError,
)
from svelteprint.options import WHITESPACE_MODES, PrintOptions

CONFIG_NAME = "svelteprint.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    ast_file: Path | None
    output_file: Path | None
    write: bool
    check: bool
    print_options: PrintOptions
    parser_command: list[str] | None
    parser_timeout: float
    script_command: list[str] | None
    style_command: list[str] | None
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="svelteprint",
        description="Svelte component formatter",
    )
    p.add_argument("input", help="Input .svelte file")
    p.add_argument("--ast", metavar="JSON", help="Use this parse tree instead of running the parser")

    out = p.add_mutually_exclusive_group()
    out.add_argument("-o", "--output", help="Output file (default: stdout)")
    out.add_argument("--write", action="store_true", help="Rewrite the input file in place")
    out.add_argument(
        "--check", action="store_true", help="Exit with 1 if the file is not formatted"
    )

    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument("--print-width", type=int, default=None, metavar="N")
    p.add_argument("--tab-width", type=int, default=None, metavar="N")
    p.add_argument("--use-tabs", action="store_true", default=None)
    p.add_argument(
        "--sort-order",
        default=None,
        metavar="ORDER",
        help="Section order, e.g. options-scripts-markup-styles, or none",
    )
    p.add_argument("--strict-mode", action="store_true", default=None)
    p.add_argument(
        "--no-shorthand",
        dest="allow_shorthand",
        action="store_false",
        default=None,
        help="Always write attribute values in full",
    )
    p.add_argument("--bracket-same-line", action="store_true", default=None)
    p.add_argument("--insert-pragma", action="store_true", default=None)
    p.add_argument("--single-attribute-per-line", action="store_true", default=None)
    p.add_argument(
        "--whitespace-sensitivity",
        choices=sorted(WHITESPACE_MODES),
        default=None,
    )
    p.add_argument(
        "--parser-command",
        metavar="CMD",
        help="Command that reads a component on stdin and writes its parse tree as JSON",
    )
    p.add_argument("--debug", action="store_true", help="Dump the document IR to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _command(value: object, where: str) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise OptionsError(f"{where} must be a string or a list of strings")


def _table(config: dict[str, Any], name: str) -> dict[str, Any]:
    table = config.get(name, {})
    if not isinstance(table, dict):
        raise OptionsError(f"[{name}] must be a table")
    return table


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Formatting options: config < CLI
    print_options = PrintOptions.from_mapping(_table(config, "format"))
    print_options = print_options.with_overrides(
        print_width=args.print_width,
        tab_width=args.tab_width,
        use_tabs=args.use_tabs,
        sort_order=args.sort_order,
        strict_mode=args.strict_mode,
        allow_shorthand=args.allow_shorthand,
        bracket_same_line=args.bracket_same_line,
        insert_pragma=args.insert_pragma,
        single_attribute_per_line=args.single_attribute_per_line,
        whitespace_sensitivity=args.whitespace_sensitivity,
    )

    # Parser command and timeout: config < CLI
    cfg_parser = _table(config, "parser")
    parser_command = _command(cfg_parser.get("command"), "parser.command")
    if args.parser_command:
        parser_command = shlex.split(args.parser_command)
    parser_timeout = 10.0
    cfg_timeout = cfg_parser.get("timeout")
    if isinstance(cfg_timeout, (int, float)) and not isinstance(cfg_timeout, bool):
        parser_timeout = float(cfg_timeout)

    # Body formatters: config only
    script_command = _command(_table(config, "scripts").get("command"), "scripts.command")
    style_command = _command(_table(config, "styles").get("command"), "styles.command")

    return CliOptions(
        input_file=input_file,
        ast_file=Path(args.ast) if args.ast else None,
        output_file=Path(args.output) if args.output else None,
        write=args.write,
        check=args.check,
        print_options=print_options,
        parser_command=parser_command,
        parser_timeout=parser_timeout,
        script_command=script_command,
        style_command=style_command,
        debug=args.debug,
        verbose=args.verbose,
    )


def format_file(options: CliOptions) -> tuple[str, str]:
    """Read, parse and print a component; return (source, formatted)."""
    from svelteprint.bridge import SvelteParser
    from svelteprint.debug import dump_doc
    from svelteprint.embed import CommandFormatter
    from svelteprint.layout import print_doc
    from svelteprint.loader import load_json
    from svelteprint.printer import print_component

    # Parse tree offsets refer to the file as stored, \r\n included
    with open(options.input_file, encoding="utf-8", newline="") as f:
        source = f.read()

    if options.ast_file is not None:
        root = load_json(options.ast_file.read_text(encoding="utf-8"), source)
    else:
        parser = SvelteParser(timeout=options.parser_timeout, cwd=str(options.input_file.parent))
        if options.parser_command:
            parser.command = options.parser_command
        root = parser.parse(source)

    scripts = CommandFormatter(options.script_command) if options.script_command else None
    styles = (
        CommandFormatter(options.style_command, default_lang="css")
        if options.style_command
        else None
    )

    po = options.print_options
    doc = print_component(root, source, po, scripts=scripts, styles=styles)

    if options.debug:
        dump_doc(doc)

    return source, print_doc(
        doc, print_width=po.print_width, tab_width=po.tab_width, use_tabs=po.use_tabs
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        options = resolve_options(args)
    except OptionsError as exc:
        print(exc.format(), file=sys.stderr)
        return 2
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config file: {exc}", file=sys.stderr)
        return 2

    filename = str(options.input_file)
    try:
        source, formatted = format_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (LoadError, ParserError) as exc:
        print(exc.format(filename), file=sys.stderr)
        return 1
    except SveltePrintError as exc:
        print(exc.format(filename), file=sys.stderr)
        return 2

    if options.check:
        if formatted != source:
            print(f"would reformat {filename}", file=sys.stderr)
            return 1
        return 0

    if options.write:
        if formatted != source:
            options.input_file.write_text(formatted, encoding="utf-8")
    elif options.output_file:
        options.output_file.write_text(formatted, encoding="utf-8")
    else:
        sys.stdout.write(formatted)

    return 0
