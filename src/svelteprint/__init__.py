"""Svelte component pretty-printer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from svelteprint.ast import Root
    from svelteprint.embed import BodyFormatter, ExpressionPrinter
    from svelteprint.options import PrintOptions

__version__ = "0.1.0"


def format(
    source: str,
    tree: Root | Mapping[str, Any],
    options: PrintOptions | None = None,
    *,
    expressions: ExpressionPrinter | None = None,
    scripts: BodyFormatter | None = None,
    styles: BodyFormatter | None = None,
) -> str:
    """Format a component from its source and its parse tree (a Root or the parser's JSON mapping)."""
    from svelteprint.layout import print_doc
    from svelteprint.loader import load_tree
    from svelteprint.options import PrintOptions
    from svelteprint.printer import print_component

    options = options or PrintOptions()
    root = load_tree(tree, source) if isinstance(tree, Mapping) else tree
    doc = print_component(
        root, source, options, expressions=expressions, scripts=scripts, styles=styles
    )
    return print_doc(
        doc,
        print_width=options.print_width,
        tab_width=options.tab_width,
        use_tabs=options.use_tabs,
    )
