"""Fixed tag sets and directive spellings."""

from __future__ import annotations

import re

# Void elements printed as <name /> when empty
SELF_CLOSING_TAGS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Block-level elements in the `css` whitespace mode
BLOCK_ELEMENTS: frozenset[str] = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "dialog",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    }
)

# Elements whose content is printed verbatim and always hugs the tags
VERBATIM_ELEMENTS: frozenset[str] = frozenset({"pre", "textarea"})

# Attributes whose quoted values may be reflowed; none at the moment
FORMATTABLE_ATTRIBUTES: frozenset[str] = frozenset()

# Embedded languages left untouched
UNSUPPORTED_LANGUAGES: frozenset[str] = frozenset(
    {"coffee", "coffeescript", "styl", "stylus", "sass"}
)

# Element kinds sharing the element printer
ELEMENT_KINDS: frozenset[str] = frozenset(
    {"Element", "InlineComponent", "Slot", "SlotTemplate", "Window", "Head", "Title"}
)

# Element kinds printed as a bare self-closing tag with attributes
SELF_CLOSING_KINDS: frozenset[str] = frozenset({"Body", "Document", "Options"})

# Directive comment spelling -> canonical directive
DIRECTIVE_ALIASES: dict[str, str] = {
    "format-ignore": "ignore",
    "format-ignore-start": "ignore-start",
    "format-ignore-end": "ignore-end",
    "prettier-ignore": "ignore",
    "prettier-ignore-start": "ignore-start",
    "prettier-ignore-end": "ignore-end",
}

PRAGMA = "<!-- @format -->"

_PRAGMA_RE = re.compile(r"^\s*<!--\s*@(format|prettier)\W")


def resolve_directive(comment_text: str) -> str | None:
    """Map a comment body to its canonical directive name, if it is one."""
    return DIRECTIVE_ALIASES.get(comment_text.strip())


def has_pragma(text: str) -> bool:
    """Return True if the source starts with a format pragma comment."""
    return _PRAGMA_RE.match(text) is not None
