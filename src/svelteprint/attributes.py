"""Attribute extraction from raw ``<script>`` and ``<style>`` headers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from svelteprint.ast import Attribute, Text

_HEADER_RE = re.compile(r"<[a-z]+\s*([\s\S]*?)>", re.IGNORECASE)
_ATTRIBUTE_RE = re.compile(
    r"""([^\s=]+)(?:=(?:(?:("|')([\s\S]*?)\2)|(?:([^>\s]+?)(?:\s|>|$))))?""",
    re.IGNORECASE | re.MULTILINE,
)


@dataclass(frozen=True, slots=True)
class SectionSource:
    """A top-level section split into its opening tag and body text."""

    header: str
    header_start: int
    attributes_start: int
    content: str
    content_start: int


def split_section(source: str, start: int, end: int) -> SectionSource:
    """Split ``source[start:end]`` into the opening tag and the body before the closing tag."""
    text = source[start:end]
    m = _HEADER_RE.search(text)
    if m is None:
        return SectionSource("", start, start, "", start)
    content_start = start + m.end()
    closing = source.rfind("</", content_start, end)
    if closing < 0:
        closing = end
    return SectionSource(
        header=m.group(1),
        header_start=start + m.start(),
        attributes_start=start + m.start(1),
        content=source[content_start:closing],
        content_start=content_start,
    )


def extract_attributes(header: str, offset: int = 0) -> tuple[Attribute, ...]:
    """Parse the attribute list of an opening tag's interior.

    *offset* is the source position of *header*; the returned nodes carry
    absolute offsets.
    """
    attrs: list[Attribute] = []
    for m in _ATTRIBUTE_RE.finditer(header):
        name = m.group(1)
        if m.group(3):
            value_group = 3
        elif m.group(4):
            value_group = 4
        else:
            value_group = 0

        attr_start = offset + m.start()
        value: Literal[True] | tuple[Text, ...] = True
        if value_group:
            data = m.group(value_group)
            value_start = offset + m.start(value_group)
            value = (Text(data, data, value_start, value_start + len(data)),)

        text = m.group(0).rstrip(">").rstrip()
        attrs.append(Attribute(name, value, attr_start, attr_start + len(text)))
    return tuple(attrs)
