"""Formatting options and section sort order."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from itertools import permutations
from typing import Any, Literal

from svelteprint.errors import OptionsError

type SortOrderPart = Literal["options", "scripts", "markup", "styles"]
type WhitespaceSensitivity = Literal["strict", "css", "ignore"]

SORT_ORDER_PARTS: tuple[SortOrderPart, ...] = ("options", "scripts", "markup", "styles")
DEFAULT_SORT_ORDER = "options-scripts-markup-styles"

# Every permutation of the four parts, the three-part orders without
# "options" (which then comes first), and "none"
SORT_ORDERS: frozenset[str] = frozenset(
    {"-".join(p) for p in permutations(SORT_ORDER_PARTS)}
    | {"-".join(p) for p in permutations(SORT_ORDER_PARTS[1:])}
    | {"none"}
)

WHITESPACE_MODES: frozenset[str] = frozenset({"strict", "css", "ignore"})


@dataclass(frozen=True, slots=True)
class PrintOptions:
    """Recognised formatting options."""

    print_width: int = 80
    tab_width: int = 2
    use_tabs: bool = False
    bracket_same_line: bool = False
    sort_order: str = DEFAULT_SORT_ORDER
    strict_mode: bool = False
    allow_shorthand: bool = True
    insert_pragma: bool = False
    parent_parser: str | None = None
    indent_script_and_style: bool = True
    single_attribute_per_line: bool = False
    whitespace_sensitivity: WhitespaceSensitivity = "strict"

    def __post_init__(self) -> None:
        if self.sort_order not in SORT_ORDERS:
            raise OptionsError(f"invalid sort order: {self.sort_order}")
        if self.whitespace_sensitivity not in WHITESPACE_MODES:
            raise OptionsError(f"invalid whitespace sensitivity: {self.whitespace_sensitivity}")
        if self.print_width < 1:
            raise OptionsError(f"print width must be positive, got {self.print_width}")
        if self.tab_width < 0:
            raise OptionsError(f"tab width must not be negative, got {self.tab_width}")

    @property
    def sort_parts(self) -> tuple[SortOrderPart, ...]:
        return parse_sort_order(self.sort_order)

    def with_overrides(self, **overrides: Any) -> PrintOptions:
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_mapping(cls, table: Mapping[str, Any]) -> PrintOptions:
        """Build options from a config table, accepting dashed or underscored keys."""
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for raw_key, value in table.items():
            key = str(raw_key).replace("-", "_")
            if key not in known:
                raise OptionsError(f"unknown option: {raw_key}")
            expected = _OPTION_TYPES[key]
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise OptionsError(f"option {raw_key} has the wrong type: {value!r}")
            values[key] = value
        return cls(**values)


_OPTION_TYPES: dict[str, type | tuple[type, ...]] = {
    "print_width": int,
    "tab_width": int,
    "use_tabs": bool,
    "bracket_same_line": bool,
    "sort_order": str,
    "strict_mode": bool,
    "allow_shorthand": bool,
    "insert_pragma": bool,
    "parent_parser": str,
    "indent_script_and_style": bool,
    "single_attribute_per_line": bool,
    "whitespace_sensitivity": str,
}


def parse_sort_order(sort_order: str) -> tuple[SortOrderPart, ...]:
    """Split a sort order into its parts; ``none`` yields no parts."""
    if sort_order not in SORT_ORDERS:
        raise OptionsError(f"invalid sort order: {sort_order}")
    if sort_order == "none":
        return ()
    parts = sort_order.split("-")
    if "options" not in parts:
        parts.insert(0, "options")
    return tuple(parts)  # type: ignore[return-value]
