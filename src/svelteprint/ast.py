"""AST node types for parsed Svelte components."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True, slots=True)
class Expression:
    """Embedded script expression or pattern, kept as its raw ESTree mapping."""

    type: str
    start: int | None
    end: int | None
    data: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def name(self) -> str | None:
        if self.type == "Identifier":
            return self.data.get("name")
        return None


@dataclass(frozen=True, slots=True)
class UnknownNode:
    """Node of a kind the loader does not model."""

    type: str
    start: int | None
    end: int | None
    data: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class Text:
    """Text content; ``raw`` keeps entities undecoded."""

    data: str
    raw: str
    start: int
    end: int

    @property
    def unencoded(self) -> str:
        return self.raw or self.data


@dataclass(frozen=True, slots=True)
class Comment:
    """HTML comment ``<!--data-->``."""

    data: str
    start: int
    end: int
    ignores: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MustacheTag:
    """Interpolation ``{expression}``."""

    expression: Expression
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class RawMustacheTag:
    """``{@html expression}``."""

    expression: Expression
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class ConstTag:
    """``{@const expression}``."""

    expression: Expression
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class DebugTag:
    """``{@debug a, b}``."""

    identifiers: tuple[Expression, ...]
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Spread:
    """Spread attribute ``{...expression}``."""

    expression: Expression
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class AttributeShorthand:
    """Attribute written as ``{name}``."""

    expression: Expression
    start: int
    end: int


type AttributeValue = Text | MustacheTag | AttributeShorthand


@dataclass(frozen=True, slots=True)
class Attribute:
    """Plain attribute; ``value`` is True for a valueless attribute."""

    name: str
    value: Literal[True] | tuple[AttributeValue, ...]
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class StyleDirective:
    """``style:name|modifiers=value``."""

    name: str
    value: Literal[True] | tuple[AttributeValue, ...]
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EventHandler:
    """``on:name|modifiers={expression}``."""

    name: str
    expression: Expression | None
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Binding:
    """``bind:name={expression}``."""

    name: str
    expression: Expression
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Class:
    """``class:name={expression}``."""

    name: str
    expression: Expression
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Let:
    """``let:name={expression}``; a shorthand has no expression."""

    name: str
    expression: Expression | None
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Transition:
    """``transition:``, ``in:`` or ``out:`` directive."""

    name: str
    expression: Expression | None
    start: int
    end: int
    modifiers: tuple[str, ...] = ()
    intro: bool = False
    outro: bool = False


@dataclass(frozen=True, slots=True)
class Action:
    """``use:name={expression}``."""

    name: str
    expression: Expression | None
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Animation:
    """``animate:name={expression}``."""

    name: str
    expression: Expression | None
    start: int
    end: int
    modifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Ref:
    """Legacy ``ref:name`` directive."""

    name: str
    start: int
    end: int


type Directive = EventHandler | Binding | Class | Let | Transition | Action | Animation | Ref
type AttributeLike = Attribute | StyleDirective | Spread | Directive


@dataclass(frozen=True, slots=True)
class Element:
    """Element-like tag.

    ``kind`` distinguishes the Svelte flavours: ``Element``,
    ``InlineComponent``, ``Slot``, ``SlotTemplate``, ``Window``, ``Head``,
    ``Title``, ``Body``, ``Document`` and ``Options``.
    """

    kind: str
    name: str
    attributes: tuple[AttributeLike, ...]
    children: tuple[Node, ...]
    start: int
    end: int
    tag: str | Expression | None = None
    expression: Expression | None = None


@dataclass(frozen=True, slots=True)
class ElseBlock:
    """``{:else}`` branch of an if or each block."""

    children: tuple[Node, ...]
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class IfBlock:
    """``{#if expression}...{/if}``."""

    expression: Expression
    children: tuple[Node, ...]
    start: int
    end: int
    else_: ElseBlock | None = None
    elseif: bool = False


@dataclass(frozen=True, slots=True)
class EachBlock:
    """``{#each expression as context, index (key)}...{/each}``."""

    expression: Expression
    context: Expression | None
    children: tuple[Node, ...]
    start: int
    end: int
    index: str | None = None
    key: Expression | None = None
    else_: ElseBlock | None = None


@dataclass(frozen=True, slots=True)
class PendingBlock:
    """Pending branch of an await block."""

    children: tuple[Node, ...]
    start: int | None
    end: int | None
    skip: bool = False


@dataclass(frozen=True, slots=True)
class ThenBlock:
    """``{:then value}`` branch of an await block."""

    children: tuple[Node, ...]
    start: int | None
    end: int | None
    skip: bool = False


@dataclass(frozen=True, slots=True)
class CatchBlock:
    """``{:catch error}`` branch of an await block."""

    children: tuple[Node, ...]
    start: int | None
    end: int | None
    skip: bool = False


@dataclass(frozen=True, slots=True)
class AwaitBlock:
    """``{#await expression}...{/await}``."""

    expression: Expression
    value: Expression | None
    error: Expression | None
    pending: PendingBlock
    then: ThenBlock
    catch: CatchBlock
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class KeyBlock:
    """``{#key expression}...{/key}``."""

    expression: Expression
    children: tuple[Node, ...]
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class CommentInfo:
    """Comment relocated together with a script or style section."""

    comment: Comment
    empty_line_after: bool


@dataclass(frozen=True, slots=True)
class Script:
    """``<script>`` section; ``context`` is ``default`` or ``module``."""

    context: str
    start: int
    end: int
    attributes: tuple[Attribute, ...] = ()
    comments: tuple[CommentInfo, ...] = ()


@dataclass(frozen=True, slots=True)
class Style:
    """``<style>`` section."""

    start: int
    end: int
    attributes: tuple[Attribute, ...] = ()
    comments: tuple[CommentInfo, ...] = ()


@dataclass(frozen=True, slots=True)
class Fragment:
    """Root markup container."""

    children: tuple[Node, ...]
    start: int | None
    end: int | None


@dataclass(frozen=True, slots=True)
class Root:
    """Parse result: markup plus the optional script and style sections."""

    html: Fragment
    css: Style | None = None
    instance: Script | None = None
    module: Script | None = None


type Block = IfBlock | ElseBlock | EachBlock | AwaitBlock | KeyBlock | PendingBlock | ThenBlock | CatchBlock

type Node = (
    Fragment
    | Text
    | Comment
    | Element
    | MustacheTag
    | RawMustacheTag
    | ConstTag
    | DebugTag
    | Block
    | Script
    | Style
    | Expression
    | UnknownNode
)

type AnyNode = Node | AttributeLike | AttributeShorthand
