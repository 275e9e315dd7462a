from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union
from typing_extensions import TypeAlias

# ---------- Syntax Tree (closed union, immutable) ----------

LITERAL_KINDS = ("number", "string", "character")


@dataclass(frozen=True)
class Literal:
    kind: str
    raw: str

    @property
    def value(self) -> Union[int, float, str]:
        """Decoded value: int/float for numbers, str otherwise."""
        if self.kind != "number":
            return self.raw
        if self.raw[:2] in ("0x", "0o", "0b"):
            return int(self.raw, 0)
        if "." in self.raw or "e" in self.raw:
            return float(self.raw)
        return int(self.raw)


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Unit:
    pass


@dataclass(frozen=True)
class Define:
    target: Identifier
    value: SyntaxNode


@dataclass(frozen=True)
class Parameter:
    name: str
    is_rest: bool = False


@dataclass(frozen=True)
class Lambda:
    params: Tuple[Parameter, ...]
    body: SyntaxNode


@dataclass(frozen=True)
class BinaryOp:
    operator: str
    left: SyntaxNode
    right: SyntaxNode


@dataclass(frozen=True)
class UnaryOp:
    operator: str
    operand: SyntaxNode
    is_prefix: bool = True


@dataclass(frozen=True)
class Range:
    start: SyntaxNode
    end: SyntaxNode


@dataclass(frozen=True)
class Get:
    target: SyntaxNode
    key: SyntaxNode


@dataclass(frozen=True)
class Apply:
    function: SyntaxNode
    arguments: Tuple[SyntaxNode, ...]


@dataclass(frozen=True)
class PointFreeOp:
    """Operator awaiting its left operand; ``preset`` is its right operand."""

    operator: str
    preset: Optional[SyntaxNode] = None


@dataclass(frozen=True)
class List:
    elements: Tuple[SyntaxNode, ...]


@dataclass(frozen=True)
class EmptyList:
    pass


@dataclass(frozen=True)
class Block:
    """Sibling lines of one indentation level, in source order."""

    statements: Tuple[SyntaxNode, ...]


SyntaxNode: TypeAlias = Union[
    Literal,
    Identifier,
    Unit,
    Define,
    Lambda,
    BinaryOp,
    UnaryOp,
    Range,
    Get,
    Apply,
    PointFreeOp,
    List,
    EmptyList,
    Block,
]
