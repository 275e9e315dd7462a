"""Operator table for Sign.

One lookup keyed by ``(symbol, position)``: the same glyph may be a prefix,
infix and postfix operator, and the parser decides the position once, from
context, before consulting the table.

Binding power grows with how tightly an operator binds. Juxtaposition
(function application) is not a symbol, but sits in the same scale.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Position(Enum):
    PREFIX = "prefix"
    INFIX = "infix"
    POSTFIX = "postfix"


class Assoc(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class OpInfo:
    symbol: str
    position: Position
    name: str
    power: int
    assoc: Assoc = Assoc.LEFT

    @property
    def right_power(self) -> int:
        """Minimum power accepted on the right-hand side (or prefix operand)."""
        if self.position is Position.INFIX and self.assoc is Assoc.LEFT:
            return self.power + 1
        return self.power


DEFINE = 10
LAMBDA = 20
PRODUCT = 30
RANGE = 35
PREFIX = 105
APPLY = 110
POSTFIX = 115
GET = 120
ATOM = 1000

_INFIX = [
    (":", "define", DEFINE, Assoc.RIGHT),
    ("?", "lambda", LAMBDA, Assoc.RIGHT),
    (",", "product", PRODUCT, Assoc.LEFT),
    ("~", "range", RANGE, Assoc.LEFT),
    ("|", "or", 40, Assoc.LEFT),
    (";", "xor", 41, Assoc.LEFT),
    ("&", "and", 50, Assoc.LEFT),
    ("<", "less", 70, Assoc.LEFT),
    ("<=", "less_eq", 70, Assoc.LEFT),
    ("=", "eq", 70, Assoc.LEFT),
    ("==", "eq", 70, Assoc.LEFT),
    (">=", "more_eq", 70, Assoc.LEFT),
    (">", "more", 70, Assoc.LEFT),
    ("!=", "neq", 70, Assoc.LEFT),
    ("+", "add", 80, Assoc.LEFT),
    ("-", "sub", 80, Assoc.LEFT),
    ("*", "mul", 90, Assoc.LEFT),
    ("/", "div", 90, Assoc.LEFT),
    ("%", "mod", 90, Assoc.LEFT),
    ("^", "power", 100, Assoc.RIGHT),
    ("'", "get", GET, Assoc.LEFT),
]

_PREFIX = [
    # export/import wrap a whole definition: #x : 5
    ("#", "export", DEFINE),
    ("@", "import", DEFINE),
    ("-", "negate", PREFIX),
    ("!", "not", PREFIX),
    ("~", "rest", PREFIX),
    ("$", "address", PREFIX),
    # |x| is parsed as a group; the entry names the resulting UnaryOp
    ("|", "abs", ATOM),
]

_POSTFIX = [
    ("!", "factorial", POSTFIX),
    ("~", "spread", POSTFIX),
]

OPERATORS: Dict[Tuple[str, Position], OpInfo] = {}

for _sym, _name, _power, _assoc in _INFIX:
    OPERATORS[(_sym, Position.INFIX)] = OpInfo(_sym, Position.INFIX, _name, _power, _assoc)
for _sym, _name, _power in _PREFIX:
    OPERATORS[(_sym, Position.PREFIX)] = OpInfo(_sym, Position.PREFIX, _name, _power)
for _sym, _name, _power in _POSTFIX:
    OPERATORS[(_sym, Position.POSTFIX)] = OpInfo(_sym, Position.POSTFIX, _name, _power)

# Special forms that never stand alone as a partially applied operator
NOT_POINT_FREE = frozenset({":", "?"})


def lookup(symbol: str, position: Position) -> Optional[OpInfo]:
    return OPERATORS.get((symbol, position))


def infix(symbol: str) -> Optional[OpInfo]:
    return OPERATORS.get((symbol, Position.INFIX))


def prefix(symbol: str) -> Optional[OpInfo]:
    return OPERATORS.get((symbol, Position.PREFIX))


def postfix(symbol: str) -> Optional[OpInfo]:
    return OPERATORS.get((symbol, Position.POSTFIX))


def is_point_free(symbol: str) -> bool:
    return infix(symbol) is not None and symbol not in NOT_POINT_FREE
