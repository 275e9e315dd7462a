"""
Token Types for the Sign front end

Shared between lexer, layout and parser to avoid circular dependencies.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    IDENT = auto()
    NUMBER = auto()
    STRING = auto()
    CHAR = auto()
    UNIT = auto()  # _

    # Operators (symbol kept in Tok.value)
    OPERATOR = auto()

    # Grouping
    OPEN = auto()  # ( [ { or an absolute-value |
    CLOSE = auto()  # ) ] } or an absolute-value |

    # Structure
    SEPARATOR = auto()  # sibling lines, inserted by layout
    INDENT = auto()  # leading tabs
    NEWLINE = auto()
    EOF = auto()


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: str
    line: int = 0
    column: int = 0
    offset: int = 0
    synthetic: bool = False

    @property
    def end(self) -> int:
        return self.offset + len(self.value)

    @property
    def level(self) -> int:
        """Indent depth carried by an INDENT token."""
        return len(self.value) if self.type == TT.INDENT else 0

    @property
    def text(self) -> str:
        """Payload of a string or character literal."""
        if self.type == TT.STRING:
            return self.value[1:-1]
        if self.type == TT.CHAR:
            return self.value[1:]
        return self.value

    def borrow(self, type_: TT, value: str) -> "Tok":
        """Create a synthetic token at this token's position."""
        return Tok(type_, value, self.line, self.column, self.offset, synthetic=True)

    def is_op(self, *symbols: str) -> bool:
        return self.type == TT.OPERATOR and (not symbols or self.value in symbols)

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
