"""Diagnostics raised by the front-end stages.

Every error carries the stage that raised it plus a source position, so a
caller can format it without knowing which stage failed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from .token_types import TT, Tok


class SignSyntaxError(Exception):
    """Base class for all front-end errors."""

    stage = "syntax"

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        lexeme: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.lexeme = lexeme
        super().__init__(f"{message} at line {line}, col {column}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "offendingLexeme": self.lexeme,
        }


class LexError(SignSyntaxError):
    """Lexical analysis error"""

    stage = "lex"


class StructureError(SignSyntaxError):
    """Illegal indentation or block structure"""

    stage = "structure"

    @classmethod
    def at(cls, message: str, token: Tok) -> StructureError:
        return cls(message, token.line, token.column, token.value)


class ParseError(SignSyntaxError):
    """Parse error with position info and a window of surrounding tokens"""

    stage = "parse"

    def __init__(self, message: str, token: Optional[Tok] = None, window: str = ""):
        self.token = token
        self.window = window
        if token is None:
            super().__init__(message)
        else:
            lexeme = None if token.type == TT.EOF else token.value
            super().__init__(message, token.line, token.column, lexeme)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["window"] = self.window
        return data


def token_window(tokens: Sequence[Tok], index: int, radius: int = 3) -> str:
    """Render the lexemes around tokens[index], marking the offending one."""
    lo = max(0, index - radius)
    hi = min(len(tokens), index + radius + 1)
    parts = []

    for i in range(lo, hi):
        tok = tokens[i]
        if tok.type == TT.EOF:
            text = "<eof>"
        elif tok.type == TT.SEPARATOR:
            text = "<sep>"
        else:
            text = tok.value
        parts.append(f">>{text}<<" if i == index else text)

    return " ".join(parts)
