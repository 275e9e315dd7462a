"""
Layout stage for Sign

Turns indentation into explicit structure, so the parser never has to
reason about line breaks:

    f :              f : [ x : 1 <sep> x + 1 ]
    	x : 1
    	x + 1

- A line ending in block operators (':' or '?') followed by lines one tab
  deeper gets an opening bracket after each of those operators, and as many
  closing brackets once the indentation drops back.
- Sibling lines of one level are joined by SEPARATOR tokens.
- While an explicit bracket is open, following lines simply continue the
  current line.

Literal payloads are single tokens by now, so nothing inside them can be
mistaken for indentation.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .errors import StructureError
from .token_types import TT, Tok

logger = logging.getLogger(__name__)

BLOCK_OPS = (":", "?")


@dataclass
class Line:
    """One logical line: its indent level and its tokens (never empty)."""

    level: int
    tokens: List[Tok]

    @property
    def anchor(self) -> Tok:
        return self.tokens[0]


class Layout:
    """Rewrite INDENT/NEWLINE tokens into brackets and separators."""

    def __init__(self, tokens: Sequence[Tok]):
        self.tokens = list(tokens)
        self.blocks = 0

    def normalize(self) -> List[Tok]:
        lines, eof = self.split_lines()
        try:
            out, _ = self.layout_block(lines, 0, 0)
        except RecursionError:
            deepest = max(lines, key=lambda line: line.level)
            raise StructureError.at("Indentation nested too deeply", deepest.anchor) from None
        out.append(eof)

        logger.debug("layout: %d lines, %d blocks", len(lines), self.blocks)
        return out

    # ========================================================================
    # Lines
    # ========================================================================

    def split_lines(self) -> Tuple[List[Line], Tok]:
        lines: List[Line] = []
        current: List[Tok] = []
        level = 0
        depth = 0

        for tok in self.tokens:
            if tok.type == TT.EOF:
                break

            if tok.type == TT.NEWLINE:
                # An explicit bracket is still open: the line continues
                if depth > 0:
                    continue
                if current:
                    lines.append(Line(level, current))
                current, level = [], 0
                continue

            if tok.type == TT.INDENT:
                if depth == 0:
                    level = tok.level
                continue

            if tok.type == TT.OPEN:
                depth += 1
            elif tok.type == TT.CLOSE:
                depth = max(0, depth - 1)

            current.append(tok)

        if current:
            lines.append(Line(level, current))

        return lines, self.eof_token()

    def eof_token(self) -> Tok:
        if self.tokens and self.tokens[-1].type == TT.EOF:
            return self.tokens[-1]
        if self.tokens:
            return self.tokens[-1].borrow(TT.EOF, "")
        return Tok(TT.EOF, "", 1, 1, 0)

    # ========================================================================
    # Blocks
    # ========================================================================

    def layout_block(self, lines: List[Line], i: int, level: int) -> Tuple[List[Tok], int]:
        """
        Emit lines[i:] that belong to a block at `level`.

        Returns the emitted tokens and the index of the first line that
        dedents below `level`.
        """
        out: List[Tok] = []

        while i < len(lines) and lines[i].level >= level:
            line = lines[i]

            if line.level > level:
                raise StructureError.at(
                    "Unexpected indent: previous line does not end in ':' or '?'",
                    line.anchor,
                )

            if out:
                out.append(line.anchor.borrow(TT.SEPARATOR, "\n"))

            i += 1
            if i >= len(lines) or lines[i].level <= level:
                out.extend(line.tokens)
                continue

            nested = lines[i]
            header_ops = trailing_block_ops(line.tokens)

            if not header_ops:
                raise StructureError.at(
                    "Unexpected indent: previous line does not end in ':' or '?'",
                    nested.anchor,
                )
            if nested.level != level + 1:
                raise StructureError.at(
                    f"Indentation jumps from level {level} to {nested.level}",
                    nested.anchor,
                )

            body, i = self.layout_block(lines, i, level + 1)
            self.blocks += 1

            out.extend(line.tokens[: len(line.tokens) - len(header_ops)])
            for op in header_ops:
                out.append(op)
                out.append(op.borrow(TT.OPEN, "["))

            out.extend(body)

            # One closer per implicit opening of the header line
            last = body[-1]
            out.extend(last.borrow(TT.CLOSE, "]") for _ in header_ops)

        return out, i


def trailing_block_ops(tokens: Sequence[Tok]) -> List[Tok]:
    """The run of block operators that ends a line, in source order."""
    ops: List[Tok] = []

    for tok in reversed(tokens):
        if not tok.is_op(*BLOCK_OPS):
            break
        ops.append(tok)

    ops.reverse()
    return ops


def normalize(tokens: Sequence[Tok]) -> List[Tok]:
    """Convenience function to lay out a scanned token list"""
    return Layout(tokens).normalize()
