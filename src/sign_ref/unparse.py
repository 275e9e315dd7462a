"""Render syntax trees back to canonical Sign source.

Walks the lark export of a tree bottom-up. Each node becomes a ``Fragment``
holding its text and the binding power of its outermost operator, so a
parent can decide whether a child needs ``[...]`` around it.

Blocks render as indented lines under the header that owns them:

    f :
    	x : 1
    	x + 1
"""
from __future__ import annotations

import textwrap
from typing import NamedTuple, Optional, Sequence

from lark import Token, Transformer, v_args

from .ast_nodes import SyntaxNode
from .operators import APPLY, ATOM, DEFINE, GET, LAMBDA, POSTFIX, PRODUCT, RANGE, Assoc, infix, prefix
from .tree import to_tree


class Fragment(NamedTuple):
    text: str
    prec: int
    # a Block: renders as lines indented under its header
    block: bool = False
    # ends in an indented block, so nothing may follow it
    tail: bool = False
    # ends in a postfix '~' that a following operand would turn into a range
    loose: bool = False


def _wrap(frag: Fragment, min_prec: int) -> Fragment:
    # blocks and tails are rightmost wherever the parser found them
    if frag.prec >= min_prec or frag.tail or frag.block:
        return frag
    return Fragment(f"[{frag.text}]", ATOM)


def _glued(frag: Fragment, min_prec: int) -> Fragment:
    """Operand written directly after a symbol, with no space between."""
    frag = _wrap(frag, min_prec)
    # x'|k| would read the second bar as closing an enclosing |...|
    if frag.text.startswith("|"):
        return Fragment(f"[{frag.text}]", ATOM)
    return frag


def _followed(frag: Fragment, min_prec: int) -> Fragment:
    """Operand that more text will follow on the same line."""
    frag = _wrap(frag, min_prec)
    if frag.loose:
        return Fragment(f"[{frag.text}]", ATOM)
    return frag


def _statement(frag: Fragment) -> Fragment:
    # a backtick opening a line starts a comment
    if frag.text.startswith("`") and not frag.tail:
        return Fragment(f"[{frag.text}]", ATOM)
    return frag


def _join(head: str, right: Fragment, prec: int) -> Fragment:
    """Attach a right-hand side, laying out a block under the header."""
    if right.block:
        body = textwrap.indent(right.text, "\t", lambda line: True)
        return Fragment(f"{head}\n{body}", prec, tail=True)
    return Fragment(f"{head} {right.text}", prec, tail=right.tail, loose=right.loose)


@v_args(inline=True)
class Unparser(Transformer):
    """Lark tree -> Fragment"""

    def literal(self, tok: Token) -> Fragment:
        if tok.type == "STRING":
            return Fragment(f"`{tok}`", ATOM)
        if tok.type == "CHARACTER":
            return Fragment(f"\\{tok}", ATOM)
        return Fragment(str(tok), ATOM)

    def identifier(self, tok: Token) -> Fragment:
        return Fragment(str(tok), ATOM)

    def unit(self) -> Fragment:
        return Fragment("_", ATOM)

    def emptylist(self) -> Fragment:
        return Fragment("[]", ATOM)

    def define(self, target: Fragment, value: Fragment) -> Fragment:
        return _join(f"{target.text} :", value, DEFINE)

    def param(self, tok: Token) -> str:
        return f"~{tok}" if tok.type == "REST" else str(tok)

    def params(self, *names: str) -> Sequence[str]:
        return names

    def anonfn(self, params: Sequence[str], body: Fragment) -> Fragment:
        head = " ".join([*params, "?"])
        return _join(head, _wrap(body, LAMBDA), LAMBDA)

    def binop(self, op: Token, left: Fragment, right: Fragment) -> Fragment:
        info = infix(str(op))
        if info.assoc is Assoc.LEFT:
            left_min, right_min = info.power, info.power + 1
        else:
            left_min, right_min = info.power + 1, info.power
        left = _followed(left, left_min)
        return _join(f"{left.text} {op}", _wrap(right, right_min), info.power)

    def unop(self, op: Token, operand: Fragment) -> Fragment:
        if op == "|":
            # a bar after whitespace never closes, as in |\ |
            if operand.text[-1:].isspace():
                operand = Fragment(f"[{operand.text}]", ATOM)
            return Fragment(f"|{operand.text}|", ATOM)

        if op.type == "POSTFIX":
            operand = _followed(operand, POSTFIX)
            return Fragment(f"{operand.text}{op}", POSTFIX, loose=op == "~")

        info = prefix(str(op))
        operand = _glued(operand, info.power)
        if operand.block:
            return _join(str(op), operand, info.power)
        return Fragment(f"{op}{operand.text}", info.power, tail=operand.tail, loose=operand.loose)

    def range(self, start: Fragment, end: Fragment) -> Fragment:
        start = _followed(start, RANGE)
        return _join(f"{start.text} ~", _wrap(end, RANGE + 1), RANGE)

    def get(self, target: Fragment, key: Fragment) -> Fragment:
        target = _followed(target, GET)
        key = _glued(key, GET + 1)
        return Fragment(f"{target.text}'{key.text}", GET, tail=key.tail, loose=key.loose)

    def args(self, *arguments: Fragment) -> Sequence[Fragment]:
        return arguments

    def apply(self, function: Fragment, arguments: Sequence[Fragment]) -> Fragment:
        parts = [_followed(function, APPLY + 1).text]
        for arg in arguments[:-1]:
            parts.append(_followed(arg, APPLY + 1).text)

        last = _wrap(arguments[-1], APPLY + 1)
        return _join(" ".join(parts), last, APPLY)

    def pointfree(self, op: Token, preset: Optional[Fragment] = None) -> Fragment:
        if preset is None:
            return Fragment(f"[{op}]", ATOM)
        return Fragment(f"[{op} {_wrap(preset, PRODUCT + 1).text}]", ATOM)

    def list(self, *elements: Fragment) -> Fragment:
        items = [_followed(e, PRODUCT + 1).text for e in elements[:-1]]
        head = ", ".join(items) + ","
        return _join(head, _wrap(elements[-1], PRODUCT + 1), PRODUCT)

    def block(self, *statements: Fragment) -> Fragment:
        lines = [_statement(s).text for s in statements]
        return Fragment("\n".join(lines), 0, block=True)


def unparse(node: SyntaxNode) -> str:
    """Serialize a syntax tree to source that parses back to the same tree."""
    frag = Unparser().transform(to_tree(node))
    return frag.text if frag.block else _statement(frag).text
