from __future__ import annotations

from typing import List, Tuple

import pytest

from sign_ref.ast_nodes import (
    Apply,
    BinaryOp,
    Block,
    Get,
    Identifier,
    Literal,
    Range,
    SyntaxNode,
    UnaryOp,
)
from sign_ref.unparse import unparse
from tests.support.harness import parse_pipeline

ROUNDTRIP_SOURCES: List[str] = [
    "x : 5",
    "add : x y ? x + y",
    "f :\n\tx + y",
    "1 ~ 5",
    "[+ 2] 3",
    "a | b",
    "|a - b|",
    "a ~ -b",
    "f !x",
    "n!! + 1",
    "f xs~",
    "xs~ + 1",
    "a'b'c",
    "a'[b c]",
    "|x| |y|",
    "|a | b|",
    "|a| | b",
    "[-2]",
    "[- 2]",
    "[* 2,]",
    "[~ 5]",
    "[|]",
    "[| b]",
    "[' k]",
    "? 1",
    "x ? a, b",
    "[a b] ? a",
    "xs ~rest ? rest",
    "g x : 5",
    "#x : 5",
    "f #x",
    "1 ~ 5, 7",
    "[a, b], c",
    "f [x ? x] [1, 2]",
    "[f x] y",
    "-x ^ 2",
    "-[x ^ 2]",
    "2 ^ 3 ^ 4",
    "[2 ^ 3] ^ 4",
    "1 - [2 - 3]",
    "-f x",
    "[-f] x",
    "x ? [y : 1]",
    "x ? y : 1",
    "c : \\x",
    "s : `a b`",
    "[`s`] x",
    "x : 1\ny : 2",
    "",
    "f : x ?\n\ta : x\n\ta + 1",
    "f : ?\n\ta\n\tb",
    "a :\n\tb :\n\t\tc\n\t\td\ne",
    "#main : ?\n\tprint `hello` \\!\n\t[+ 1] 2, [- 3] 4",
    "fact : n ?\n\tn < 2 & 1 | n * fact [n - 1]",
    "pairs : xs ~rest ?\n\t|xs'0 - rest'0|, rest~",
    "r : 1 ~ 10\ns : r'[n!]",
    "@lib\n$ptr\nq : -a ^ 2",
]

CANONICAL_CASES: List[Tuple[str, str]] = [
    ("x:5", "x : 5"),
    ("(1 + 2) * 3", "[1 + 2] * 3"),
    ("{a}", "a"),
    ("[-2]", "-2"),
    ("[* 2,]", "[* 2]"),
    ("[a b] ? a", "a b ? a"),
    ("xs~ + 1", "[xs~] + 1"),
    ("f !x", "f [!x]"),
    ("f :\n\tx + y", "f : x + y"),
    ("f :\n\ta\n\tb", "f :\n\ta\n\tb"),
    ("x : 1\n\ny : 2", "x : 1\ny : 2"),
]

HAND_BUILT: List[Tuple[str, SyntaxNode]] = [
    ("string-statement", Literal("string", "s")),
    ("string-in-block", Block((Literal("string", "s"), Identifier("x")))),
    ("abs-of-space-char", UnaryOp("|", Literal("character", " "))),
    ("abs-in-not-in-abs", UnaryOp("|", UnaryOp("!", UnaryOp("|", Identifier("x"))))),
    ("get-abs-key", Get(Identifier("x"), UnaryOp("|", Identifier("k")))),
    ("spread-function", Apply(UnaryOp("~", Identifier("f"), is_prefix=False), (Identifier("x"),))),
    ("spread-range-start", Range(UnaryOp("~", Identifier("x"), is_prefix=False), Identifier("y"))),
    ("spread-minus", BinaryOp("-", UnaryOp("~", Identifier("x"), is_prefix=False), Identifier("y"))),
    ("spread-of-spread", UnaryOp("~", UnaryOp("~", Identifier("x"), is_prefix=False), is_prefix=False)),
]


@pytest.mark.parametrize("source", ROUNDTRIP_SOURCES)
def test_reparse_of_unparse_is_identity(source: str) -> None:
    node = parse_pipeline(source)
    assert parse_pipeline(unparse(node)) == node


@pytest.mark.parametrize("source, expected", CANONICAL_CASES, ids=[s for s, _ in CANONICAL_CASES])
def test_canonical_text(source: str, expected: str) -> None:
    assert unparse(parse_pipeline(source)) == expected


@pytest.mark.parametrize("name, node", HAND_BUILT, ids=[name for name, _ in HAND_BUILT])
def test_hand_built_trees_roundtrip(name: str, node: SyntaxNode) -> None:
    del name
    assert parse_pipeline(unparse(node)) == node


def test_unparse_is_a_fixed_point() -> None:
    source = "pairs : xs ~rest ?\n\t|xs'0 - rest'0|, rest~\ngo : f : ?\n\tx"
    once = unparse(parse_pipeline(source))
    assert unparse(parse_pipeline(once)) == once


def test_nested_blocks_are_indented() -> None:
    text = unparse(parse_pipeline("f : x ?\n\ta : x ?\n\t\tb\n\t\tc\n\td"))
    assert text == "f : x ?\n\ta : x ?\n\t\tb\n\t\tc\n\td"
