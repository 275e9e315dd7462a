from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Type

import pytest

from sign_ref.errors import token_window
from tests.support.harness import (
    TT,
    LexError,
    ParseError,
    SignSyntaxError,
    StructureError,
    Tok,
    build,
    parse_pipeline,
    scan,
)


@dataclass(frozen=True)
class Case:
    name: str
    source: str
    exc: Type[SignSyntaxError]
    msg: str
    pos: Optional[Tuple[int, int]] = None


PIPELINE_ERROR_CASES: List[Case] = [
    Case("unclosed-paren", "(x + ", ParseError, "Unmatched opening bracket '('", (1, 1)),
    Case("unclosed-inner", "f [a (b]", ParseError, "Unmatched opening bracket '['", (1, 3)),
    Case("unmatched-closer", "x : )", ParseError, "Unmatched closing bracket ')'", (1, 5)),
    Case("mismatched-abs", "|x)", ParseError, "Mismatched brackets", (1, 3)),
    Case("dangling-infix", "x +", ParseError, "Missing operand after '+'", (1, 3)),
    Case("dangling-define", "x :", ParseError, "Missing operand after ':'", (1, 3)),
    Case("dangling-lambda", "?", ParseError, "Missing operand after '?'", (1, 1)),
    Case("dangling-prefix", "f [-]x -", ParseError, "Missing operand after '-'", (1, 8)),
    Case("leading-infix", "+ 1", ParseError, "Expected an operand, got '+'", (1, 1)),
    Case("lone-or", "| |", ParseError, "Expected an operand, got '|'", (1, 1)),
    Case("bad-params", "[1 + 2] ? x", ParseError, "Lambda parameters must be identifiers", (1, 9)),
    Case("dangling-in-block", "f :\n\tx *", ParseError, "Missing operand after '*'", (2, 4)),
    Case("lex-first", "(x + `oops", LexError, "Unterminated string literal", (1, 6)),
    Case("continuation-in-open-bracket", "(x\n\ty", ParseError, "Unmatched opening bracket", (1, 1)),
    Case("structure-error", "a\n\tb +", StructureError, "Unexpected indent", (2, 2)),
]


@pytest.mark.parametrize("case", PIPELINE_ERROR_CASES, ids=lambda case: case.name)
def test_pipeline_errors(case: Case) -> None:
    with pytest.raises(case.exc) as exc_info:
        parse_pipeline(case.source)

    err = exc_info.value
    assert case.msg in err.message
    if case.pos is not None:
        assert (err.line, err.column) == case.pos


def test_parse_error_carries_window() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_pipeline("x +")

    assert exc_info.value.window == "x >>+<< <eof>"


def test_unclosed_bracket_window_marks_opener() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_pipeline("(x + ")

    assert exc_info.value.window.startswith(">>(<<")


def test_error_to_dict() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_pipeline("x +")

    data = exc_info.value.to_dict()
    assert data["stage"] == "parse"
    assert (data["line"], data["column"]) == (1, 3)
    assert data["offendingLexeme"] == "+"
    assert "Missing operand" in data["message"]
    assert data["window"] == "x >>+<< <eof>"


def test_lex_error_to_dict() -> None:
    with pytest.raises(LexError) as exc_info:
        scan("a.b")

    data = exc_info.value.to_dict()
    assert data == {
        "stage": "lex",
        "line": 1,
        "column": 2,
        "message": "Unexpected character '.'",
        "offendingLexeme": ".",
    }


def test_error_at_end_of_input_has_no_lexeme() -> None:
    # an unclosed opener is cited rather than the end of input
    tokens = [Tok(TT.OPEN, "(", 1, 1, 0), Tok(TT.IDENT, "x", 1, 2, 1), Tok(TT.EOF, "", 1, 3, 2)]
    with pytest.raises(ParseError) as exc_info:
        build(tokens)
    assert exc_info.value.lexeme == "("

    err = ParseError("boom", Tok(TT.EOF, "", 4, 1, 30))
    assert err.lexeme is None
    assert (err.line, err.column) == (4, 1)


def test_error_message_format() -> None:
    err = StructureError("Unexpected indent", 3, 2, "x")
    assert str(err) == "Unexpected indent at line 3, col 2"
    assert isinstance(err, SignSyntaxError)


def test_empty_absolute_value_group() -> None:
    tokens = [Tok(TT.OPEN, "|", 1, 1, 0), Tok(TT.CLOSE, "|", 1, 2, 1), Tok(TT.EOF, "", 1, 3, 2)]
    with pytest.raises(ParseError, match="Empty absolute-value group"):
        build(tokens)


def test_leftover_tokens_are_rejected() -> None:
    # raw scanner output still holds line structure the builder cannot consume
    with pytest.raises(ParseError, match="after complete expression"):
        build(scan("x\ny"))


def test_build_adds_missing_eof() -> None:
    assert build([Tok(TT.IDENT, "x", 1, 1, 0)]).name == "x"


def test_token_window_radius() -> None:
    tokens = scan("a b c d e f g h")
    assert token_window(tokens, 4, radius=2) == "c d >>e<< f g"
    assert token_window(tokens, 0, radius=1) == ">>a<< b"


@pytest.mark.parametrize(
    "source",
    [
        " : ".join(f"a{i}" for i in range(2000)),
        "[" * 2000 + "1" + "]" * 2000,
    ],
    ids=["define-chain", "nested-brackets"],
)
def test_deep_nesting_is_a_parse_error(source: str) -> None:
    with pytest.raises(ParseError, match="Expression nested too deeply") as exc_info:
        parse_pipeline(source)

    err = exc_info.value
    assert err.stage == "parse"
    assert err.line == 1
    assert err.window
