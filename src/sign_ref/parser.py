"""
Tree Builder for Sign

Precedence climbing over the laid-out token stream. Binding powers and
associativity come from the operator table in ``operators``; special forms
are layered on top:

- define:         name : expr
- lambda:         a b ~rest ? body      (or ``? body`` for no parameters)
- juxtaposition:  f x y                 -> Apply(f, (x, y))
- point-free:     [+ 2]                 -> PointFreeOp('+', 2)
- absolute value: |a - b|               -> UnaryOp('|', a - b)
- empty group:    []                    -> EmptyList

Position of a context-sensitive symbol (``-``, ``!``, ``~``) is decided once,
here: after a complete left operand an infix reading wins.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .ast_nodes import (
    Apply,
    BinaryOp,
    Block,
    Define,
    EmptyList,
    Get,
    Identifier,
    Lambda,
    List as ListNode,
    Literal,
    Parameter,
    PointFreeOp,
    Range,
    SyntaxNode,
    UnaryOp,
    Unit,
)
from .errors import ParseError, token_window
from .layout import normalize
from .lexer import scan
from .operators import (
    APPLY,
    DEFINE,
    LAMBDA,
    PRODUCT,
    OpInfo,
    infix,
    is_point_free,
    postfix,
    prefix,
)
from .token_types import TT, Tok

logger = logging.getLogger(__name__)

ABS = "|"

LITERAL_KINDS = {
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.CHAR: "character",
}

OPERAND_START = frozenset({TT.IDENT, TT.NUMBER, TT.STRING, TT.CHAR, TT.UNIT, TT.OPEN})


def has_prefix_role(symbol: str) -> bool:
    # '|' as an operator token is always the binary or; |x| arrives as brackets
    return symbol != ABS and prefix(symbol) is not None


def describe(tok: Tok) -> str:
    if tok.type == TT.EOF:
        return "end of input"
    if tok.type == TT.SEPARATOR:
        return "line break"
    return f"'{tok.value}'"


# ============================================================================
# Parser
# ============================================================================


class Parser:
    """
    Precedence-climbing parser for Sign.

    Binding power (lowest to highest):
    0.   line separators (Block)
    10.  define (:), export (#), import (@)
    20.  lambda (?)
    30.  product (,)
    35.  range (~)
    40.  or (|), xor (;), and (&)
    70.  comparisons
    80.  add, sub
    90.  mul, div, mod
    100. power (^)
    105. prefix (- ! ~ $)
    110. juxtaposition
    115. postfix (! ~)
    120. get (')
    """

    def __init__(self, tokens: Sequence[Tok]):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != TT.EOF:
            anchor = self.tokens[-1] if self.tokens else Tok(TT.EOF, "", 1, 1, 0)
            self.tokens.append(anchor.borrow(TT.EOF, ""))
        self.pos = 0
        self.current = self.tokens[0]

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if 0 <= idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current = self.tokens[self.pos]
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def error(self, message: str, token: Optional[Tok] = None) -> ParseError:
        index = self.pos
        if token is not None:
            index = next((i for i, tok in enumerate(self.tokens) if tok is token), self.pos)
        return ParseError(message, self.tokens[index], token_window(self.tokens, index))

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> SyntaxNode:
        """Parse the whole token stream into one tree"""
        self.check_brackets()
        try:
            node = self.parse_sequence()
        except RecursionError:
            raise self.error("Expression nested too deeply") from None

        if not self.check(TT.EOF):
            raise self.error(f"Unexpected {describe(self.current)} after complete expression")

        logger.debug("built %s from %d tokens", type(node).__name__, len(self.tokens))
        return node

    def check_brackets(self) -> None:
        """Every opener needs a closer of its family: ([{ interchangeably, or |."""
        stack: List[Tok] = []

        for tok in self.tokens:
            if tok.type == TT.OPEN:
                stack.append(tok)
            elif tok.type == TT.CLOSE:
                if not stack:
                    raise self.error(f"Unmatched closing bracket '{tok.value}'", tok)
                opener = stack.pop()
                if (opener.value == ABS) != (tok.value == ABS):
                    raise self.error(
                        f"Mismatched brackets: '{opener.value}' at line {opener.line}, "
                        f"col {opener.column} closed by '{tok.value}'",
                        tok,
                    )

        if stack:
            opener = stack[-1]
            raise self.error(f"Unmatched opening bracket '{opener.value}'", opener)

    def parse_sequence(self) -> SyntaxNode:
        """Statements joined by line separators, up to a closer or the end"""
        statements: List[SyntaxNode] = []

        while not self.check(TT.CLOSE, TT.EOF):
            statements.append(self.parse_expr())
            if not self.match(TT.SEPARATOR):
                break

        if len(statements) == 1:
            return statements[0]
        return Block(tuple(statements))

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self, min_power: int = 0) -> SyntaxNode:
        """Parse an expression whose operators bind at least `min_power`"""
        left = self.parse_prefix(min_power)
        applied = False  # left is an Apply built by this loop
        listing = False  # left is a List built by this loop

        while True:
            tok = self.current

            if tok.type == TT.OPERATOR:
                post = postfix(tok.value)
                if post is not None and post.power >= min_power and self.is_postfix_here():
                    self.advance()
                    left = UnaryOp(tok.value, left, is_prefix=False)
                    applied = listing = False
                    continue

                info = infix(tok.value)
                if info is not None:
                    if info.power < min_power:
                        break

                    if tok.value == ",":
                        self.advance()
                        item = self.parse_right(tok, info.right_power)
                        elements = left.elements if listing else (left,)
                        left = ListNode(elements + (item,))
                        listing, applied = True, False
                        continue

                    left = self.parse_infix(left, info)
                    applied = listing = False
                    continue

            if APPLY >= min_power and self.starts_operand(tok):
                arg = self.parse_expr(APPLY + 1)
                if applied:
                    left = Apply(left.function, left.arguments + (arg,))
                else:
                    left = Apply(left, (arg,))
                applied, listing = True, False
                continue

            break

        return left

    def parse_infix(self, left: SyntaxNode, info: OpInfo) -> SyntaxNode:
        op = self.advance()

        if op.value == "?":
            params = self.params_from(left, op)
            return Lambda(params, self.parse_right(op, info.right_power))

        right = self.parse_right(op, info.right_power)

        if op.value == ":" and isinstance(left, Identifier):
            return Define(left, right)
        if op.value == "~":
            return Range(left, right)
        if op.value == "'":
            return Get(left, right)
        return BinaryOp(op.value, left, right)

    def parse_right(self, op: Tok, min_power: int) -> SyntaxNode:
        """Parse the operand an operator is waiting for"""
        if not self.starts_operand(self.current):
            raise self.error(
                f"Missing operand after '{op.value}', got {describe(self.current)}", op
            )
        return self.parse_expr(min_power)

    def parse_prefix(self, min_power: int) -> SyntaxNode:
        """Parse a primary term, a prefix operation or a leading special form"""
        tok = self.current

        if tok.type == TT.IDENT and min_power <= DEFINE and self.peek(1).type == TT.OPERATOR and self.peek(1).value == ":":
            return self.parse_define()

        if min_power <= LAMBDA and self.lambda_head_length():
            return self.parse_lambda()

        if tok.type == TT.IDENT:
            self.advance()
            return Identifier(tok.value)

        if tok.type in LITERAL_KINDS:
            self.advance()
            return Literal(LITERAL_KINDS[tok.type], tok.text)

        if tok.type == TT.UNIT:
            self.advance()
            return Unit()

        if tok.type == TT.OPEN:
            return self.parse_group()

        if tok.type == TT.OPERATOR:
            if tok.value == "?":
                # ? body: a lambda that takes no parameters
                self.advance()
                return Lambda((), self.parse_right(tok, LAMBDA))

            if has_prefix_role(tok.value):
                info = prefix(tok.value)
                self.advance()
                operand = self.parse_right(tok, info.right_power)
                return UnaryOp(tok.value, operand, is_prefix=True)

        raise self.error(f"Expected an operand, got {describe(tok)}")

    # ========================================================================
    # Special Forms
    # ========================================================================

    def parse_define(self) -> SyntaxNode:
        name = self.advance()
        colon = self.advance()
        return Define(Identifier(name.value), self.parse_right(colon, DEFINE))

    def lambda_head_length(self) -> int:
        """Length of a parameter list `a b ~c` directly followed by '?', else 0"""
        i = self.pos
        while self.tokens[i].type == TT.IDENT:
            i += 1

        if self.tokens[i].type == TT.OPERATOR and self.tokens[i].value == "~" and self.tokens[i + 1].type == TT.IDENT:
            i += 2

        if i > self.pos and self.tokens[i].type == TT.OPERATOR and self.tokens[i].value == "?":
            return i - self.pos
        return 0

    def parse_lambda(self) -> SyntaxNode:
        params: List[Parameter] = []

        while not self.current.is_op("?"):
            if self.current.is_op("~"):
                self.advance()
                params.append(Parameter(self.advance().value, is_rest=True))
            else:
                params.append(Parameter(self.advance().value))

        question = self.advance()
        return Lambda(tuple(params), self.parse_right(question, LAMBDA))

    def params_from(self, left: SyntaxNode, op: Tok) -> Tuple[Parameter, ...]:
        """Read a bracketed parameter list such as `[a b] ? body`"""
        names = [left]
        if isinstance(left, Apply):
            names = [left.function, *left.arguments]

        if all(isinstance(name, Identifier) for name in names):
            return tuple(Parameter(name.name) for name in names)

        raise self.error("Lambda parameters must be identifiers", op)

    def parse_group(self) -> SyntaxNode:
        """Parse a bracket group: grouping, [], |x| or a point-free operator"""
        opener = self.advance()

        if opener.value == ABS:
            if self.check(TT.CLOSE):
                raise self.error("Empty absolute-value group", opener)
            inner = self.parse_sequence()
            self.expect_close(opener)
            return UnaryOp(ABS, inner, is_prefix=True)

        if self.check(TT.CLOSE):
            self.expect_close(opener)
            return EmptyList()

        if self.is_point_free_head():
            node = self.parse_point_free()
        else:
            node = self.parse_sequence()

        self.expect_close(opener)
        return node

    def is_point_free_head(self) -> bool:
        tok = self.current
        if tok.type != TT.OPERATOR or not is_point_free(tok.value):
            return False

        # [-2] negates, [- 2] subtracts 2
        nxt = self.peek(1)
        glued = tok.end == nxt.offset and not nxt.synthetic
        if has_prefix_role(tok.value) and glued and self.starts_operand(nxt):
            return False
        return True

    def parse_point_free(self) -> SyntaxNode:
        op = self.advance()
        if self.check(TT.CLOSE):
            return PointFreeOp(op.value)

        preset = self.parse_right(op, PRODUCT + 1)
        if self.current.is_op(",") or self.check(TT.SEPARATOR):
            self.advance()
        return PointFreeOp(op.value, preset)

    def expect_close(self, opener: Tok) -> Tok:
        if not self.check(TT.CLOSE):
            raise self.error(
                f"Unexpected {describe(self.current)} in group opened at line "
                f"{opener.line}, col {opener.column}"
            )
        return self.advance()

    # ========================================================================
    # Position Resolution
    # ========================================================================

    def starts_operand(self, tok: Tok) -> bool:
        if tok.type in OPERAND_START:
            return True
        return tok.type == TT.OPERATOR and (tok.value == "?" or has_prefix_role(tok.value))

    def is_postfix_here(self) -> bool:
        """Decide whether the current '!' or '~' closes off the left operand"""
        tok = self.current
        nxt = self.peek(1)

        if tok.value == "~":
            # infix range wins whenever a right operand follows
            return not self.starts_operand(nxt)

        prev = self.peek(-1)
        glued = prev.end == tok.offset and not prev.synthetic
        return glued or not self.starts_operand(nxt)


def build(tokens: Sequence[Tok]) -> SyntaxNode:
    """Build a syntax tree from laid-out tokens"""
    return Parser(tokens).parse()


def parse_source(source: str) -> SyntaxNode:
    """
    Parse Sign source code to a syntax tree.

    Runs the whole front end: scan -> normalize -> build.
    """
    return build(normalize(scan(source)))
