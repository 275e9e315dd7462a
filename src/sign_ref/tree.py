"""Conversion between syntax nodes and lark trees.

The lark form is what the command line prints and what the serializer walks:
every node becomes a ``Tree`` labelled after its kind, and scalar data
(names, operator symbols, literal text) become ``Token`` leaves.
"""
from __future__ import annotations

from typing import List, Optional, Union

from lark import Token, Transformer, Tree, v_args
from typing_extensions import TypeAlias

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

Node: TypeAlias = Union[Tree, Token]


# ---------- SyntaxNode -> Tree ----------

def _param(param: Parameter) -> Tree:
    return Tree("param", [Token("REST" if param.is_rest else "NAME", param.name)])

def to_tree(node: SyntaxNode) -> Tree:
    """Export a syntax tree as a lark ``Tree``."""
    match node:
        case Literal(kind, raw):
            return Tree("literal", [Token(kind.upper(), raw)])
        case Identifier(name):
            return Tree("identifier", [Token("NAME", name)])
        case Unit():
            return Tree("unit", [])
        case Define(target, value):
            return Tree("define", [to_tree(target), to_tree(value)])
        case Lambda(params, body):
            return Tree("anonfn", [Tree("params", [_param(p) for p in params]), to_tree(body)])
        case BinaryOp(op, left, right):
            return Tree("binop", [Token("OP", op), to_tree(left), to_tree(right)])
        case UnaryOp(op, operand, is_prefix):
            return Tree("unop", [Token("PREFIX" if is_prefix else "POSTFIX", op), to_tree(operand)])
        case Range(start, end):
            return Tree("range", [to_tree(start), to_tree(end)])
        case Get(target, key):
            return Tree("get", [to_tree(target), to_tree(key)])
        case Apply(function, arguments):
            return Tree("apply", [to_tree(function), Tree("args", [to_tree(a) for a in arguments])])
        case PointFreeOp(op, preset):
            children: List[Node] = [Token("OP", op)]
            if preset is not None:
                children.append(to_tree(preset))
            return Tree("pointfree", children)
        case ListNode(elements):
            return Tree("list", [to_tree(e) for e in elements])
        case EmptyList():
            return Tree("emptylist", [])
        case Block(statements):
            return Tree("block", [to_tree(s) for s in statements])

    raise TypeError(f"not a syntax node: {node!r}")


# ---------- Tree -> SyntaxNode ----------

@v_args(inline=True)
class ToNode(Transformer):
    """Rebuild syntax nodes from an exported tree."""

    def literal(self, tok: Token) -> Literal:
        return Literal(tok.type.lower(), str(tok))

    def identifier(self, tok: Token) -> Identifier:
        return Identifier(str(tok))

    def unit(self) -> Unit:
        return Unit()

    def define(self, target: Identifier, value: SyntaxNode) -> Define:
        return Define(target, value)

    def param(self, tok: Token) -> Parameter:
        return Parameter(str(tok), is_rest=tok.type == "REST")

    def params(self, *params: Parameter) -> tuple:
        return params

    def anonfn(self, params: tuple, body: SyntaxNode) -> Lambda:
        return Lambda(params, body)

    def binop(self, op: Token, left: SyntaxNode, right: SyntaxNode) -> BinaryOp:
        return BinaryOp(str(op), left, right)

    def unop(self, op: Token, operand: SyntaxNode) -> UnaryOp:
        return UnaryOp(str(op), operand, is_prefix=op.type == "PREFIX")

    def range(self, start: SyntaxNode, end: SyntaxNode) -> Range:
        return Range(start, end)

    def get(self, target: SyntaxNode, key: SyntaxNode) -> Get:
        return Get(target, key)

    def args(self, *arguments: SyntaxNode) -> tuple:
        return arguments

    def apply(self, function: SyntaxNode, arguments: tuple) -> Apply:
        return Apply(function, arguments)

    def pointfree(self, op: Token, preset: Optional[SyntaxNode] = None) -> PointFreeOp:
        return PointFreeOp(str(op), preset)

    def list(self, *elements: SyntaxNode) -> ListNode:
        return ListNode(elements)

    def emptylist(self) -> EmptyList:
        return EmptyList()

    def block(self, *statements: SyntaxNode) -> Block:
        return Block(statements)


def from_tree(tree: Tree) -> SyntaxNode:
    """Inverse of ``to_tree``."""
    return ToNode().transform(tree)
