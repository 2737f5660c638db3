"""Expression nodes for Kiln AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal as TypingLiteral

from kiln.nodes.base import Node

CompareOp = TypingLiteral["==", "!=", "<", ">", "<=", ">="]


@dataclass(frozen=True, slots=True)
class Literal(Node):
    """Constant value: string, number, boolean."""

    value: str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Symbol(Node):
    """Variable reference: {{ user }}"""

    value: str


@dataclass(frozen=True, slots=True)
class Group(Node):
    """Parenthesized expression: (a)"""

    children: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Array(Node):
    """List expression: [a, b, c]"""

    children: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Pair(Node):
    """Dict entry: key: value"""

    key: Node
    value: Node


@dataclass(frozen=True, slots=True)
class Dict(Node):
    """Dict expression: {a: b, "c": d}"""

    children: Sequence[Pair]


@dataclass(frozen=True, slots=True)
class BinOp(Node):
    """Base for binary operators."""

    left: Node
    right: Node


@dataclass(frozen=True, slots=True)
class Or(BinOp):
    """Logical or: a or b"""


@dataclass(frozen=True, slots=True)
class And(BinOp):
    """Logical and: a and b"""


@dataclass(frozen=True, slots=True)
class Add(BinOp):
    """a + b"""


@dataclass(frozen=True, slots=True)
class Sub(BinOp):
    """a - b"""


@dataclass(frozen=True, slots=True)
class Mul(BinOp):
    """a * b"""


@dataclass(frozen=True, slots=True)
class Div(BinOp):
    """a / b"""


@dataclass(frozen=True, slots=True)
class FloorDiv(BinOp):
    """a // b"""


@dataclass(frozen=True, slots=True)
class Mod(BinOp):
    """a % b"""


@dataclass(frozen=True, slots=True)
class Pow(BinOp):
    """a ** b"""


@dataclass(frozen=True, slots=True)
class UnaryOp(Node):
    """Base for unary operators."""

    target: Node


@dataclass(frozen=True, slots=True)
class Not(UnaryOp):
    """not a"""


@dataclass(frozen=True, slots=True)
class Neg(UnaryOp):
    """-a"""


@dataclass(frozen=True, slots=True)
class Pos(UnaryOp):
    """+a"""


@dataclass(frozen=True, slots=True)
class CompareOperand(Node):
    """One ``op right`` step of a comparison chain."""

    expr: Node
    type: CompareOp


@dataclass(frozen=True, slots=True)
class Compare(Node):
    """Comparison: expr op1 right1 op2 right2 ..."""

    expr: Node
    ops: Sequence[CompareOperand]


@dataclass(frozen=True, slots=True)
class LookupVal(Node):
    """Member access: target[val] or target.val"""

    target: Node
    val: Node


@dataclass(frozen=True, slots=True)
class KeywordArg(Node):
    """Keyword argument in a call: name=value"""

    key: Symbol
    value: Node


@dataclass(frozen=True, slots=True)
class FunCall(Node):
    """Function call: name(args, key=value)"""

    name: Node
    args: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class Filter(Node):
    """Filter application: value | name(args)

    ``args[0]`` is the filtered value.
    """

    name: Node
    args: Sequence[Node] = ()
