"""Kiln AST node definitions.

Nodes are frozen dataclasses handed to the compiler by an external parser.
The set of variants is closed: ``NODE_TYPES`` lists every concrete node
kind the compiler dispatches on.

Categories:
- expressions: Literal, Symbol, Group, Array, Dict, Pair, operators,
  Compare, LookupVal, FunCall, KeywordArg, Filter
- output: Output, TemplateData
- control_flow: NodeList, If, For
- variables: Set
- functions: Macro, MacroParam
- structure: Root, Extends, Block, Include, Import, FromImport

"""

from __future__ import annotations

from kiln.nodes.base import Node
from kiln.nodes.control_flow import For, If, NodeList
from kiln.nodes.expressions import (
    Add,
    And,
    Array,
    BinOp,
    Compare,
    CompareOperand,
    Dict,
    Div,
    Filter,
    FloorDiv,
    FunCall,
    Group,
    KeywordArg,
    Literal,
    LookupVal,
    Mod,
    Mul,
    Neg,
    Not,
    Or,
    Pair,
    Pos,
    Pow,
    Sub,
    Symbol,
    UnaryOp,
)
from kiln.nodes.functions import Macro, MacroParam
from kiln.nodes.output import Output, TemplateData
from kiln.nodes.structure import Block, Extends, FromImport, Import, Include, Root
from kiln.nodes.variables import Set

# Concrete node kinds. Pair, CompareOperand, KeywordArg and MacroParam only
# appear inside their owners and are compiled by them, never dispatched.
NODE_TYPES: tuple[type[Node], ...] = (
    Literal,
    Symbol,
    Group,
    Array,
    Dict,
    Or,
    And,
    Add,
    Sub,
    Mul,
    Div,
    FloorDiv,
    Mod,
    Pow,
    Not,
    Neg,
    Pos,
    Compare,
    LookupVal,
    FunCall,
    Filter,
    Set,
    If,
    For,
    Macro,
    Import,
    FromImport,
    Block,
    Extends,
    Include,
    Output,
    TemplateData,
    NodeList,
    Root,
)

__all__ = [
    "NODE_TYPES",
    "Add",
    "And",
    "Array",
    "BinOp",
    "Block",
    "Compare",
    "CompareOperand",
    "Dict",
    "Div",
    "Extends",
    "Filter",
    "FloorDiv",
    "For",
    "FromImport",
    "FunCall",
    "Group",
    "If",
    "Import",
    "Include",
    "KeywordArg",
    "Literal",
    "LookupVal",
    "Macro",
    "MacroParam",
    "Mod",
    "Mul",
    "Neg",
    "Node",
    "NodeList",
    "Not",
    "Or",
    "Output",
    "Pair",
    "Pos",
    "Pow",
    "Root",
    "Set",
    "Sub",
    "Symbol",
    "TemplateData",
    "UnaryOp",
]
