"""Tests for expression compilation.

Each case renders a one-output template and checks the text produced,
plus a few checks on the shape of the generated Python.
"""

from __future__ import annotations

import ast
from types import SimpleNamespace

import pytest

from kiln.compiler import Compiler
from kiln.nodes import (
    Add,
    And,
    Compare,
    CompareOperand,
    Div,
    FloorDiv,
    Group,
    LookupVal,
    Mod,
    Mul,
    Neg,
    Not,
    Or,
    Pair,
    Dict,
    Pos,
    Pow,
    Sub,
)

from .builders import arr, attr, call, cmp, dict_, filt, for_, lit, out, sym, tpl


def source_of(root) -> str:
    """Generated Python source for ``root``."""
    return ast.unparse(Compiler().compile_module(root))


class TestLiteralsAndNames:
    """Literals, symbols and the dynamic lookup fallback."""

    def test_string_literal(self, render):
        assert render(tpl(out(lit("hello")))) == "hello"

    def test_number_literal(self, render):
        assert render(tpl(out(lit(42)))) == "42"

    def test_none_literal_renders_empty(self, render):
        assert render(tpl(out(lit(None)))) == ""

    def test_literal_with_quotes_and_newlines(self, render):
        value = "say \"hi\"\n\t'there'\\"
        assert render(tpl(out(lit(value)))) == value

    def test_symbol_from_context(self, render):
        assert render(tpl(out(sym("name"))), name="World") == "World"

    def test_missing_symbol_renders_empty(self, render):
        assert render(tpl(out(sym("missing")))) == ""

    def test_none_value_renders_empty(self, render):
        assert render(tpl(out(sym("value"))), value=None) == ""

    def test_unbound_symbol_uses_runtime_resolve(self):
        assert "runtime.resolve(context, frame, 'user')" in source_of(tpl(out(sym("user"))))

    def test_bound_symbol_uses_local(self):
        code = source_of(tpl(for_("item", sym("items"), out(sym("item")))))
        assert "runtime.resolve(context, frame, 'item')" not in code
        assert "runtime.to_str(t_4)" in code


class TestOperators:
    """Arithmetic, boolean and comparison operators."""

    @pytest.mark.parametrize(
        "node,expected",
        [
            (Add(lit(2), lit(3)), "5"),
            (Sub(lit(2), lit(3)), "-1"),
            (Mul(lit(4), lit(3)), "12"),
            (Div(lit(7), lit(2)), "3.5"),
            (Mod(lit(7), lit(3)), "1"),
            (FloorDiv(lit(7), lit(2)), "3"),
            (FloorDiv(lit(-7), lit(2)), "-4"),
            (Pow(lit(2), lit(10)), "1024"),
            (Neg(lit(5)), "-5"),
            (Pos(lit(5)), "5"),
            (Not(lit(False)), "True"),
        ],
    )
    def test_arithmetic(self, render, node, expected):
        assert render(tpl(out(node))) == expected

    def test_floor_division_goes_through_runtime(self):
        assert "runtime.floor(7 / 2)" in source_of(tpl(out(FloorDiv(lit(7), lit(2)))))

    def test_power_goes_through_runtime(self):
        assert "runtime.power(2, 3)" in source_of(tpl(out(Pow(lit(2), lit(3)))))

    def test_or_falls_back_on_missing(self, render):
        assert render(tpl(out(Or(sym("missing"), lit("fallback"))))) == "fallback"

    def test_and_returns_last_truthy(self, render):
        assert render(tpl(out(And(lit(1), lit(2))))) == "2"

    @pytest.mark.parametrize(
        "op,left,right,expected",
        [
            ("==", 1, 1, "True"),
            ("!=", 1, 1, "False"),
            ("<", 1, 2, "True"),
            (">", 1, 2, "False"),
            ("<=", 2, 2, "True"),
            (">=", 1, 2, "False"),
        ],
    )
    def test_comparison(self, render, op, left, right, expected):
        assert render(tpl(out(cmp(lit(left), op, lit(right))))) == expected

    def test_chained_comparison(self, render):
        node = Compare(lit(1), [CompareOperand(lit(2), "<"), CompareOperand(lit(3), "<")])
        assert render(tpl(out(node))) == "True"


class TestAggregates:
    """Groups, arrays and dicts."""

    def test_single_group_is_its_child(self, render):
        assert render(tpl(out(Group([Add(lit(1), lit(2))])))) == "3"

    def test_multi_group_is_tuple(self, render):
        assert render(tpl(out(Group([lit(1), lit(2)])))) == "(1, 2)"

    def test_array(self, render):
        assert render(tpl(out(arr(lit(1), lit("x"))))) == "[1, 'x']"

    def test_dict_with_name_keys(self, render):
        assert render(tpl(out(attr(dict_(a=lit(1)), "a")))) == "1"

    def test_dict_with_string_literal_keys(self, render):
        node = LookupVal(Dict([Pair(lit("b c"), lit(2))]), lit("b c"))
        assert render(tpl(out(node))) == "2"

    def test_dict_value_from_context(self, render):
        assert render(tpl(out(attr(dict_(a=sym("x")), "a"))), x="from ctx") == "from ctx"


class TestMemberAccess:
    """LookupVal through runtime.member."""

    def test_mapping_key(self, render):
        assert render(tpl(out(attr(sym("user"), "name"))), user={"name": "Ann"}) == "Ann"

    def test_object_attribute(self, render):
        page = SimpleNamespace(title="Home")
        assert render(tpl(out(attr(sym("page"), "title"))), page=page) == "Home"

    def test_sequence_index(self, render):
        node = LookupVal(sym("xs"), lit(1))
        assert render(tpl(out(node)), xs=["a", "b"]) == "b"

    def test_missing_member_renders_empty(self, render):
        assert render(tpl(out(attr(sym("user"), "email"))), user={"name": "Ann"}) == ""

    def test_member_of_missing_value_renders_empty(self, render):
        assert render(tpl(out(attr(attr(sym("a"), "b"), "c")))) == ""


class TestCalls:
    """Function calls and filters."""

    def test_plain_callable_receives_positional_only(self, render):
        def f(a):
            return f"got {a}"

        assert render(tpl(out(call("f", lit(1), x=lit(2)))), f=f) == "got 1"

    def test_keyword_args_reach_macros_only(self):
        code = source_of(tpl(out(call("f", lit(1), x=lit(2)))))
        assert "t_1([1], {'x': 2}) if runtime.is_macro(" in code
        assert "else t_1(1)" in code

    def test_callee_evaluated_once(self, render):
        lookups = []

        class Tracking(dict):
            def __getitem__(self, key):
                lookups.append(key)
                return super().__getitem__(key)

        obj = Tracking(fn=lambda: "called")
        assert render(tpl(out(call(attr(sym("obj"), "fn")))), obj=obj) == "called"
        assert lookups == ["fn"]

    def test_call_site_checks_macro_marker(self):
        code = source_of(tpl(out(call("f", lit(1)))))
        assert "t_1 := runtime.resolve(context, frame, 'f')" in code
        assert "t_1([1], {}) if runtime.is_macro(" in code
        assert "else t_1(1)" in code

    def test_filter(self, render):
        assert render(tpl(out(filt("upper", sym("name")))), name="bob") == "BOB"

    def test_filter_with_arguments(self, render):
        assert render(tpl(out(filt("replace", lit("a-b"), lit("-"), lit("+"))))) == "a+b"

    def test_chained_filters(self, render):
        assert render(tpl(out(filt("upper", filt("trim", lit("  x ")))))) == "X"

    def test_filter_lookup_goes_through_env(self):
        assert "env.get_filter('upper')" in source_of(tpl(out(filt("upper", lit("x")))))
