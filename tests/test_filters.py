"""Tests for the built-in filters."""

from __future__ import annotations

import pytest

from kiln.environment.filters import DEFAULT_FILTERS
from kiln.nodes import Filter, KeywordArg, Symbol

from .builders import filt, lit, out, sym, tpl


class TestStringFilters:
    """Case conversion, trimming and replacement."""

    @pytest.mark.parametrize(
        "name,value,expected",
        [
            ("upper", "hello", "HELLO"),
            ("lower", "HeLLo", "hello"),
            ("title", "hello world", "Hello World"),
            ("capitalize", "hELLO", "Hello"),
            ("trim", "  x  ", "x"),
            ("string", 42, "42"),
        ],
    )
    def test_basic(self, render, name, value, expected):
        assert render(tpl(out(filt(name, lit(value))))) == expected

    def test_missing_value_is_empty(self, render):
        assert render(tpl(out(filt("upper", sym("missing"))))) == ""

    def test_replace_all(self, render):
        assert render(tpl(out(filt("replace", lit("a.b.c"), lit("."), lit("/"))))) == "a/b/c"

    def test_replace_count(self, render):
        node = filt("replace", lit("a.b.c"), lit("."), lit("/"), lit(1))
        assert render(tpl(out(node))) == "a/b.c"

    def test_keyword_args_are_not_passed(self, env):
        env.add_filter("bracket", lambda v: f"[{v}]")
        node = Filter(Symbol("bracket"), [lit("v"), KeywordArg(Symbol("x"), lit(2))])
        assert env.from_ast(tpl(out(node))).render() == "[v]"


class TestSequenceFilters:
    """length, join, first, last and reverse."""

    def test_length(self, render):
        assert render(tpl(out(filt("length", sym("xs")))), xs=[1, 2, 3]) == "3"

    def test_length_of_missing(self):
        assert DEFAULT_FILTERS["length"](None) == 0

    def test_length_of_generator(self):
        assert DEFAULT_FILTERS["length"](x for x in range(4)) == 4

    def test_join(self, render):
        assert render(tpl(out(filt("join", sym("xs"), lit(", ")))), xs=[1, "a"]) == "1, a"

    def test_join_default_separator(self):
        assert DEFAULT_FILTERS["join"](["a", "b"]) == "ab"

    @pytest.mark.parametrize(
        "name,value,expected",
        [
            ("first", [1, 2], 1),
            ("first", [], None),
            ("last", [1, 2], 2),
            ("last", "abc", "c"),
            ("last", {3, 3}, 3),
            ("last", None, None),
            ("reverse", "abc", "cba"),
            ("reverse", [1, 2], [2, 1]),
            ("reverse", None, []),
        ],
    )
    def test_edges(self, name, value, expected):
        assert DEFAULT_FILTERS[name](value) == expected


class TestValueFilters:
    """default and int."""

    def test_default_on_missing(self, render):
        root = tpl(out(filt("default", sym("missing"), lit("fallback"))))
        assert render(root) == "fallback"

    def test_default_keeps_value(self, render):
        root = tpl(out(filt("default", sym("x"), lit("fallback"))))
        assert render(root, x="set") == "set"

    def test_default_boolean(self):
        assert DEFAULT_FILTERS["default"](0, "d") == 0
        assert DEFAULT_FILTERS["default"](0, "d", True) == "d"

    @pytest.mark.parametrize(
        "value,expected",
        [("3", 3), ("3.7", 3), (4.9, 4), ("junk", 0), (None, 0)],
    )
    def test_int(self, value, expected):
        assert DEFAULT_FILTERS["int"](value) == expected

    def test_int_custom_default(self):
        assert DEFAULT_FILTERS["int"]("junk", -1) == -1

    def test_filters_are_registered(self):
        assert sorted(DEFAULT_FILTERS) == [
            "capitalize",
            "default",
            "first",
            "int",
            "join",
            "last",
            "length",
            "lower",
            "replace",
            "reverse",
            "string",
            "title",
            "trim",
            "upper",
        ]
