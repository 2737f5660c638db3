"""Pytest configuration and fixtures for Kiln tests."""

import pytest

from kiln import DictLoader, Environment

from .builders import (
    block,
    call,
    extends,
    lit,
    macro,
    out,
    set_,
    sym,
    text,
    tpl,
)


@pytest.fixture
def env():
    """Create a basic Kiln Environment (no loader)."""
    return Environment()


@pytest.fixture
def make_env():
    """Factory: Environment over a DictLoader of template ASTs."""

    def _make(templates, **kwargs):
        return Environment(loader=DictLoader(templates), **kwargs)

    return _make


@pytest.fixture
def render(env):
    """Compile a Root with the shared env and render it."""

    def _render(root, **ctx):
        return env.from_ast(root, name="test.html").render(ctx)

    return _render


@pytest.fixture
def env_with_loader():
    """Environment with an inheritance chain, a partial and a macro module."""
    templates = {
        "base.html": tpl(
            text("<html><head>"),
            block("head", text("Base Head")),
            text("</head><body>"),
            block("body"),
            text("</body></html>"),
        ),
        "child.html": tpl(
            extends("base.html"),
            block("body", text("Hello World")),
        ),
        "partial.html": tpl(text("<p>"), out(sym("who")), text("</p>")),
        "macros.html": tpl(
            macro("greet", ["name"], text("Hello "), out(sym("name"))),
            macro("_hidden", [], text("secret")),
            set_("version", lit("1.0")),
        ),
        "uses_macros.html": tpl(
            macro("shout", [("word", lit("hey"))], out(sym("word")), text("!")),
            out(call("shout")),
        ),
    }
    return Environment(loader=DictLoader(templates))
