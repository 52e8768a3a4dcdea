"""Tests for calls into other units: const tags and render()."""

import types

import pytest

from tagcraft import TemplateCompileError, TemplateRuntimeError, html


@html
def Card(title):
    with div(class_="card"):
        h2(title)
        render_children()


ui = types.SimpleNamespace(Card=Card)


@html
def Outline(node):
    with ul():
        with li(_for=node.get("children", [])) as child:
            text(child["name"])
            Outline(child)


class TestConstTags:
    """Capitalized names call other units."""

    def test_const_tag(self):
        @html
        def page():
            Card(title="A")

        assert page.render() == '<div class="card"><h2>A</h2></div>'

    def test_const_tag_with_block(self):
        @html
        def page():
            with Card("A"):
                p("body")

        assert page.render() == '<div class="card"><h2>A</h2><p>body</p></div>'

    def test_dotted_path(self):
        @html
        def page():
            ui.Card("B")

        assert page.render() == '<div class="card"><h2>B</h2></div>'

    def test_block_parameters(self):
        @html
        def Each(items):
            for index, entry in enumerate(items):
                render_yield(index, entry)

        @html
        def page(items):
            with ol():
                with Each(items) as (index, entry):
                    li(f"{index}: {entry}")

        assert page.render(["a", "b"]) == "<ol><li>0: a</li><li>1: b</li></ol>"

    def test_plain_function_component(self):
        def Badge(label):
            span(label, class_="badge")

        @html
        def page():
            Badge("new")

        assert page.render() == '<span class="badge">new</span>'

    def test_markup_order_around_component(self):
        @html
        def page():
            with section():
                h1("before")
                Card("x")
                p("after")

        assert page.render() == (
            '<section><h1>before</h1><div class="card"><h2>x</h2></div><p>after</p></section>'
        )

    def test_recursive_component(self):
        @html
        def Tree(node):
            with ul():
                with li(_for=node.get("children", [])) as child:
                    text(child["name"])
                    Tree(child)

        tree = {"children": [{"name": "a", "children": [{"name": "b"}]}]}
        assert Tree.render(tree) == "<ul><li>a<ul><li>b<ul></ul></li></ul></li></ul>"

    def test_recursive_module_level_component(self):
        tree = {"children": [{"name": "a"}]}
        assert Outline.render(tree) == "<ul><li>a<ul></ul></li></ul>"
        assert Outline.compile().function.__name__ == "Outline"


class TestRender:
    """render(target, ...) with computed targets."""

    def test_render_template(self):
        @html
        def page(widget):
            render(widget, "dynamic")

        assert page.render(Card) == '<div class="card"><h2>dynamic</h2></div>'

    def test_render_self(self):
        @html
        def countdown(n):
            span(n)
            if n > 0:
                render(countdown, n - 1)

        assert countdown.render(2) == "<span>2</span><span>1</span><span>0</span>"

    def test_render_inline_lambda(self):
        @html
        def page(items):
            with ul():
                for item in items:
                    render(lambda value: li(value), item)

        assert page.render([1, 2]) == "<ul><li>1</li><li>2</li></ul>"

    def test_render_with_block(self):
        @html
        def page():
            with render(Card, "t"):
                p("inner")

        assert page.render() == '<div class="card"><h2>t</h2><p>inner</p></div>'

    def test_render_none_renders_nothing(self):
        @html
        def page(widget):
            p("x")
            render(widget)

        assert page.render(None) == "<p>x</p>"

    def test_render_string_is_escaped(self):
        @html
        def page(value):
            render(value)

        assert page.render("<b>") == "&lt;b&gt;"

    def test_render_unsupported_object(self):
        @html
        def page():
            render(42)

        with pytest.raises(TemplateRuntimeError, match="Cannot render int"):
            page.render()

    def test_render_needs_a_target(self):
        @html
        def page():
            render()

        with pytest.raises(TemplateCompileError, match="render\\(\\) needs"):
            page.compile()

    def test_plain_functions_are_compiled_once(self, env):
        def widget():
            p("w")

        first = env.compiled_unit(widget, "html")
        second = env.compiled_unit(widget, "html")
        assert first is second
        assert env.compiled_unit(widget, "xml") is not first
