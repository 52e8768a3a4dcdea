"""Tests for element rendering: nesting, inner text, loops and control flow."""

import contextlib

import pytest

from tagcraft import Template, TemplateCompileError, html, xml


class TestElements:
    """Basic element shapes."""

    def test_nested_elements(self):
        @html
        def page():
            with div():
                h1("Hi")

        assert page.render() == "<div><h1>Hi</h1></div>"

    def test_empty_element_closes(self):
        @html
        def page():
            p()

        assert page.render() == "<p></p>"

    def test_siblings(self):
        @html
        def page():
            h1("Title")
            p("First")
            p("Second")

        assert page.render() == "<h1>Title</h1><p>First</p><p>Second</p>"

    def test_dynamic_inner_text(self):
        @html
        def greeting(name):
            p(f"Hello, {name}!")

        assert greeting.render("World") == "<p>Hello, World!</p>"

    def test_non_string_inner_text(self):
        @html
        def page(count):
            span(count)
            span(None)

        assert page.render(3) == "<span>3</span><span></span>"

    def test_trailing_underscore_is_dropped(self):
        @html
        def page(title):
            with head():
                title_(title)
            del_("old")

        assert page.render("Home") == "<head><title>Home</title></head><del>old</del>"

    def test_underscores_become_dashes(self):
        @html
        def page():
            my_element("x")

        assert page.render() == "<my-element>x</my-element>"

    def test_lambda_inner_text_renders_inline(self):
        @html
        def page():
            div(lambda: (h1("a"), p("b")))

        assert page.render() == "<div><h1>a</h1><p>b</p></div>"

    def test_multiple_with_items_nest(self):
        @html
        def page():
            with div(), span():
                text("x")

        assert page.render() == "<div><span>x</span></div>"

    def test_docstring_is_not_rendered(self):
        @html
        def page():
            """A documented template."""
            p("x")

        assert page.render() == "<p>x</p>"

    def test_lambda_template(self):
        page = Template(lambda title: h1(title))
        assert page.render("Hello") == "<h1>Hello</h1>"

    def test_lambda_tuple_body(self):
        page = Template(lambda: (h1("a"), h2("b")))
        assert page.render() == "<h1>a</h1><h2>b</h2>"

    def test_template_called_directly(self):
        @html
        def page(name):
            p(name)

        assert page("x") == "<p>x</p>"


class TestTagBuiltin:
    """tag(name, ...) with static and dynamic names."""

    def test_static_name(self):
        @html
        def page():
            tag("my_el", "x", class_="a")

        assert page.render() == '<my-el class="a">x</my-el>'

    def test_dynamic_name(self):
        @html
        def page(kind):
            tag(kind, "x")

        assert page.render("section") == "<section>x</section>"
        assert page.render("data_table") == "<data-table>x</data-table>"

    def test_dynamic_void_name(self):
        @html
        def page(kind):
            tag(kind, id="x")

        assert page.render("br") == '<br id="x">'

    def test_dynamic_name_with_block(self):
        @html
        def page(kind):
            with tag(kind):
                p("inside")

        assert page.render("article") == "<article><p>inside</p></article>"

    def test_dynamic_name_in_xml_self_closes(self):
        @xml
        def doc(kind):
            tag(kind)

        assert doc.render("item") == "<item/>"

    def test_tag_without_name_is_error(self):
        @html
        def page():
            tag()

        with pytest.raises(TemplateCompileError, match="tag name"):
            page.compile()


class TestLoops:
    """_for= iteration on elements."""

    def test_loop_without_target(self):
        @html
        def page(items):
            li(_for=items)

        assert page.render([1, 2, 3]) == "<li></li><li></li><li></li>"

    def test_loop_with_target(self):
        @html
        def page(items):
            with ul():
                with li(_for=items) as item:
                    span(item)

        assert page.render(["a", "b"]) == "<ul><li><span>a</span></li><li><span>b</span></li></ul>"

    def test_loop_with_tuple_target(self):
        @html
        def page(pairs):
            with dl():
                with div(_for=pairs) as (term, definition):
                    dt(term)
                    dd(definition)

        assert page.render([("a", 1)]) == "<dl><div><dt>a</dt><dd>1</dd></div></dl>"

    def test_empty_loop(self):
        @html
        def page(items):
            with ul():
                li(_for=items)

        assert page.render([]) == "<ul></ul>"

    def test_as_target_without_loop_is_error(self):
        @html
        def page():
            with div() as element:
                p(element)

        with pytest.raises(TemplateCompileError, match="_for"):
            page.compile()


class TestControlFlow:
    """Python statements mixed with tags."""

    def test_for_and_if(self):
        @html
        def listing(items):
            with ul():
                for item in items:
                    if item > 1:
                        li(item)
                    else:
                        li("small", class_="small")

        assert listing.render([1, 2]) == '<ul><li class="small">small</li><li>2</li></ul>'

    def test_elif_chain(self):
        @html
        def grade(score):
            if score >= 90:
                b_("A")
            elif score >= 80:
                b_("B")
            else:
                b_("C")

        assert [grade.render(s) for s in (95, 85, 10)] == ["<b>A</b>", "<b>B</b>", "<b>C</b>"]

    def test_while(self):
        @html
        def countdown(n):
            while n > 0:
                span(n)
                n -= 1

        assert countdown.render(3) == "<span>3</span><span>2</span><span>1</span>"

    def test_for_else(self):
        @html
        def page(items):
            for item in items:
                p(item)
            else:
                p("done")

        assert page.render(["a"]) == "<p>a</p><p>done</p>"

    def test_try_except(self):
        @html
        def first(values):
            try:
                span(values[0])
            except IndexError:
                span("empty")

        assert first.render([1]) == "<span>1</span>"
        assert first.render([]) == "<span>empty</span>"

    def test_match(self):
        @html
        def page(kind):
            match kind:
                case "a":
                    p("alpha")
                case _:
                    p("other")

        assert page.render("a") == "<p>alpha</p>"
        assert page.render("z") == "<p>other</p>"

    def test_plain_with_statement(self):
        @html
        def page(data):
            with contextlib.suppress(KeyError):
                p(data["missing"])
            p("after")

        assert page.render({}) == "<p>after</p>"

    def test_assignments_inside_element_blocks(self):
        @html
        def page(items):
            with ul():
                total = 0
                for item in items:
                    total += item
                    li(item)
            p(total)

        assert page.render([1, 2]) == "<ul><li>1</li><li>2</li></ul><p>3</p>"

    def test_method_calls_are_plain_python(self):
        @html
        def page(items):
            seen = []
            for item in items:
                seen.append(item)
            p(len(seen))

        assert page.render("abc") == "<p>3</p>"

    def test_print_passes_through(self, capsys):
        @html
        def page():
            print("side effect")
            p("x")

        assert page.render() == "<p>x</p>"
        assert capsys.readouterr().out == "side effect\n"

    def test_early_return(self):
        @html
        def page(show):
            p("always")
            if not show:
                return
            p("shown")

        assert page.render(False) == "<p>always</p>"
        assert page.render(True) == "<p>always</p><p>shown</p>"

    def test_return_value_is_error(self):
        @html
        def page():
            return 1

        with pytest.raises(TemplateCompileError, match="cannot return a value"):
            page.compile()
