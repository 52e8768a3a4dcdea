"""Tests for the markdown() builtin."""

from tagcraft import Environment, Markup, html, markdown


class TestMarkdown:
    """Markdown conversion through Python-Markdown."""

    def test_static_markdown_is_converted_at_compile_time(self):
        @html
        def page():
            with article():
                markdown("# Title")

        assert page.render() == "<article><h1>Title</h1></article>"
        assert "__markdown__(" not in page.compiled_code

    def test_dynamic_markdown(self):
        @html
        def page(body):
            markdown(body)

        assert page.render("*em*") == "<p><em>em</em></p>"
        assert "__markdown__(body)" in page.compiled_code

    def test_markdown_output_is_not_escaped(self):
        @html
        def page(body):
            div(markdown_html(body))

        assert page.render("x") == "<div><p>x</p></div>"

    def test_environment_options(self):
        env = Environment(markdown_options={"extensions": []})
        assert env.markdown_options["output_format"] == "html"
        assert env.markdown("a  \nb") == "<p>a<br>\nb</p>"

    def test_per_call_options(self, env):
        result = env.markdown("Term\n: Definition", extensions=["def_list"])
        assert "<dl>" in result

    def test_default_extensions(self, env):
        table = "| a | b |\n|---|---|\n| 1 | 2 |"
        assert "<table>" in env.markdown(table)

    def test_returns_markup(self):
        result = markdown("**x**")
        assert isinstance(result, Markup)
        assert result == "<p><strong>x</strong></p>"

    def test_none_is_empty(self, env):
        assert env.markdown(None) == ""


def markdown_html(text):
    return markdown(text)
