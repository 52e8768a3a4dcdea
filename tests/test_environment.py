"""Tests for Environment configuration and template factories."""

import logging

import pytest

import tagcraft
from tagcraft import Environment, Template, TemplateRuntimeError, get_default_environment
from tagcraft.utils.constants import HTML, JSON, XML


class TestConfiguration:
    """Environment settings."""

    def test_debug_from_environment_variable(self, monkeypatch):
        monkeypatch.setenv("TAGCRAFT_DEBUG", "1")
        assert Environment().debug is True
        monkeypatch.setenv("TAGCRAFT_DEBUG", "true")
        assert Environment().debug is True
        monkeypatch.setenv("TAGCRAFT_DEBUG", "0")
        assert Environment().debug is False

    def test_explicit_debug_wins(self, monkeypatch):
        monkeypatch.setenv("TAGCRAFT_DEBUG", "1")
        assert Environment(debug=False).debug is False

    def test_markdown_options_are_merged_with_defaults(self):
        env = Environment(markdown_options={"output_format": "xhtml"})
        assert env.markdown_options["output_format"] == "xhtml"
        assert "extra" in env.markdown_options["extensions"]

    def test_repr(self):
        env = Environment(extensions={"card": lambda: None}, debug=False)
        assert repr(env) == "<Environment extensions=['card'] debug=False>"


class TestFactories:
    """Decorators bind templates to their environment and mode."""

    @pytest.mark.parametrize(("factory", "mode"), [("html", HTML), ("xml", XML), ("json", JSON)])
    def test_mode(self, env, factory, mode):
        template = getattr(env, factory)(lambda: None)
        assert isinstance(template, Template)
        assert template.mode == mode
        assert template.env is env

    def test_module_level_decorators_use_default_environment(self):
        @tagcraft.html
        def page():
            p("x")

        assert page.env is get_default_environment()
        assert get_default_environment() is get_default_environment()

    def test_unknown_mode(self, env):
        with pytest.raises(ValueError, match="Unknown rendering mode"):
            env.template(lambda: None, "yaml")

    def test_template_repr(self, env):
        @env.html
        def page():
            p("x")

        assert repr(page) == "<Template 'page' (html)>"
        assert repr(page.compile()) == "<CompiledUnit 'page' (html)>"
        assert page.name == "page"

    def test_template_is_callable(self, env):
        @env.html
        def page(name):
            p(name)

        assert page("x") == page.render("x") == "<p>x</p>"

    def test_template_renders_into_markup(self, env):
        @env.html
        def page():
            p("x")

        assert page.__html__() == "<p>x</p>"


class TestCompiledUnits:
    """Resolution of template-like objects."""

    def test_template(self, env):
        template = env.html(lambda: p("x"))
        assert env.compiled_unit(template, HTML) is template.compile()

    def test_compiled_unit_is_returned_as_is(self, env):
        unit = env.html(lambda: p("x")).compile()
        assert env.compiled_unit(unit, HTML) is unit

    def test_function_is_cached_per_mode(self, env):
        def widget():
            item("x")

        assert env.compiled_unit(widget, HTML) is env.compiled_unit(widget, HTML)
        assert env.compiled_unit(widget, XML) is not env.compiled_unit(widget, HTML)

    def test_unsupported_object(self, env):
        with pytest.raises(TemplateRuntimeError, match="Cannot render int object"):
            env.compiled_unit(42, HTML)

    def test_render_to_buffer(self, env):
        @env.html
        def page():
            p("x")

        buffer = ["<!-- start -->"]
        assert page.render_to_buffer(buffer) is buffer
        assert "".join(buffer) == "<!-- start --><p>x</p>"

    def test_compiled_unit_call(self, env):
        @env.html
        def page(name):
            p(name)

        assert page.compile()([], "x") == ["<p>x</p>"]


class TestLogging:
    """Debug logging of compilation."""

    def test_compile_is_logged(self, env, caplog):
        @env.html
        def page():
            p("x")

        with caplog.at_level(logging.DEBUG, logger="tagcraft"):
            page.compile()

        assert "Compiled template 'page'" in caplog.text
        assert "Generated code for" not in caplog.text

    def test_debug_logs_generated_code(self, debug_env, caplog):
        @debug_env.html
        def page():
            p("x")

        with caplog.at_level(logging.DEBUG, logger="tagcraft"):
            page.compile()

        assert "Generated code for 'page'" in caplog.text
        assert "def __tagcraft_factory__(" in caplog.text

    def test_extension_registration_is_logged(self, env, caplog):
        with caplog.at_level(logging.DEBUG, logger="tagcraft"):
            env.extension(card=lambda: None)

        assert "Registered extensions: card" in caplog.text
