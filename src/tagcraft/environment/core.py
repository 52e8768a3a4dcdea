"""Core Environment class for tagcraft.

The Environment is the central configuration object. It holds the
extension registry and the markdown defaults, creates compilers, and
resolves anything usable as a template unit (Template, template function,
lambda) to its compiled form.

Thread-Safety:
    - Extensions use copy-on-write (registration creates a new dict)
    - Helper sets and function templates are cached; concurrent first use
      may build a value twice, and either copy is equivalent
    - Templates compile lazily and keep their compiled unit for good

Example:
    >>> from tagcraft import Environment
    >>> env = Environment(markdown_options={"extensions": ["extra"]})
    >>> @env.html
    ... def greeting(name):
    ...     p(f"Hello, {name}!")
    >>> greeting.render("World")
    '<p>Hello, World!</p>'

"""

from __future__ import annotations

import logging
import os
import weakref
from collections.abc import Callable, Mapping
from types import FunctionType
from typing import Any

from tagcraft.compiler.core import Compiler
from tagcraft.environment.exceptions import TemplateRuntimeError
from tagcraft.environment.registry import ExtensionRegistry
from tagcraft.template.core import CompiledUnit, Template
from tagcraft.template.helpers import build_helpers
from tagcraft.utils.constants import HTML, JSON, MODES, XML
from tagcraft.utils.html import Markup, to_text

logger = logging.getLogger(__name__)

DEFAULT_MARKDOWN_OPTIONS: dict[str, Any] = {
    "extensions": ["extra", "sane_lists"],
    "output_format": "html",
}


def _debug_from_environ() -> bool:
    return os.environ.get("TAGCRAFT_DEBUG", "").strip().lower() in ("1", "true")


class Environment:
    """Central configuration for template compilation and rendering.

    Attributes:
        extensions: Registry of extension units, callable as tags by name
        markdown_options: Defaults passed to Python-Markdown
        debug: Log the generated source of every compiled template

    Example:
        >>> env = Environment()
        >>> env.extension(card=Card)
        >>> @env.html
        ... def page():
        ...     card(title="Hello")
    """

    __slots__ = (
        "__weakref__",
        "_extensions",
        "_function_templates",
        "_helpers",
        "debug",
        "markdown_options",
    )

    def __init__(
        self,
        *,
        extensions: Mapping[str, Any] | None = None,
        markdown_options: Mapping[str, Any] | None = None,
        debug: bool | None = None,
    ):
        self._extensions: dict[str, Any] = dict(extensions or {})
        self.markdown_options: dict[str, Any] = {
            **DEFAULT_MARKDOWN_OPTIONS,
            **(markdown_options or {}),
        }
        self.debug = _debug_from_environ() if debug is None else debug
        self._helpers: dict[str, dict[str, Callable[..., Any]]] = {}
        self._function_templates: weakref.WeakKeyDictionary[
            FunctionType, dict[str, Template]
        ] = weakref.WeakKeyDictionary()

    @property
    def extensions(self) -> ExtensionRegistry:
        """Extensions as a dict-like registry (copy-on-write)."""
        return ExtensionRegistry(self)

    # ─────────────────────────────────────────────────────────────────────
    # Template factories
    # ─────────────────────────────────────────────────────────────────────

    def template(self, func: Callable[..., Any], mode: str = HTML) -> Template:
        """Wrap a template function in a Template bound to this environment."""
        return Template(func, mode, self)

    def html(self, func: Callable[..., Any]) -> Template:
        """Decorator: an HTML template."""
        return self.template(func, HTML)

    def xml(self, func: Callable[..., Any]) -> Template:
        """Decorator: an XML template."""
        return self.template(func, XML)

    def json(self, func: Callable[..., Any]) -> Template:
        """Decorator: a JSON template."""
        return self.template(func, JSON)

    def extension(self, **units: Any) -> None:
        """Register extension units by name.

        Templates compiled afterwards treat ``name(...)`` as a call of the
        registered unit. Registering is additive; a name registered again
        is replaced.
        """
        self.extensions.update(units)
        logger.debug(f"Registered extensions: {', '.join(sorted(units))}")

    # ─────────────────────────────────────────────────────────────────────
    # Markdown
    # ─────────────────────────────────────────────────────────────────────

    def markdown(self, text: Any, **options: Any) -> Markup:
        """Convert Markdown to HTML with Python-Markdown.

        Per-call options override the environment's ``markdown_options``.
        """
        import markdown

        return Markup(markdown.markdown(to_text(text), **{**self.markdown_options, **options}))

    # ─────────────────────────────────────────────────────────────────────
    # Compilation support
    # ─────────────────────────────────────────────────────────────────────

    def compiler(self, mode: str) -> Compiler:
        """A fresh compiler for one unit."""
        return Compiler(self, mode)

    def helpers(self, mode: str) -> dict[str, Callable[..., Any]]:
        """Runtime helpers handed to units compiled for ``mode``."""
        helpers = self._helpers.get(mode)
        if helpers is None:
            helpers = build_helpers(self, mode)
            self._helpers = {**self._helpers, mode: helpers}
        return helpers

    def compiled_unit(self, target: Any, mode: str) -> CompiledUnit:
        """Resolve a template-like object to its compiled unit.

        Accepts a CompiledUnit, a Template, or a plain function or lambda
        written in the template DSL; plain functions are wrapped in a
        Template for ``mode`` once and cached for the function's lifetime.

        Raises:
            TemplateRuntimeError: ``target`` is not usable as a template.
        """
        if isinstance(target, CompiledUnit):
            return target
        if isinstance(target, Template):
            return target.compile()
        if isinstance(target, FunctionType):
            return self._function_template(target, mode).compile()
        raise TemplateRuntimeError(
            f"Cannot render {type(target).__name__} object as a template",
            suggestion="Pass a Template, a template function or a lambda",
        )

    def _function_template(self, func: FunctionType, mode: str) -> Template:
        if mode not in MODES:
            raise ValueError(f"Unknown rendering mode {mode!r}")
        by_mode = self._function_templates.get(func)
        if by_mode is None:
            by_mode = self._function_templates[func] = {}
        template = by_mode.get(mode)
        if template is None:
            template = by_mode[mode] = Template(func, mode, self)
        return template

    def __repr__(self) -> str:
        return f"<Environment extensions={sorted(self._extensions)!r} debug={self.debug}>"


_default_environment: Environment | None = None


def get_default_environment() -> Environment:
    """The environment behind the module-level ``html``/``xml``/``json`` helpers."""
    global _default_environment
    if _default_environment is None:
        _default_environment = Environment()
    return _default_environment
