"""tagcraft: compiled Python templates for HTML, XML and JSON.

Templates are plain Python functions written with tag calls. Each one is
compiled on first render into specialized code that appends pre-joined
markup fragments to a buffer, instead of calling a generic renderer per tag.

Quickstart:
    >>> from tagcraft import html
    >>> @html
    ... def greeting(name):
    ...     with div(class_="greeting"):
    ...         p(f"Hello, {name}!")
    >>> greeting.render("World")
    '<div class="greeting"><p>Hello, World!</p></div>'

Composition:
    >>> @html
    ... def layout(title):
    ...     with html5():
    ...         with head():
    ...             title_(title)
    ...         with body():
    ...             render_yield()
    >>> layout.render("Home", block=lambda: h1("Welcome"))

Architecture:
Template function → Source (ast) → Translator → Specialized nodes → Code
generator → Python source + source map → exec() → CompiledUnit

Pipeline stages:
1. **Source**: the defining ``def``/``lambda`` is re-parsed from its file
2. **Translator**: tag-call shapes become specialized nodes
3. **Compiler**: nodes become buffer appends with coalesced literal markup
4. **Template**: lazily compiles and exposes render()/apply()

Errors raised while rendering keep their type; their tracebacks point at
the template's own file and lines through the source map.

Thread-Safety:
Compilation is idempotent, rendering uses only local state, and the
extension registry is copy-on-write.

"""

from collections.abc import Callable
from typing import Any

from tagcraft.environment import (
    Environment,
    ErrorCode,
    ExtensionRegistry,
    JsonStructureError,
    MissingBlockError,
    TemplateArgumentError,
    TemplateCompileError,
    TemplateError,
    TemplateRuntimeError,
    UncompilableTemplateError,
    get_default_environment,
)
from tagcraft.template import AppliedTemplate, CompiledUnit, JsonBuffer, Markup, Template
from tagcraft.utils.html import html_escape, uri_escape, xml_escape

__version__ = "0.1.0"


def html(func: Callable[..., Any]) -> Template:
    """Decorator: an HTML template in the default environment."""
    return get_default_environment().html(func)


def xml(func: Callable[..., Any]) -> Template:
    """Decorator: an XML template in the default environment."""
    return get_default_environment().xml(func)


def json(func: Callable[..., Any]) -> Template:
    """Decorator: a JSON template in the default environment."""
    return get_default_environment().json(func)


def extension(**units: Any) -> None:
    """Register extension units in the default environment."""
    get_default_environment().extension(**units)


def markdown(text: Any, **options: Any) -> Markup:
    """Markdown to HTML with the default environment's options."""
    return get_default_environment().markdown(text, **options)


__all__ = [
    "AppliedTemplate",
    "CompiledUnit",
    "Environment",
    "ErrorCode",
    "ExtensionRegistry",
    "JsonBuffer",
    "JsonStructureError",
    "Markup",
    "MissingBlockError",
    "Template",
    "TemplateArgumentError",
    "TemplateCompileError",
    "TemplateError",
    "TemplateRuntimeError",
    "UncompilableTemplateError",
    "__version__",
    "extension",
    "get_default_environment",
    "html",
    "html_escape",
    "json",
    "markdown",
    "uri_escape",
    "xml",
    "xml_escape",
]


def __getattr__(name: str) -> object:
    """Module-level getattr for the free-threading declaration."""
    if name == "_Py_mod_gil":
        # 0 = Py_MOD_GIL_NOT_USED
        return 0
    raise AttributeError(f"module 'tagcraft' has no attribute {name!r}")
