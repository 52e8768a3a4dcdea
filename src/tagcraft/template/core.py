"""tagcraft templates: Template, AppliedTemplate and CompiledUnit.

A Template wraps a template function and a rendering mode. Compilation is
lazy and memoized: the first ``compile()`` (or render) translates and
generates code, evaluates it in the function's module globals and caches
the resulting CompiledUnit on the Template for good.

Architecture:
    ```
    Template
    ├── _func: template function         # def or lambda in the DSL
    ├── _mode: "html" | "xml" | "json"
    ├── _env: Environment                # extensions, markdown, caches
    └── _compiled: CompiledUnit | None   # set once, never evicted

    CompiledUnit
    ├── function(__buffer__, *args, block=None, **kwargs) -> __buffer__
    ├── code, source_map                 # generated text + line mapping
    └── accepts_block
    ```

Calling convention:
Every compiled unit takes the output buffer first and returns it; child
blocks are passed as ``block=`` and take the buffer first as well. Units
call each other's raw functions directly, so traceback translation happens
once, at the outermost CompiledUnit call.

Thread-Safety:
Compiling twice on concurrent first use is harmless: both results are
equivalent and either one is kept. Rendering uses only local state.

"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from tagcraft.compiler.names import BLOCK_PARAM, FACTORY_NAME
from tagcraft.compiler.source_map import SourceMap, register_source_map, translate_backtrace
from tagcraft.environment.exceptions import TemplateArgumentError, TemplateError
from tagcraft.template.helpers import buffer_result, new_buffer
from tagcraft.utils.constants import HTML, MODES
from tagcraft.utils.html import Markup

if TYPE_CHECKING:
    from tagcraft.environment.core import Environment

logger = logging.getLogger(__name__)


class CompiledUnit:
    """Executable form of a template.

    Calling a CompiledUnit runs its function and, when an error that is not
    a TemplateError escapes, rewrites the error's traceback so template
    frames point at the template source. The error itself is re-raised
    unchanged.

    Attributes:
        function: The generated function (buffer first, returns the buffer)
        name: Template name
        mode: Rendering mode
        code: Generated source text
        source_map: Generated line → template line mapping
        accepts_block: Whether ``function`` takes ``block=``
    """

    __slots__ = ("accepts_block", "code", "function", "mode", "name", "source_map")

    def __init__(
        self,
        function: Callable[..., Any],
        *,
        name: str,
        mode: str,
        code: str,
        source_map: SourceMap,
        accepts_block: bool = False,
    ):
        self.function = function
        self.name = name
        self.mode = mode
        self.code = code
        self.source_map = source_map
        self.accepts_block = accepts_block

    def __call__(self, buffer: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return self.function(buffer, *args, **kwargs)
        except TemplateError:
            raise
        except Exception as error:
            translate_backtrace(error)
            raise

    def __repr__(self) -> str:
        return f"<CompiledUnit {self.name!r} ({self.mode})>"


class Template:
    """A template unit: a DSL function plus a rendering mode.

    Example:
        >>> page = Template(lambda title: h1(title))
        >>> page.render("Hello")
        '<h1>Hello</h1>'

    Templates are usually created with the ``html``, ``xml`` and ``json``
    decorators.

    Attributes:
        func: The template function
        mode: ``html``, ``xml`` or ``json``
        env: Environment used for compilation and rendering
    """

    __slots__ = ("__weakref__", "_compiled", "_env", "_func", "_mode", "_signature")

    def __init__(self, func: Callable[..., Any], mode: str = HTML, env: Environment | None = None):
        if mode not in MODES:
            raise ValueError(f"Unknown rendering mode {mode!r}, expected one of {sorted(MODES)}")
        if env is None:
            from tagcraft.environment.core import get_default_environment

            env = get_default_environment()
        self._func = func
        self._mode = mode
        self._env = env
        self._compiled: CompiledUnit | None = None
        self._signature: inspect.Signature | None = None

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def env(self) -> Environment:
        return self._env

    @property
    def name(self) -> str:
        return getattr(self._func, "__name__", "template")

    # ─────────────────────────────────────────────────────────────────────
    # Compilation
    # ─────────────────────────────────────────────────────────────────────

    def compile(self) -> CompiledUnit:
        """Return the compiled unit, compiling on first use."""
        compiled = self._compiled
        if compiled is None:
            compiled = self._compile()
            self._compiled = compiled
        return compiled

    def _compile(self) -> CompiledUnit:
        generated = self._env.compiler(self._mode).compile(self._func)

        namespace: dict[str, Any] = {}
        exec(generated.code_object, self._func.__globals__, namespace)
        factory = namespace[FACTORY_NAME]
        helpers = self._env.helpers(self._mode)
        function = factory(*helpers.values(), *generated.free_vars.values())
        _rename_unit(function, generated.name)

        register_source_map(generated.source_map)
        logger.debug(f"Template {self.name!r} compiled as {generated.source_map.filename}")

        return CompiledUnit(
            function,
            name=generated.name,
            mode=self._mode,
            code=generated.code,
            source_map=generated.source_map,
            accepts_block=generated.accepts_block,
        )

    @property
    def compiled_code(self) -> str:
        """Generated source of this template."""
        return self.compile().code

    @property
    def source_map(self) -> SourceMap:
        return self.compile().source_map

    # ─────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────

    def render(self, *args: Any, block: Any = None, **kwargs: Any) -> str:
        """Render to a string.

        Args:
            *args: Positional template arguments
            block: Child block for render_yield()/render_children(): a
                Template, a template function or lambda, or None
            **kwargs: Keyword template arguments

        Raises:
            TemplateArgumentError: Arguments don't match the template's parameters.
        """
        buffer = self.render_to_buffer(new_buffer(self._mode), *args, block=block, **kwargs)
        return buffer_result(buffer, self._mode)

    __call__ = render

    def render_to_buffer(self, buffer: Any, *args: Any, block: Any = None, **kwargs: Any) -> Any:
        """Render into an existing buffer and return it."""
        self.check_arguments(args, kwargs)
        unit = self.compile()
        if block is not None:
            if not unit.accepts_block:
                raise TemplateArgumentError(
                    "A block was given but the template never renders it",
                    template_name=self.name,
                )
            kwargs[BLOCK_PARAM] = self._env.compiled_unit(block, self._mode).function
        return unit(buffer, *args, **kwargs)

    def check_arguments(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> None:
        """Verify arguments against the template's parameters before rendering."""
        signature = self._signature
        if signature is None:
            signature = self._signature = inspect.signature(self._func)
        try:
            signature.bind(*args, **kwargs)
        except TypeError as e:
            raise TemplateArgumentError(str(e), template_name=self.name) from None

    def apply(self, *args: Any, block: Any = None, **kwargs: Any) -> Template:
        """Return a new template with some arguments (and a block) bound.

        Applied positional arguments come before call-time ones; call-time
        keyword arguments override applied ones.

        Example:
            >>> greet = Template(lambda greeting, name: p(f"{greeting}, {name}"))
            >>> greet.apply("Hello").render("Ada")
            '<p>Hello, Ada</p>'
        """
        return AppliedTemplate(self, args, kwargs, block)

    def __html__(self) -> Markup:
        return Markup(self.render())

    def __repr__(self) -> str:
        return f"<Template {self.name!r} ({self._mode})>"


class AppliedTemplate(Template):
    """A template with pre-bound arguments, derived from another template.

    Compiling it compiles the parent; its compiled unit forwards the merged
    arguments. A block bound with ``apply`` takes the applied arguments too,
    ahead of those passed to ``render_yield()``, and wraps the block given at
    render time: inside the applied block, ``render_yield()`` renders the latter.
    """

    __slots__ = ("_applied_args", "_applied_block", "_applied_kwargs", "_parent")

    def __init__(
        self,
        parent: Template,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        block: Any = None,
    ):
        super().__init__(parent.func, parent.mode, parent.env)
        self._parent = parent
        self._applied_args = args
        self._applied_kwargs = kwargs
        self._applied_block = block

    def check_arguments(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> None:
        self._parent.check_arguments(
            (*self._applied_args, *args), {**self._applied_kwargs, **kwargs}
        )

    def _compile(self) -> CompiledUnit:
        parent = self._parent.compile()
        parent_function = parent.function
        applied_args = self._applied_args
        applied_kwargs = self._applied_kwargs
        applied_block = None
        if self._applied_block is not None:
            if not parent.accepts_block:
                raise TemplateArgumentError(
                    "A block was applied but the template never renders it",
                    template_name=self.name,
                )
            applied_block = self._env.compiled_unit(self._applied_block, self._mode)

        def applied(buffer: Any, *args: Any, block: Any = None, **kwargs: Any) -> Any:
            child = _wrap_block(applied_block, block, applied_args, applied_kwargs)
            if child is not None:
                kwargs[BLOCK_PARAM] = child
            return parent_function(buffer, *applied_args, *args, **{**applied_kwargs, **kwargs})

        return CompiledUnit(
            applied,
            name=parent.name,
            mode=self._mode,
            code=parent.code,
            source_map=parent.source_map,
            accepts_block=parent.accepts_block,
        )

    def __repr__(self) -> str:
        return f"<AppliedTemplate {self.name!r} ({self._mode})>"


def _wrap_block(
    outer: CompiledUnit | None,
    inner: Callable[..., Any] | None,
    applied_args: tuple[Any, ...],
    applied_kwargs: dict[str, Any],
) -> Callable[..., Any] | None:
    """Combine an applied block with a call-time block.

    The applied block receives the applied arguments ahead of the ones given
    to render_yield(), and renders the call-time block as its own child.
    """
    if outer is None:
        return inner
    outer_function = outer.function
    if inner is None or not outer.accepts_block:

        def block(buffer: Any, *args: Any, **kwargs: Any) -> Any:
            return outer_function(buffer, *applied_args, *args, **{**applied_kwargs, **kwargs})

        return block

    def block_with_child(buffer: Any, *args: Any, **kwargs: Any) -> Any:
        return outer_function(
            buffer, *applied_args, *args, **{**applied_kwargs, **kwargs, BLOCK_PARAM: inner}
        )

    return block_with_child


def _rename_unit(function: Any, name: str) -> None:
    """Give the generated unit function the template's name in tracebacks and errors."""
    qualname = f"{FACTORY_NAME}.<locals>.{name}"
    function.__code__ = function.__code__.replace(co_name=name, co_qualname=qualname)
    function.__name__ = name
    function.__qualname__ = qualname
