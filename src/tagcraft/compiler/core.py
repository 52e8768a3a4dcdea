"""tagcraft compiler: template functions to buffer-appending Python.

The Compiler turns a template function into generated Python source in
which markup is appended to a buffer as pre-joined literal fragments:

    ```python
    @html
    def page(title):
        with div(class_="main"):
            h1(title)
            Card(title=title)
    ```

becomes

    ```python
    def __tagcraft_factory__(__escape__, ..., Card):
        def __tagcraft_unit__(__buffer__, title):  # renamed to page
            __buffer__.append(f'<div class="main"><h1>{__escape__(title)}</h1>')
            __unit__(Card)(__buffer__, title=title)
            __buffer__.append('</div>')
            return __buffer__
        return __tagcraft_unit__
    ```

Pipeline:
1. **Source**: locate the ``def``/``lambda`` node in the defining file
2. **Translate**: rewrite call shapes into specialized nodes
3. **Generate**: walk the tree, coalescing markup and recording a source map
4. **Compile**: byte-compile the text under a synthetic filename

The factory takes the runtime helpers and a snapshot of the function's
closure variables as parameters, so the generated unit resolves names the
way the original function would: locals, then closure, then the defining
module's globals (the code is executed in the function's ``__globals__``).

Statements are generated one line at a time from AST nodes built for the
purpose and rendered with ``ast.unparse``; user expressions are spliced in as
AST nodes, never as text.

"""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import CodeType, FunctionType
from typing import TYPE_CHECKING, Any

from tagcraft.compiler.code_builder import CodeBuilder
from tagcraft.compiler.coalescing import FragmentCoalescingMixin
from tagcraft.compiler.names import (
    BLOCK_PARAM,
    BUFFER_PARAM,
    FACTORY_NAME,
    HELPER_NAMES,
    ORIG_BUFFER,
    PARTS,
    RUN_PARTS,
    UNIT_FUNCTION,
)
from tagcraft.compiler.source import TemplateSource, load_source
from tagcraft.compiler.source_map import SourceMap, synthetic_filename
from tagcraft.compiler.statements import StatementCompilationMixin
from tagcraft.compiler.translator import TagTranslator, with_block_param, with_buffer_param
from tagcraft.environment.exceptions import ErrorCode, TemplateCompileError

if TYPE_CHECKING:
    from tagcraft.environment.core import Environment
    from tagcraft.nodes import Statement

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeneratedUnit:
    """Output of the compiler, ready to be evaluated.

    Attributes:
        name: Name of the generated unit function
        code: Generated source text
        source_map: Generated line → template line mapping
        code_object: ``code`` compiled under ``source_map.filename``
        free_vars: Closure variables of the template function, passed to the factory
        accepts_block: Whether the unit takes the ``block`` keyword
    """

    name: str
    code: str
    source_map: SourceMap
    code_object: CodeType
    free_vars: Mapping[str, Any] = field(default_factory=dict)
    accepts_block: bool = False


@dataclass(slots=True)
class _Scope:
    """Per-function generation state (unit, child blocks, deferred blocks)."""

    uses_defer: bool = False
    returns: list[int] = field(default_factory=list)


class Compiler(
    StatementCompilationMixin,
    FragmentCoalescingMixin,
):
    """Compile template functions into buffer-appending Python code.

    A Compiler instance is bound to an Environment and a rendering mode and
    compiles one unit at a time; create one per compilation.

    Attributes:
        _env: Environment (extensions, markdown options)
        _mode: ``html``, ``xml`` or ``json``
        _code: CodeBuilder receiving generated lines
        _pending: Pending markup fragments (see FragmentCoalescingMixin)
        _scope: State of the function currently being generated
        _uses_block: Whether any part of the unit invokes the child block
        _counter: Counter for unique generated names

    Node Dispatch:
        O(1) dict lookup from node class name to handler, covering the
        specialized nodes and the Python compound statements whose bodies
        may contain them. Everything else is emitted through ``ast.unparse``.
    """

    __slots__ = (
        "_code",
        "_counter",
        "_dispatch",
        "_env",
        "_filename",
        "_mode",
        "_pending",
        "_pending_lineno",
        "_scope",
        "_source",
        "_unit_name",
        "_uses_block",
    )

    def __init__(self, env: Environment, mode: str):
        self._env = env
        self._mode = mode
        self._code = CodeBuilder()
        self._pending: list[str | ast.expr] = []
        self._pending_lineno: int | None = None
        self._scope = _Scope()
        self._uses_block = False
        self._counter = 0
        self._filename: str | None = None
        self._source: str | None = None
        self._unit_name = "template"
        self._dispatch = self._get_node_dispatch()

    def compile(self, func: FunctionType) -> GeneratedUnit:
        """Compile a template function.

        Raises:
            UncompilableTemplateError: The function's source is unavailable.
            TemplateCompileError: The template uses a call shape incorrectly.
        """
        source = load_source(func)
        free_vars = _closure_vars(func)
        filename = synthetic_filename(source.name, self._mode, source.filename, source.lineno)

        source_map, code = self.generate(source, free_vars=tuple(free_vars))
        source_map = SourceMap(filename, source.filename, source_map.lines)

        try:
            code_object = compile(code, filename, "exec")
        except SyntaxError as e:
            raise TemplateCompileError(
                f"Generated code for {source.name!r} does not compile: {e.msg}",
                lineno=source_map.lookup(e.lineno or 0) or source.lineno,
                filename=source.filename,
                source=source.source,
                code=ErrorCode.UNSUPPORTED_STATEMENT,
            ) from e

        logger.debug(
            f"Compiled template {source.name!r} from {source.filename}:{source.lineno} "
            f"({self._mode}, {len(code.splitlines())} lines)"
        )
        if self._env.debug:
            logger.debug(f"Generated code for {source.name!r}:\n{code}")

        return GeneratedUnit(
            name=source.name,
            code=code,
            source_map=source_map,
            code_object=code_object,
            free_vars=free_vars,
            accepts_block=self._uses_block or _declares_block(source.node.args),
        )

    def generate(
        self,
        source: TemplateSource,
        *,
        wrap: bool = True,
        free_vars: Sequence[str] = (),
    ) -> tuple[SourceMap, str]:
        """Generate code for a template body.

        With ``wrap`` the body is wrapped in the unit function (buffer
        parameter first, original parameters, ``block`` if used) inside the
        factory; without it only the body statements are generated.

        Returns:
            ``(source_map, code)``; the source map's filename is left empty.
        """
        self._filename = source.filename
        self._source = source.source
        self._unit_name = source.name
        self._code = CodeBuilder()
        self._pending = []
        self._uses_block = False

        body = TagTranslator(
            self._mode,
            self._env.extensions,
            filename=source.filename,
            source=source.source,
        ).translate(source.body)

        if wrap:
            self._code.add_line(f"def {FACTORY_NAME}({', '.join((*HELPER_NAMES, *free_vars))}):")
            self._code.indent()
            params = with_buffer_param(_strip_annotations(source.node.args))
            self._compile_function(UNIT_FUNCTION, params, body, source.lineno, is_unit=True)
            self._code.add_line(f"return {UNIT_FUNCTION}")
            self._code.dedent()
        else:
            self._scope = _Scope()
            prelude = self._code.add_section()
            self._compile_body(body)
            self._flush()
            self._compile_postlude(prelude)

        return SourceMap("", source.filename, self._code.line_map()), str(self._code)

    # ─────────────────────────────────────────────────────────────────────
    # Functions (unit, child blocks, deferred blocks)
    # ─────────────────────────────────────────────────────────────────────

    def _compile_function(
        self,
        name: str,
        params: ast.arguments,
        body: Sequence[Statement],
        lineno: int,
        *,
        is_unit: bool = False,
    ) -> None:
        """Generate a buffer-taking function definition.

        The ``def`` line is written last into a section reserved up front:
        whether the unit needs the ``block`` parameter is only known once its
        body has been generated.
        """
        self._flush()
        header = self._code.add_section()
        self._code.indent()
        outer_scope, self._scope = self._scope, _Scope()

        prelude = self._code.add_section()
        self._compile_body(body)
        self._flush()
        self._compile_postlude(prelude)
        self._code.add_line(f"return {BUFFER_PARAM}")

        self._scope = outer_scope
        self._code.dedent()

        if is_unit and self._uses_block:
            params = with_block_param(params)
        header.add_line(f"def {name}({ast.unparse(params)}):", lineno)

    def _compile_postlude(self, prelude: CodeBuilder) -> None:
        """Finish defer mode: restore the buffer and run the queued parts in order."""
        if not self._scope.uses_defer:
            return
        if self._scope.returns:
            raise TemplateCompileError(
                "`return` cannot be used in a template that uses defer()",
                lineno=self._scope.returns[0],
                filename=self._filename,
                source=self._source,
                code=ErrorCode.UNSUPPORTED_STATEMENT,
            )
        prelude.add_line(f"{PARTS} = None")
        self._code.add_line(f"if {PARTS} is not None:")
        self._code.indent()
        self._code.add_line(f"{BUFFER_PARAM} = {ORIG_BUFFER}")
        self._code.add_line(f"{RUN_PARTS}({BUFFER_PARAM}, {PARTS})")
        self._code.dedent()

    # ─────────────────────────────────────────────────────────────────────
    # Bodies
    # ─────────────────────────────────────────────────────────────────────

    def _compile_body(self, body: Sequence[Statement]) -> None:
        for node in body:
            self._compile_node(node)

    def _compile_suite(self, body: Sequence[Statement]) -> None:
        """Generate an indented body; pending markup is flushed inside it."""
        self._code.indent()
        mark = len(self._code)
        self._compile_body(body)
        self._flush()
        if len(self._code) == mark:
            self._code.add_line("pass")
        self._code.dedent()

    def _compile_node(self, node: Statement) -> None:
        handler = self._dispatch.get(type(node).__name__, self._compile_statement)
        handler(node)

    def _get_node_dispatch(self) -> dict[str, Callable[[Any], None]]:
        return {
            # Specialized nodes
            "TagNode": self._compile_tag,
            "TextNode": self._compile_text,
            "RawNode": self._compile_raw,
            "BuiltinNode": self._compile_builtin,
            "ConstTagNode": self._compile_const_tag,
            "RenderNode": self._compile_render,
            "ExtensionTagNode": self._compile_extension_tag,
            "RenderYieldNode": self._compile_render_yield,
            "RenderChildrenNode": self._compile_render_children,
            "BlockInvocationNode": self._compile_block_invocation,
            "DeferNode": self._compile_defer,
            # Python statements with translated bodies
            "If": self._compile_if,
            "For": self._compile_for,
            "While": self._compile_while,
            "With": self._compile_with,
            "Try": self._compile_try,
            "TryStar": self._compile_try,
            "Match": self._compile_match,
            "Return": self._compile_return,
        }

    def _unique_name(self, prefix: str) -> str:
        self._counter += 1
        return f"__{prefix}_{self._counter}__"

    def _error(
        self, message: str, node: Any, code: ErrorCode = ErrorCode.INVALID_CALL
    ) -> TemplateCompileError:
        return TemplateCompileError(
            message,
            lineno=getattr(node, "lineno", None),
            filename=self._filename,
            source=self._source,
            col_offset=getattr(node, "col_offset", None),
            code=code,
        )


def _closure_vars(func: FunctionType) -> dict[str, Any]:
    """Snapshot of the function's closure; empty cells are left out."""
    values: dict[str, Any] = {}
    for name, cell in zip(func.__code__.co_freevars, func.__closure__ or (), strict=True):
        try:
            values[name] = cell.cell_contents
        except ValueError:
            logger.debug(f"Closure variable {name!r} of {func.__qualname__} is not bound yet")
    return values


def _strip_annotations(arguments: ast.arguments) -> ast.arguments:
    """Parameter list without annotations (evaluated nowhere in generated code)."""

    def strip(arg: ast.arg | None) -> ast.arg | None:
        return None if arg is None else ast.arg(arg=arg.arg)

    return ast.arguments(
        posonlyargs=[strip(a) for a in arguments.posonlyargs],
        args=[strip(a) for a in arguments.args],
        vararg=strip(arguments.vararg),
        kwonlyargs=[strip(a) for a in arguments.kwonlyargs],
        kw_defaults=list(arguments.kw_defaults),
        kwarg=strip(arguments.kwarg),
        defaults=list(arguments.defaults),
    )


def _declares_block(arguments: ast.arguments) -> bool:
    return any(
        a.arg == BLOCK_PARAM
        for a in (*arguments.posonlyargs, *arguments.args, *arguments.kwonlyargs)
    ) or arguments.kwarg is not None
