"""Locate and parse the source of a template function.

The source of the file defining the function is read through ``linecache``
(so modules loaded from zip archives and interactive cells registered with
linecache work too), parsed once per file content, and searched for the
``def`` or ``lambda`` that produced the function's code object.
"""

from __future__ import annotations

import ast
import functools
import linecache
from dataclasses import dataclass
from types import CodeType, FunctionType
from typing import Any

from tagcraft.environment.exceptions import ErrorCode, UncompilableTemplateError


@dataclass(frozen=True, slots=True)
class TemplateSource:
    """Parsed source of a template function.

    Attributes:
        filename: ``co_filename`` of the function
        source: Full text of that file
        node: The ``def`` or ``lambda`` node of the function
        name: Identifier used for the generated function
    """

    filename: str
    source: str
    node: ast.FunctionDef | ast.Lambda
    name: str

    @property
    def lineno(self) -> int:
        return self.node.lineno

    @property
    def body(self) -> list[ast.stmt]:
        """The function body as statements; lambda bodies become one statement per element."""
        if isinstance(self.node, ast.Lambda):
            return lambda_statements(self.node)
        body = self.node.body
        if (
            body
            and isinstance(body[0], ast.Expr)
            and isinstance(body[0].value, ast.Constant)
            and isinstance(body[0].value.value, str)
        ):
            body = body[1:]
        return body


def lambda_statements(node: ast.Lambda) -> list[ast.stmt]:
    """Turn a lambda body into statements: a tuple body yields one per element."""
    values = node.body.elts if isinstance(node.body, ast.Tuple) else [node.body]
    return [ast.copy_location(ast.Expr(value=value), value) for value in values]


@functools.lru_cache(maxsize=128)
def _parse_module(filename: str, source: str) -> ast.Module:
    return ast.parse(source, filename=filename)


def load_source(func: Any) -> TemplateSource:
    """Find the AST of a template function.

    Raises:
        UncompilableTemplateError: The function has no retrievable, parseable
            source (built with ``exec``, defined in a plain REPL, C function,
            or the file changed on disk since import).
    """
    if not isinstance(func, FunctionType):
        raise UncompilableTemplateError(f"Cannot compile {func!r}: not a Python function")

    code = func.__code__
    filename = code.co_filename
    lines = linecache.getlines(filename, func.__globals__)
    if not lines:
        raise UncompilableTemplateError(
            f"Cannot compile template {func.__qualname__!r}: source not available ({filename})"
        )
    source = "".join(lines)

    try:
        module = _parse_module(filename, source)
    except SyntaxError as e:
        raise UncompilableTemplateError(
            f"Cannot compile template {func.__qualname__!r}: source of {filename} does not parse ({e.msg})"
        ) from None

    node = _find_definition(module, code)
    if node is None:
        raise UncompilableTemplateError(
            f"Cannot compile template {func.__qualname__!r}: "
            f"no matching definition at {filename}:{code.co_firstlineno}"
        )

    name = func.__name__ if func.__name__.isidentifier() else "template"
    return TemplateSource(filename=filename, source=source, node=node, name=name)


def _first_line(node: ast.FunctionDef) -> int:
    return min([node.lineno, *(d.lineno for d in node.decorator_list)])


def _find_definition(module: ast.Module, code: CodeType) -> ast.FunctionDef | ast.Lambda | None:
    if code.co_name == "<lambda>":
        return _find_lambda(module, code)
    for node in ast.walk(module):
        if (
            isinstance(node, ast.FunctionDef)
            and node.name == code.co_name
            and _first_line(node) == code.co_firstlineno
        ):
            return node
    return None


def _find_lambda(module: ast.Module, code: CodeType) -> ast.Lambda | None:
    candidates = [
        node
        for node in ast.walk(module)
        if isinstance(node, ast.Lambda) and node.lineno == code.co_firstlineno
    ]
    if len(candidates) == 1:
        return candidates[0]

    # Several lambdas start on this line: pick the one whose body position
    # appears in the code object's instruction positions.
    positions = {
        (line, col) for line, _, col, _ in code.co_positions() if line is not None
    }
    matches = [
        node for node in candidates if (node.body.lineno, node.body.col_offset) in positions
    ]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise UncompilableTemplateError(
            f"Cannot compile lambda at {code.co_filename}:{code.co_firstlineno}: "
            "several lambdas on this line match",
            code=ErrorCode.AMBIGUOUS_SOURCE,
        )
    return None
