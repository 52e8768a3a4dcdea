"""AST construction helpers for the code generator."""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import Any, Final


class _Dynamic:
    __slots__ = ()

    def __repr__(self) -> str:
        return "DYNAMIC"


# Marker returned by literal_value() for expressions only known at render time
DYNAMIC: Final = _Dynamic()


def load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def call(
    func: str | ast.expr,
    args: Sequence[ast.expr] = (),
    keywords: Sequence[ast.keyword] = (),
) -> ast.Call:
    """Build ``func(*args, **keywords)``; a string ``func`` is a plain name."""
    return ast.Call(
        func=load(func) if isinstance(func, str) else func,
        args=list(args),
        keywords=list(keywords),
    )


def literal_value(node: ast.expr) -> Any:
    """Python value of a literal expression, or DYNAMIC.

    Literals are constants and lists/tuples of constants (attribute arrays).
    """
    if isinstance(node, ast.Constant) and not isinstance(node.value, bytes):
        return node.value
    if isinstance(node, ast.List | ast.Tuple):
        values = [literal_value(elt) for elt in node.elts]
        if any(value is DYNAMIC for value in values):
            return DYNAMIC
        return values
    return DYNAMIC
