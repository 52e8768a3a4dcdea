"""Tag translator: recognize templating call shapes in a function body.

Walks the statements of a template function top-down and rewrites the call
shapes the code generator knows how to specialize into the node types of
``tagcraft.nodes``. Only statement-position calls are considered:

    h1("Hi")                     # expression statement
    with div(class_="box"):      # with statement, body is the attached block
        ...

Match rules, first match wins:

1. Builtin control form (``render``, ``render_yield``, ``text``, ...).
   ``print`` and ``breakpoint`` are recognized and left untouched.
2. Registered extension name → ExtensionTagNode
3. Capitalized name, bare or behind a dotted path of names → ConstTagNode
4. The child block parameter ``block(...)`` → BlockInvocationNode
5. Any other bare name → TagNode
6. Everything else is kept; compound statements are rebuilt with their
   bodies translated so nested matches are found.

The translator never mutates the parsed tree: rewritten statements and
parameter lists are new nodes built from the fields of the old ones.
"""

from __future__ import annotations

import ast
from collections.abc import Callable, Container, Sequence
from typing import Any

from tagcraft.compiler.names import BLOCK_PARAM, BUFFER_PARAM
from tagcraft.compiler.source import lambda_statements
from tagcraft.environment.exceptions import ErrorCode, TemplateCompileError
from tagcraft.nodes import (
    Block,
    BlockInvocationNode,
    BuiltinNode,
    ConstTagNode,
    DeferNode,
    ExtensionTagNode,
    RawNode,
    RenderChildrenNode,
    RenderNode,
    RenderYieldNode,
    Statement,
    TagNode,
    TextNode,
)
from tagcraft.utils.constants import HTML, JSON, VOID_ELEMENTS, XML
from tagcraft.utils.markup import name_repr

LOOP_KEYWORD = "_for"

BUILTINS: frozenset[str] = frozenset(
    {
        "render_yield",
        "render_children",
        "render",
        "raw",
        "text",
        "defer",
        "html",
        "html5",
        "markdown",
        "tag",
    }
)

# Markup builtins are plain keys in JSON mode
JSON_BUILTINS: frozenset[str] = frozenset({"render_yield", "render_children", "render", "tag"})

# XML has no doctype wrapper: html/html5 are plain elements there
XML_BUILTINS: frozenset[str] = BUILTINS - {"html", "html5"}

# Recognized but emitted as ordinary Python calls
PASSTHROUGH: frozenset[str] = frozenset({"print", "breakpoint"})


def with_buffer_param(arguments: ast.arguments) -> ast.arguments:
    """Return a copy of a parameter list with the buffer parameter prepended."""
    buffer = ast.arg(arg=BUFFER_PARAM)
    if arguments.posonlyargs:
        return _rebuild(arguments, posonlyargs=[buffer, *arguments.posonlyargs])
    return _rebuild(arguments, args=[buffer, *arguments.args])


def with_block_param(arguments: ast.arguments) -> ast.arguments:
    """Return a copy of a parameter list with a keyword-only ``block=None``."""
    declared = {a.arg for a in (*arguments.posonlyargs, *arguments.args, *arguments.kwonlyargs)}
    if BLOCK_PARAM in declared:
        return arguments
    return _rebuild(
        arguments,
        kwonlyargs=[*arguments.kwonlyargs, ast.arg(arg=BLOCK_PARAM)],
        kw_defaults=[*arguments.kw_defaults, ast.Constant(value=None)],
    )


def _rebuild(node: Any, **changes: Any) -> Any:
    """Build a new AST node from ``node``'s fields with some replaced."""
    fields = {name: getattr(node, name, None) for name in node._fields}
    fields.update(changes)
    return ast.copy_location(type(node)(**fields), node)


def _arguments(names: Sequence[str] = ()) -> ast.arguments:
    return ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=name) for name in names],
        vararg=None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=[],
    )


def _is_constant_path(node: ast.expr) -> bool:
    """``ui`` or ``ui.components``: names and attribute access only."""
    while isinstance(node, ast.Attribute):
        node = node.value
    return isinstance(node, ast.Name)


def _dotted_name(node: ast.expr) -> str:
    if isinstance(node, ast.Attribute):
        return f"{_dotted_name(node.value)}.{node.attr}"
    if isinstance(node, ast.Name):
        return node.id
    return ast.unparse(node)


class TagTranslator:
    """Rewrite a template body into specialized nodes.

    Args:
        mode: Rendering mode (``html``, ``xml`` or ``json``)
        extensions: Names registered as extensions
        filename: Source file, for error locations
        source: Source text, for error snippets
    """

    __slots__ = ("_builtins", "_dispatch", "_extensions", "_filename", "_mode", "_source")

    def __init__(
        self,
        mode: str,
        extensions: Container[str] = (),
        *,
        filename: str | None = None,
        source: str | None = None,
    ):
        self._mode = mode
        self._extensions = extensions
        self._filename = filename
        self._source = source
        self._builtins = {JSON: JSON_BUILTINS, XML: XML_BUILTINS}.get(mode, BUILTINS)
        self._dispatch: dict[str, Callable[[Any], Statement]] = {
            "Expr": self._translate_expr,
            "With": self._translate_with,
            "If": self._translate_branches,
            "For": self._translate_branches,
            "While": self._translate_branches,
            "Try": self._translate_try,
            "TryStar": self._translate_try,
            "Match": self._translate_match,
        }

    def translate(self, body: Sequence[ast.stmt]) -> list[Statement]:
        """Translate a sequence of statements."""
        return [self._translate_stmt(stmt) for stmt in body]

    def translate_lambda(self, node: ast.Lambda) -> Block:
        """Translate a lambda literal into a buffer-taking block."""
        return Block(
            lineno=node.lineno,
            col_offset=node.col_offset,
            params=with_buffer_param(node.args),
            body=self.translate(lambda_statements(node)),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────────────

    def _translate_stmt(self, stmt: ast.stmt) -> Statement:
        handler = self._dispatch.get(type(stmt).__name__)
        if handler is None:
            return stmt
        return handler(stmt)

    def _translate_expr(self, stmt: ast.Expr) -> Statement:
        if isinstance(stmt.value, ast.Call):
            node = self._classify(stmt.value)
            if node is not None:
                return node
        return stmt

    def _translate_with(self, stmt: ast.With) -> Statement:
        return self._translate_with_items(stmt, stmt.items)

    def _translate_with_items(self, stmt: ast.With, items: Sequence[ast.withitem]) -> Statement:
        # `with a(), b():` nests b inside a
        item, rest = items[0], items[1:]
        if rest:
            body: list[Statement] = [self._translate_with_items(stmt, rest)]
        else:
            body = self.translate(stmt.body)

        if isinstance(item.context_expr, ast.Call):
            node = self._classify(item.context_expr, body=body, target=item.optional_vars)
            if node is not None:
                return node
        return _rebuild(stmt, items=[item], body=body)

    def _translate_branches(self, stmt: ast.If | ast.For | ast.While) -> Statement:
        return _rebuild(stmt, body=self.translate(stmt.body), orelse=self.translate(stmt.orelse))

    def _translate_try(self, stmt: ast.Try) -> Statement:
        handlers = [_rebuild(h, body=self.translate(h.body)) for h in stmt.handlers]
        return _rebuild(
            stmt,
            body=self.translate(stmt.body),
            handlers=handlers,
            orelse=self.translate(stmt.orelse),
            finalbody=self.translate(stmt.finalbody),
        )

    def _translate_match(self, stmt: ast.Match) -> Statement:
        cases = [_rebuild(case, body=self.translate(case.body)) for case in stmt.cases]
        return _rebuild(stmt, cases=cases)

    # ─────────────────────────────────────────────────────────────────────
    # Call classification
    # ─────────────────────────────────────────────────────────────────────

    def _classify(
        self,
        call: ast.Call,
        *,
        body: list[Statement] | None = None,
        target: ast.expr | None = None,
    ) -> Statement | None:
        """Return the specialized node for a call, or None to keep it as is.

        ``body`` and ``target`` are the attached block and ``as`` target of a
        ``with`` statement.
        """
        func = call.func
        if isinstance(func, ast.Name):
            name, receiver = func.id, None
        elif isinstance(func, ast.Attribute):
            name, receiver = func.attr, func.value
        else:
            return None

        if receiver is None:
            if name in PASSTHROUGH:
                return None
            if name in self._builtins:
                return self._builtin(name, call, body, target)
            if name in self._extensions:
                return ExtensionTagNode(
                    lineno=call.lineno,
                    col_offset=call.col_offset,
                    call=call,
                    key=name,
                    args=tuple(call.args),
                    keywords=tuple(call.keywords),
                    block=self._block(call, body, target),
                )

        if name[:1].isupper() and (receiver is None or _is_constant_path(receiver)):
            return ConstTagNode(
                lineno=call.lineno,
                col_offset=call.col_offset,
                call=call,
                name=_dotted_name(func),
                ref=func,
                args=tuple(call.args),
                keywords=tuple(call.keywords),
                block=self._block(call, body, target),
            )

        if receiver is not None:
            return None

        if name == BLOCK_PARAM:
            if body is not None:
                raise self._error(
                    "The child block cannot be invoked with a block of its own",
                    call,
                    ErrorCode.BLOCK_INVOCATION_WITH_BLOCK,
                )
            return BlockInvocationNode(
                lineno=call.lineno,
                col_offset=call.col_offset,
                call=call,
                name=name,
                args=tuple(call.args),
                keywords=tuple(call.keywords),
            )

        return self._tag(call, self._tag_name(name), None, call.args, body, target)

    def _builtin(
        self,
        name: str,
        call: ast.Call,
        body: list[Statement] | None,
        target: ast.expr | None,
    ) -> Statement:
        loc = {"lineno": call.lineno, "col_offset": call.col_offset, "call": call}

        match name:
            case "render":
                if not call.args or isinstance(call.args[0], ast.Starred):
                    raise self._error("render() needs the unit to render as first argument", call)
                first, rest = call.args[0], tuple(call.args[1:])
                block = self._block(call, body, target)
                if isinstance(first, ast.Lambda):
                    return RenderNode(
                        **loc,
                        inline=self.translate_lambda(first),
                        args=rest,
                        keywords=tuple(call.keywords),
                        block=block,
                    )
                return RenderNode(
                    **loc, target=first, args=rest, keywords=tuple(call.keywords), block=block
                )

            case "render_yield" | "render_children":
                if body is not None:
                    raise self._error(f"{name}() does not take a block", call)
                node_type = RenderYieldNode if name == "render_yield" else RenderChildrenNode
                return node_type(**loc, args=tuple(call.args), keywords=tuple(call.keywords))

            case "text" | "raw":
                if body is not None or call.keywords or len(call.args) > 1:
                    raise self._error(f"{name}() takes at most one positional argument", call)
                value = call.args[0] if call.args else None
                node_type = TextNode if name == "text" else RawNode
                return node_type(**loc, value=value)

            case "defer":
                if call.args and len(call.args) == 1 and isinstance(call.args[0], ast.Lambda):
                    if body is not None or call.args[0].args.args:
                        raise self._error("defer() takes either a block or a lambda", call)
                    return DeferNode(**loc, block=self.translate_lambda(call.args[0]))
                if body is None or call.args or call.keywords:
                    raise self._error("defer() must be used as `with defer():`", call)
                return DeferNode(**loc, block=self._block(call, body, target))

            case "html" | "html5":
                if call.args:
                    raise self._error(f"{name}() takes keyword attributes only", call)
                return BuiltinNode(
                    **loc,
                    tag=name,
                    keywords=tuple(call.keywords),
                    block=self._block(call, body, target),
                )

            case "markdown":
                if body is not None or len(call.args) != 1:
                    raise self._error("markdown() takes exactly one text argument", call)
                return BuiltinNode(
                    **loc, tag=name, args=tuple(call.args), keywords=tuple(call.keywords)
                )

            case _:  # tag
                if not call.args or isinstance(call.args[0], ast.Starred):
                    raise self._error("tag() needs the tag name as first argument", call)
                first, rest = call.args[0], call.args[1:]
                if isinstance(first, ast.Constant) and isinstance(first.value, str):
                    return self._tag(call, self._tag_name(first.value), None, rest, body, target)
                element = self._tag(call, None, first, rest, body, target)
                return BuiltinNode(**loc, tag=name, args=tuple(call.args), element=element)

    def _tag(
        self,
        call: ast.Call,
        tag: str | None,
        tag_expr: ast.expr | None,
        args: Sequence[ast.expr],
        body: list[Statement] | None,
        target: ast.expr | None,
    ) -> TagNode:
        if len(args) > 1 or any(isinstance(arg, ast.Starred) for arg in args):
            raise self._error(
                f"Tag {tag or ast.unparse(tag_expr)!r} takes at most one positional argument (inner text)",
                call,
            )
        inner_text = args[0] if args else None

        loop: ast.expr | None = None
        attributes: list[ast.keyword] = []
        for keyword in call.keywords:
            if keyword.arg == LOOP_KEYWORD:
                loop = keyword.value
            elif keyword.arg is None and _is_static_key_dict(keyword.value):
                attributes.extend(
                    ast.copy_location(ast.keyword(arg=key.value, value=value), keyword)
                    for key, value in zip(keyword.value.keys, keyword.value.values, strict=True)
                )
            else:
                attributes.append(keyword)

        if target is not None and loop is None:
            raise self._error("An `as` target on a tag requires a _for= iterable", call)

        block: Block | None = None
        if isinstance(inner_text, ast.Lambda):
            if body is not None or inner_text.args.args:
                raise self._error("A lambda used as inner text takes no parameters or block", call)
            block = self.translate_lambda(inner_text)
            inner_text = None
        elif body is not None:
            block = Block(
                lineno=call.lineno,
                col_offset=call.col_offset,
                params=with_buffer_param(_arguments()),
                body=body,
            )

        is_void = self._mode == HTML and tag in VOID_ELEMENTS
        if is_void and (inner_text is not None or block is not None):
            raise self._error(
                f"Void element {tag!r} cannot have inner text or a block",
                call,
                ErrorCode.VOID_ELEMENT_CONTENT,
            )

        return TagNode(
            lineno=call.lineno,
            col_offset=call.col_offset,
            call=call,
            tag=tag,
            tag_expr=tag_expr,
            attributes=tuple(attributes),
            inner_text=inner_text,
            block=block,
            loop=loop,
            loop_target=target,
            is_void=is_void,
        )

    def _tag_name(self, name: str) -> str:
        """Markup name of a tag; JSON keys are kept verbatim."""
        return name if self._mode == JSON else name_repr(name, self._mode)

    def _block(
        self, call: ast.Call, body: list[Statement] | None, target: ast.expr | None
    ) -> Block | None:
        """Attached block of a component call; the ``as`` target names its parameters."""
        if body is None:
            return None
        names: list[ast.expr] = []
        if target is not None:
            names = target.elts if isinstance(target, ast.Tuple | ast.List) else [target]
            if not all(isinstance(name, ast.Name) for name in names):
                raise self._error("Block parameters must be plain names", call)
        arguments = _arguments([name.id for name in names])
        return Block(
            lineno=call.lineno,
            col_offset=call.col_offset,
            params=with_buffer_param(arguments),
            body=body,
        )

    def _error(
        self, message: str, node: ast.AST, code: ErrorCode = ErrorCode.INVALID_CALL
    ) -> TemplateCompileError:
        return TemplateCompileError(
            message,
            lineno=getattr(node, "lineno", None),
            filename=self._filename,
            source=self._source,
            col_offset=getattr(node, "col_offset", None),
            code=code,
        )


def _is_static_key_dict(node: ast.expr) -> bool:
    return isinstance(node, ast.Dict) and all(
        isinstance(key, ast.Constant) and isinstance(key.value, str) for key in node.keys
    )
