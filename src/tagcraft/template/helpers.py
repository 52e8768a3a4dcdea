"""Runtime helpers passed to compiled units.

Generated code receives these as parameters of its factory function (see
``tagcraft.compiler.names``), bound to an Environment and a rendering mode.
Everything except unit resolution is a pure function of its arguments.

Thread-Safety:
Helpers hold no mutable state of their own; unit resolution goes through the
Environment's caches, which tolerate concurrent first use.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from tagcraft.compiler import names
from tagcraft.environment.exceptions import MissingBlockError, TemplateRuntimeError
from tagcraft.template.json_buffer import JsonBuffer
from tagcraft.utils.constants import HTML, JSON, VOID_ELEMENTS
from tagcraft.utils.html import to_text
from tagcraft.utils.markup import escaper_for, format_attrs, name_repr

if TYPE_CHECKING:
    from tagcraft.environment.core import Environment


def new_buffer(mode: str) -> list[Any] | JsonBuffer:
    """Empty output buffer for a rendering mode."""
    return JsonBuffer() if mode == JSON else []


def buffer_result(buffer: Any, mode: str) -> str:
    """Final text of a buffer filled by a compiled unit."""
    if isinstance(buffer, JsonBuffer):
        return buffer.to_json()
    return "".join(buffer)


def run_parts(buffer: list[Any], parts: list[Any]) -> None:
    """Flush defer-mode parts: strings are appended, deferred blocks are run."""
    for part in parts:
        if callable(part):
            part(buffer)
        else:
            buffer.append(part)


def require_block(block: Callable[..., Any] | None, template_name: str) -> Callable[..., Any]:
    """Return the child block, failing if the caller supplied none."""
    if block is None:
        raise MissingBlockError(template_name)
    return block


def _render_nothing(buffer: Any, *args: Any, **kwargs: Any) -> Any:
    return buffer


def _text_renderer(text: str) -> Callable[..., Any]:
    def emit(buffer: Any, *args: Any, **kwargs: Any) -> Any:
        buffer.append(text)
        return buffer

    return emit


def build_helpers(env: Environment, mode: str) -> dict[str, Callable[..., Any]]:
    """Helpers for units compiled in ``env`` for ``mode``, in factory parameter order."""

    escape = escaper_for(mode)

    def attrs(mapping: Mapping[Any, Any]) -> str:
        return format_attrs(mapping, mode)

    def tag_name(value: Any, has_content: bool = False) -> str:
        name = name_repr(value, mode)
        if has_content and mode == HTML and name in VOID_ELEMENTS:
            raise TemplateRuntimeError(
                f"Void element {name!r} cannot have inner text or a block",
                suggestion="Leave out the content, or compute a non-void tag name",
            )
        return name

    def close_tag(name: str) -> str:
        if mode == HTML and name in VOID_ELEMENTS:
            return ""
        return f"</{name}>"

    def unit(target: Any) -> Callable[..., Any]:
        return env.compiled_unit(target, mode).function

    def extension(key: str) -> Callable[..., Any]:
        try:
            target = env.extensions[key]
        except KeyError:
            raise TemplateRuntimeError(f"Extension {key!r} is not registered") from None
        return env.compiled_unit(target, mode).function

    def render(target: Any) -> Callable[..., Any]:
        if target is None:
            return _render_nothing
        if isinstance(target, str):
            return _text_renderer(escape(target))
        return env.compiled_unit(target, mode).function

    helpers: dict[str, Callable[..., Any]] = {
        names.ESCAPE: escape,
        names.TO_TEXT: to_text,
        names.ATTRS: attrs,
        names.TAG_NAME: tag_name,
        names.CLOSE_TAG: close_tag,
        names.UNIT: unit,
        names.EXTENSION: extension,
        names.RENDER: render,
        names.MARKDOWN: env.markdown,
        names.REQUIRE_BLOCK: require_block,
        names.RUN_PARTS: run_parts,
    }
    assert tuple(helpers) == names.HELPER_NAMES
    return helpers
