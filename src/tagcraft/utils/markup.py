"""Tag and attribute naming plus attribute serialization.

Used both by the compiler (for statically known names and attributes, folded
into literal markup) and by the runtime helpers (for dynamic ones), so the
two paths always produce identical output.

Naming rules:
    - one trailing underscore is dropped (``class_`` → ``class``)
    - in XML mode a double underscore becomes a namespace colon
      (``soap__Envelope`` → ``soap:Envelope``)
    - remaining underscores become dashes (``data_foo`` → ``data-foo``)

Attribute value rules:
    - ``None`` / ``False``: attribute omitted
    - ``True``: bare attribute name
    - list / tuple: items joined with a space (``None`` items render empty)
    - anything else: ``str()`` and escaped
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from tagcraft.utils.constants import XML
from tagcraft.utils.html import html_escape, to_text, xml_escape


def escaper_for(mode: str) -> Callable[[Any], str]:
    """Return the text escaper used by a rendering mode."""
    return xml_escape if mode == XML else html_escape


def name_repr(name: Any, mode: str) -> str:
    """Convert a Python-side tag or attribute name to its markup form."""
    name = str(name)
    if len(name) > 1 and name.endswith("_") and not name.endswith("__"):
        name = name[:-1]
    if mode == XML:
        name = name.replace("__", ":")
    return name.replace("_", "-")


def attr_value(value: Any) -> Any:
    """Unescaped text of an attribute value, or None if omitted.

    ``True`` is returned as the empty string and rendered as a bare name.
    """
    if value is None or value is False:
        return None
    if value is True:
        return ""
    if isinstance(value, list | tuple):
        return " ".join(to_text(item) for item in value)
    if hasattr(value, "__html__"):
        return value
    return str(value)


def format_attr(name: Any, value: Any, mode: str) -> str:
    """Serialize one attribute with its leading space, or ``""`` if omitted."""
    text = attr_value(value)
    if text is None:
        return ""
    key = name_repr(name, mode)
    if value is True:
        return f" {key}"
    return f' {key}="{escaper_for(mode)(text)}"'


def format_attrs(attrs: Mapping[Any, Any] | Iterable[tuple[Any, Any]], mode: str) -> str:
    """Serialize an attribute mapping in insertion order."""
    items = attrs.items() if isinstance(attrs, Mapping) else attrs
    return "".join(format_attr(name, value, mode) for name, value in items)
