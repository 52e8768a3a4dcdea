"""Escaping primitives and the Markup safe-string type.

All escapers are pure functions:

- ``None`` renders as the empty string
- objects implementing ``__html__`` are trusted and passed through
- everything else goes through ``str()`` and a single ``str.translate()`` pass

"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

_HTML_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

_XML_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&apos;",
    }
)

# Characters left untouched by uri_escape (RFC 3986 reserved + unreserved)
_URI_SAFE = "/:?#[]@!$&'()*+,;=-._~%"


class Markup(str):
    """A string that is already safe for inclusion in markup.

    Markup is never escaped again:

        >>> html_escape(Markup("<b>bold</b>"))
        '<b>bold</b>'
    """

    __slots__ = ()

    def __html__(self) -> Markup:
        return self

    def __repr__(self) -> str:
        return f"Markup({super().__repr__()})"


def to_text(value: Any) -> str:
    """Convert a value to unescaped text (``None`` → ``""``)."""
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(value)


def html_escape(value: Any) -> str:
    """Escape a value for HTML text and attribute content."""
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(value).translate(_HTML_ESCAPE_TABLE)


def xml_escape(value: Any) -> str:
    """Escape a value for XML text and attribute content."""
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(value).translate(_XML_ESCAPE_TABLE)


def uri_escape(value: Any) -> str:
    """Percent-encode a value for use in a URI, keeping URI delimiters."""
    return quote(to_text(value), safe=_URI_SAFE)
