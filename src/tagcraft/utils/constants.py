"""Shared markup constants for tagcraft."""

from __future__ import annotations

# Elements that never take content and are never closed (HTML mode only).
# Source: WHATWG HTML Living Standard, "void elements"
VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements whose text content is emitted verbatim (HTML mode only)
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})

HTML5_DOCTYPE = "<!DOCTYPE html>"

# Rendering modes
HTML = "html"
XML = "xml"
JSON = "json"
MODES: frozenset[str] = frozenset({HTML, XML, JSON})
