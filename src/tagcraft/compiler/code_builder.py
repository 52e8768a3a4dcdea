"""Indented source builder that remembers where each line came from.

Every line carries the original source line it was generated from (or None
for scaffolding such as ``return __buffer__``). Sections are placeholders
that can be filled after later lines were added, e.g. a function prelude
whose content depends on what the body turned out to use.
"""

from __future__ import annotations

from collections.abc import Iterator

INDENT_STEP = 4


class CodeBuilder:
    """Build source code conveniently.

    Example:
        >>> code = CodeBuilder()
        >>> code.add_line("def unit(__buffer__):", lineno=3)
        >>> code.indent()
        >>> code.add_line("__buffer__.append('<p></p>')", lineno=4)
        >>> code.dedent()
        >>> code.line_map()
        {1: 3, 2: 4}
    """

    __slots__ = ("_entries", "indent_level")

    def __init__(self, indent_level: int = 0):
        self._entries: list[tuple[str, int | None] | CodeBuilder] = []
        self.indent_level = indent_level

    def add_line(self, line: str, lineno: int | None = None) -> None:
        """Add a line of source, indented to the current level."""
        self._entries.append((" " * self.indent_level + line, lineno))

    def add_lines(self, text: str, lineno: int | None = None) -> None:
        """Add several lines (e.g. an unparsed nested def), all attributed to ``lineno``."""
        for line in text.splitlines():
            self.add_line(line, lineno)

    def add_section(self) -> CodeBuilder:
        """Add a section, a sub-CodeBuilder filled in later."""
        section = CodeBuilder(self.indent_level)
        self._entries.append(section)
        return section

    def indent(self) -> None:
        self.indent_level += INDENT_STEP

    def dedent(self) -> None:
        self.indent_level -= INDENT_STEP

    def __len__(self) -> int:
        return len(self._entries)

    def lines(self) -> Iterator[tuple[str, int | None]]:
        """Yield ``(text, original_line)`` for every line, sections expanded."""
        for entry in self._entries:
            if isinstance(entry, CodeBuilder):
                yield from entry.lines()
            else:
                yield entry

    def line_map(self) -> dict[int, int]:
        """Map 1-based generated line numbers to original line numbers."""
        return {
            number: lineno
            for number, (_, lineno) in enumerate(self.lines(), start=1)
            if lineno is not None
        }

    def __str__(self) -> str:
        return "".join(f"{text}\n" for text, _ in self.lines())
