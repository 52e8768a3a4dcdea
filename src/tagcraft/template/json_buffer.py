"""Output buffer for JSON-mode templates.

A stack of containers: the top is the object or array currently being
filled. A container's kind is decided by its first entry, so an empty nested
block produces ``null``.
"""

from __future__ import annotations

import json
from typing import Any

from tagcraft.environment.exceptions import JsonStructureError


class JsonBuffer:
    """Builds a JSON document from ``kv``/``item`` calls.

    Example:
        >>> buf = JsonBuffer()
        >>> buf.kv("name", "Ada")
        >>> buf.enter()
        >>> buf.item(1)
        >>> buf.item(2)
        >>> buf.leave_key("scores")
        >>> buf.to_json()
        '{"name":"Ada","scores":[1,2]}'
    """

    __slots__ = ("_stack",)

    def __init__(self) -> None:
        self._stack: list[dict[Any, Any] | list[Any] | None] = [None]

    @property
    def value(self) -> dict[Any, Any] | list[Any] | None:
        """The root container."""
        return self._stack[0]

    def kv(self, key: Any, value: Any) -> None:
        """Set a key on the current object."""
        self._current(dict)[key] = value

    def item(self, value: Any) -> None:
        """Append an item to the current array."""
        self._current(list).append(value)

    def enter(self) -> None:
        """Start a nested container."""
        self._stack.append(None)

    def leave_key(self, key: Any) -> None:
        """Close the nested container and set it as ``key`` on its parent."""
        self.kv(key, self._stack.pop())

    def leave_item(self) -> None:
        """Close the nested container and append it to its parent."""
        self.item(self._stack.pop())

    def to_json(self) -> str:
        return json.dumps(self.value, separators=(",", ":"), ensure_ascii=False)

    def _current(self, kind: type) -> Any:
        top = self._stack[-1]
        if top is None:
            top = self._stack[-1] = kind()
        elif not isinstance(top, kind):
            raise JsonStructureError(
                "Mixing array items and object keys at the same level",
                suggestion="Wrap array items in their own key: `with items(): item(...)`",
            )
        return top

    def __repr__(self) -> str:
        return f"JsonBuffer({self.value!r})"
