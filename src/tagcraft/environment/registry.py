"""Extension registry for the tagcraft environment.

Extensions are named template units callable from any template as if they
were tags: ``env.extension(card=card_template)`` makes ``card(...)`` invoke
``card_template`` with the current buffer.

The registry is a view: it owns no data and every change replaces the
environment's dict with an updated copy, so a compiler or a render that
already holds the old dict keeps seeing a consistent snapshot.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tagcraft.environment.core import Environment


class ExtensionRegistry(MutableMapping[str, Any]):
    """Mutable mapping of extension name → template unit, copy-on-write.

    Example:
        >>> env.extensions["card"] = Card
        >>> "card" in env.extensions
        True
    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment):
        self._env = env

    def _replace(self, changes: Mapping[str, Any]) -> None:
        self._env._extensions = {**self._env._extensions, **changes}

    def __getitem__(self, name: str) -> Any:
        return self._env._extensions[name]

    def __setitem__(self, name: str, unit: Any) -> None:
        self._replace({name: unit})

    def __delitem__(self, name: str) -> None:
        current = self._env._extensions
        if name not in current:
            raise KeyError(name)
        self._env._extensions = {k: v for k, v in current.items() if k != name}

    def __iter__(self) -> Iterator[str]:
        return iter(self._env._extensions)

    def __len__(self) -> int:
        return len(self._env._extensions)

    def update(self, other: Mapping[str, Any] | None = None, /, **units: Any) -> None:  # type: ignore[override]
        """Register several extensions with a single copy."""
        self._replace({**(other or {}), **units})

    def clear(self) -> None:
        self._env._extensions = {}

    def __repr__(self) -> str:
        return f"ExtensionRegistry({self._env._extensions!r})"
