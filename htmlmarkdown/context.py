"""Per-conversion state and the context handed to every handler."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from htmlmarkdown.dom import Node
from htmlmarkdown.url import default_assemble_absolute_url

AssembleAbsoluteURL = Callable[[str, str, str], str]


class GlobalState:
    """Key/value storage shared by all handlers during one conversion."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if the key was never set."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value under ``key``."""
        self._data[key] = value

    def update(self, key: str, fn: Callable[[Any], Any]) -> None:
        """Replace the value with ``fn(old)``; ``old`` is None if the key is unset."""
        self._data[key] = fn(self._data.get(key))


class Context:
    """Immutable context of one conversion, passed to renderers and other handlers."""

    def __init__(
        self,
        converter: Any,
        domain: str = "",
        state: GlobalState | None = None,
        assemble_absolute_url: AssembleAbsoluteURL | None = None,
        values: Mapping[Any, Any] | None = None,
    ) -> None:
        self._converter = converter
        self._domain = domain
        self._state = state if state is not None else GlobalState()
        self._assemble = (
            assemble_absolute_url
            if assemble_absolute_url is not None
            else default_assemble_absolute_url
        )
        self._values: dict[Any, Any] = dict(values or {})

    @property
    def domain(self) -> str:
        """The base domain used to make relative URLs absolute."""
        return self._domain

    def value(self, key: Any) -> Any:
        """Return the value stored under ``key``, or None."""
        return self._values.get(key)

    def with_value(self, key: Any, val: Any) -> Context:
        """Return a derived context that additionally maps ``key`` to ``val``."""
        return Context(
            self._converter,
            domain=self._domain,
            state=self._state,
            assemble_absolute_url=self._assemble,
            values={**self._values, key: val},
        )

    def assemble_absolute_url(self, tag_name: str, raw_url: str) -> str:
        return self._assemble(tag_name, raw_url, self._domain)

    def get_tag_type(self, tag_name: str):
        return self._converter.get_tag_type(tag_name)

    def render_nodes(self, w, *args: Node) -> None:
        """Render the given nodes into ``w``."""
        self._converter.render_nodes(self, w, list(args))

    def render_child_nodes(self, w, node: Node) -> None:
        """Render all children of ``node`` into ``w``."""
        self._converter.render_nodes(self, w, list(node.children))

    def escape_content(self, content):
        return self._converter.escape_content(content)

    def unescape_content(self, content):
        return self._converter.unescape_content(content)

    def get_state(self, key: str, default: Any = None) -> Any:
        return self._state.get(key, default)

    def set_state(self, key: str, val: Any) -> None:
        self._state.set(key, val)

    def update_state(self, key: str, fn: Callable[[Any], Any]) -> None:
        self._state.update(key, fn)