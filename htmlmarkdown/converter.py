"""The converter: handler registration and the HTML to markdown pipeline."""

from __future__ import annotations

import abc
import enum
import io
import threading
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TextIO

from htmlmarkdown.context import Context, GlobalState
from htmlmarkdown.dom import Node, is_block_name, is_inline_name, node_name, parse_html
from htmlmarkdown.prioritized import Prioritized, sort_prioritized

ESCAPE_MARKER = "\ue000"
"""Placed before characters that may need escaping; resolved after rendering."""


class EscapeMode(str, enum.Enum):
    """How strictly characters with a markdown meaning are escaped."""

    DISABLED = "disabled"
    SMART = "smart"


class TagType(str, enum.Enum):
    """How an element is treated when no renderer handles it."""

    BLOCK = "block"
    INLINE = "inline"
    REMOVE = "remove"


class RenderStatus(enum.Enum):
    """The outcome of a render handler."""

    TRY_NEXT = enum.auto()
    SUCCESS = enum.auto()


class ConverterError(Exception):
    """The converter is not set up in a way that allows converting."""


class NoRenderHandlersError(ConverterError):
    def __init__(self) -> None:
        super().__init__(
            "no render handlers are registered. "
            'did you forget to register the "commonmark" and "base" plugins?'
        )


class BasePluginMissingError(ConverterError):
    def __init__(self) -> None:
        super().__init__(
            'you registered the "commonmark" plugin but the "base" plugin is also required'
        )


class Plugin(abc.ABC):
    """Extends a converter with handlers; ``name`` must not be empty."""

    name: str = ""

    @abc.abstractmethod
    def init(self, conv: Converter) -> None:
        """Validate the plugin's options and register its handlers on ``conv``."""


PreRenderFunc = Callable[[Context, Node], None]
RenderFunc = Callable[[Context, TextIO, Node], RenderStatus]
PostRenderFunc = Callable[[Context, str], str]
TextTransformFunc = Callable[[Context, str], str]
UnEscapeFunc = Callable[[str, int], int]


class Register:
    """Registers handlers and tag types on a converter."""

    def __init__(self, conv: Converter) -> None:
        self._conv = conv

    def pre_renderer(self, fn: PreRenderFunc, priority: int) -> None:
        self._conv._add(self._conv._pre_render, fn, priority)

    def renderer(self, fn: RenderFunc, priority: int) -> None:
        self._conv._add(self._conv._render, fn, priority)

    def renderer_for(
        self, tag_name: str, tag_type: TagType, render_fn: RenderFunc, priority: int
    ) -> None:
        """Register a renderer and a tag type for one specific tag name."""
        self.tag_type(tag_name, tag_type, priority)

        def render_matching(ctx: Context, w: TextIO, node: Node) -> RenderStatus:
            if node_name(node) == tag_name:
                return render_fn(ctx, w, node)
            return RenderStatus.TRY_NEXT

        self.renderer(render_matching, priority)

    def post_renderer(self, fn: PostRenderFunc, priority: int) -> None:
        self._conv._add(self._conv._post_render, fn, priority)

    def text_transformer(self, fn: TextTransformFunc, priority: int) -> None:
        self._conv._add(self._conv._text_transform, fn, priority)

    def escaped_char(self, *args: str) -> None:
        """Mark characters as having a markdown meaning."""
        with self._conv._lock:
            self._conv._markdown_chars.update(args)

    def unescaper(self, fn: UnEscapeFunc, priority: int) -> None:
        self._conv._add(self._conv._unescape, fn, priority)

    def tag_type(self, tag_name: str, tag_type: TagType, priority: int) -> None:
        with self._conv._lock:
            self._conv._tag_types[tag_name].append(Prioritized(TagType(tag_type), priority))


class Converter:
    """Converts HTML documents to markdown using the registered handlers."""

    def __init__(
        self,
        plugins: Iterable[Plugin] = (),
        escape_mode: EscapeMode = EscapeMode.SMART,
    ) -> None:
        self._lock = threading.RLock()
        self._error: Exception | None = None
        self._registered_plugins: list[str] = []
        self._pre_render: list[Prioritized[PreRenderFunc]] = []
        self._render: list[Prioritized[RenderFunc]] = []
        self._post_render: list[Prioritized[PostRenderFunc]] = []
        self._text_transform: list[Prioritized[TextTransformFunc]] = []
        self._unescape: list[Prioritized[UnEscapeFunc]] = []
        self._markdown_chars: set[str] = set()
        self._tag_types: defaultdict[str, list[Prioritized[TagType]]] = defaultdict(list)
        self.escape_mode = EscapeMode(escape_mode)
        self.register = Register(self)

        try:
            for plugin in plugins:
                if not plugin.name:
                    raise ConverterError("the plugin has no name")
                self._registered_plugins.append(plugin.name)
                plugin.init(self)
        except Exception as err:  # noqa: BLE001
            # Setup problems (e.g. invalid plugin options) surface on the first conversion.
            self._error = err

    @property
    def registered_plugins(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._registered_plugins)

    def _add(self, handlers: list, fn: Any, priority: int) -> None:
        with self._lock:
            handlers.append(Prioritized(fn, priority))

    def _sorted(self, handlers: list) -> list:
        with self._lock:
            snapshot = list(handlers)
        return [item.value for item in sort_prioritized(snapshot)]

    def get_tag_type(self, tag_name: str) -> TagType | None:
        """The highest-priority registered tag type, else one derived from the name."""
        with self._lock:
            types = list(self._tag_types.get(tag_name, ()))
        if not types:
            if is_block_name(tag_name):
                return TagType.BLOCK
            if is_inline_name(tag_name):
                return TagType.INLINE
            return None
        return sort_prioritized(types)[0].value

    # - - - escaping - - - #

    def escape_content(self, chars: str) -> str:
        """Put a marker before every character with a markdown meaning."""
        if self.escape_mode is EscapeMode.DISABLED:
            return chars
        with self._lock:
            special = frozenset(self._markdown_chars)
        out = []
        for ch in chars:
            if ch == "\x00":
                # U+0000 must be replaced with the replacement character.
                out.append("\ufffd")
            elif ch in special:
                out.append(ESCAPE_MARKER + ch)
            else:
                out.append(ch)
        return "".join(out)

    def unescape_content(self, chars: str) -> str:
        """Turn markers into backslashes where an unescaper asks for it, drop the rest."""
        if self.escape_mode is EscapeMode.DISABLED:
            return chars
        handlers = self._sorted(self._unescape)

        def skip_for(index: int) -> int:
            for handler in handlers:
                skip = handler(chars, index)
                if skip != -1:
                    return skip
            return -1

        escaped: set[int] = set()
        index = 0
        while index < len(chars):
            if chars[index] != ESCAPE_MARKER:
                index += 1
                continue
            if index + 1 >= len(chars):
                break
            skip = skip_for(index + 1)
            if skip == -1:
                index += 1
                continue
            escaped.add(index)
            index += skip

        out = []
        for position, ch in enumerate(chars):
            if ch != ESCAPE_MARKER:
                out.append(ch)
            elif position in escaped:
                out.append("\\")
        return "".join(out)

    # - - - rendering - - - #

    def render_nodes(self, ctx: Context, w: TextIO, nodes: Iterable[Node]) -> None:
        for node in nodes:
            self.render_node(ctx, w, node)

    def render_node(self, ctx: Context, w: TextIO, node: Node) -> RenderStatus:
        """Render one node with the first renderer that succeeds, else the fallback."""
        if node_name(node) == "#text":
            content = node.data
            for transform in self._sorted(self._text_transform):
                content = transform(ctx, content)
            w.write(content)
            return RenderStatus.SUCCESS

        for handler in self._sorted(self._render):
            if handler(ctx, w, node) is RenderStatus.SUCCESS:
                return RenderStatus.SUCCESS

        return self._render_fallback(ctx, w, node)

    def _render_fallback(self, ctx: Context, w: TextIO, node: Node) -> RenderStatus:
        is_block = ctx.get_tag_type(node_name(node)) is TagType.BLOCK
        if is_block:
            w.write("\n\n")
        ctx.render_child_nodes(w, node)
        if is_block:
            w.write("\n\n")
        return RenderStatus.SUCCESS

    # - - - converting - - - #

    def convert_node(
        self,
        doc: Node,
        domain: str = "",
        context: Mapping[Any, Any] | None = None,
    ) -> str:
        """Convert an already parsed document to markdown.

        ``domain`` makes relative URLs absolute; ``context`` seeds the values
        that handlers can read with ``Context.value``.
        """
        if self._error is not None:
            raise self._error

        if not self._sorted(self._render):
            raise NoRenderHandlersError()

        plugins = self.registered_plugins
        if "commonmark" in plugins and "base" not in plugins:
            raise BasePluginMissingError()

        ctx = Context(self, domain=domain, state=GlobalState(), values=context)

        for handler in self._sorted(self._pre_render):
            handler(ctx, doc)

        buffer = io.StringIO()
        self.render_node(ctx, buffer, doc)

        result = buffer.getvalue()
        for handler in self._sorted(self._post_render):
            result = handler(ctx, result)
        return result

    def convert_file(
        self,
        stream,
        domain: str = "",
        context: Mapping[Any, Any] | None = None,
    ) -> str:
        """Parse HTML from a text or binary stream and convert it."""
        return self.convert_node(parse_html(stream), domain=domain, context=context)

    def convert_string(
        self,
        html_input: str,
        domain: str = "",
        context: Mapping[Any, Any] | None = None,
    ) -> str:
        """Parse an HTML string and convert it."""
        return self.convert_node(parse_html(html_input), domain=domain, context=context)