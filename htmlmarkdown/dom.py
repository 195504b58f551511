"""A small HTML node tree with parsing and rendering helpers."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from xml.dom import Node as _DomNode

import html5lib


class NodeType(enum.Enum):
    """The kind of a node in the tree."""

    DOCUMENT = "document"
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    DOCTYPE = "doctype"


@dataclass(eq=False, repr=False)
class Node:
    """A node of an HTML document: element, text, comment, doctype or document."""

    type: NodeType
    data: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list, init=False)
    parent: Node | None = field(default=None, init=False)

    def __repr__(self) -> str:
        return f"Node({self.type.name}, {self.data!r})"

    def _index(self) -> int:
        if self.parent is None:
            raise ValueError("node has no parent")
        for index, sibling in enumerate(self.parent.children):
            if sibling is self:
                return index
        raise ValueError("node is not among its parent's children")

    @property
    def first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> Node | None:
        return self.children[-1] if self.children else None

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        index = self._index() + 1
        siblings = self.parent.children
        return siblings[index] if index < len(siblings) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        index = self._index()
        return self.parent.children[index - 1] if index > 0 else None

    def append_child(self, child: Node) -> None:
        """Append a detached node as the last child."""
        if child.parent is not None:
            raise ValueError("child already has a parent")
        child.parent = self
        self.children.append(child)

    def remove_child(self, child: Node) -> None:
        """Detach one of this node's children."""
        if child.parent is not self:
            raise ValueError("node is not a child of this node")
        del self.children[child._index()]
        child.parent = None

    def get_attribute(self, key: str, default: str = "") -> str:
        """Return the attribute's value, or ``default`` if it is absent."""
        return self.attrs.get(key, default)


def _convert(dom_node) -> Node | None:
    kind = dom_node.nodeType
    if kind == _DomNode.DOCUMENT_NODE:
        return Node(NodeType.DOCUMENT)
    if kind == _DomNode.DOCUMENT_TYPE_NODE:
        return Node(NodeType.DOCTYPE, dom_node.name or "")
    if kind == _DomNode.ELEMENT_NODE:
        return Node(NodeType.ELEMENT, dom_node.tagName, dict(dom_node.attributes.items()))
    if kind in (_DomNode.TEXT_NODE, _DomNode.CDATA_SECTION_NODE):
        return Node(NodeType.TEXT, dom_node.data)
    if kind == _DomNode.COMMENT_NODE:
        return Node(NodeType.COMMENT, dom_node.data)
    return None


def parse_html(text) -> Node:
    """Parse an HTML document (string, bytes or stream) into a document node."""
    document = html5lib.parse(text, treebuilder="dom", namespaceHTMLElements=False)
    root = _convert(document)
    pending = [(root, document)]
    while pending:
        target, source = pending.pop()
        for source_child in source.childNodes:
            child = _convert(source_child)
            if child is None:
                continue
            target.append_child(child)
            pending.append((child, source_child))
    return root


_VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "keygen",
     "link", "meta", "param", "source", "track", "wbr"}
)
_RAW_TEXT_ELEMENTS = frozenset(
    {"iframe", "noembed", "noframes", "noscript", "plaintext", "script", "style", "xmp"}
)
_LEADING_NEWLINE_ELEMENTS = frozenset({"pre", "listing", "textarea"})

_ESCAPES = str.maketrans(
    {"&": "&amp;", "'": "&#39;", "<": "&lt;", ">": "&gt;", '"': "&#34;", "\r": "&#13;"}
)


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


def _render(node: Node, parts: list[str]) -> None:
    if node.type is NodeType.DOCUMENT:
        for child in node.children:
            _render(child, parts)
    elif node.type is NodeType.TEXT:
        parts.append(_escape(node.data))
    elif node.type is NodeType.COMMENT:
        parts.append(f"<!--{node.data}-->")
    elif node.type is NodeType.DOCTYPE:
        parts.append(f"<!DOCTYPE {node.data}>")
    else:
        parts.append("<" + node.data)
        for key, value in node.attrs.items():
            parts.append(f' {key}="{_escape(value)}"')
        if node.data in _VOID_ELEMENTS:
            parts.append("/>")
            return
        parts.append(">")
        first = node.first_child
        if (
            node.data in _LEADING_NEWLINE_ELEMENTS
            and first is not None
            and first.type is NodeType.TEXT
            and first.data.startswith("\n")
        ):
            parts.append("\n")
        raw = node.data in _RAW_TEXT_ELEMENTS
        for child in node.children:
            if raw and child.type is NodeType.TEXT:
                parts.append(child.data)
            else:
                _render(child, parts)
        parts.append(f"</{node.data}>")


def render_html(node: Node) -> str:
    """Serialise a node and its descendants back to HTML."""
    parts: list[str] = []
    _render(node, parts)
    return "".join(parts)


def node_name(node: Node) -> str:
    """Return the tag name of an element, or a ``#kind`` name for other nodes."""
    if node.type is NodeType.ELEMENT:
        return node.data
    return "#" + node.type.value


def all_nodes(node: Node) -> Iterator[Node]:
    """Yield the node and all its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(current.children)))


_BLOCK_NAMES = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "caption", "center",
        "col", "colgroup", "dd", "details", "dialog", "dir", "div", "dl", "dt",
        "fieldset", "figcaption", "figure", "footer", "form", "frameset", "h1",
        "h2", "h3", "h4", "h5", "h6", "head", "header", "hgroup", "hr", "html",
        "legend", "li", "main", "menu", "nav", "noframes", "ol", "optgroup",
        "option", "p", "pre", "section", "summary", "table", "tbody", "td",
        "tfoot", "th", "thead", "title", "tr", "ul",
    }
)
_INLINE_NAMES = frozenset(
    {
        "a", "abbr", "acronym", "audio", "b", "bdi", "bdo", "big", "br",
        "button", "canvas", "cite", "code", "data", "datalist", "del", "dfn",
        "em", "embed", "font", "i", "iframe", "img", "input", "ins", "kbd",
        "label", "map", "mark", "meter", "object", "output", "picture",
        "progress", "q", "ruby", "s", "samp", "select", "slot", "small", "span",
        "strike", "strong", "sub", "sup", "svg", "template", "textarea", "time",
        "tt", "u", "var", "video", "wbr",
    }
)


def is_block_name(name: str) -> bool:
    """Whether the tag name denotes a block-level element."""
    return name in _BLOCK_NAMES


def is_inline_name(name: str) -> bool:
    """Whether the tag name denotes an inline element."""
    return name in _INLINE_NAMES