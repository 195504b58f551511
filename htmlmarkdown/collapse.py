"""Collapse insignificant whitespace in an HTML tree."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from htmlmarkdown.dom import Node, NodeType, node_name

_BLOCK_ELEMENTS = frozenset(
    {
        "address", "article", "aside", "audio", "blockquote", "body", "canvas",
        "center", "dd", "dir", "div", "dl", "dt", "fieldset", "figcaption",
        "figure", "footer", "form", "frameset", "h1", "h2", "h3", "h4", "h5",
        "h6", "header", "hgroup", "hr", "html", "isindex", "li", "main", "menu",
        "nav", "noframes", "noscript", "ol", "output", "p", "pre", "section",
        "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
    }
)

_VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "command", "embed", "hr", "img", "input",
        "keygen", "link", "meta", "param", "track", "wbr",
    }
)

_WHITESPACE_RUN = re.compile(r"[ \r\n\t]+")


def default_is_block_node(node: Node) -> bool:
    return node_name(node) in _BLOCK_ELEMENTS


def default_is_void_node(node: Node) -> bool:
    return node_name(node) in _VOID_ELEMENTS


def default_is_preformatted_node(node: Node) -> bool:
    return node_name(node) in ("pre", "code")


def replace_any_whitespace_with_space(source: str) -> str:
    """Replace every run of spaces, tabs, CRs and LFs with a single space."""
    return _WHITESPACE_RUN.sub(" ", source)


NodePredicate = Callable[[Node], bool]


@dataclass
class DomFuncs:
    """Predicates that classify nodes; any left as None uses the default."""

    is_block_node: NodePredicate | None = None
    is_void_node: NodePredicate | None = None
    is_preformatted_node: NodePredicate | None = None

    def __post_init__(self) -> None:
        if self.is_block_node is None:
            self.is_block_node = default_is_block_node
        if self.is_void_node is None:
            self.is_void_node = default_is_void_node
        if self.is_preformatted_node is None:
            self.is_preformatted_node = default_is_preformatted_node


def _next_node(prev: Node | None, current: Node, funcs: DomFuncs) -> Node | None:
    if (prev is not None and prev.parent is current) or funcs.is_preformatted_node(current):
        return current.next_sibling or current.parent
    return current.first_child or current.next_sibling or current.parent


def _remove_node(node: Node) -> Node | None:
    following = node.next_sibling or node.parent
    node.parent.remove_child(node)
    return following


def collapse(element: Node, dom_funcs: DomFuncs | None = None) -> None:
    """Collapse whitespace in the text nodes below ``element``, in place."""
    funcs = dom_funcs if dom_funcs is not None else DomFuncs()

    if element.first_child is None or funcs.is_preformatted_node(element):
        return

    prev_text: Node | None = None
    keep_leading_ws = False
    prev: Node | None = None
    node = _next_node(prev, element, funcs)

    while node is not element:
        if node.type is NodeType.TEXT:
            text = replace_any_whitespace_with_space(node.data)
            if (
                (prev_text is None or prev_text.data.endswith(" "))
                and not keep_leading_ws
                and text.startswith(" ")
            ):
                text = text[1:]

            if not text:
                node = _remove_node(node)
                continue

            node.data = text
            prev_text = node
        elif node.type is NodeType.ELEMENT:
            name = node_name(node)
            if funcs.is_block_node(node) or name == "br":
                if prev_text is not None:
                    prev_text.data = prev_text.data.removesuffix(" ")
                prev_text = None
                keep_leading_ws = False
            elif funcs.is_void_node(node) or funcs.is_preformatted_node(node) or name == "code":
                # Keep the space around inline void and preformatted elements.
                prev_text = None
                keep_leading_ws = True
            elif prev_text is not None:
                keep_leading_ws = False
        elif node.type is NodeType.COMMENT:
            pass
        else:
            node = _remove_node(node)
            continue

        following = _next_node(prev, node, funcs)
        prev = node
        node = following

    if prev_text is not None:
        prev_text.data = prev_text.data.removesuffix(" ")
        if not prev_text.data:
            _remove_node(prev_text)