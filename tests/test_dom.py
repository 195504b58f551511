import pytest

from htmlmarkdown.dom import (
    Node,
    NodeType,
    all_nodes,
    is_block_name,
    is_inline_name,
    node_name,
    parse_html,
    render_html,
)


def _find(doc, name):
    return next(n for n in all_nodes(doc) if n.type is NodeType.ELEMENT and n.data == name)


def test_round_trip_body():
    doc = parse_html('<p class="x">a &amp; b<br/>c</p>')
    assert render_html(_find(doc, "body")) == '<body><p class="x">a &amp; b<br/>c</p></body>'


def test_doctype_is_parsed_and_rendered():
    doc = parse_html("<!DOCTYPE html><html><head></head><body></body></html>")
    assert doc.first_child.type is NodeType.DOCTYPE
    assert render_html(doc) == "<!DOCTYPE html><html><head></head><body></body></html>"


def test_attribute_quotes_are_escaped():
    doc = parse_html("<a title='say \"hi\"'>x</a>")
    assert render_html(_find(doc, "a")) == '<a title="say &#34;hi&#34;">x</a>'


def test_pre_leading_newline_round_trip():
    doc = parse_html("<pre>\n\nx</pre>")
    assert render_html(_find(doc, "pre")) == "<pre>\n\nx</pre>"


def test_script_content_is_raw():
    doc = parse_html("<script>if (a < b) {}</script>")
    assert render_html(_find(doc, "script")) == "<script>if (a < b) {}</script>"


def test_comment_round_trip():
    doc = parse_html("<p>before<!-- my comment -->after</p>")
    assert render_html(_find(doc, "p")) == "<p>before<!-- my comment -->after</p>"


def test_node_names():
    doc = parse_html("<p>text</p>")
    paragraph = _find(doc, "p")
    assert node_name(paragraph) == "p"
    assert node_name(paragraph.first_child) == "#text"
    assert node_name(doc) == "#document"


def test_all_nodes_order():
    doc = parse_html("<div><p>a</p><span>b</span></div>")
    names = [node_name(n) for n in all_nodes(_find(doc, "body"))]
    assert names == ["body", "div", "p", "#text", "span", "#text"]


def test_append_and_remove_child():
    parent = Node(NodeType.ELEMENT, "span")
    first = Node(NodeType.TEXT, "a")
    second = Node(NodeType.TEXT, "b")
    parent.append_child(first)
    parent.append_child(second)
    assert parent.first_child is first
    assert first.next_sibling is second
    assert second.previous_sibling is first
    parent.remove_child(first)
    assert first.parent is None
    assert parent.children == [second]
    assert render_html(parent) == "<span>b</span>"


def test_append_child_with_parent_raises():
    parent = Node(NodeType.ELEMENT, "div")
    child = Node(NodeType.TEXT, "x")
    parent.append_child(child)
    with pytest.raises(ValueError):
        Node(NodeType.ELEMENT, "p").append_child(child)


def test_remove_foreign_child_raises():
    with pytest.raises(ValueError):
        Node(NodeType.ELEMENT, "div").remove_child(Node(NodeType.TEXT, "x"))


def test_get_attribute():
    node = Node(NodeType.ELEMENT, "star-rating", {"count": "5"})
    assert node.get_attribute("count", "0") == "5"
    assert node.get_attribute("missing", "0") == "0"


def test_block_and_inline_names():
    assert is_block_name("div")
    assert is_block_name("p")
    assert not is_block_name("span")
    assert is_inline_name("strong")
    assert not is_inline_name("div")