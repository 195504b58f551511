import io

from htmlmarkdown.context import Context, GlobalState
from htmlmarkdown.dom import Node, NodeType


class _FakeConverter:
    def __init__(self):
        self.rendered = []

    def render_nodes(self, ctx, w, nodes):
        self.rendered.append((ctx, w, list(nodes)))

    def get_tag_type(self, tag_name):
        return ("block", True) if tag_name == "div" else ("", False)

    def escape_content(self, content):
        return "<" + content + ">"

    def unescape_content(self, content):
        return content.strip("<>")


def test_state():
    state = GlobalState()
    assert state.get("key", 0) == 0

    state.set("key", 10)
    state.update("key", lambda i: i + 5)

    assert state.get("key", 0) == 15


def test_state_update_of_missing_key_receives_none():
    state = GlobalState()
    state.update("items", lambda old: (old or []) + ["x"])
    assert state.get("items") == ["x"]


def test_context_with_value():
    ctx = Context(_FakeConverter())

    ctx1 = ctx.with_value("keyA", "a1")
    assert ctx1.value("keyA") == "a1"

    ctx2 = ctx.with_value("keyA", "a2")
    assert ctx2.value("keyA") == "a2"
    assert ctx1.value("keyA") == "a1"

    ctx3 = ctx.with_value("keyB", "b1")
    assert ctx3.value("keyA") is None
    assert ctx3.value("keyB") == "b1"


def test_with_value_shares_state_and_domain():
    ctx = Context(_FakeConverter(), domain="example.com")
    derived = ctx.with_value("k", 1)

    derived.set_state("count", 3)
    derived.update_state("count", lambda n: n * 2)

    assert ctx.get_state("count") == 6
    assert derived.domain == "example.com"


def test_get_state_default():
    ctx = Context(_FakeConverter())
    assert ctx.get_state("missing", 42) == 42


def test_assemble_absolute_url_uses_domain():
    ctx = Context(_FakeConverter(), domain="test.com")
    assert ctx.assemble_absolute_url("a", "/page.html") == "http://test.com/page.html"


def test_custom_assemble_function():
    calls = []

    def assemble(tag_name, raw_url, domain):
        calls.append((tag_name, raw_url, domain))
        return "assembled"

    ctx = Context(_FakeConverter(), domain="d.example.com", assemble_absolute_url=assemble)

    assert ctx.assemble_absolute_url("img", "x.png") == "assembled"
    assert calls == [("img", "x.png", "d.example.com")]


def test_render_child_nodes_delegates_children():
    converter = _FakeConverter()
    ctx = Context(converter)
    parent = Node(NodeType.ELEMENT, "p")
    first = Node(NodeType.TEXT, "a")
    second = Node(NodeType.ELEMENT, "b")
    parent.append_child(first)
    parent.append_child(second)
    out = io.StringIO()

    ctx.render_child_nodes(out, parent)

    assert len(converter.rendered) == 1
    used_ctx, used_writer, nodes = converter.rendered[0]
    assert used_ctx is ctx
    assert used_writer is out
    assert nodes == [first, second]


def test_render_nodes_delegates_given_nodes():
    converter = _FakeConverter()
    ctx = Context(converter)
    node = Node(NodeType.TEXT, "x")
    out = io.StringIO()

    ctx.render_nodes(out, node)

    assert converter.rendered[0][2] == [node]


def test_tag_type_and_escaping_delegate_to_converter():
    ctx = Context(_FakeConverter())

    assert ctx.get_tag_type("div") == ("block", True)
    assert ctx.get_tag_type("custom") == ("", False)
    assert ctx.escape_content("a") == "<a>"
    assert ctx.unescape_content("<a>") == "a"