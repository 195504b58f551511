# htmlmarkdown

The machinery for turning HTML into Markdown. The package supplies a
prioritised handler pipeline. You register the handlers that decide how each
element is rendered.

Modules:

- `htmlmarkdown.dom`: parses HTML (via html5lib) into a small `Node` tree.
  Also provides `render_html`, `node_name`, `all_nodes`, `is_block_name` and
  `is_inline_name`.
- `htmlmarkdown.collapse`: `collapse(element, dom_funcs)` collapses
  whitespace in place, the way a browser would.
  `replace_any_whitespace_with_space` is the string helper behind it.
- `htmlmarkdown.url`: `default_assemble_absolute_url`,
  `parse_and_encode_query` and `parse_base_domain`.
- `htmlmarkdown.prioritized`: `Prioritized`, `sort_prioritized` and the
  constants `PRIORITY_EARLY` (100), `PRIORITY_STANDARD` (500) and
  `PRIORITY_LATE` (1000).
- `htmlmarkdown.context`: `Context`, which is passed to every handler, and
  `GlobalState`, the per-conversion key/value store.
- `htmlmarkdown.converter`: `Converter`, `Register`, `Plugin`, `TagType`,
  `RenderStatus`, `EscapeMode` and the `ConverterError` exceptions.
- `htmlmarkdown.cli_errors`: helpers for reporting errors on a terminal:
  - the printers `ColoredBox`, `Paragraph` and `CodeBlock`
  - `CLIError`, `print_error` and `print_warning`
  - flag suggestions: `format_flag`, `levenshtein`, `suggest_flag` and
    `unknown_flag_error`

## Installation

```
pip install htmlmarkdown
```

## A converter with a custom renderer

```python
from htmlmarkdown.converter import Converter, RenderStatus, TagType
from htmlmarkdown.prioritized import PRIORITY_STANDARD


def render_star_rating(ctx, w, node):
    count = int(node.get_attribute("count", "0") or 0)
    w.write("⭐" * count)
    return RenderStatus.SUCCESS


conv = Converter()
conv.register.renderer_for(
    "star-rating", TagType.INLINE, render_star_rating, PRIORITY_STANDARD
)
result = conv.convert_string('<p>Rated <star-rating count="3"></star-rating></p>')
print(result.strip())  # Rated ⭐⭐⭐
```

Handlers run in priority order, lowest number first. The pipeline for each
conversion is:

1. Pre-renderers (`register.pre_renderer`) receive the parsed document.
2. Each node is offered to the renderers (`register.renderer`,
   `register.renderer_for`) until one returns `RenderStatus.SUCCESS`.
   - Text nodes are not offered to renderers. They pass through the text
     transformers (`register.text_transformer`) and are written as they are.
   - If no renderer takes an element, its children are rendered instead. Two
     newlines are written before and after it when its tag type is
     `TagType.BLOCK`.
3. Post-renderers (`register.post_renderer`) transform the resulting string.

How tag types are looked up:

- `register.tag_type` sets the tag type for a name; the registration with the
  highest priority wins.
- Without a registration, the type comes from `is_block_name` and
  `is_inline_name`.

Conversion errors:

- If no render handler is registered, `convert_string`, `convert_file` and
  `convert_node` raise `NoRenderHandlersError`.
- If a plugin named `"commonmark"` is registered without one named `"base"`,
  they raise `BasePluginMissingError`.
- Both are subclasses of `ConverterError`.

## Plugins

A plugin subclasses `Plugin`. It sets a non-empty `name` and registers its
handlers in `init(conv)`. Plugins are passed as `Converter(plugins=[...])`.

If a plugin has no name, or its `init` raises, the error is kept. It is raised
by the first conversion.

## Context and state

Every handler receives a `Context`. It provides:

- `domain`, the base domain of the conversion
- `assemble_absolute_url(tag_name, raw_url)`
- `render_nodes(w, *nodes)` and `render_child_nodes(w, node)`
- `escape_content` and `unescape_content`
- `get_tag_type`

Values passed as `context={...}` to a conversion can be read with
`ctx.value(key)`. `ctx.with_value(key, val)` returns a derived context.

`get_state`, `set_state` and `update_state` share data between handlers for
the length of one conversion.

## Escaping

To escape characters with a Markdown meaning:

- Register the characters with `register.escaped_char(...)`.
- `ctx.escape_content(text)` puts a marker before each of those characters.
- `ctx.unescape_content(text)` asks the unescapers, registered with
  `register.unescaper(...)`, about each marker. A marker becomes a backslash
  where an unescaper returns something other than `-1`. All other markers are
  dropped.

The converter does not call these itself. Wire them in as handlers:

```python
from htmlmarkdown.converter import Converter, RenderStatus
from htmlmarkdown.prioritized import PRIORITY_STANDARD

conv = Converter()
conv.register.renderer(lambda ctx, w, node: RenderStatus.TRY_NEXT, PRIORITY_STANDARD)
conv.register.escaped_char("|")
conv.register.unescaper(lambda chars, i: 1 if chars[i] == "|" else -1, PRIORITY_STANDARD)
conv.register.text_transformer(lambda ctx, text: ctx.escape_content(text), PRIORITY_STANDARD)
conv.register.post_renderer(lambda ctx, text: ctx.unescape_content(text), PRIORITY_STANDARD)

print(conv.convert_string("a|b").strip())  # a\|b
```

With `Converter(escape_mode=EscapeMode.DISABLED)` both calls return their
input unchanged.

## Links

```python
from htmlmarkdown.url import default_assemble_absolute_url

default_assemble_absolute_url("a", "/page.html?key=val#hash", "test.com")
# 'http://test.com/page.html?key=val#hash'
```

The query keeps its parameter order, and spaces are encoded as `%20`.
Spaces, brackets, parentheses and angle brackets are percent-encoded, so the
result can be placed in a Markdown link.

Pass `domain=` to a conversion. Handlers can then resolve relative links
against it with `ctx.assemble_absolute_url`.

## Whitespace

```python
from htmlmarkdown.collapse import collapse
from htmlmarkdown.dom import parse_html, render_html

doc = parse_html("<p>Foo   bar</p>  <p>Words</p>")
collapse(doc, None)
print(render_html(doc))
# <html><head></head><body><p>Foo bar</p><p>Words</p></body></html>
```

`DomFuncs` replaces the predicates that decide which nodes are block, void or
preformatted.

## What this package does not do

- It ships no rules for standard elements. Headings, emphasis, links, lists and
  the like are not rendered as Markdown until you register renderers for them.
  Unhandled elements contribute only their text.
- It has no command-line program. `htmlmarkdown.cli_errors` only formats error
  messages and flag suggestions.