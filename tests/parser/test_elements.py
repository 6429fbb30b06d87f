"""
Tests for markup children and tag extraction.

Verifies:
1.  Elements of every kind get a name, start tag and (when present) end tag.
2.  Text, comments and attribute parts emit the expected token stream.
3.  Special ``this`` attributes are synthesized from the element expression.
"""

import pytest

from svelte_ast_bridge import ParseError, parse_foreign_ast
from svelte_ast_bridge.ast.nodes import SvelteName
from svelte_ast_bridge.parser.context import Context
from svelte_ast_bridge.parser.converts.element import convert_child, extract_element_tags
from tests.builders import element, expression_tag, ident, modern_root, span, text


def _convert(code, nodes):
  return parse_foreign_ast(code, modern_root(code, nodes=nodes)).ast


def test_html_element_with_mixed_attribute_and_comment() -> None:
  code = '<div class="a {b} c" hidden>hello <!-- note --></div>'
  quote = code.index('"')
  class_value = [
    text(code, "a ", quote + 1),
    expression_tag(code, "{b}", ident(code, "b", code.index("{b}"))),
    text(code, " c", quote + 1),
  ]
  class_start, class_end = span(code, 'class="a {b} c"')
  hidden_start, hidden_end = span(code, "hidden")
  comment_start, comment_end = span(code, "<!-- note -->")
  div = element(
    code,
    "div",
    code,
    attributes=[
      {"type": "Attribute", "name": "class", "start": class_start, "end": class_end, "value": class_value},
      {"type": "Attribute", "name": "hidden", "start": hidden_start, "end": hidden_end, "value": True},
    ],
    nodes=[
      text(code, "hello "),
      {"type": "Comment", "start": comment_start, "end": comment_end, "data": " note "},
    ],
  )
  program = _convert(code, [div])
  (div_node,) = program.body

  class_attr, hidden_attr = div_node.start_tag.attributes
  assert class_attr.key.name == "class"
  assert [v.type for v in class_attr.value] == ["SvelteLiteral", "SvelteMustacheTag", "SvelteLiteral"]
  assert class_attr.value[0].value == "a "
  assert class_attr.value[2].value == " c"
  assert hidden_attr.boolean is True
  assert hidden_attr.value == []

  assert [c.type for c in div_node.children] == ["SvelteText", "SvelteHTMLComment"]
  assert div_node.children[1].value == " note "
  assert div_node.end_tag.range == span(code, "</div>")
  assert div_node.start_tag.range == span(code, '<div class="a {b} c" hidden>')

  assert [t.type for t in program.tokens] == [
    "HTMLTagOpen",
    "HTMLIdentifier",
    "HTMLIdentifier",
    "Punctuator",
    "HTMLText",
    "Punctuator",
    "Identifier",
    "Punctuator",
    "HTMLText",
    "HTMLIdentifier",
    "HTMLTagClose",
    "HTMLText",
    "HTMLComment",
    "HTMLEndTagOpen",
    "HTMLIdentifier",
    "HTMLTagClose",
  ]


def test_void_element_has_no_end_tag() -> None:
  code = "<input disabled>"
  s, e = span(code, "disabled")
  program = _convert(code, [element(code, "input", code, attributes=[{"type": "Attribute", "name": "disabled", "start": s, "end": e, "value": True}])])
  (node,) = program.body
  assert node.end_tag is None
  assert node.start_tag.self_closing is False
  assert node.start_tag.range == (0, len(code))


def test_whitespace_text_emits_token() -> None:
  code = "<p> </p>"
  program = _convert(code, [element(code, "p", code, nodes=[text(code, " ")])])
  assert program.body[0].children[0].value == " "
  (ws,) = [t for t in program.tokens if t.type == "HTMLText"]
  assert ws.value == " "
  assert ws.range == (3, 4)


def test_nested_parents() -> None:
  code = "<ul><li>a</li></ul>"
  li = element(code, "li", "<li>a</li>", nodes=[text(code, "a", code.index("<li>"))])
  program = _convert(code, [element(code, "ul", code, nodes=[li])])
  ul_node = program.body[0]
  li_node = ul_node.children[0]
  assert li_node.parent is ul_node
  assert li_node.children[0].parent is li_node
  assert li_node.name.parent is li_node
  assert ul_node.start_tag.parent is ul_node


def test_component_names() -> None:
  code = "<Foo/><Foo.Bar />"
  foo = element(code, "Foo", "<Foo/>", node_type="Component")
  foo_bar = element(code, "Foo.Bar", "<Foo.Bar />", node_type="Component")
  program = _convert(code, [foo, foo_bar])
  plain, dotted = program.body

  assert plain.kind == "component"
  assert plain.name.type == "Identifier"
  assert plain.name.name == "Foo"

  assert dotted.name.type == "SvelteMemberExpressionName"
  assert dotted.name.range == span(code, "Foo.Bar")
  assert dotted.name.object.name == "Foo"
  assert dotted.name.property.name == "Bar"
  assert dotted.name.property.range == span(code, "Bar")
  assert dotted.name.object.parent is dotted.name


def test_svelte_element_this_directive() -> None:
  code = "<svelte:element this={tag}></svelte:element>"
  node = element(code, "svelte:element", code, node_type="SvelteElement")
  node["tag"] = ident(code, "tag", code.index("{tag}"))
  program = _convert(code, [node])
  (el,) = program.body

  assert el.kind == "special"
  assert el.name.name == "svelte:element"
  (directive,) = el.start_tag.attributes
  assert directive.type == "SvelteSpecialDirective"
  assert directive.kind == "this"
  assert directive.range == span(code, "this={tag}")
  assert directive.key.range == span(code, "this")
  assert directive.expression.name == "tag"
  assert el.end_tag.range == span(code, "</svelte:element>")
  assert [t.value for t in program.tokens][:8] == ["<", "svelte:element", "this", "=", "{", "tag", "}", ">"]


def test_svelte_component_this_directive_is_sorted_with_attributes() -> None:
  code = "<svelte:component this={Comp} open />"
  s, e = span(code, "open")
  node = element(
    code,
    "svelte:component",
    code,
    node_type="SvelteComponent",
    attributes=[{"type": "Attribute", "name": "open", "start": s, "end": e, "value": True}],
  )
  node["expression"] = ident(code, "Comp", code.index("{Comp}"))
  (el,) = _convert(code, [node]).body

  assert [a.type for a in el.start_tag.attributes] == ["SvelteSpecialDirective", "SvelteAttribute"]
  assert el.start_tag.self_closing is True


def test_unsupported_child_raises() -> None:
  code = "<x>"
  with pytest.raises(ParseError, match="Unsupported template node 'Mystery'"):
    convert_child({"type": "Mystery", "start": 0, "end": 3}, Context(code))


def test_unterminated_start_tag_raises() -> None:
  code = "<div"
  ctx = Context(code)

  def build(start, end):
    return SvelteName(name=code[start:end], **ctx.location(start, end))

  with pytest.raises(ParseError, match="Unterminated start tag"):
    extract_element_tags(0, len(code), [], ctx, build)


def test_extract_element_tags_returns_finished_record() -> None:
  code = "<b>x</b>"
  ctx = Context(code)

  def build(start, end):
    ctx.add_token("HTMLIdentifier", start, end)
    return SvelteName(name=code[start:end], **ctx.location(start, end))

  tags = extract_element_tags(0, len(code), [], ctx, build)
  assert tags.name.name == "b"
  assert tags.name.range == (1, 2)
  assert tags.start_tag.range == (0, 3)
  assert tags.end_tag.range == (4, 8)
  assert [t.type for t in ctx.tokens] == ["HTMLTagOpen", "HTMLIdentifier", "HTMLTagClose", "HTMLEndTagOpen", "HTMLIdentifier", "HTMLTagClose"]
