"""
Tests for attribute and directive conversion.
"""

import pytest

from svelte_ast_bridge import ParseError, parse_foreign_ast
from svelte_ast_bridge.parser.context import Context
from svelte_ast_bridge.parser.converts.attr import convert_attribute
from tests.builders import element, expression_tag, ident, modern_root, span, text


def _attributes(code, attributes):
  """Converts ``<tag ...attributes>`` (the whole code) and returns (attributes, tokens)."""
  name = code[1 : code.index(" ")]
  program = parse_foreign_ast(code, modern_root(code, nodes=[element(code, name, code, attributes=attributes)])).ast
  return program.body[0].start_tag.attributes, program.tokens


def _directive(code, node_type, source, name, expression=None, **extra):
  s, e = span(code, source)
  node = {"type": node_type, "name": name, "start": s, "end": e, "modifiers": [], "expression": expression}
  node.update(extra)
  return node


def test_bind_shorthand() -> None:
  code = "<input bind:value>"
  value_start = code.index("value")
  bind = _directive(code, "BindDirective", "bind:value", "value", expression=ident(code, "value", value_start))
  (attr,), tokens = _attributes(code, [bind])

  assert attr.type == "SvelteDirective"
  assert attr.kind == "Binding"
  assert attr.shorthand is True
  assert attr.key.name.type == "SvelteName"
  assert attr.key.name.name == "value"
  assert attr.key.range == span(code, "bind:value")
  assert attr.expression.name == "value"
  assert [t.value for t in tokens] == ["<", "input", "bind:value", ">"]


def test_event_handler_with_modifiers() -> None:
  code = "<button on:click|once|preventDefault={handle}></button>"
  handler = _directive(
    code,
    "OnDirective",
    "on:click|once|preventDefault={handle}",
    "click",
    expression=ident(code, "handle", code.index("{handle}")),
    modifiers=["once", "preventDefault"],
  )
  (attr,), tokens = _attributes(code, [handler])

  assert attr.kind == "EventHandler"
  assert attr.shorthand is False
  assert attr.key.name.name == "click"
  assert attr.key.name.range == span(code, "click")
  assert attr.key.modifiers == ["once", "preventDefault"]
  assert attr.expression.name == "handle"
  assert [t.value for t in tokens][2:7] == ["on:click|once|preventDefault", "=", "{", "handle", "}"]


def test_action_and_transition_kinds() -> None:
  code = "<div use:tooltip transition:fade in:fly={params}></div>"
  attrs = [
    _directive(code, "UseDirective", "use:tooltip", "tooltip"),
    _directive(code, "TransitionDirective", "transition:fade", "fade", intro=True, outro=True),
    _directive(code, "TransitionDirective", "in:fly={params}", "fly", expression=ident(code, "params"), intro=True, outro=False),
  ]
  (use, transition, intro), _ = _attributes(code, attrs)

  assert use.kind == "Action"
  assert use.key.name.type == "Identifier"
  assert use.key.name.name == "tooltip"
  assert use.expression is None

  assert transition.kind == "Transition"
  assert (transition.intro, transition.outro) == (True, True)

  assert intro.kind == "Transition"
  assert (intro.intro, intro.outro) == (True, False)
  assert intro.expression.name == "params"


def test_class_and_let_directives_legacy_types() -> None:
  code = "<div class:active={on} let:item></div>"
  attrs = [
    _directive(code, "Class", "class:active={on}", "active", expression=ident(code, "on", code.index("{on}"))),
    _directive(code, "Let", "let:item", "item"),
  ]
  (cls, let), _ = _attributes(code, attrs)

  assert cls.kind == "Class"
  assert cls.key.name.type == "SvelteName"
  assert let.kind == "Let"
  assert let.shorthand is True
  assert let.expression is None


def test_style_directives() -> None:
  code = '<div style:color={c} style:width style:height="10px"></div>'
  color_s, color_e = span(code, "style:color={c}")
  width_s, width_e = span(code, "style:width")
  height_s, height_e = span(code, 'style:height="10px"')
  attrs = [
    {
      "type": "StyleDirective",
      "name": "color",
      "start": color_s,
      "end": color_e,
      "modifiers": [],
      "value": expression_tag(code, "{c}", ident(code, "c", code.index("{c}"))),
    },
    {"type": "StyleDirective", "name": "width", "start": width_s, "end": width_e, "modifiers": [], "value": True},
    {"type": "StyleDirective", "name": "height", "start": height_s, "end": height_e, "modifiers": [], "value": [text(code, "10px")]},
  ]
  (color, width, height), tokens = _attributes(code, attrs)

  assert color.type == "SvelteStyleDirective"
  assert color.key.name.name == "color"
  assert color.value[0].type == "SvelteMustacheTag"
  assert color.value[0].expression.name == "c"
  assert width.shorthand is True
  assert width.value == []
  assert height.value[0].type == "SvelteLiteral"
  assert height.value[0].value == "10px"
  assert "10px" in [t.value for t in tokens]


def test_spread_and_shorthand_attributes() -> None:
  code = "<Comp {...rest} {name}/>"
  spread_s, spread_e = span(code, "{...rest}")
  name_s, name_e = span(code, "{name}")
  attrs = [
    {"type": "SpreadAttribute", "start": spread_s, "end": spread_e, "expression": ident(code, "rest")},
    {
      "type": "Attribute",
      "name": "name",
      "start": name_s,
      "end": name_e,
      "value": expression_tag(code, "{name}", ident(code, "name", name_s)),
    },
  ]
  program = parse_foreign_ast(code, modern_root(code, nodes=[element(code, "Comp", code, attributes=attrs, node_type="Component")])).ast
  spread, shorthand = program.body[0].start_tag.attributes

  assert spread.type == "SvelteSpreadAttribute"
  assert spread.argument.name == "rest"
  assert shorthand.type == "SvelteShorthandAttribute"
  assert shorthand.key is not shorthand.value
  assert shorthand.key.range == shorthand.value.range == span(code, "name", name_s)
  assert [t.value for t in program.tokens] == ["<", "Comp", "{", "...", "rest", "}", "{", "name", "}", "/>"]


def test_unknown_attribute_type_raises() -> None:
  with pytest.raises(ParseError, match="Unsupported attribute 'Weird'"):
    convert_attribute({"type": "Weird", "start": 0, "end": 1}, Context("<a>"))
