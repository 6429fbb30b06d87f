"""
Tests for the Root Converter and the conversion pipeline.

Verifies:
1.  Program range always spans the whole source.
2.  Body order: markup, then instance script, module script and style.
3.  The options pseudo-node is merged among the markup children by position.
4.  Style elements get a text child only when they have content.
5.  Scopes are re-keyed to the Program, except the global scope.
"""

import pytest

from svelte_ast_bridge import ParseError, ParserConfig, parse_foreign_ast
from svelte_ast_bridge.parser.converts.root import merge_options
from tests.builders import element, expression_tag, ident, legacy_root, let_declaration, modern_root, script, span, style

EXAMPLE = "<script>let x=1;</script><div>{x}</div>"


def _example_parts(code: str):
  x_tag = expression_tag(code, "{x}", ident(code, "x", code.index("{x}")))
  div = element(code, "div", "<div>{x}</div>", nodes=[x_tag])
  instance = script(code, "<script>let x=1;</script>", [let_declaration(code, "let x=1;", "x", 1)])
  return div, instance


def test_example_modern_body_and_range() -> None:
  """
  Scenario: Instance script followed by markup.
  Expectation: Markup element first, script element second, range covers all.
  """
  div, instance = _example_parts(EXAMPLE)
  result = parse_foreign_ast(EXAMPLE, modern_root(EXAMPLE, nodes=[div], instance=instance))
  program = result.ast

  assert program.range == (0, len(EXAMPLE))
  assert [n.type for n in program.body] == ["SvelteElement", "SvelteScriptElement"]
  assert result.schema_version == "modern"

  div_node, script_node = program.body
  assert div_node.name.name == "div"
  assert div_node.children[0].type == "SvelteMustacheTag"
  assert div_node.children[0].expression.name == "x"
  assert script_node.kind == "instance"
  assert script_node.body[0].type == "VariableDeclaration"
  assert script_node.body[0].parent is script_node
  assert div_node.parent is program


def test_example_token_stream() -> None:
  div, instance = _example_parts(EXAMPLE)
  program = parse_foreign_ast(EXAMPLE, modern_root(EXAMPLE, nodes=[div], instance=instance)).ast

  values = [t.value for t in program.tokens]
  assert values == ["<", "script", ">", "let", "x", "=", "1", ";", "</", "script", ">"] + [
    "<",
    "div",
    ">",
    "{",
    "x",
    "}",
    "</",
    "div",
    ">",
  ]
  starts = [t.range[0] for t in program.tokens]
  assert starts == sorted(starts)
  assert program.tokens[1].type == "HTMLIdentifier"
  assert program.tokens[3].type == "Keyword"
  assert program.tokens[-1].type == "HTMLTagClose"


def test_example_legacy_matches_modern() -> None:
  """Both schema versions of the same template convert to the same shape."""
  code = EXAMPLE
  x_tag = {"type": "MustacheTag", "start": code.index("{x}"), "end": code.index("{x}") + 3}
  x_tag["expression"] = ident(code, "x", x_tag["start"])
  s, e = span(code, "<div>{x}</div>")
  div = {"type": "Element", "name": "div", "start": s, "end": e, "attributes": [], "children": [x_tag]}
  _, instance = _example_parts(code)

  result = parse_foreign_ast(code, legacy_root(code, children=[div], instance=instance))

  assert result.schema_version == "legacy"
  assert [n.type for n in result.ast.body] == ["SvelteElement", "SvelteScriptElement"]
  assert result.ast.body[0].children[0].expression.name == "x"


def test_style_only_gets_text_child() -> None:
  code = "<style>.a{color:red}</style>"
  program = parse_foreign_ast(code, modern_root(code, css=style(code, code))).ast

  assert program.range == (0, len(code))
  (style_node,) = program.body
  assert style_node.type == "SvelteStyleElement"
  assert style_node.name.name == "style"
  (text_node,) = style_node.children
  assert text_node.value == ".a{color:red}"
  assert text_node.range == span(code, ".a{color:red}")
  assert [t.value for t in program.tokens] == ["<", "style", ">", ".a{color:red}", "</", "style", ">"]
  assert program.tokens[3].type == "HTMLText"


def test_empty_style_has_no_children() -> None:
  code = "<style></style>"
  program = parse_foreign_ast(code, modern_root(code, css=style(code, code))).ast
  assert program.body[0].children == []


def test_self_closing_markup_only() -> None:
  code = "<div/>"
  program = parse_foreign_ast(code, modern_root(code, nodes=[element(code, "div", code)])).ast

  assert program.range == (0, 6)
  (div,) = program.body
  assert div.start_tag.self_closing is True
  assert div.end_tag is None
  assert [t.type for t in program.tokens] == ["HTMLTagOpen", "HTMLIdentifier", "HTMLSelfClosingTagClose"]


def test_empty_source_gives_empty_program() -> None:
  result = parse_foreign_ast("", modern_root(""))
  assert result.ast.body == []
  assert result.ast.range == (0, 0)


def test_no_fragment_skips_options_and_markup() -> None:
  code = "<svelte:options />"
  root = modern_root(code, options={"start": 0, "end": len(code), "attributes": []})
  root["fragment"] = None
  program = parse_foreign_ast(code, root).ast
  assert program.body == []
  assert program.tokens == []


def test_style_tag_text_inside_markup_string() -> None:
  """
  Scenario: A mustache string literal contains '<style>' before the real style block.
  Expectation: Only the block at the foreign node's offset is read.
  """
  code = '<p>{"<style>"}</p><style>.a{}</style>'
  lit_s, lit_e = span(code, '"<style>"')
  literal = {"type": "Literal", "value": "<style>", "raw": '"<style>"', "start": lit_s, "end": lit_e}
  p = element(code, "p", '<p>{"<style>"}</p>', nodes=[expression_tag(code, '{"<style>"}', literal)])
  program = parse_foreign_ast(code, modern_root(code, nodes=[p], css=style(code, "<style>.a{}</style>"))).ast

  assert [n.type for n in program.body] == ["SvelteElement", "SvelteStyleElement"]
  assert program.body[1].range == span(code, "<style>.a{}</style>")
  assert program.body[1].children[0].value == ".a{}"


def test_component_named_like_a_block_tag() -> None:
  code = "<Style /><style>.a{}</style>"
  component = element(code, "Style", "<Style />", node_type="Component")
  program = parse_foreign_ast(code, modern_root(code, nodes=[component], css=style(code, "<style>.a{}</style>"))).ast

  component_node, style_node = program.body
  assert component_node.name.name == "Style"
  assert style_node.name.name == "style"
  assert style_node.children[0].value == ".a{}"


def test_script_attribute_value_containing_angle_brackets() -> None:
  code = '<script lang="ts" generics="T extends A<B>">let x = 1;</script>'
  instance = {
    "type": "Script",
    "start": 0,
    "end": len(code),
    "context": "default",
    "content": {
      "type": "Program",
      "start": code.index("let"),
      "end": code.index("</script>"),
      "body": [let_declaration(code, "let x = 1;", "x", 1)],
      "sourceType": "module",
    },
  }
  program = parse_foreign_ast(code, modern_root(code, instance=instance)).ast

  (script_node,) = program.body
  _, generics = script_node.start_tag.attributes
  assert generics.key.name == "generics"
  assert generics.value[0].value == "T extends A<B>"
  assert script_node.start_tag.range == (0, code.index("let"))
  assert script_node.body[0].declarations[0].id.name == "x"
  assert [t.value for t in program.tokens][-8:] == ["let", "x", "=", "1", ";", "</", "script", ">"]


def test_instance_before_module_in_body() -> None:
  """
  Scenario: Module script appears first in the source.
  Expectation: Body still lists the instance element before the module element;
  the virtual script program lists module statements first.
  """
  code = '<script context="module">const a = 1;</script><script>let b = 2;</script>'
  module_src = '<script context="module">const a = 1;</script>'
  instance_src = "<script>let b = 2;</script>"
  root = modern_root(
    code,
    module=script(code, module_src, [let_declaration(code, "const a = 1;", "a", 1, kind="const")], context="module"),
    instance=script(code, instance_src, [let_declaration(code, "let b = 2;", "b", 2)]),
  )
  result = parse_foreign_ast(code, root)
  instance_el, module_el = result.ast.body

  assert (instance_el.kind, module_el.kind) == ("instance", "module")
  (attr,) = module_el.start_tag.attributes
  assert attr.key.name == "context"
  assert attr.value[0].value == "module"

  module_scope = result.scope_manager.scopes[1]
  assert [v.name for v in module_scope.variables] == ["a", "b"]


def test_options_inserted_before_child_starting_at_its_end() -> None:
  code = "<svelte:options immutable /><div></div>"
  opt_start, opt_end = span(code, "<svelte:options immutable />")
  attr_start, attr_end = span(code, "immutable")
  options = {
    "start": opt_start,
    "end": opt_end,
    "attributes": [{"type": "Attribute", "name": "immutable", "start": attr_start, "end": attr_end, "value": True}],
  }
  root = modern_root(code, nodes=[element(code, "div", "<div></div>")], options=options)
  program = parse_foreign_ast(code, root).ast

  options_el, div = program.body
  assert options_el.kind == "special"
  assert options_el.name.name == "svelte:options"
  assert options_el.start_tag.self_closing is True
  assert options_el.start_tag.attributes[0].boolean is True
  assert div.name.name == "div"


def test_options_appended_when_no_later_child() -> None:
  code = "<div></div><svelte:options />"
  s, e = span(code, "<svelte:options />")
  root = modern_root(code, nodes=[element(code, "div", "<div></div>")], options={"start": s, "end": e, "attributes": []})
  program = parse_foreign_ast(code, root).ast
  assert [n.name.name for n in program.body] == ["div", "svelte:options"]


def test_merge_options_positions() -> None:
  children = [{"start": 0, "end": 5}, {"start": 10, "end": 12}]

  tie = {"start": 5, "end": 10}
  assert merge_options(children, tie) == [children[0], tie, children[1]]

  overlapping = {"start": 5, "end": 11}
  assert merge_options(children, overlapping) == children + [overlapping]

  assert merge_options([], tie) == [tie]


def test_scopes_rekeyed_and_global_reverted() -> None:
  """
  Scenario: Module source type opens a global and a module scope on the script program.
  Expectation: Module scope points at the unified Program; the global scope is
  reverted to the program analysis ran on.
  """
  div, instance = _example_parts(EXAMPLE)
  result = parse_foreign_ast(EXAMPLE, modern_root(EXAMPLE, nodes=[div], instance=instance))
  manager = result.scope_manager

  global_scope, module_scope = manager.scopes
  assert module_scope.block is result.ast
  assert global_scope.block is not result.ast
  assert global_scope.block.type == "Program"
  assert manager.acquire(result.ast, inner=True) is module_scope
  assert [v.name for v in module_scope.variables] == ["x"]


def test_script_source_type_keeps_single_global_scope() -> None:
  div, instance = _example_parts(EXAMPLE)
  config = ParserConfig(source_type="script")
  result = parse_foreign_ast(EXAMPLE, modern_root(EXAMPLE, nodes=[div], instance=instance), config)

  (global_scope,) = result.scope_manager.scopes
  assert global_scope.block is not result.ast
  assert result.scope_manager.acquire(result.ast) is global_scope
  assert result.ast.source_type == "script"


def test_scope_analysis_disabled() -> None:
  div, instance = _example_parts(EXAMPLE)
  result = parse_foreign_ast(EXAMPLE, modern_root(EXAMPLE, nodes=[div], instance=instance), ParserConfig(analyze_scope=False))
  assert result.scope_manager is None
  assert result.ast.body[1].body[0].type == "VariableDeclaration"


def test_unknown_schema_raises() -> None:
  with pytest.raises(ParseError, match="Unrecognized foreign AST"):
    parse_foreign_ast("<div></div>", {"type": "Something"})


def test_schema_mismatch_raises() -> None:
  with pytest.raises(ParseError, match="schema_version is legacy"):
    parse_foreign_ast("", modern_root(""), ParserConfig(schema_version="legacy"))


def test_missing_script_block_raises() -> None:
  """An instance region with no matching <script> in the source fails fast."""
  code = "<div></div>"
  instance = {"type": "Script", "start": 0, "end": len(code), "context": "default", "content": {"type": "Program", "body": []}}
  with pytest.raises(ParseError, match="No <script> or <style> block"):
    parse_foreign_ast(code, modern_root(code, instance=instance))


def test_to_dict_is_json_shaped() -> None:
  div, instance = _example_parts(EXAMPLE)
  data = parse_foreign_ast(EXAMPLE, modern_root(EXAMPLE, nodes=[div], instance=instance)).to_dict()

  assert data["type"] == "Program"
  assert data["range"] == [0, len(EXAMPLE)]
  assert data["body"][0]["startTag"]["type"] == "SvelteStartTag"
  assert data["tokens"][0] == {
    "type": "HTMLTagOpen",
    "value": "<",
    "range": [0, 1],
    "loc": {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 1}},
  }
  assert "parent" not in data["body"][0]
