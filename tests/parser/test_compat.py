"""
Tests for the schema compatibility accessors.
"""

import pytest

from svelte_ast_bridge.parser import compat


@pytest.mark.parametrize(
  "root, expected",
  [
    ({"type": "Root", "fragment": {}}, compat.MODERN),
    ({"fragment": {"nodes": []}}, compat.MODERN),
    ({"html": {"children": []}}, compat.LEGACY),
    ({"type": "Program"}, None),
  ],
)
def test_detect_schema(root, expected) -> None:
  assert compat.detect_schema(root) == expected


def test_children_of_either_fragment() -> None:
  assert compat.get_children({"nodes": [1]}) == [1]
  assert compat.get_children({"children": [2]}) == [2]
  assert compat.get_children(None) == []


def test_options_normalized_as_special_element() -> None:
  options = compat.get_options_from_root({"options": {"start": 3, "end": 9, "attributes": [{"type": "Attribute"}]}})
  assert options["type"] == "SvelteOptions"
  assert options["name"] == "svelte:options"
  assert (options["start"], options["end"]) == (3, 9)
  assert compat.get_element_children(options) == []

  assert compat.get_options_from_root({"options": None}) is None
  assert compat.get_options_from_root({"options": {"start": None, "runes": True}}) is None


@pytest.mark.parametrize(
  "node, kind",
  [
    ({"type": "RegularElement", "name": "div"}, "html"),
    ({"type": "Element", "name": "div"}, "html"),
    ({"type": "Component", "name": "Foo"}, "component"),
    ({"type": "InlineComponent", "name": "svelte:self"}, "special"),
    ({"type": "SvelteWindow", "name": "svelte:window"}, "special"),
    ({"type": "Head", "name": "svelte:head"}, "special"),
  ],
)
def test_element_kind(node, kind) -> None:
  assert compat.get_element_kind(node) == kind


def test_special_this_expression() -> None:
  tag = {"type": "Identifier", "name": "t"}
  assert compat.get_special_this_expression({"name": "svelte:element", "tag": tag}) is tag
  assert compat.get_special_this_expression({"name": "svelte:element", "tag": "div"}) is None
  assert compat.get_special_this_expression({"name": "svelte:component", "expression": tag}) is tag
  assert compat.get_special_this_expression({"name": "div"}) is None


def test_if_accessors_for_both_schemas() -> None:
  modern = {"test": "t", "consequent": {"nodes": ["a"]}, "alternate": None}
  assert compat.get_test_from_if(modern) == "t"
  assert compat.get_consequent_from_if(modern) == ["a"]
  assert compat.get_alternate_from_if(modern) is None

  legacy = {"expression": "e", "children": ["a"], "else": {"children": ["b"]}}
  assert compat.get_test_from_if(legacy) == "e"
  assert compat.get_alternate_from_if(legacy) == ["b"]


def test_each_accessors_for_both_schemas() -> None:
  assert compat.get_fallback_from_each({"body": {"nodes": []}, "fallback": {"nodes": ["f"]}}) == ["f"]
  assert compat.get_fallback_from_each({"body": {"nodes": []}}) is None
  assert compat.get_body_from_each({"children": ["c"], "else": None}) == ["c"]
  assert compat.get_fallback_from_each({"children": [], "else": {"children": ["e"]}}) == ["e"]


def test_await_clause() -> None:
  node = {
    "pending": {"type": "Fragment", "nodes": ["p"]},
    "then": {"type": "ThenBlock", "skip": True, "children": []},
    "catch": {"type": "CatchBlock", "skip": False, "children": ["c"]},
  }
  assert compat.get_await_clause(node, "pending") == ["p"]
  assert compat.get_await_clause(node, "then") is None
  assert compat.get_await_clause(node, "catch") == ["c"]
  assert compat.get_await_clause({}, "then") is None


def test_snippet_and_key_accessors() -> None:
  context = {"type": "Identifier", "name": "x"}
  assert compat.get_snippet_parameters({"context": context}) == [context]
  assert compat.get_snippet_parameters({}) == []
  assert compat.get_snippet_parameters({"parameters": [context]}) == [context]
  assert compat.get_snippet_body({"children": ["c"]}) == ["c"]
  assert compat.get_children_from_key({"fragment": {"nodes": ["k"]}}) == ["k"]


def test_render_call_unwraps_chain() -> None:
  call = {"type": "CallExpression", "callee": {}, "arguments": []}
  assert compat.get_render_call({"expression": {"type": "ChainExpression", "expression": call}}) is call
  assert compat.get_render_call({"expression": call}) is call


def test_const_tag_declarator() -> None:
  declarator = {"type": "VariableDeclarator", "id": {}, "init": {}}
  assert compat.get_declarator_from_const_tag({"declaration": {"declarations": [declarator]}}) is declarator

  left = {"type": "Identifier", "name": "a", "start": 8, "end": 9}
  right = {"type": "Literal", "value": 1, "start": 12, "end": 13}
  legacy = compat.get_declarator_from_const_tag({"expression": {"type": "AssignmentExpression", "left": left, "right": right}})
  assert legacy["type"] == "VariableDeclarator"
  assert (legacy["start"], legacy["end"]) == (8, 13)
  assert legacy["id"] is left
  assert legacy["init"] is right
