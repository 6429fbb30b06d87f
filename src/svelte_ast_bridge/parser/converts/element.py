"""
Markup Child Converter and Tag Extractor.

Converts foreign fragment children (text, comments, elements, mustache tags and
blocks) into unified nodes, and extracts the name, start tag and end tag of any
tag-bearing element from the source text.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from svelte_ast_bridge.ast.nodes import (
  EstreeNode,
  Node,
  SvelteElement,
  SvelteEndTag,
  SvelteHTMLComment,
  SvelteMemberExpressionName,
  SvelteName,
  SvelteStartTag,
  SvelteText,
)
from svelte_ast_bridge.parser import compat
from svelte_ast_bridge.parser.context import Context, ForeignNode, foreign_offsets
from svelte_ast_bridge.parser.converts import attr as attr_converts
from svelte_ast_bridge.parser.converts import block as block_converts
from svelte_ast_bridge.parser.converts import mustache as mustache_converts

BuildNameNode = Callable[[int, int], Node]
"""Receives the (start, end) span of the open tag name and returns the name node."""


@dataclass
class ElementTags:
  """
  Finished tag parts of an element, produced by :func:`extract_element_tags`.

  Attributes:
      name (Node): Element name node.
      start_tag (SvelteStartTag): Start tag holding the attributes.
      end_tag (Optional[SvelteEndTag]): End tag, None for self-closing or void tags.
  """

  name: Node
  start_tag: SvelteStartTag
  end_tag: Optional[SvelteEndTag]


def extract_element_tags(
  start: int,
  end: int,
  attributes: List[Node],
  ctx: Context,
  build_name_node: BuildNameNode,
) -> ElementTags:
  """
  Locates the start and end tags of the element spanning ``[start, end)``.

  Args:
      start (int): Offset of the element's '<'.
      end (int): Offset just past the element.
      attributes (List[Node]): Converted start tag attributes, in source order.
      ctx (Context): Conversion context.
      build_name_node (BuildNameNode): Creates the name node from the open tag
          name span; responsible for emitting the name token.

  Returns:
      ElementTags: The name, start tag and optional end tag.

  Raises:
      ParseError: If the start tag is not terminated.
  """
  code = ctx.code
  if not code.startswith("<", start):
    raise ctx.parse_error("Expected '<' at element start", start)
  name_end = _scan_until(code, start + 1, lambda c: c in "/>" or c.isspace())
  ctx.add_token("HTMLTagOpen", start, start + 1)
  name = build_name_node(start + 1, name_end)

  search_from = attributes[-1].range[1] if attributes else name_end
  close = code.find(">", search_from)
  if close < 0:
    raise ctx.parse_error("Unterminated start tag", start)
  start_tag_end = close + 1
  self_closing = code[close - 1] == "/"
  if self_closing:
    ctx.add_token("HTMLSelfClosingTagClose", close - 1, start_tag_end)
  else:
    ctx.add_token("HTMLTagClose", close, start_tag_end)
  start_tag = SvelteStartTag(attributes=attributes, self_closing=self_closing, **ctx.location(start, start_tag_end))

  end_tag = None
  if not self_closing and code[end - 1] == ">":
    end_open = code.rfind("<", start_tag_end, end)
    if end_open >= 0 and code.startswith("</", end_open):
      tag_name_start = end_open + 2
      tag_name_end = _scan_until(code, tag_name_start, lambda c: c == ">" or c.isspace())
      tag_close = code.find(">", tag_name_end)
      if tag_close < 0:
        raise ctx.parse_error("Unterminated end tag", end_open)
      ctx.add_token("HTMLEndTagOpen", end_open, tag_name_start)
      ctx.add_token("HTMLIdentifier", tag_name_start, tag_name_end)
      ctx.add_token("HTMLTagClose", tag_close, tag_close + 1)
      end_tag = SvelteEndTag(**ctx.location(end_open, tag_close + 1))

  return ElementTags(name=name, start_tag=start_tag, end_tag=end_tag)


def _scan_until(code: str, pos: int, stop: Callable[[str], bool]) -> int:
  while pos < len(code) and not stop(code[pos]):
    pos += 1
  return pos


def convert_children(nodes: List[ForeignNode], ctx: Context) -> List[Node]:
  """
  Converts a list of foreign fragment children.

  Args:
      nodes (List[ForeignNode]): Children in source order.
      ctx (Context): Conversion context.

  Returns:
      List[Node]: Converted nodes, in the same order.
  """
  return [convert_child(node, ctx) for node in nodes]


def convert_child(node: ForeignNode, ctx: Context) -> Node:
  """
  Converts one foreign fragment child.

  Raises:
      ParseError: For node types this converter does not know.
  """
  node_type = node["type"]
  if node_type == "Text":
    return convert_text(node, ctx)
  if node_type == "Comment":
    return convert_comment(node, ctx)
  if node_type in compat.ELEMENT_TYPES:
    return convert_element(node, ctx)
  if node_type in ("MustacheTag", "ExpressionTag"):
    return mustache_converts.convert_mustache_tag(node, ctx, "text")
  if node_type in ("RawMustacheTag", "HtmlTag"):
    return mustache_converts.convert_mustache_tag(node, ctx, "raw")
  if node_type == "DebugTag":
    return mustache_converts.convert_debug_tag(node, ctx)
  if node_type == "ConstTag":
    return mustache_converts.convert_const_tag(node, ctx)
  if node_type == "RenderTag":
    return mustache_converts.convert_render_tag(node, ctx)
  if node_type == "IfBlock":
    return block_converts.convert_if_block(node, ctx)
  if node_type == "EachBlock":
    return block_converts.convert_each_block(node, ctx)
  if node_type == "AwaitBlock":
    return block_converts.convert_await_block(node, ctx)
  if node_type == "KeyBlock":
    return block_converts.convert_key_block(node, ctx)
  if node_type == "SnippetBlock":
    return block_converts.convert_snippet_block(node, ctx)
  start, _ = foreign_offsets(node)
  raise ctx.parse_error(f"Unsupported template node '{node_type}'", start)


def convert_text(node: ForeignNode, ctx: Context) -> SvelteText:
  """Converts a text node; the value is the exact source slice."""
  start, end = foreign_offsets(node)
  value = ctx.code[start:end]
  ctx.add_token("HTMLText", start, end)
  return SvelteText(value=value, **ctx.location(start, end))


def convert_comment(node: ForeignNode, ctx: Context) -> SvelteHTMLComment:
  start, end = foreign_offsets(node)
  ctx.add_token("HTMLComment", start, end)
  return SvelteHTMLComment(value=node.get("data", ""), **ctx.location(start, end))


def convert_element(node: ForeignNode, ctx: Context) -> SvelteElement:
  """
  Converts an element of any kind (html, component or ``svelte:*``).
  """
  start, end = foreign_offsets(node)
  kind = compat.get_element_kind(node)
  attributes = attr_converts.convert_attributes(compat.get_attributes(node), ctx)
  this_expression = compat.get_special_this_expression(node)
  if this_expression is not None:
    special = attr_converts.convert_special_this(start, this_expression, ctx)
    attributes = attr_converts.insert_by_position(attributes, special)
  children = convert_children(compat.get_element_children(node), ctx)
  tags = extract_element_tags(start, end, attributes, ctx, build_name_node=_element_name_builder(node["name"], kind, ctx))
  return SvelteElement(
    name=tags.name,
    start_tag=tags.start_tag,
    children=children,
    end_tag=tags.end_tag,
    kind=kind,
    **ctx.location(start, end),
  )


def _element_name_builder(name: str, kind: str, ctx: Context) -> BuildNameNode:
  def build(name_start: int, name_end: int) -> Node:
    ctx.add_token("HTMLIdentifier", name_start, name_end)
    if kind != "component":
      return SvelteName(name=name, **ctx.location(name_start, name_end))
    return build_component_name(name, name_start, ctx)

  return build


def build_component_name(name: str, start: int, ctx: Context) -> Node:
  """
  Builds the name of a component.

  A plain name becomes an Identifier; a dotted name (``Foo.Bar.Baz``) becomes
  nested :class:`SvelteMemberExpressionName` nodes.
  """
  parts = name.split(".")
  current: Node = ctx.identifier(parts[0], start, start + len(parts[0]))
  offset = start + len(parts[0])
  for part in parts[1:]:
    prop_start = offset + 1
    prop: EstreeNode = ctx.identifier(part, prop_start, prop_start + len(part))
    offset = prop_start + len(part)
    current = SvelteMemberExpressionName(object=current, property=prop, **ctx.location(start, offset))
  return current
