"""
Attribute and Directive Converters.

Maps foreign start tag attributes onto :class:`SvelteAttribute`,
:class:`SvelteShorthandAttribute`, :class:`SvelteSpreadAttribute`,
:class:`SvelteDirective`, :class:`SvelteStyleDirective` and the synthesized
:class:`SvelteSpecialDirective` for ``this``.
"""

import bisect
from typing import Any, Dict, List, Optional, Tuple

from svelte_ast_bridge.ast.nodes import (
  Node,
  SvelteAttribute,
  SvelteDirective,
  SvelteDirectiveKey,
  SvelteLiteral,
  SvelteName,
  SvelteShorthandAttribute,
  SvelteSpecialDirective,
  SvelteSpecialDirectiveKey,
  SvelteSpreadAttribute,
  SvelteStyleDirective,
)
from svelte_ast_bridge.parser.context import Context, ForeignNode, foreign_offsets
from svelte_ast_bridge.parser.converts import mustache as mustache_converts

# Foreign directive node type -> directive kind.
DIRECTIVE_KINDS: Dict[str, str] = {
  # legacy
  "Binding": "Binding",
  "EventHandler": "EventHandler",
  "Class": "Class",
  "Action": "Action",
  "Transition": "Transition",
  "Animation": "Animation",
  "Let": "Let",
  # modern
  "BindDirective": "Binding",
  "OnDirective": "EventHandler",
  "ClassDirective": "Class",
  "UseDirective": "Action",
  "TransitionDirective": "Transition",
  "AnimateDirective": "Animation",
  "LetDirective": "Let",
}

# Directive kinds whose name refers to a script binding rather than a plain name.
_REFERENCE_NAME_KINDS = frozenset(["Action", "Transition", "Animation"])


def convert_attributes(attrs: List[ForeignNode], ctx: Context) -> List[Node]:
  """
  Converts a start tag's attribute list, preserving source order.

  Args:
      attrs (List[ForeignNode]): Foreign attributes and directives.
      ctx (Context): Conversion context.

  Returns:
      List[Node]: Converted attribute nodes.
  """
  return [convert_attribute(a, ctx) for a in attrs]


def convert_attribute(node: ForeignNode, ctx: Context) -> Node:
  """
  Converts a single attribute or directive.

  Raises:
      ParseError: For unknown attribute node types.
  """
  node_type = node["type"]
  if node_type == "Attribute":
    return _convert_plain(node, ctx)
  if node_type in ("Spread", "SpreadAttribute"):
    return _convert_spread(node, ctx)
  if node_type == "StyleDirective":
    return _convert_style_directive(node, ctx)
  if node_type in DIRECTIVE_KINDS:
    return _convert_directive(node, ctx)
  start, _ = foreign_offsets(node)
  raise ctx.parse_error(f"Unsupported attribute '{node_type}'", start)


def insert_by_position(attributes: List[Node], attribute: Node) -> List[Node]:
  """Returns a new list with ``attribute`` inserted at its source position."""
  starts = [a.range[0] for a in attributes]
  idx = bisect.bisect_left(starts, attribute.range[0])
  return attributes[:idx] + [attribute] + attributes[idx:]


def _value_parts(value: Any) -> List[ForeignNode]:
  if value is True or value is None:
    return []
  if isinstance(value, dict):
    return [value]
  return list(value)


def _key_end(ctx: Context, start: int, end: int) -> int:
  """End of an attribute key: the first '=' or whitespace inside the attribute."""
  code = ctx.code
  pos = start
  while pos < end and code[pos] != "=" and not code[pos].isspace():
    pos += 1
  return pos


def _add_equals(ctx: Context, key_end: int, end: int) -> int:
  """Emits the '=' token after a key; returns the offset after it, or -1 if none."""
  eq = ctx.code.find("=", key_end, end)
  if eq < 0:
    return -1
  ctx.add_token("Punctuator", eq, eq + 1)
  return eq + 1


def _convert_value(parts: List[ForeignNode], ctx: Context) -> List[Node]:
  values: List[Node] = []
  for part in parts:
    start, end = foreign_offsets(part)
    if part["type"] == "Text":
      ctx.add_token("HTMLText", start, end)
      values.append(SvelteLiteral(value=ctx.code[start:end], **ctx.location(start, end)))
    else:
      values.append(mustache_converts.convert_mustache_tag(part, ctx, "text"))
  return values


def _convert_plain(node: ForeignNode, ctx: Context) -> Node:
  start, end = foreign_offsets(node)
  code = ctx.code
  name = node["name"]
  parts = _value_parts(node.get("value"))

  if code.startswith("{", start):
    # {name} shorthand
    expression = parts[0]["expression"] if parts and "expression" in parts[0] else None
    name_start, name_end = foreign_offsets(expression) if expression else (start + 1, end - 1)
    ctx.add_script_tokens(start, end)
    return SvelteShorthandAttribute(
      key=ctx.identifier(name, name_start, name_end),
      value=ctx.identifier(name, name_start, name_end),
      **ctx.location(start, end),
    )

  key_end = start + len(name)
  ctx.add_token("HTMLIdentifier", start, key_end)
  key = SvelteName(name=name, **ctx.location(start, key_end))
  if node.get("value") is True:
    return SvelteAttribute(key=key, value=[], boolean=True, **ctx.location(start, end))
  _add_equals(ctx, key_end, end)
  return SvelteAttribute(key=key, value=_convert_value(parts, ctx), boolean=False, **ctx.location(start, end))


def _convert_spread(node: ForeignNode, ctx: Context) -> SvelteSpreadAttribute:
  start, end = foreign_offsets(node)
  ctx.add_script_tokens(start, end)
  return SvelteSpreadAttribute(argument=ctx.convert_estree(node["expression"]), **ctx.location(start, end))


def _parse_key(ctx: Context, start: int, key_end: int) -> Tuple[str, int, int, List[str]]:
  """
  Splits ``prefix:name|mod1|mod2``.

  Returns:
      Tuple: (name, name_start, name_end, modifiers).
  """
  text = ctx.code[start:key_end]
  colon = text.index(":")
  name_and_modifiers = text[colon + 1 :].split("|")
  name = name_and_modifiers[0]
  name_start = start + colon + 1
  return name, name_start, name_start + len(name), name_and_modifiers[1:]


def _directive_key(node: ForeignNode, kind: Optional[str], ctx: Context) -> Tuple[SvelteDirectiveKey, int]:
  start, end = foreign_offsets(node)
  key_end = _key_end(ctx, start, end)
  name, name_start, name_end, modifiers = _parse_key(ctx, start, key_end)
  ctx.add_token("HTMLIdentifier", start, key_end)
  if kind in _REFERENCE_NAME_KINDS and "." not in name:
    name_node: Node = ctx.identifier(name, name_start, name_end)
  else:
    name_node = SvelteName(name=name, **ctx.location(name_start, name_end))
  key = SvelteDirectiveKey(name=name_node, modifiers=modifiers, **ctx.location(start, key_end))
  return key, key_end


def _lex_value(ctx: Context, value_start: int, end: int) -> None:
  """Lexes an attribute value span, skipping surrounding quotes."""
  code = ctx.code
  while value_start < end and code[value_start].isspace():
    value_start += 1
  if value_start < end and code[value_start] in "\"'" and code[end - 1] == code[value_start]:
    value_start += 1
    end -= 1
  ctx.add_script_tokens(value_start, end)


def _convert_directive(node: ForeignNode, ctx: Context) -> SvelteDirective:
  start, end = foreign_offsets(node)
  kind = DIRECTIVE_KINDS[node["type"]]
  key, key_end = _directive_key(node, kind, ctx)
  value_start = _add_equals(ctx, key_end, end)
  shorthand = value_start < 0
  if not shorthand:
    _lex_value(ctx, value_start, end)
  raw_expression = node.get("expression")
  expression = ctx.convert_estree(raw_expression) if raw_expression else None
  intro = outro = False
  if kind == "Transition":
    intro = bool(node.get("intro"))
    outro = bool(node.get("outro"))
  return SvelteDirective(
    key=key,
    expression=expression,
    kind=kind,
    shorthand=shorthand,
    intro=intro,
    outro=outro,
    **ctx.location(start, end),
  )


def _convert_style_directive(node: ForeignNode, ctx: Context) -> SvelteStyleDirective:
  start, end = foreign_offsets(node)
  key, key_end = _directive_key(node, None, ctx)
  value = node.get("value")
  if value is True:
    return SvelteStyleDirective(key=key, value=[], shorthand=True, **ctx.location(start, end))
  _add_equals(ctx, key_end, end)
  return SvelteStyleDirective(
    key=key,
    value=_convert_value(_value_parts(value), ctx),
    shorthand=False,
    **ctx.location(start, end),
  )


def convert_special_this(element_start: int, expression: ForeignNode, ctx: Context) -> SvelteSpecialDirective:
  """
  Synthesizes the ``this={...}`` directive of ``<svelte:element>``/``<svelte:component>``.

  The foreign tree keeps only the expression, so the attribute span is
  recovered from the source around it.

  Args:
      element_start (int): Offset of the element's '<'.
      expression (ForeignNode): The ``this`` expression.
      ctx (Context): Conversion context.

  Returns:
      SvelteSpecialDirective: Directive spanning ``this`` through the closing
      brace or quote.
  """
  code = ctx.code
  expr_start, expr_end = foreign_offsets(expression)
  key_start = code.rfind("this", element_start, expr_start)
  if key_start < 0:
    raise ctx.parse_error("Cannot locate 'this' attribute", element_start)
  key_end = key_start + len("this")
  end = expr_end
  while end < len(code) and code[end].isspace():
    end += 1
  if code.startswith("}", end):
    end += 1
  if end < len(code) and code[end] in "\"'":
    end += 1

  ctx.add_token("HTMLIdentifier", key_start, key_end)
  value_start = _add_equals(ctx, key_end, expr_start)
  if value_start >= 0:
    _lex_value(ctx, value_start, end)
  key = SvelteSpecialDirectiveKey(**ctx.location(key_start, key_end))
  return SvelteSpecialDirective(key=key, expression=ctx.convert_estree(expression), kind="this", **ctx.location(key_start, end))
