"""
Block Converters.

``{#if}``, ``{#each}``, ``{#await}``, ``{#key}`` and ``{#snippet}`` blocks. The
foreign tree only records where a block starts and ends, so the positions of
``{:else}``, ``{:then}`` and ``{:catch}`` clauses are located in the source text.
Only the embedded expressions and patterns of a block contribute tokens.
"""

import re
from typing import List, Optional

from svelte_ast_bridge.ast.nodes import (
  Node,
  SvelteAwaitBlock,
  SvelteAwaitCatchBlock,
  SvelteAwaitPendingBlock,
  SvelteAwaitThenBlock,
  SvelteEachBlock,
  SvelteElseBlock,
  SvelteIfBlock,
  SvelteKeyBlock,
  SvelteSnippetBlock,
)
from svelte_ast_bridge.parser import compat
from svelte_ast_bridge.parser.context import Context, ForeignNode, foreign_offsets
from svelte_ast_bridge.parser.converts import element as element_converts


def _convert_code(node: Optional[ForeignNode], ctx: Context) -> Optional[Node]:
  """Converts an embedded expression or pattern and lexes its span."""
  if node is None:
    return None
  start, end = foreign_offsets(node)
  ctx.add_script_tokens(start, end)
  return ctx.convert_estree(node)


def _children_end(children: List[Node], default: int) -> int:
  return children[-1].range[1] if children else default


def _find_clause(ctx: Context, opener: str, search_from: int, block_start: int) -> int:
  index = ctx.code.find(opener, search_from)
  if index < 0:
    raise ctx.parse_error(f"Missing '{opener}' clause", block_start)
  return index


def _tag_end(ctx: Context, index: int) -> int:
  """Offset just past the '}' closing the clause tag opened at ``index``."""
  close = ctx.code.find("}", index)
  if close < 0:
    raise ctx.parse_error("Unterminated block tag", index)
  return close + 1


def _convert_else(ctx: Context, alternate: List[ForeignNode], search_from: int, block_start: int) -> SvelteElseBlock:
  else_start = _find_clause(ctx, "{:else", search_from, block_start)
  children = element_converts.convert_children(alternate, ctx)
  elseif = len(alternate) == 1 and alternate[0]["type"] == "IfBlock" and bool(alternate[0].get("elseif"))
  else_end = _children_end(children, _tag_end(ctx, else_start))
  return SvelteElseBlock(children=children, elseif=elseif, **ctx.location(else_start, else_end))


def convert_if_block(node: ForeignNode, ctx: Context) -> SvelteIfBlock:
  """
  Converts ``{#if}`` (or a nested ``{:else if}``) with its optional else branch.
  """
  start, end = foreign_offsets(node)
  expression = _convert_code(compat.get_test_from_if(node), ctx)
  children = element_converts.convert_children(compat.get_consequent_from_if(node), ctx)
  else_block = None
  alternate = compat.get_alternate_from_if(node)
  if alternate is not None:
    else_block = _convert_else(ctx, alternate, _children_end(children, expression.range[1]), start)
  return SvelteIfBlock(
    expression=expression,
    children=children,
    else_block=else_block,
    elseif=bool(node.get("elseif")),
    **ctx.location(start, end),
  )


def convert_each_block(node: ForeignNode, ctx: Context) -> SvelteEachBlock:
  """
  Converts ``{#each list as item, index (key)}`` with its optional fallback.

  The index is a plain name in the foreign tree; its Identifier is synthesized
  from the source text.
  """
  start, end = foreign_offsets(node)
  expression = _convert_code(node["expression"], ctx)
  context = _convert_code(node.get("context"), ctx)
  position = (context or expression).range[1]

  index = None
  index_name = node.get("index")
  if index_name:
    match = re.compile(r",\s*(" + re.escape(index_name) + r")\b").search(ctx.code, position, end)
    if not match:
      raise ctx.parse_error(f"Cannot locate each index '{index_name}'", position)
    ctx.add_token("Identifier", match.start(1), match.end(1))
    index = ctx.identifier(index_name, match.start(1), match.end(1))
    position = match.end(1)

  key = _convert_code(node.get("key"), ctx)
  if key is not None:
    position = key.range[1]

  children = element_converts.convert_children(compat.get_body_from_each(node), ctx)
  else_block = None
  fallback = compat.get_fallback_from_each(node)
  if fallback is not None:
    else_block = _convert_else(ctx, fallback, _children_end(children, position), start)
  return SvelteEachBlock(
    expression=expression,
    context=context,
    index=index,
    key=key,
    children=children,
    else_block=else_block,
    **ctx.location(start, end),
  )


def convert_await_block(node: ForeignNode, ctx: Context) -> SvelteAwaitBlock:
  """
  Converts ``{#await}`` in any of its three opener forms.

  ``{#await p}`` has kind 'await' and clause blocks of kind 'block';
  ``{#await p then v}`` and ``{#await p catch e}`` have kinds 'await-then' and
  'await-catch', and their inline clause has kind 'const'.
  """
  start, end = foreign_offsets(node)
  code = ctx.code
  expression = _convert_code(node["expression"], ctx)
  after = expression.range[1]
  while after < end and code[after].isspace():
    after += 1
  if code.startswith("then", after):
    kind = "await-then"
  elif code.startswith("catch", after):
    kind = "await-catch"
  else:
    kind = "await"

  position = expression.range[1]
  pending = None
  pending_children = compat.get_await_clause(node, "pending")
  if kind == "await" and pending_children is not None:
    pending_start = _tag_end(ctx, position)
    children = element_converts.convert_children(pending_children, ctx)
    position = _children_end(children, pending_start)
    pending = SvelteAwaitPendingBlock(children=children, **ctx.location(pending_start, position))

  then = None
  then_children = compat.get_await_clause(node, "then")
  if then_children is not None:
    if kind == "await-then":
      clause_kind, clause_start = "const", start
    else:
      clause_kind, clause_start = "block", _find_clause(ctx, "{:then", position, start)
    value = _convert_code(node.get("value"), ctx)
    children = element_converts.convert_children(then_children, ctx)
    tag_end = _tag_end(ctx, value.range[1] if value is not None else clause_start)
    position = _children_end(children, tag_end)
    then = SvelteAwaitThenBlock(value=value, children=children, kind=clause_kind, **ctx.location(clause_start, position))

  catch = None
  catch_children = compat.get_await_clause(node, "catch")
  if catch_children is not None:
    if kind == "await-catch":
      clause_kind, clause_start = "const", start
    else:
      clause_kind, clause_start = "block", _find_clause(ctx, "{:catch", position, start)
    error = _convert_code(node.get("error"), ctx)
    children = element_converts.convert_children(catch_children, ctx)
    tag_end = _tag_end(ctx, error.range[1] if error is not None else clause_start)
    position = _children_end(children, tag_end)
    catch = SvelteAwaitCatchBlock(error=error, children=children, kind=clause_kind, **ctx.location(clause_start, position))

  return SvelteAwaitBlock(
    expression=expression,
    pending=pending,
    then=then,
    catch=catch,
    kind=kind,
    **ctx.location(start, end),
  )


def convert_key_block(node: ForeignNode, ctx: Context) -> SvelteKeyBlock:
  start, end = foreign_offsets(node)
  expression = _convert_code(node["expression"], ctx)
  children = element_converts.convert_children(compat.get_children_from_key(node), ctx)
  return SvelteKeyBlock(expression=expression, children=children, **ctx.location(start, end))


def convert_snippet_block(node: ForeignNode, ctx: Context) -> SvelteSnippetBlock:
  start, end = foreign_offsets(node)
  snippet_id = _convert_code(node["expression"], ctx)
  params = compat.get_snippet_parameters(node)
  if len(params) > 1:
    raise ctx.parse_error("Snippet blocks take at most one parameter", foreign_offsets(params[1])[0])
  context = _convert_code(params[0], ctx) if params else None
  children = element_converts.convert_children(compat.get_snippet_body(node), ctx)
  return SvelteSnippetBlock(id=snippet_id, context=context, children=children, **ctx.location(start, end))
