"""
Mustache Tag Converters.

``{expression}``, ``{@html expression}``, ``{@debug a, b}``, ``{@const a = b}``
and ``{@render snippet(args)}``. Each tag emits a '{' and '}' Punctuator, an
``MustacheKeyword`` token for the ``@`` keyword if any, and the lexed tokens of
the code between them.
"""

from typing import Optional

from svelte_ast_bridge.ast.nodes import SvelteConstTag, SvelteDebugTag, SvelteMustacheTag, SvelteRenderTag
from svelte_ast_bridge.parser import compat
from svelte_ast_bridge.parser.context import Context, ForeignNode, foreign_offsets


def _tokenize_tag(start: int, end: int, keyword: Optional[str], ctx: Context) -> None:
  code = ctx.code
  if not code.startswith("{", start) or not code.endswith("}", 0, end):
    raise ctx.parse_error("Mustache tag must be enclosed in braces", start)
  ctx.add_token("Punctuator", start, start + 1)
  inner_start = start + 1
  if keyword is not None:
    keyword_start = code.index(keyword, inner_start)
    inner_start = keyword_start + len(keyword)
    ctx.add_token("MustacheKeyword", keyword_start, inner_start)
  ctx.add_script_tokens(inner_start, end - 1)
  ctx.add_token("Punctuator", end - 1, end)


def convert_mustache_tag(node: ForeignNode, ctx: Context, kind: str) -> SvelteMustacheTag:
  """
  Converts an expression tag.

  Args:
      node (ForeignNode): ``MustacheTag``/``ExpressionTag`` or the raw variants.
      ctx (Context): Conversion context.
      kind (str): 'text' or 'raw' (``{@html}``).

  Returns:
      SvelteMustacheTag: The converted tag.
  """
  start, end = foreign_offsets(node)
  _tokenize_tag(start, end, "@html" if kind == "raw" else None, ctx)
  expression = ctx.convert_estree(node["expression"])
  return SvelteMustacheTag(expression=expression, kind=kind, **ctx.location(start, end))


def convert_debug_tag(node: ForeignNode, ctx: Context) -> SvelteDebugTag:
  start, end = foreign_offsets(node)
  _tokenize_tag(start, end, "@debug", ctx)
  identifiers = [ctx.convert_estree(i) for i in node.get("identifiers") or []]
  return SvelteDebugTag(identifiers=identifiers, **ctx.location(start, end))


def convert_const_tag(node: ForeignNode, ctx: Context) -> SvelteConstTag:
  """The declaration is always a VariableDeclarator, whichever schema produced it."""
  start, end = foreign_offsets(node)
  _tokenize_tag(start, end, "@const", ctx)
  declaration = ctx.convert_estree(compat.get_declarator_from_const_tag(node))
  return SvelteConstTag(declaration=declaration, **ctx.location(start, end))


def convert_render_tag(node: ForeignNode, ctx: Context) -> SvelteRenderTag:
  start, end = foreign_offsets(node)
  _tokenize_tag(start, end, "@render", ctx)
  call = compat.get_render_call(node)
  arguments = call.get("arguments") or []
  if len(arguments) > 1:
    raise ctx.parse_error("{@render} takes at most one argument", foreign_offsets(arguments[1])[0])
  return SvelteRenderTag(
    callee=ctx.convert_estree(call["callee"]),
    argument=ctx.convert_estree(arguments[0]) if arguments else None,
    **ctx.location(start, end),
  )
