"""
Root Converter.

Builds the unified :class:`Program` from a foreign root: the markup children
(with the ``<svelte:options>`` pseudo-node merged back in by position), followed
by the instance and module code elements and the style element.

The Program also takes over the scopes the resolver keyed to the virtual script
program, except the global scope, which is handed back (see
:func:`revert_global_scope_block`).
"""

from functools import partial
from typing import List, Sequence

from svelte_ast_bridge.ast.nodes import Comment, Node, Program, SvelteName, SvelteScriptElement, SvelteStyleElement, SvelteText, Token
from svelte_ast_bridge.parser import compat
from svelte_ast_bridge.parser.context import Context, ForeignNode, foreign_offsets
from svelte_ast_bridge.parser.converts import attr as attr_converts
from svelte_ast_bridge.parser.converts.element import BuildNameNode, convert_children, extract_element_tags
from svelte_ast_bridge.parser.scope_binding import RestoreHooks
from svelte_ast_bridge.scope.analyzer import ScopeManager


def convert_svelte_root(root: ForeignNode, ctx: Context, source_type: str = "module") -> Program:
  """
  Converts a foreign root into the unified Program.

  Args:
      root (ForeignNode): Foreign root of either schema version.
      ctx (Context): Conversion context; receives tokens and the scope restore
          callback.
      source_type (str): 'module' or 'script'.

  Returns:
      Program: Root spanning the whole source text.
  """
  body: List[Node] = []

  fragment = compat.get_fragment_from_root(root)
  if fragment is not None:
    children = compat.get_children(fragment)
    options = compat.get_options_from_root(root)
    if options is not None:
      children = merge_options(children, options)
    body.extend(convert_children(children, ctx))

  instance = compat.get_instance_from_root(root)
  if instance is not None:
    body.append(convert_script_element(instance, "instance", ctx))
  module = compat.get_module_from_root(root)
  if module is not None:
    body.append(convert_script_element(module, "module", ctx))
  style = compat.get_style_from_root(root)
  if style is not None:
    body.append(convert_style_element(style, ctx))

  program = Program(
    body=body,
    source_type=source_type,
    comments=ctx.comments,
    tokens=ctx.tokens,
    **ctx.location(0, len(ctx.code)),
  )
  ctx.scope_binding.add_program_restore(partial(restore_program_scopes, program))
  return program


def merge_options(children: List[ForeignNode], options: ForeignNode) -> List[ForeignNode]:
  """
  Inserts the options pseudo-node among the fragment children by position.

  It goes before the first child starting at or after its end, or last if there
  is none.
  """
  options_end = foreign_offsets(options)[1]
  for idx, node in enumerate(children):
    if foreign_offsets(node)[0] >= options_end:
      return children[:idx] + [options] + children[idx:]
  return children + [options]


def _literal_name_builder(name: str, ctx: Context) -> BuildNameNode:
  def build(start: int, end: int) -> Node:
    ctx.add_token("HTMLIdentifier", start, end)
    return SvelteName(name=name, **ctx.location(start, end))

  return build


def convert_script_element(node: ForeignNode, kind: str, ctx: Context) -> SvelteScriptElement:
  """
  Builds a code element; its ``body`` is filled later by the script body pass.

  Args:
      node (ForeignNode): The foreign instance or module script.
      kind (str): 'instance' or 'module'.
      ctx (Context): Conversion context.
  """
  start, end = foreign_offsets(node)
  attributes = attr_converts.convert_attributes(ctx.find_block(start).attrs, ctx)
  tags = extract_element_tags(start, end, attributes, ctx, _literal_name_builder("script", ctx))
  return SvelteScriptElement(
    name=tags.name,
    start_tag=tags.start_tag,
    body=[],
    end_tag=tags.end_tag,
    kind=kind,
    **ctx.location(start, end),
  )


def convert_style_element(node: ForeignNode, ctx: Context) -> SvelteStyleElement:
  """
  Builds the style element, with a single text child for non-empty contents.
  """
  start, end = foreign_offsets(node)
  attributes = attr_converts.convert_attributes(ctx.find_block(start).attrs, ctx)
  tags = extract_element_tags(start, end, attributes, ctx, _literal_name_builder("style", ctx))
  children: List[Node] = []
  if tags.end_tag is not None:
    text_start = tags.start_tag.range[1]
    text_end = tags.end_tag.range[0]
    if text_start < text_end:
      ctx.add_token("HTMLText", text_start, text_end)
      children.append(SvelteText(value=ctx.code[text_start:text_end], **ctx.location(text_start, text_end)))
  return SvelteStyleElement(
    name=tags.name,
    start_tag=tags.start_tag,
    children=children,
    end_tag=tags.end_tag,
    **ctx.location(start, end),
  )


def restore_program_scopes(
  program: Program,
  resolved_root: Node,
  tokens: Sequence[Token],
  comments: Sequence[Comment],
  hooks: RestoreHooks,
) -> None:
  """
  Re-keys every scope opened by ``resolved_root`` to ``program``.

  Schedules :func:`revert_global_scope_block` to run after all restores.
  """
  for scope in hooks.scope_manager.scopes:
    if scope.block is resolved_root:
      hooks.register_node_to_scope(program, scope)
  hooks.add_post_process(partial(revert_global_scope_block, hooks.scope_manager, resolved_root))


def revert_global_scope_block(scope_manager: ScopeManager, resolved_root: Node) -> None:
  """
  Points the global scope back at the program scope analysis ran on.

  Reference trackers find import and export declarations by comparing the
  global scope's block with that program.
  """
  global_scope = scope_manager.global_scope
  if global_scope is not None:
    global_scope.block = resolved_root
