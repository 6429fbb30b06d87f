"""
Script Body Pass.

Converts the statements of the instance and module scripts, stores them as the
``body`` of their code elements, and assembles the virtual script Program that
scope analysis runs on.
"""

from typing import List, Optional, Tuple

from svelte_ast_bridge.ast.nodes import EstreeNode, Node, Program, SvelteReactiveStatement, SvelteScriptElement, adopt
from svelte_ast_bridge.parser import compat
from svelte_ast_bridge.parser.context import Context, ForeignNode, foreign_offsets


def convert_statement(node: ForeignNode, ctx: Context, kind: str) -> Node:
  """
  Converts a top-level script statement.

  ``$: statement`` in the instance script becomes a
  :class:`SvelteReactiveStatement`; anything else an :class:`EstreeNode`.
  """
  if kind == "instance" and node["type"] == "LabeledStatement" and node["label"].get("name") == "$":
    start, end = foreign_offsets(node)
    return SvelteReactiveStatement(
      label=ctx.convert_estree(node["label"]),
      body=ctx.convert_estree(node["body"]),
      **ctx.location(start, end),
    )
  return ctx.convert_estree(node)


def _find_element(program: Program, kind: str) -> Optional[SvelteScriptElement]:
  for node in program.body:
    if isinstance(node, SvelteScriptElement) and node.kind == kind:
      return node
  return None


def convert_script_bodies(root: ForeignNode, program: Program, ctx: Context) -> EstreeNode:
  """
  Fills the code elements of ``program`` and returns the virtual script Program.

  The virtual Program lists the module statements, then the instance statements.
  Its statements are the very nodes stored in the code elements, whose parent is
  the code element.

  Args:
      root (ForeignNode): Foreign root the Program was converted from.
      program (Program): The unified Program.
      ctx (Context): Conversion context; receives the script tokens and comments.

  Returns:
      EstreeNode: Program-typed node for scope analysis.
  """
  owners: List[Tuple[SvelteScriptElement, List[Node]]] = []
  statements: List[Node] = []
  for kind, script in (("module", compat.get_module_from_root(root)), ("instance", compat.get_instance_from_root(root))):
    if script is None:
      continue
    element = _find_element(program, kind)
    if element is None:
      raise ctx.parse_error(f"No {kind} script element to fill", foreign_offsets(script)[0])
    content_start = element.start_tag.range[1]
    content_end = element.end_tag.range[0] if element.end_tag is not None else element.range[1]
    ctx.add_script_tokens(content_start, content_end)
    converted = [convert_statement(s, ctx, kind) for s in script["content"].get("body") or []]
    owners.append((element, converted))
    statements.extend(converted)

  virtual = EstreeNode(
    estree_type="Program",
    props={"body": statements, "sourceType": program.source_type},
    **ctx.location(0, len(ctx.code)),
  )
  for element, converted in owners:
    element.body = converted
    adopt(element, converted)
  return virtual
