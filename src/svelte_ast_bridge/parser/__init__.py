"""
Conversion Pipeline.

Drives one conversion pass over a template source and its foreign AST:

1. convert the root into the unified Program,
2. fill the code element bodies and assemble the virtual script program,
3. resolve scopes on the virtual script program,
4. run the restore phase, then the post-process phase.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from svelte_ast_bridge.ast.nodes import Program
from svelte_ast_bridge.config import ParserConfig
from svelte_ast_bridge.parser import compat
from svelte_ast_bridge.parser.context import Context, ForeignNode
from svelte_ast_bridge.parser.converts.root import convert_svelte_root
from svelte_ast_bridge.parser.script import convert_script_bodies
from svelte_ast_bridge.scope.analyzer import ScopeManager, analyze
from svelte_ast_bridge.utils.console import log_debug
from svelte_ast_bridge.visitor_keys import KEYS, VisitorKeys


@dataclass
class ParseResult:
  """
  Output of :func:`parse_foreign_ast`.

  Attributes:
      ast (Program): The unified tree.
      scope_manager (Optional[ScopeManager]): Script scopes, None when scope
          analysis is disabled.
      visitor_keys (VisitorKeys): Registry for traversing ``ast``.
      schema_version (str): Schema version of the foreign input.
  """

  ast: Program
  scope_manager: Optional[ScopeManager]
  visitor_keys: VisitorKeys
  schema_version: str

  def to_dict(self) -> Dict[str, Any]:
    """Serializes the tree (with tokens and comments) into JSON-compatible data."""
    return self.ast.to_estree()


def resolve_schema(root: ForeignNode, ctx: Context, config: ParserConfig) -> str:
  """
  Determines the schema version of ``root``.

  Raises:
      ParseError: If the schema is unrecognized or contradicts the configured one.
  """
  detected = compat.detect_schema(root)
  if detected is None:
    raise ctx.parse_error("Unrecognized foreign AST: expected a 'fragment' or 'html' root", 0)
  if config.schema_version != "auto" and config.schema_version != detected:
    raise ctx.parse_error(f"Foreign AST is {detected}, but schema_version is {config.schema_version}", 0)
  return detected


def parse_foreign_ast(code: str, foreign_ast: ForeignNode, config: Optional[ParserConfig] = None) -> ParseResult:
  """
  Converts a template and its foreign AST into the unified tree.

  Args:
      code (str): The template source text the foreign AST was parsed from.
      foreign_ast (ForeignNode): Foreign root, as produced by the template compiler.
      config (Optional[ParserConfig]): Pass options; defaults apply if None.

  Returns:
      ParseResult: The Program, its scopes and the visitor keys.

  Raises:
      ParseError: If the input violates a conversion invariant.
  """
  config = config or ParserConfig()
  ctx = Context(code)
  schema = resolve_schema(foreign_ast, ctx, config)
  label = str(config.file_path) if config.file_path else "<template>"
  log_debug(f"Converting {label} ({schema} schema, {len(code)} chars)")

  program = convert_svelte_root(foreign_ast, ctx, config.source_type)
  virtual_program = convert_script_bodies(foreign_ast, program, ctx)

  scope_manager = None
  if config.analyze_scope:
    scope_manager = analyze(virtual_program, config.source_type)
    ctx.scope_binding.restore(virtual_program, ctx.tokens, ctx.comments, scope_manager)
    ctx.scope_binding.post_process()
    log_debug(f"Resolved {len(scope_manager.scopes)} scopes")

  log_debug(f"Converted {label}: {len(program.body)} top-level nodes, {len(ctx.tokens)} tokens, {len(ctx.comments)} comments")
  return ParseResult(ast=program, scope_manager=scope_manager, visitor_keys=KEYS, schema_version=schema)


__all__ = ["ParseResult", "parse_foreign_ast", "resolve_schema"]
