"""
CLI Command Handlers.

Each handler returns a process exit code and reports failures through the
logging helpers instead of raising.
"""

import json
from pathlib import Path
from typing import Optional

from rich.table import Table

from svelte_ast_bridge.config import ParserConfig
from svelte_ast_bridge.errors import ParseError
from svelte_ast_bridge.parser import parse_foreign_ast
from svelte_ast_bridge.utils.console import console, log_error, log_info, log_success
from svelte_ast_bridge.visitor_keys import KEYS, SVELTE_KEYS, as_lists


def handle_convert(
  ast_path: Path,
  source_path: Path,
  output_path: Optional[Path],
  schema_version: Optional[str] = None,
  source_type: Optional[str] = None,
  analyze_scope: Optional[bool] = None,
) -> int:
  """
  Handles the 'convert' command.

  Args:
      ast_path: JSON file holding the foreign AST.
      source_path: Template source file.
      output_path: Destination of the unified tree JSON; stdout if None.
      schema_version: Override for the foreign schema version.
      source_type: Override for the script source type.
      analyze_scope: Override for scope analysis.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  for path in (ast_path, source_path):
    if not path.is_file():
      log_error(f"Input not found: [bold blue]{path}[/bold blue]")
      return 1

  config = ParserConfig.load(
    source_type=source_type,
    schema_version=schema_version,
    analyze_scope=analyze_scope,
    file_path=source_path,
  )
  code = source_path.read_text(encoding="utf-8")
  try:
    foreign_ast = json.loads(ast_path.read_text(encoding="utf-8"))
  except json.JSONDecodeError as e:
    log_error(f"Invalid AST JSON in {ast_path}: {e}")
    return 1

  try:
    result = parse_foreign_ast(code, foreign_ast, config)
  except ParseError as e:
    log_error(f"{source_path}: {e}")
    return 1

  payload = json.dumps(result.to_dict(), indent=2)
  if output_path is None:
    console.print_json(payload)
    return 0

  output_path.parent.mkdir(parents=True, exist_ok=True)
  output_path.write_text(payload, encoding="utf-8")
  log_success(f"Wrote {len(result.ast.body)} top-level nodes to [bold blue]{output_path}[/bold blue]")
  if result.scope_manager is not None:
    log_info(f"Resolved {len(result.scope_manager.scopes)} script scopes")
  return 0


def handle_keys(as_json: bool = False, include_base: bool = False) -> int:
  """
  Handles the 'keys' command.

  Args:
      as_json: Print the registry as JSON.
      include_base: Include base ESTree types, not only template node types.

  Returns:
      int: Exit code (always 0).
  """
  registry = as_lists(KEYS)
  if not include_base:
    registry = {k: v for k, v in registry.items() if k in SVELTE_KEYS}

  if as_json:
    console.print_json(json.dumps(registry, sort_keys=True))
    return 0

  table = Table(title="Visitor Keys")
  table.add_column("Node type", style="bold magenta")
  table.add_column("Child fields")
  for node_type in sorted(registry):
    table.add_row(node_type, ", ".join(registry[node_type]) or "-")
  console.print(table)
  return 0
