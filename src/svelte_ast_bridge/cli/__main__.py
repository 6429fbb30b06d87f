"""
Main Entry Point for the svelte-ast-bridge CLI.

Parses arguments and dispatches to the handlers in `svelte_ast_bridge.cli.commands`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from svelte_ast_bridge import __version__
from svelte_ast_bridge.cli import commands
from svelte_ast_bridge.utils.console import set_verbose


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="svelte-ast-bridge: Svelte AST to ESTree converter")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CONVERT ---
  cmd_conv = subparsers.add_parser("convert", help="Convert a foreign AST JSON file into the unified tree")
  cmd_conv.add_argument("ast", type=Path, help="Foreign AST as JSON (output of the compiler's parse())")
  cmd_conv.add_argument("--source", type=Path, required=True, help="Template source the AST was parsed from")
  cmd_conv.add_argument("--out", type=Path, default=None, help="Write the unified tree here (default: stdout)")
  cmd_conv.add_argument(
    "--schema",
    choices=["auto", "legacy", "modern"],
    default=None,
    help="Foreign AST schema version (default: from toml, else auto)",
  )
  cmd_conv.add_argument(
    "--source-type",
    choices=["module", "script"],
    default=None,
    help="Source type of the embedded scripts (default: from toml, else module)",
  )
  cmd_conv.add_argument("--no-scope", action="store_true", help="Skip scope analysis")

  # --- Command: KEYS ---
  cmd_keys = subparsers.add_parser("keys", help="Print the visitor key registry")
  cmd_keys.add_argument("--json", action="store_true", help="Print as JSON instead of a table")
  cmd_keys.add_argument("--all", action="store_true", help="Include the base ESTree types")

  args = parser.parse_args(argv)
  set_verbose(args.verbose)

  if args.command == "convert":
    return commands.handle_convert(
      args.ast,
      args.source,
      args.out,
      schema_version=args.schema,
      source_type=args.source_type,
      analyze_scope=False if args.no_scope else None,
    )

  elif args.command == "keys":
    return commands.handle_keys(as_json=args.json, include_base=args.all)

  return 1


if __name__ == "__main__":
  raise SystemExit(main())
