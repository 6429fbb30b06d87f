"""
Unified tree node types.
"""

from svelte_ast_bridge.ast.nodes import (
  SVELTE_NODE_TYPES,
  Comment,
  EstreeNode,
  Node,
  Position,
  Program,
  SourceLocation,
  Token,
  to_estree,
)

__all__ = [
  "SVELTE_NODE_TYPES",
  "Comment",
  "EstreeNode",
  "Node",
  "Position",
  "Program",
  "SourceLocation",
  "Token",
  "to_estree",
]
