"""
svelte-ast-bridge Package.

Converts the AST emitted by the Svelte template compiler into a unified
ESTree-compatible tree, so generic ESTree tooling (linters, reference trackers,
code walkers) can traverse templates, scripts and styles as a single Program.

Usage
-----

.. code-block:: python

    import svelte_ast_bridge as sab

    result = sab.parse_foreign_ast(code, foreign_ast)
    program = result.ast
    for node in program.body:
        print(node.type, node.range)
"""

from svelte_ast_bridge.config import ParserConfig
from svelte_ast_bridge.errors import ParseError
from svelte_ast_bridge.parser import ParseResult, parse_foreign_ast
from svelte_ast_bridge.traverse import traverse_nodes
from svelte_ast_bridge.visitor_keys import KEYS

__version__ = "0.1.0"

__all__ = [
  "KEYS",
  "ParseError",
  "ParseResult",
  "ParserConfig",
  "parse_foreign_ast",
  "traverse_nodes",
  "__version__",
]
