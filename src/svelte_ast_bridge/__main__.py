"""
Entry point for module execution (``python -m svelte_ast_bridge``).

Delegates to the CLI in ``svelte_ast_bridge.cli.__main__``.
"""

import sys

from svelte_ast_bridge.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
