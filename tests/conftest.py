"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console capture fixture for CLI and logging tests.

Foreign AST builders live in ``tests/builders.py``.
"""

import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'svelte_ast_bridge' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from svelte_ast_bridge.utils.console import reset_console, set_console  # noqa: E402


@pytest.fixture
def captured_console():
  """Routes console output and logging into a recording console."""
  recorder = Console(record=True, width=200, force_terminal=False)
  set_console(recorder)
  yield recorder
  reset_console()
