"""
Tests for the console proxy and logging helpers.

Verifies:
1. The proxy forwards to a swappable Rich console.
2. Logging helpers route through the active console with their prefixes.
3. Verbosity toggles debug output.
"""

import logging

import pytest
from rich.console import Console

from svelte_ast_bridge.utils.console import (
  console,
  get_console,
  log_debug,
  log_error,
  log_info,
  log_success,
  log_warning,
  logger,
  reset_console,
  set_console,
  set_verbose,
)


@pytest.fixture(autouse=True)
def cleanup_console():
  """Ensures console and verbosity are reset after every test."""
  reset_console()
  yield
  set_verbose(False)
  reset_console()


def test_console_singleton_proxy():
  assert callable(console.print)
  assert hasattr(console, "export_text")
  assert isinstance(get_console(), Console)


def test_custom_console_injection():
  """
  Verify an injected recording console captures log records.
  """
  capture_console = Console(record=True, width=200)
  set_console(capture_console)

  log_info("Captured Log")
  log_success("Done")
  log_warning("Careful")

  output = capture_console.export_text()
  assert "Captured Log" in output
  assert "ℹ️" in output
  assert "✅ Done" in output
  assert "Careful" in output


def test_reset_creates_fresh_backend():
  original = get_console()
  temp = Console()
  set_console(temp)
  assert get_console() is temp

  reset_console()
  current = get_console()
  assert current is not temp
  assert current is not original


def test_single_rich_handler_after_swaps():
  set_console(Console())
  set_console(Console())
  handlers = [h for h in logger.handlers if h.__class__.__name__ == "RichHandler"]
  assert len(handlers) == 1
  assert logger.propagate is False


def test_logging_wrappers_format(capsys):
  reset_console()
  log_info("InfoText")
  log_error("ErrorText")

  captured = capsys.readouterr()
  assert "InfoText" in captured.out
  assert "ErrorText" in captured.out
  assert "❌" in captured.out


def test_verbose_toggles_debug(captured_console):
  set_verbose(False)
  log_debug("hidden detail")
  assert "hidden detail" not in captured_console.export_text()

  set_verbose(True)
  assert logger.level == logging.DEBUG
  log_debug("shown detail")
  assert "shown detail" in captured_console.export_text()


def test_proxy_getattr_delegation():
  assert isinstance(console.width, int)
