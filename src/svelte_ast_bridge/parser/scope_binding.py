"""
Scope Binding Phases.

Holds the program-restore callbacks registered by converters and runs them as
explicit, ordered pipeline phases once scope resolution is available:

1. **restore**: every registered callback, once, in registration order.
2. **post-process**: every step scheduled by the restore callbacks, once,
   strictly after all restore callbacks have run.
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence

from svelte_ast_bridge.ast.nodes import Comment, Node, Token
from svelte_ast_bridge.scope.analyzer import Scope, ScopeManager

PostProcess = Callable[[], None]


@dataclass
class RestoreHooks:
  """
  Services handed to a program-restore callback.

  Attributes:
      scope_manager (ScopeManager): Result of scope resolution.
      register_node_to_scope (Callable): Re-keys a scope to a new block node.
      add_post_process (Callable): Schedules a step for the post-process phase.
  """

  scope_manager: ScopeManager
  register_node_to_scope: Callable[[Node, Scope], None]
  add_post_process: Callable[[PostProcess], None]


RestoreCallback = Callable[[Node, Sequence[Token], Sequence[Comment], RestoreHooks], None]


class ScopeBinding:
  """
  Ordered program-restore and post-process phases for one conversion pass.

  Not shareable across passes: each phase runs at most once.
  """

  def __init__(self) -> None:
    self._restores: List[RestoreCallback] = []
    self._post_processes: List[PostProcess] = []
    self._restored = False
    self._post_processed = False

  def add_program_restore(self, callback: RestoreCallback) -> None:
    """
    Registers a callback for the restore phase.

    Args:
        callback: Called as ``callback(resolved_root, tokens, comments, hooks)``
            where ``resolved_root`` is the program node the scope resolver analyzed.
    """
    if self._restored:
      raise RuntimeError("Program restore phase already ran")
    self._restores.append(callback)

  def restore(
    self,
    resolved_root: Node,
    tokens: Sequence[Token],
    comments: Sequence[Comment],
    scope_manager: ScopeManager,
  ) -> None:
    """
    Runs the restore phase.

    Args:
        resolved_root: The root node scopes were originally keyed to.
        tokens: The final token stream.
        comments: The final comment list.
        scope_manager: Result of scope resolution.

    Raises:
        RuntimeError: If the phase already ran.
    """
    if self._restored:
      raise RuntimeError("Program restore phase already ran")
    self._restored = True
    hooks = RestoreHooks(
      scope_manager=scope_manager,
      register_node_to_scope=scope_manager.register_node_to_scope,
      add_post_process=self._post_processes.append,
    )
    for callback in self._restores:
      callback(resolved_root, tokens, comments, hooks)

  def post_process(self) -> None:
    """
    Runs the post-process phase.

    Raises:
        RuntimeError: If the restore phase has not run yet, or this phase already ran.
    """
    if not self._restored:
      raise RuntimeError("Post-process phase requires the restore phase to run first")
    if self._post_processed:
      raise RuntimeError("Post-process phase already ran")
    self._post_processed = True
    for step in self._post_processes:
      step()

  @property
  def pending_restores(self) -> int:
    """Number of registered restore callbacks."""
    return len(self._restores)
