"""
Generic Tree Traversal.

Depth-first walker driven by the visitor key registry. Works uniformly over
template nodes and embedded ESTree nodes.
"""

from typing import Callable, Iterator, List, Optional

from svelte_ast_bridge.ast.nodes import Node
from svelte_ast_bridge.visitor_keys import KEYS, VisitorKeys, keys_for

Visit = Callable[[Node, Optional[Node]], None]


def iter_children(node: Node, keys: VisitorKeys = KEYS) -> Iterator[Node]:
  """
  Yields the direct children of a node in registry order.

  Args:
      node: The node to expand.
      keys: Visitor key registry.
  """
  for key in keys_for(node, keys):
    value = node.get(key)
    if isinstance(value, Node):
      yield value
    elif isinstance(value, list):
      for item in value:
        if isinstance(item, Node):
          yield item


def traverse_nodes(
  node: Node,
  enter: Optional[Visit] = None,
  leave: Optional[Visit] = None,
  keys: VisitorKeys = KEYS,
) -> None:
  """
  Walks the tree depth-first.

  Args:
      node: Root of the walk.
      enter: Called with (node, parent) before the children are visited.
      leave: Called with (node, parent) after the children are visited.
      keys: Visitor key registry.
  """
  # Iterative to keep deep markup from exhausting the recursion limit.
  stack: List[tuple] = [(node, None, False)]
  while stack:
    current, parent, done = stack.pop()
    if done:
      if leave:
        leave(current, parent)
      continue
    if enter:
      enter(current, parent)
    stack.append((current, parent, True))
    children = list(iter_children(current, keys))
    for item in reversed(children):
      stack.append((item, current, False))


def collect_types(node: Node, keys: VisitorKeys = KEYS) -> List[str]:
  """Returns the type of every node reached from ``node``, in visit order."""
  seen: List[str] = []
  traverse_nodes(node, enter=lambda n, _p: seen.append(n.type), keys=keys)
  return seen
